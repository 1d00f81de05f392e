"""Typer CLI definition for voicecache."""

import asyncio
import logging
import sys
from pathlib import Path

import typer

from .config import CONFIG_PATH, generate_config, load_config
from .core import fetch_audio, list_available_voices, purge_cache
from .errors import CacheError, TTSAPIError, TTSAuthError

app = typer.Typer(help="Cache text-to-speech audio on disk")

ConfigOption = typer.Option(
    None, "-c", "--config", help="Config file (default ~/.config/voicecache/config.toml)"
)
DebugOption = typer.Option(
    False, "--debug", help="Show verbose error messages and cache activity"
)


def configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )


def fail(message: str, error: Exception, debug: bool) -> typer.Exit:
    """Report an error on stderr and build the exit to raise."""
    if debug:
        typer.echo(f"Debug - {message}: {error!r}", err=True)
    else:
        typer.echo(f"Error: {message}: {error}", err=True)
    return typer.Exit(1)


def process_text_input(text: str | None) -> str:
    """Return the text to synthesize.

    Raises:
        ValueError: If no text is provided
    """
    if text is None or not text.strip():
        raise ValueError("No text provided")
    return text


@app.command()
def get(
    text: str | None = typer.Argument(None, help="Text to speak (stdin if omitted)"),
    voice: str | None = typer.Option(
        None, "-v", "--voice", help="Voice label (from config if omitted)"
    ),
    audio_format: str | None = typer.Option(
        None, "-f", "--format", help="Audio format, e.g. mp3 (from config if omitted)"
    ),
    provider: str | None = typer.Option(
        None, "-p", "--provider", help="TTS provider (from config if omitted)"
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Seconds allowed for synthesis on a cache miss"
    ),
    config_path: Path | None = ConfigOption,
    debug: bool = DebugOption,
) -> None:
    """Print the path of cached audio for TEXT, synthesizing it on a miss."""
    configure_logging(debug)

    if text is None and not sys.stdin.isatty():
        text = sys.stdin.read().strip()

    try:
        text = process_text_input(text)
        config = load_config(config_path)
        result = asyncio.run(
            fetch_audio(
                text,
                config,
                voice=voice,
                audio_format=audio_format,
                provider=provider,
                timeout=timeout,
            )
        )
    except CacheError as e:
        raise fail("Cache error", e, debug) from None
    except TTSAuthError as e:
        raise fail("Authentication error", e, debug) from None
    except TTSAPIError as e:
        raise fail("TTS API error", e, debug) from None
    except TimeoutError as e:
        raise fail("Synthesis timed out", e, debug) from None
    except (KeyError, ValueError) as e:
        raise fail("Invalid input", e, debug) from None

    if not result.cached:
        raise fail("Audio synthesized but not cached", result.error, debug)

    typer.echo(str(result.path))


@app.command()
def purge(
    config_path: Path | None = ConfigOption,
    debug: bool = DebugOption,
) -> None:
    """Delete cache files unused for longer than cache.expire_days."""
    configure_logging(debug)

    try:
        config = load_config(config_path)
        result = asyncio.run(purge_cache(config))
    except CacheError as e:
        raise fail("Cache error", e, debug) from None
    except KeyError as e:
        raise fail("Invalid provider", e, debug) from None

    if config.cache.expire_days == 0:
        typer.echo("Eviction disabled (cache.expire_days = 0)")
        return

    typer.echo(f"Deleted {result.deleted} of {result.scanned} files")
    if result.failed:
        typer.echo(f"Failed to delete {result.failed} files", err=True)
        raise typer.Exit(1)


@app.command()
def voices(
    provider: str = typer.Option(
        "elevenlabs", "-p", "--provider", help="TTS provider to list voices from"
    ),
    debug: bool = DebugOption,
) -> None:
    """List available voices as "Name: voice_id"."""
    configure_logging(debug)

    try:
        available = asyncio.run(list_available_voices(provider))
    except (TTSAuthError, TTSAPIError, KeyError) as e:
        raise fail("Failed to list voices", e, debug) from None

    for voice in available:
        typer.echo(f"{voice['name']}: {voice['id']}")


@app.command("init-config")
def init_config(
    config_path: Path | None = ConfigOption,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a default config file."""
    path = config_path or CONFIG_PATH
    if path.exists() and not force:
        typer.echo(f"Config already exists at {path} (use --force to overwrite)")
        raise typer.Exit(1)
    typer.echo(f"Generated {generate_config(path)}")
