"""Configuration management for voicecache.

Loads configuration from ~/.config/voicecache/config.toml.
Priority chain: CLI flags > env vars > config file.
"""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError

CONFIG_DIR = Path.home() / ".config" / "voicecache"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_CONFIG = """\
# voicecache configuration

[tts]
# Provider: "elevenlabs" (cloud) or "system" (OS built-in, wav only)
provider = "elevenlabs"

# Voice used when none is given; also the prefix of cached file names.
# ElevenLabs accepts a voice name (resolved to its ID) or a voice ID,
# see `voicecache voices`
voice = "Rachel"

# Audio format of cached files: "mp3", "pcm", "ulaw" (elevenlabs), "wav" (system)
format = "mp3"

[cache]
# Folder holding cached audio and text sidecars (required)
folder = "~/.cache/voicecache"

# Delete files unused for this many days, 0 keeps everything
expire_days = 0

# API keys are read from environment variables, not this file:
#   ELEVENLABS_API_KEY  - ElevenLabs provider
"""


@dataclass(frozen=True)
class TTSConfig:
    """Synthesis provider configuration."""

    provider: str
    voice: str
    format: str


@dataclass(frozen=True)
class CacheConfig:
    """Audio cache configuration."""

    folder: Path
    expire_days: int


@dataclass(frozen=True)
class VoicecacheConfig:
    """Top-level voicecache configuration."""

    tts: TTSConfig
    cache: CacheConfig


def generate_config(path: Path = CONFIG_PATH) -> Path:
    """Generate default config file, ~/.config/voicecache/config.toml by default."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG)
    return path


def _parse_expire_days(value: object) -> int:
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise ConfigurationError(
                f"cache.expire_days must be an integer, got {value!r}"
            ) from None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"cache.expire_days must be an integer, got {value!r}")
    if value < 0:
        raise ConfigurationError(f"cache.expire_days must be 0 or greater, got {value}")
    return value


def load_config(path: Path | None = None) -> VoicecacheConfig:
    """Load configuration from config file with env var overrides.

    On first run, generates the config file and fails so the user
    can review it before proceeding.

    Args:
        path: Config file to read, defaults to ~/.config/voicecache/config.toml

    Returns:
        Loaded and validated VoicecacheConfig.

    Raises:
        ConfigurationError: If config is missing (after generating), unreadable,
            or invalid.
    """
    config_path = path or CONFIG_PATH

    if not config_path.exists():
        generate_config(config_path)
        raise ConfigurationError(
            f"No config found. Generated {config_path}, review it and run again."
        )

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid config file {config_path}: {e}", e) from e

    tts = data.get("tts", {})
    cache = data.get("cache", {})

    folder = os.getenv("VOICECACHE_FOLDER", cache.get("folder", ""))
    if not isinstance(folder, str) or not folder.strip():
        raise ConfigurationError(
            f"Folder for cache must be defined: set cache.folder in {config_path}"
        )

    # Validate required fields
    missing = [f"tts.{name}" for name in ("provider", "voice") if name not in tts]
    if missing:
        raise ConfigurationError(
            f"Missing required config values: {', '.join(missing)}. "
            f"Edit {config_path} or delete it to regenerate."
        )

    return VoicecacheConfig(
        tts=TTSConfig(
            provider=os.getenv("VOICECACHE_PROVIDER", tts["provider"]),
            voice=os.getenv("VOICECACHE_VOICE", tts["voice"]),
            format=os.getenv("VOICECACHE_FORMAT", tts.get("format", "mp3")),
        ),
        cache=CacheConfig(
            folder=Path(folder).expanduser(),
            expire_days=_parse_expire_days(
                os.getenv("VOICECACHE_EXPIRE_DAYS", cache.get("expire_days", 0))
            ),
        ),
    )
