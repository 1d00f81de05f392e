"""High-level API for voicecache library usage."""

from pathlib import Path

from .cache.models import CacheResult
from .config import load_config
from .core import fetch_audio


async def get_audio(
    text: str,
    voice: str | None = None,
    audio_format: str | None = None,
    provider: str | None = None,
    config_path: str | Path | None = None,
    timeout: float | None = None,
) -> CacheResult:
    """Get speech audio for text, from the cache when possible.

    Args:
        text: Text to speak
        voice: Voice label (from config if omitted)
        audio_format: Audio format such as "mp3" (from config if omitted)
        provider: TTS provider name (from config if omitted)
        config_path: Config file to use instead of ~/.config/voicecache/config.toml
        timeout: Seconds allowed for synthesis on a cache miss

    Returns:
        CacheResult; ``result.path`` is the cached audio file, or None with
        ``result.audio`` holding unpersisted audio if writing failed

    Raises:
        ConfigurationError: If configuration is missing or invalid
        KeyDerivationError: If no cache key can be derived
        TTSAuthError: If API key is not configured
        TTSAPIError: If TTS conversion fails
        ValueError: If text is empty
        KeyError: If provider not found
    """
    config = load_config(Path(config_path) if config_path else None)

    return await fetch_audio(
        text,
        config,
        voice=voice,
        audio_format=audio_format,
        provider=provider,
        timeout=timeout,
    )
