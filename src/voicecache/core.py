"""Core functionality for voicecache - wires configuration, providers and caches."""

import logging
import threading
from pathlib import Path

from .cache.eviction import RetentionState
from .cache.manager import AudioCache
from .cache.models import CacheResult, SweepResult
from .config import VoicecacheConfig
from .errors import TTSAPIError, TTSAuthError
from .providers import ProviderRegistry

logger = logging.getLogger(__name__)

# Process-wide caches, one per (folder, provider), sharing one retention
# state per folder so the sweep throttle holds across providers
_caches: dict[tuple[Path, str], AudioCache] = {}
_retention: dict[Path, RetentionState] = {}
_registry_lock = threading.Lock()


def get_cache(config: VoicecacheConfig, provider: str | None = None) -> AudioCache:
    """Get the shared AudioCache for a configuration.

    Args:
        config: Loaded configuration
        provider: Provider name, defaults to config.tts.provider

    Returns:
        AudioCache bound to the configured folder and provider

    Raises:
        ConfigurationError: If the cache folder or retention window is invalid
        KeyError: If provider not found
    """
    provider_name = provider or config.tts.provider
    folder = config.cache.folder.expanduser()

    with _registry_lock:
        cache = _caches.get((folder, provider_name))
        if cache is None:
            retention = _retention.get(folder)
            if retention is None:
                retention = _retention[folder] = RetentionState(
                    config.cache.expire_days
                )
            cache = AudioCache(
                folder,
                ProviderRegistry.get_instance(provider_name),
                retention=retention,
            )
            _caches[(folder, provider_name)] = cache
            logger.debug(f"Created cache for {provider_name} at {folder}")
    return cache


def reset_caches() -> None:
    """Forget all shared caches and retention state."""
    with _registry_lock:
        _caches.clear()
        _retention.clear()


async def fetch_audio(
    text: str,
    config: VoicecacheConfig,
    voice: str | None = None,
    audio_format: str | None = None,
    provider: str | None = None,
    timeout: float | None = None,
) -> CacheResult:
    """Get audio for text through the configured cache.

    Args:
        text: Text to speak
        config: Loaded configuration
        voice: Voice label, defaults to config.tts.voice
        audio_format: Audio format, defaults to config.tts.format
        provider: Provider name, defaults to config.tts.provider
        timeout: Seconds allowed for synthesis on a miss

    Returns:
        CacheResult for the request

    Raises:
        KeyDerivationError: If no cache key can be derived
        TTSAuthError: If the provider is not authenticated
        TTSAPIError: If synthesis fails
        ValueError: If text is empty or the format is invalid
        KeyError: If provider not found
    """
    if not text or not text.strip():
        raise ValueError("Text cannot be empty")

    cache = get_cache(config, provider)
    return await cache.get_audio(
        text,
        voice or config.tts.voice,
        audio_format or config.tts.format,
        timeout=timeout,
    )


async def purge_cache(config: VoicecacheConfig) -> SweepResult:
    """Sweep aged files from the configured cache folder now."""
    cache = get_cache(config)
    return await cache.purge()


async def list_available_voices(provider: str = "elevenlabs") -> list[dict]:
    """List all available voices from specified provider.

    Raises:
        TTSAuthError: If API key is not configured
        TTSAPIError: If API call fails
        KeyError: If provider not found
    """
    try:
        return await ProviderRegistry.get_instance(provider).list_voices()
    except (TTSAuthError, TTSAPIError, KeyError):
        raise
    except Exception as e:
        raise TTSAPIError(f"Failed to list voices: {e}", None, e) from e
