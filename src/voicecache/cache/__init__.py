"""Disk-backed audio cache for voicecache."""

from pathlib import Path

from .eviction import EvictionScheduler, RetentionState
from .keys import derive_key
from .manager import AudioCache
from .models import CacheEntry, CacheResult, EntryFile, SweepResult
from .store import ArtifactStore, normalize_format

__all__ = [
    "ArtifactStore",
    "AudioCache",
    "CacheEntry",
    "CacheResult",
    "EntryFile",
    "EvictionScheduler",
    "RetentionState",
    "SweepResult",
    "derive_key",
    "get_cache_dir",
    "normalize_format",
]


def get_cache_dir() -> Path:
    """Get or create the default voicecache cache directory.

    Creates ~/.cache/voicecache/ if it doesn't exist.

    Returns:
        Path to the cache directory
    """
    cache_dir = Path.home() / ".cache" / "voicecache"
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir
