"""Data models for the audio cache."""

from dataclasses import dataclass
from pathlib import Path

from ..errors import PersistenceError


@dataclass(frozen=True)
class CacheEntry:
    """Files making up one cache entry.

    Attributes:
        key: Cache key shared by both files
        audio_path: Path to the audio payload (<key>.<format>)
        text_path: Path to the UTF-8 sidecar with the source text (<key>.txt)
    """

    key: str
    audio_path: Path
    text_path: Path


@dataclass(frozen=True)
class EntryFile:
    """A file found in the cache folder with its last-modified time."""

    path: Path
    mtime: float


@dataclass
class SweepResult:
    """Outcome of one eviction sweep.

    Attributes:
        scanned: Number of files enumerated
        deleted: Number of aged files removed
        failed: Number of aged files that could not be removed
    """

    scanned: int = 0
    deleted: int = 0
    failed: int = 0


@dataclass(frozen=True)
class CacheResult:
    """Result of a cache lookup.

    A result is either cached (``path`` set) or not cached, in which case
    ``error`` explains why and ``audio`` carries the synthesized payload so
    the caller can still use it.

    Attributes:
        key: Cache key of the request
        audio_format: Normalized audio format (file extension)
        path: Path to the cached audio file, None if it could not be persisted
        hit: True if the audio was already in the cache
        audio: Freshly synthesized audio that could not be persisted
        error: Persistence failure that prevented caching
    """

    key: str
    audio_format: str
    path: Path | None
    hit: bool = False
    audio: bytes | None = None
    error: PersistenceError | None = None

    @property
    def cached(self) -> bool:
        """Whether the audio is available from the cache folder."""
        return self.path is not None
