"""Read-through audio cache.

Orchestrates ArtifactStore, EvictionScheduler and a TTS provider: a request
is answered from the cache folder when possible, otherwise synthesized,
persisted and returned. Every interaction gives the eviction scheduler a
chance to sweep aged files.
"""

import asyncio
import logging
import threading
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from pathlib import Path

from ..errors import ConfigurationError, PersistenceError
from ..providers.base import TTSProvider
from .eviction import EvictionScheduler, RetentionState
from .keys import derive_key
from .models import CacheResult, EntryFile, SweepResult
from .store import ArtifactStore, normalize_format

logger = logging.getLogger(__name__)

# Seconds between checks while another request holds a key
KEY_POLL_INITIAL = 0.005
KEY_POLL_MAX = 0.1


class AudioCache:
    """Disk-backed cache of synthesized speech.

    Example:
        cache = AudioCache("~/.cache/voicecache", ElevenLabsProvider(), expire_days=30)

        # First call - cache miss, synthesizes and stores audio
        result = await cache.get_audio("Hello world", "Robert", "mp3")

        # Second call - cache hit, no provider call
        result = await cache.get_audio("Hello world", "Robert", "mp3")
        assert result.hit
    """

    def __init__(
        self,
        cache_dir: Path | str | None,
        provider: TTSProvider,
        expire_days: int = 0,
        retention: RetentionState | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the cache.

        Args:
            cache_dir: Folder holding all cache files, created if missing
            provider: Synthesis backend used on cache misses
            expire_days: Days an unused file is kept, 0 disables eviction.
                Ignored when retention is given.
            retention: Shared retention state, for several caches that must
                respect one throttle window
            clock: Time source in epoch seconds

        Raises:
            ConfigurationError: If the folder is missing or unusable, or the
                retention window is invalid
        """
        if not cache_dir:
            raise ConfigurationError("Folder for cache must be defined")

        self.store = ArtifactStore(Path(cache_dir))
        self.provider = provider
        self.retention = retention or RetentionState(expire_days)
        self.scheduler = EvictionScheduler(self.store, self.retention, clock)
        self._clock = clock

        # Keys with a lookup or synthesis in progress, shared by every thread
        # and event loop using this cache
        self._busy_keys: set[str] = set()
        self._busy_lock = threading.Lock()

        logger.debug(
            f"AudioCache initialized at {self.store.folder} "
            f"(expire_days={self.retention.expire_days})"
        )

    @property
    def folder(self) -> Path:
        return self.store.folder

    async def get_audio(
        self,
        text: str,
        voice: str,
        audio_format: str,
        timeout: float | None = None,
    ) -> CacheResult:
        """Return cached audio for text and voice, synthesizing it on a miss.

        Concurrent requests for the same entry share a single synthesis, also
        when they come from different threads or event loops: later requesters
        wait for the first one and then see a cache hit.

        Args:
            text: Text to speak
            voice: Voice label passed to the provider and used in the key
            audio_format: Audio format such as "mp3"
            timeout: Seconds allowed for the provider call. Only synthesis is
                bounded; reading and writing the cache folder is not.

        Returns:
            CacheResult describing the cached file, or why it is not cached

        Raises:
            KeyDerivationError: If no cache key can be derived
            ValueError: If the audio format is invalid
            TTSError: If synthesis fails
            TimeoutError: If synthesis exceeds the timeout
        """
        key = derive_key(text, voice)
        fmt = normalize_format(audio_format)

        async with self._key_lock(key):
            result = await self._lookup(key, fmt)
            if result is None:
                result = await self._fetch(key, text, voice, fmt, timeout)

        await asyncio.to_thread(self.scheduler.maybe_sweep)
        return result

    async def _lookup(self, key: str, fmt: str) -> CacheResult | None:
        if not await asyncio.to_thread(self.store.exists, key, fmt):
            logger.debug(f"Cache miss for {key}.{fmt}")
            return None

        now = self._clock()
        if not await asyncio.to_thread(self.store.touch, key, fmt, now):
            logger.debug(f"Cache entry {key}.{fmt} removed during lookup")
            return None

        logger.debug(f"Cache hit for {key}.{fmt}")
        return CacheResult(
            key=key, audio_format=fmt, path=self.store.read(key, fmt), hit=True
        )

    async def _fetch(
        self, key: str, text: str, voice: str, fmt: str, timeout: float | None
    ) -> CacheResult:
        audio = await asyncio.wait_for(
            self.provider.synthesize(text, voice, fmt), timeout
        )

        try:
            path = await asyncio.to_thread(self.store.write, key, fmt, text, audio)
        except PersistenceError as e:
            logger.warning(f"Could not write {key}.{fmt} to cache: {e}")
            return CacheResult(
                key=key, audio_format=fmt, path=None, audio=audio, error=e
            )

        logger.info(f"Cached audio for '{text[:50]}' at {path}")
        return CacheResult(key=key, audio_format=fmt, path=path)

    def _try_claim(self, key: str) -> bool:
        with self._busy_lock:
            if key in self._busy_keys:
                return False
            self._busy_keys.add(key)
            return True

    @asynccontextmanager
    async def _key_lock(self, key: str) -> AsyncIterator[None]:
        # Waiters poll since the key set is shared across threads and event loops
        delay = KEY_POLL_INITIAL
        while not self._try_claim(key):
            await asyncio.sleep(delay)
            delay = min(delay * 2, KEY_POLL_MAX)
        try:
            yield
        finally:
            with self._busy_lock:
                self._busy_keys.discard(key)

    async def purge(self) -> SweepResult:
        """Sweep aged files now, ignoring the throttle window.

        Still a no-op when eviction is disabled.
        """
        return await asyncio.to_thread(self.scheduler.sweep)

    async def entries(self) -> list[EntryFile]:
        """List all files currently in the cache folder."""
        return await asyncio.to_thread(self.store.list_entries)
