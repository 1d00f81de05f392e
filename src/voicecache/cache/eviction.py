"""Age-based eviction of cache files.

Sweeps are triggered by cache interactions rather than a timer. At most one
sweep runs per throttle window, and a sweep removes every file whose last
access is older than the retention window.
"""

import logging
import threading
import time
from collections.abc import Callable

from ..errors import ConfigurationError, PurgeError
from .models import SweepResult
from .store import ArtifactStore

logger = logging.getLogger(__name__)

ONE_DAY = 24 * 60 * 60
SWEEP_INTERVAL = 2 * ONE_DAY


class RetentionState:
    """Retention window and last sweep time shared by all cache users.

    Attributes:
        expire_days: Days an unused file is kept, 0 disables eviction
        last_sweep: Epoch seconds of the last committed sweep
    """

    def __init__(self, expire_days: int = 0, last_sweep: float = 0.0):
        """Initialize retention state.

        Raises:
            ConfigurationError: If expire_days is not a non-negative integer
        """
        if isinstance(expire_days, bool) or not isinstance(expire_days, int):
            raise ConfigurationError(
                f"expire_days must be an integer, got {expire_days!r}"
            )
        if expire_days < 0:
            raise ConfigurationError(
                f"expire_days must be 0 or greater, got {expire_days}"
            )
        self._expire_days = expire_days
        self._last_sweep = last_sweep
        self._lock = threading.Lock()

    @property
    def expire_days(self) -> int:
        return self._expire_days

    @property
    def last_sweep(self) -> float:
        with self._lock:
            return self._last_sweep

    @property
    def enabled(self) -> bool:
        return self._expire_days > 0

    def claim_sweep(self, now: float) -> bool:
        """Atomically decide whether a sweep is due and commit it.

        The throttle window is committed before the caller scans, so a slow
        or failing scan does not make the next call scan again.

        Args:
            now: Current time in epoch seconds

        Returns:
            True if the caller should sweep now
        """
        if not self.enabled:
            return False
        with self._lock:
            elapsed = now - self._last_sweep
            if elapsed <= SWEEP_INTERVAL:
                return False
            self._last_sweep = now
            return True


class EvictionScheduler:
    """Removes cache files unused for longer than the retention window."""

    def __init__(
        self,
        store: ArtifactStore,
        state: RetentionState,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.state = state
        self._clock = clock

    def maybe_sweep(self) -> SweepResult | None:
        """Run a sweep if eviction is enabled and the throttle window passed.

        Returns:
            Result of the sweep, None if no sweep was due
        """
        now = self._clock()
        logger.debug(
            f"Cache cleaner: {now - self.state.last_sweep:.0f}s since last sweep"
        )
        if not self.state.claim_sweep(now):
            return None
        return self.sweep(now)

    def sweep(self, now: float | None = None) -> SweepResult:
        """Delete every file older than the retention window.

        Individual deletion failures are logged and counted but never abort
        the sweep. Files already removed by someone else are not errors.

        Args:
            now: Reference time, defaults to the scheduler clock

        Returns:
            Counts of scanned, deleted and failed files
        """
        result = SweepResult()
        if not self.state.enabled:
            return result

        now = self._clock() if now is None else now
        max_age = self.state.expire_days * ONE_DAY

        try:
            files = self.store.list_entries()
        except OSError as e:
            logger.warning(f"Cache cleaner could not scan {self.store.folder}: {e}")
            return result

        result.scanned = len(files)
        for entry in files:
            if now - entry.mtime <= max_age:
                continue
            try:
                if self.store.delete(entry.path):
                    result.deleted += 1
            except PurgeError as e:
                result.failed += 1
                logger.warning(str(e))

        logger.info(f"Cache cleaner deleted '{result.deleted}' aged files")
        return result
