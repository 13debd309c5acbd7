"""Fortune selection by rejection sampling.

Ids in the store may have gaps, so a uniformly drawn id can miss. Rather than
tracking the set of live ids, each attempt re-reads the current maximum id,
draws uniformly from `[0, max_id)` and does a single point lookup; misses are
retried immediately with a fresh draw. The loop is bounded by an attempt
count and a wall-clock deadline so an empty store, or a bound that no longer
covers any live id, surfaces as `NoContentAvailable` instead of spinning a
worker forever.
"""

import logging
import time
from typing import Any, Optional

import numpy as np

from ..core.models_io import DEFAULT_MAX_ATTEMPTS, DEFAULT_SELECTION_TIMEOUT, Entry

logger = logging.getLogger(__name__)


class NoContentAvailable(Exception):
    """No entry could be found within the attempt or time budget."""

    def __init__(self, attempts: int, elapsed: float):
        self.attempts = attempts
        self.elapsed = elapsed
        super().__init__(
            f"No content available after {attempts} attempts in {elapsed:.3f}s"
        )


class FortuneSelector:
    """
    Picks a random entry from a storage reader.

    `storage` needs `max_identifier() -> int` and
    `fetch_by_id(int) -> Optional[Entry]`; `StorageReader` provides both.
    """

    def __init__(
        self,
        storage: Any,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        timeout: Optional[float] = DEFAULT_SELECTION_TIMEOUT,
        rng: Optional[np.random.Generator] = None,
    ):
        self.storage = storage
        self.max_attempts = max_attempts
        self.timeout = timeout
        self.rng = rng if rng is not None else np.random.default_rng()

    def _attempt(self) -> Optional[Entry]:
        max_id = int(self.storage.max_identifier())
        if max_id <= 0:
            return None
        candidate = int(self.rng.integers(0, max_id))
        return self.storage.fetch_by_id(candidate)

    def select(self) -> Entry:
        """
        Draw entries until one exists.

        Returns:
            The first entry found

        Raises:
            NoContentAvailable: when `max_attempts` lookups or `timeout`
                seconds pass without a hit
        """
        started = time.monotonic()
        deadline = started + self.timeout if self.timeout is not None else None

        attempts = 0
        while attempts < self.max_attempts:
            attempts += 1
            entry = self._attempt()
            if entry is not None:
                if attempts > 1:
                    logger.debug("Selected id %d after %d attempts", entry.id, attempts)
                return entry
            if deadline is not None and time.monotonic() >= deadline:
                break

        raise NoContentAvailable(attempts, time.monotonic() - started)
