"""Bounded window of raw connection-log lines with snapshot persistence."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable

from .config import LINES_KEY
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1000


class StreamBuffer:
    """Insertion-ordered line buffer that drops the oldest lines on overflow.

    Every push mirrors the capacity-truncated window to the store. Persistence
    is best-effort and never interrupts ingestion.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        capacity: int = DEFAULT_CAPACITY,
        storage_key: str = LINES_KEY,
        autosave: bool = True,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self.autosave = autosave
        self._store = store
        self._key = storage_key
        self._lines: deque[str] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._lines)

    def push(self, line: str) -> None:
        if len(self._lines) == self.capacity:
            logger.debug("Stream window full (%d), dropping oldest line", self.capacity)
        self._lines.append(line)
        if self.autosave:
            self.save()

    def extend(self, lines: Iterable[str]) -> int:
        """Push several lines with a single persistence write."""
        count = 0
        for line in lines:
            self._lines.append(line)
            count += 1
        if count and self.autosave:
            self.save()
        return count

    def snapshot(self) -> list[str]:
        """Current window in arrival order."""
        return list(self._lines)

    def save(self) -> bool:
        try:
            return self._store.set(self._key, self.snapshot())
        except (OSError, ValueError) as e:
            logger.warning("Failed to persist stream window: %s", e)
            return False

    def restore(self) -> list[str]:
        """Reload the last persisted window, replacing the live one."""
        try:
            stored = self._store.get(self._key, [])
        except (OSError, ValueError) as e:
            logger.warning("Failed to load persisted stream window: %s", e)
            stored = []
        if not isinstance(stored, list):
            logger.warning("Ignoring malformed persisted stream window (%s)", type(stored).__name__)
            stored = []

        self._lines = deque((str(s) for s in stored[-self.capacity :]), maxlen=self.capacity)
        return self.snapshot()

    def clear(self) -> None:
        self._lines.clear()
        self._store.remove(self._key)
