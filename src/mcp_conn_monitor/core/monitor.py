"""Connection-monitor session.

This module is the main integration point: it receives raw lines from a
transport, keeps the bounded window, and serves the filtered/sorted view.
"""

from __future__ import annotations

import gzip
import logging
import time
from collections.abc import Callable, Iterable
from contextlib import asynccontextmanager
from pathlib import Path

import aiofiles
from aiofiles.threadpool import wrap

from .config import MonitorConfig, open_store, resolve_monitor_config
from .filtering import filter_records
from .formats import RecordParser, default_parser
from .intel_cache import IntelligenceCache
from .models import ConnectionRecord, IntelligenceRecord, SortColumn, SortDirection
from .preferences import load_sort_state, save_sort_state
from .sorting import SortSpec, sort_records
from .storage import KeyValueStore
from .stream_buffer import StreamBuffer

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _open_text(path: Path, *, encoding: str, decode_errors: str):
    """Open a log file for async text reading (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        f = gzip.open(path, mode="rt", encoding=encoding, errors=decode_errors)
        af = wrap(f)
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=encoding, errors=decode_errors) as f:
            yield f


class ConnectionMonitor:
    """One monitoring session: stream window + intelligence cache over a shared store."""

    def __init__(
        self,
        cfg: MonitorConfig | None = None,
        *,
        store: KeyValueStore | None = None,
        parser: RecordParser | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = cfg or MonitorConfig()
        self.store = store if store is not None else open_store(self.config)
        self.parser = parser or default_parser()
        self.buffer = StreamBuffer(self.store, capacity=self.config.buffer_capacity)
        self.intel = IntelligenceCache(
            self.store,
            max_entries=self.config.lookup_cache_size,
            idle_seconds=self.config.lookup_idle_seconds,
            clock=clock,
        )
        self.paused = False
        self.last_error: str | None = None

    @classmethod
    def from_env(cls, cfg: MonitorConfig | None = None) -> ConnectionMonitor:
        return cls(resolve_monitor_config(cfg))

    # -- transport callbacks -------------------------------------------------

    def on_line(self, line: str) -> bool:
        """Accept one line from the transport. Returns False if it was ignored."""
        line = line.rstrip("\r\n")
        if self.paused or not line.strip():
            return False
        self.buffer.push(line)
        return True

    def on_error(self, error: BaseException | str | None = None) -> None:
        self.last_error = str(error) if error is not None else "stream error"
        logger.warning("Connection-log stream error: %s", self.last_error)

    def ingest(self, lines: Iterable[str]) -> int:
        """Push a batch of lines with one persistence write; returns how many were kept."""
        if self.paused:
            return 0
        cleaned = (ln.rstrip("\r\n") for ln in lines)
        return self.buffer.extend(ln for ln in cleaned if ln.strip())

    async def ingest_file(
        self,
        log_path: str | Path,
        *,
        encoding: str = "utf-8",
        decode_errors: str = "replace",
    ) -> int:
        """Feed every line of a connection-log file (plain or .gz) into the window."""
        path = Path(log_path)
        if not path.is_file():
            raise FileNotFoundError(f"Log file not found: {path}")

        lines: list[str] = []
        async with _open_text(path, encoding=encoding, decode_errors=decode_errors) as f:
            async for line in f:
                lines.append(line)
        count = self.ingest(lines)
        logger.debug("Ingested %d lines from %s", count, path)
        return count

    # -- views ---------------------------------------------------------------

    def records(self) -> list[ConnectionRecord]:
        """Parsed records of the retained window, arrival order; unparsable lines skipped."""
        out: list[ConnectionRecord] = []
        for line in self.buffer.snapshot():
            rec = self.parser.parse(line)
            if rec is not None:
                out.append(rec)
        return out

    def view(
        self,
        query: str = "",
        column: SortColumn | None = None,
        direction: SortDirection = SortDirection.NONE,
        *,
        limit: int | None = None,
    ) -> list[ConnectionRecord]:
        """Filter, keep the most recent ``limit`` matches, then sort."""
        matched = filter_records(query, self.records())
        if limit is not None:
            if limit <= 0:
                raise ValueError("limit must be > 0")
            matched = matched[-limit:]
        return sort_records(matched, column, direction)

    def annotate(self, record: ConnectionRecord) -> IntelligenceRecord | None:
        """Intelligence record owning the record's destination address, if known."""
        return self.intel.find_containing(record.destination)

    # -- preferences / lifecycle --------------------------------------------

    @property
    def sort_state(self) -> SortSpec:
        return load_sort_state(self.store)

    @sort_state.setter
    def sort_state(self, spec: SortSpec) -> None:
        save_sort_state(self.store, spec)

    def restore(self) -> list[str]:
        """Reload the persisted window (session start)."""
        return self.buffer.restore()

    def clear(self) -> None:
        self.buffer.clear()
