"""Address-intelligence cache.

Durable ``id -> IntelligenceRecord`` mapping (persisted on every write) plus a
volatile, size-bounded LRU of containment lookups keyed by normalized address.
Negative results are cached too. The volatile state is dropped on every write
and after an idle period with no reads or writes; the loaded mapping stays
authoritative for the session even when storage writes fail.
"""

from __future__ import annotations

import ipaddress
import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Iterable

from pydantic import ValidationError

from .config import ASN_KEY
from .models import IntelligenceRecord
from .storage import KeyValueStore
from .variants import strip_port

logger = logging.getLogger(__name__)

IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network
IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

DEFAULT_MAX_ENTRIES = 10_000
DEFAULT_IDLE_SECONDS = 60.0

_MISSING = object()


def parse_address(address: str) -> IPAddress | None:
    """Parse an address literal (port and brackets allowed); IPv4-mapped IPv6 becomes IPv4."""
    try:
        addr = ipaddress.ip_address(strip_port(address))
    except ValueError:
        return None
    if isinstance(addr, ipaddress.IPv6Address) and addr.ipv4_mapped is not None:
        return addr.ipv4_mapped
    return addr


def parse_prefix(prefix: str) -> IPNetwork | None:
    try:
        return ipaddress.ip_network(prefix.strip(), strict=False)
    except ValueError:
        return None


def normalize_address(address: str) -> str:
    """Cache key for an address: canonical text when parseable, stripped literal otherwise."""
    addr = parse_address(address)
    if addr is None:
        return strip_port(address).lower()
    return str(addr)


class IntelligenceCache:
    """Bounded, idle-invalidated LRU over CIDR containment lookups.

    Ties between records whose prefixes both contain an address go to the
    longest prefix; equal prefix lengths go to the record added first.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        idle_seconds: float = DEFAULT_IDLE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        storage_key: str = ASN_KEY,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._store = store
        self._key = storage_key
        self.max_entries = max_entries
        self.idle_seconds = idle_seconds
        self._clock = clock
        self._lock = threading.Lock()

        self._records: dict[str, IntelligenceRecord] | None = None
        self._networks: list[tuple[IntelligenceRecord, list[IPNetwork]]] | None = None
        self._lookups: OrderedDict[str, IntelligenceRecord | None] = OrderedDict()
        self._last_touched: float | None = None

    def __len__(self) -> int:
        """Number of memoized lookups currently held."""
        return len(self._lookups)

    # -- lifecycle helpers (lock held) --------------------------------------

    def _expired(self, now: float) -> bool:
        return self._last_touched is not None and now - self._last_touched >= self.idle_seconds

    def _touch(self) -> None:
        now = self._clock()
        if self._expired(now):
            logger.debug("Intelligence cache idle for %.1fs, dropping lookups", now - self._last_touched)
            self._invalidate()
        self._last_touched = now

    def _invalidate(self) -> None:
        self._networks = None
        self._lookups.clear()

    def _load(self) -> dict[str, IntelligenceRecord]:
        if self._records is not None:
            return self._records

        try:
            raw = self._store.get(self._key, {})
        except (OSError, ValueError) as e:
            logger.warning("Failed to load intelligence records: %s", e)
            raw = {}
        records: dict[str, IntelligenceRecord] = {}
        if isinstance(raw, dict):
            for rid, value in raw.items():
                try:
                    records[str(rid)] = IntelligenceRecord.model_validate(value)
                except ValidationError as e:
                    logger.warning("Skipping invalid intelligence record %s: %s", rid, e)
        else:
            logger.warning("Ignoring malformed intelligence store (%s)", type(raw).__name__)

        self._records = records
        return records

    def _compiled(self) -> list[tuple[IntelligenceRecord, list[IPNetwork]]]:
        if self._networks is None:
            compiled = []
            for rec in self._load().values():
                nets = []
                for prefix in rec.prefixes:
                    net = parse_prefix(prefix)
                    if net is None:
                        logger.debug("Ignoring malformed prefix %r in %s", prefix, rec.id)
                        continue
                    nets.append(net)
                compiled.append((rec, nets))
            self._networks = compiled
        return self._networks

    def _persist(self) -> None:
        records = self._load()
        try:
            saved = self._store.set(self._key, {rid: rec.model_dump() for rid, rec in records.items()})
        except (OSError, ValueError) as e:
            logger.warning("Failed to persist intelligence records: %s", e)
            return
        if not saved:
            logger.warning("Intelligence records kept in memory only (store rejected write)")

    def _scan(self, addr: IPAddress | None) -> IntelligenceRecord | None:
        if addr is None:
            return None
        best: IntelligenceRecord | None = None
        best_len = -1
        for rec, nets in self._compiled():
            for net in nets:
                if net.version == addr.version and addr in net and net.prefixlen > best_len:
                    best = rec
                    best_len = net.prefixlen
        return best

    # -- public API ----------------------------------------------------------

    def add(self, record_id: str, name: str, prefixes: Iterable[str]) -> IntelligenceRecord:
        """Upsert a record (last write wins), persist it and drop memoized lookups."""
        record = IntelligenceRecord(id=record_id, name=name, prefixes=list(dict.fromkeys(prefixes)))
        with self._lock:
            self._touch()
            self._load()[record_id] = record
            self._persist()
            self._networks = None
            self._lookups.clear()
        return record.model_copy(deep=True)

    def find_containing(self, address: str) -> IntelligenceRecord | None:
        """Return the record owning ``address`` or None. Never raises on bad input."""
        key = normalize_address(address)
        with self._lock:
            self._touch()
            cached = self._lookups.get(key, _MISSING)
            if cached is not _MISSING:
                self._lookups.move_to_end(key)
                return cached.model_copy(deep=True) if cached is not None else None

            result = self._scan(parse_address(address))

            if len(self._lookups) >= self.max_entries:
                evicted, _ = self._lookups.popitem(last=False)
                logger.debug("Evicted lookup %s", evicted)
            self._lookups[key] = result
        return result.model_copy(deep=True) if result is not None else None

    def get_all(self) -> dict[str, IntelligenceRecord]:
        """Snapshot of the durable mapping; mutating it does not affect the cache."""
        with self._lock:
            self._touch()
            return {rid: rec.model_copy(deep=True) for rid, rec in self._load().items()}

    def is_cached(self, address: str) -> bool:
        """Whether a lookup for ``address`` is memoized (does not count as a use)."""
        with self._lock:
            if self._expired(self._clock()):
                return False
            return normalize_address(address) in self._lookups

    def clear(self) -> None:
        """Wipe durable and volatile state."""
        with self._lock:
            try:
                self._store.remove(self._key)
            except OSError as e:
                logger.warning("Failed to remove persisted intelligence records: %s", e)
            self._invalidate()
            self._records = {}
            self._last_touched = None
