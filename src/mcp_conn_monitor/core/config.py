"""Monitor configuration and environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from .storage import JsonFileStore, KeyValueStore, MemoryStore

LINES_KEY = "conn_monitor_lines"
ASN_KEY = "conn_monitor_asn"
SORT_KEY = "conn_monitor_sort"
DISMISSED_VERSIONS_KEY = "conn_monitor_dismissed_versions"


@dataclass(frozen=True, slots=True)
class MonitorConfig:
    data_dir: Path | None = None  # None keeps everything in memory
    buffer_capacity: int = 1000
    lookup_cache_size: int = 10_000
    lookup_idle_seconds: float = 60.0


def _env_int(name: str) -> int | None:
    env = os.getenv(name)
    if env is None or env == "":
        return None
    try:
        value = int(env)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < 1:
        raise ValueError(f"{name} must be >= 1")
    return value


def _env_float(name: str) -> float | None:
    env = os.getenv(name)
    if env is None or env == "":
        return None
    try:
        value = float(env)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number") from exc
    if value <= 0:
        raise ValueError(f"{name} must be > 0")
    return value


def resolve_monitor_config(cfg: MonitorConfig | None = None) -> MonitorConfig:
    """Return config with optional env overrides applied."""
    if cfg is None:
        cfg = MonitorConfig()

    data_dir = os.getenv("CONN_MONITOR_DATA_DIR")
    if data_dir:
        cfg = replace(cfg, data_dir=Path(data_dir).expanduser())

    capacity = _env_int("CONN_MONITOR_BUFFER_CAPACITY")
    if capacity is not None:
        cfg = replace(cfg, buffer_capacity=capacity)

    cache_size = _env_int("CONN_MONITOR_CACHE_SIZE")
    if cache_size is not None:
        cfg = replace(cfg, lookup_cache_size=cache_size)

    idle = _env_float("CONN_MONITOR_CACHE_IDLE_SECONDS")
    if idle is not None:
        cfg = replace(cfg, lookup_idle_seconds=idle)

    return cfg


def open_store(cfg: MonitorConfig) -> KeyValueStore:
    """Open the durable store for a config (file-backed when data_dir is set)."""
    if cfg.data_dir is None:
        return MemoryStore()
    return JsonFileStore(cfg.data_dir)
