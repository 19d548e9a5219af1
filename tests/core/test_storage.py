from __future__ import annotations

from pathlib import Path

import pytest

from mcp_conn_monitor.core.config import MonitorConfig, open_store, resolve_monitor_config
from mcp_conn_monitor.core.models import SortColumn, SortDirection
from mcp_conn_monitor.core.preferences import (
    dismiss_version,
    dismissed_versions,
    load_sort_state,
    save_sort_state,
)
from mcp_conn_monitor.core.sorting import SortSpec
from mcp_conn_monitor.core.storage import JsonFileStore, MemoryStore


def test_json_file_store_roundtrip(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "state")
    assert store.get("k", default=[]) == []
    assert store.set("k", {"a": [1, 2]})
    assert store.get("k") == {"a": [1, 2]}
    store.remove("k")
    assert store.get("k") is None
    store.remove("k")


def test_json_file_store_rejects_path_like_keys(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        JsonFileStore(tmp_path).get("../escape")


def test_json_file_store_unserializable_value(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path)
    assert store.set("k", {"x": object()}) is False
    assert store.get("k") is None


def test_memory_store_detaches_values() -> None:
    store = MemoryStore()
    value = {"a": [1]}
    store.set("k", value)
    value["a"].append(2)
    got = store.get("k")
    got["a"].append(3)
    assert store.get("k") == {"a": [1]}


def test_sort_state_roundtrip_and_defaults() -> None:
    store = MemoryStore()
    assert load_sort_state(store) == SortSpec()

    save_sort_state(store, SortSpec(SortColumn.DOMAIN, SortDirection.DESC))
    assert load_sort_state(store) == SortSpec(SortColumn.DOMAIN, SortDirection.DESC)

    store.set("conn_monitor_sort", {"column": "bogus", "direction": "asc"})
    assert load_sort_state(store) == SortSpec()


def test_dismiss_version_appends_once() -> None:
    store = MemoryStore()
    assert dismissed_versions(store) == []
    dismiss_version(store, "v1.2.0")
    assert dismiss_version(store, "v1.2.0") == ["v1.2.0"]
    assert dismiss_version(store, "v1.3.0") == ["v1.2.0", "v1.3.0"]


def test_resolve_monitor_config_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONN_MONITOR_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CONN_MONITOR_BUFFER_CAPACITY", "50")
    monkeypatch.setenv("CONN_MONITOR_CACHE_SIZE", "7")
    monkeypatch.setenv("CONN_MONITOR_CACHE_IDLE_SECONDS", "2.5")

    cfg = resolve_monitor_config()
    assert cfg == MonitorConfig(
        data_dir=tmp_path,
        buffer_capacity=50,
        lookup_cache_size=7,
        lookup_idle_seconds=2.5,
    )
    assert isinstance(open_store(cfg), JsonFileStore)
    assert isinstance(open_store(MonitorConfig()), MemoryStore)


def test_resolve_monitor_config_invalid_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONN_MONITOR_BUFFER_CAPACITY", "0")
    with pytest.raises(ValueError, match="CONN_MONITOR_BUFFER_CAPACITY"):
        resolve_monitor_config()

    monkeypatch.setenv("CONN_MONITOR_BUFFER_CAPACITY", "lots")
    with pytest.raises(ValueError, match="CONN_MONITOR_BUFFER_CAPACITY"):
        resolve_monitor_config()
