from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from mcp_conn_monitor.core.config import MonitorConfig
from mcp_conn_monitor.core.monitor import ConnectionMonitor
from mcp_conn_monitor.core.storage import MemoryStore

CONN_LINES = [
    "2025/10/13 22:41:12.466126 [INFO],TCP,,assets.example.com,192.168.1.100:38894,,92.123.206.67:443,laptop,",
    "2025/10/13 22:41:13.100201 [INFO],UDP,youtube,rr3.googlevideo.com,192.168.1.101:51820,,173.194.1.8:443,,tv",
    "2025/10/13 22:41:14.000042 [INFO],TCP,,api.github.com,192.168.1.100:38900,github,140.82.112.6:443,,",
    "2025/10/13 22:41:15.310000 [INFO],TCP,,www.youtube.com,192.168.1.102:40001,,142.250.74.110:443",
]


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def monitor(store: MemoryStore, clock: FakeClock) -> ConnectionMonitor:
    return ConnectionMonitor(MonitorConfig(), store=store, clock=clock)


@pytest.fixture
def conn_lines() -> list[str]:
    return list(CONN_LINES)


@pytest.fixture
def write_conn_log() -> Callable[[Path], None]:
    def _write(path: Path) -> None:
        path.write_text(
            "\n".join(CONN_LINES + ["not a connection line"]) + "\n",
            encoding="utf-8",
        )

    return _write
