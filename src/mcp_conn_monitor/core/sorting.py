"""Type-aware, stable single-column sort over connection records."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .models import ConnectionRecord, SortColumn, SortDirection


@dataclass(frozen=True, slots=True)
class SortSpec:
    column: SortColumn | None = None
    direction: SortDirection = SortDirection.NONE


def _timestamp_key(r: ConnectionRecord) -> tuple[bool, datetime]:
    # unparsable timestamps sort first when ascending
    instant = r.instant
    return (instant is not None, instant or datetime.min)


SORT_KEYS: dict[SortColumn, Callable[[ConnectionRecord], Any]] = {
    SortColumn.TIMESTAMP: _timestamp_key,
    SortColumn.SET: lambda r: (r.host_set or r.ip_set).lower(),
    SortColumn.PROTOCOL: lambda r: r.protocol.lower(),
    SortColumn.DOMAIN: lambda r: r.domain.lower(),
    SortColumn.SOURCE: lambda r: r.source.lower(),
    SortColumn.DESTINATION: lambda r: r.destination.lower(),
}


def parse_sort(column: str | None, direction: str | None) -> SortSpec:
    """Build a SortSpec from user strings, raising ValueError on unknown names."""
    if not column:
        return SortSpec()
    try:
        col = SortColumn(column.strip().lower())
    except ValueError as e:
        valid = ", ".join(c.value for c in SortColumn)
        raise ValueError(f"Unknown sort column '{column}'. Valid values: {valid}.") from e
    try:
        dirn = SortDirection((direction or SortDirection.ASC.value).strip().lower())
    except ValueError as e:
        valid = ", ".join(d.value for d in SortDirection)
        raise ValueError(f"Unknown sort direction '{direction}'. Valid values: {valid}.") from e
    return SortSpec(column=col, direction=dirn)


def sort_records(
    records: Iterable[ConnectionRecord],
    column: SortColumn | None,
    direction: SortDirection,
) -> list[ConnectionRecord]:
    """Sort records by one column; ties keep input order in both directions.

    ``SortDirection.NONE`` (or no column) returns the records in input order.
    """
    items = list(records)
    if column is None or direction is SortDirection.NONE:
        return items
    # sorted() stays stable with reverse=True
    return sorted(items, key=SORT_KEYS[column], reverse=direction is SortDirection.DESC)
