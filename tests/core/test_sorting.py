from __future__ import annotations

import pytest

from mcp_conn_monitor.core.formats import parse
from mcp_conn_monitor.core.models import ConnectionRecord, SortColumn, SortDirection
from mcp_conn_monitor.core.sorting import SortSpec, parse_sort, sort_records


def _rec(ts: str, domain: str, tag: str = "", host_set: str = "", ip_set: str = "") -> ConnectionRecord:
    rec = parse(f"{ts} [INFO],TCP,{host_set},{domain},10.0.0.1:1{tag},{ip_set},1.1.1.1:443")
    assert rec is not None
    return rec


def test_none_direction_preserves_input() -> None:
    rs = [_rec("2025/10/13 22:41:15", "b.com"), _rec("2025/10/13 22:41:12", "a.com")]
    assert sort_records(rs, SortColumn.TIMESTAMP, SortDirection.NONE) == rs
    assert sort_records(rs, None, SortDirection.ASC) == rs


def test_timestamp_asc_desc_inverse() -> None:
    rs = [
        _rec("2025/10/13 22:41:15.5", "c.com"),
        _rec("2025/10/13 22:41:12.1", "a.com"),
        _rec("2025/10/13 22:41:13.9", "b.com"),
    ]
    asc = sort_records(rs, SortColumn.TIMESTAMP, SortDirection.ASC)
    desc = sort_records(rs, SortColumn.TIMESTAMP, SortDirection.DESC)
    assert [r.domain for r in asc] == ["a.com", "b.com", "c.com"]
    assert desc == list(reversed(asc))


def test_timestamp_uses_full_precision() -> None:
    later = _rec("2025/10/13 22:41:12.900", "later.com")
    earlier = _rec("2025/10/13 22:41:12.100", "earlier.com")
    assert later.timestamp == earlier.timestamp
    out = sort_records([later, earlier], SortColumn.TIMESTAMP, SortDirection.ASC)
    assert [r.domain for r in out] == ["earlier.com", "later.com"]


def test_unparsable_timestamps_sort_first() -> None:
    good = _rec("2025/10/13 22:41:12", "good.com")
    bad = _rec("sometime", "bad.com")
    out = sort_records([good, bad], SortColumn.TIMESTAMP, SortDirection.ASC)
    assert [r.domain for r in out] == ["bad.com", "good.com"]


def test_string_columns_case_insensitive() -> None:
    rs = [_rec("2025/10/13 22:41:12", "B.com"), _rec("2025/10/13 22:41:12", "a.com")]
    out = sort_records(rs, SortColumn.DOMAIN, SortDirection.ASC)
    assert [r.domain for r in out] == ["a.com", "B.com"]


def test_ties_keep_input_order_both_directions() -> None:
    rs = [
        _rec("2025/10/13 22:41:12", "same.com", tag="1"),
        _rec("2025/10/13 22:41:12", "other.com", tag="2"),
        _rec("2025/10/13 22:41:12", "same.com", tag="3"),
    ]
    asc = sort_records(rs, SortColumn.DOMAIN, SortDirection.ASC)
    desc = sort_records(rs, SortColumn.DOMAIN, SortDirection.DESC)
    assert [r.source for r in asc] == ["10.0.0.1:12", "10.0.0.1:11", "10.0.0.1:13"]
    assert [r.source for r in desc] == ["10.0.0.1:11", "10.0.0.1:13", "10.0.0.1:12"]


def test_set_column_uses_host_or_ip_set() -> None:
    rs = [
        _rec("2025/10/13 22:41:12", "x.com", ip_set="zeta"),
        _rec("2025/10/13 22:41:12", "y.com", host_set="Alpha"),
        _rec("2025/10/13 22:41:12", "z.com"),
    ]
    out = sort_records(rs, SortColumn.SET, SortDirection.ASC)
    assert [r.domain for r in out] == ["z.com", "y.com", "x.com"]


def test_parse_sort() -> None:
    assert parse_sort(None, None) == SortSpec()
    assert parse_sort("Domain", None) == SortSpec(SortColumn.DOMAIN, SortDirection.ASC)
    assert parse_sort("timestamp", "DESC") == SortSpec(SortColumn.TIMESTAMP, SortDirection.DESC)
    with pytest.raises(ValueError, match="sort column"):
        parse_sort("color", "asc")
    with pytest.raises(ValueError, match="sort direction"):
        parse_sort("domain", "sideways")
