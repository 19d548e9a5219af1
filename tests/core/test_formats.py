from __future__ import annotations

from datetime import datetime

from mcp_conn_monitor.core.formats import (
    CompositeParser,
    CsvLineParser,
    SniLineParser,
    default_parser,
    parse,
)


def test_csv_parser_fields() -> None:
    line = "2025/10/13 22:41:12.466126 [INFO],TCP,,assets.example.com,192.168.1.100:38894,,92.123.206.67:443"
    rec = CsvLineParser().parse(line)
    assert rec is not None
    assert rec.timestamp == "2025/10/13 22:41:12"
    assert rec.timestamp_full == "2025/10/13 22:41:12.466126"
    assert rec.protocol == "TCP"
    assert rec.host_set == ""
    assert rec.domain == "assets.example.com"
    assert rec.source == "192.168.1.100:38894"
    assert rec.ip_set == ""
    assert rec.destination == "92.123.206.67:443"
    assert rec.source_alias == ""
    assert rec.device_name == ""
    assert rec.raw == line


def test_csv_parser_optional_trailing_fields() -> None:
    rec = parse("2025/10/13 22:41:13 [INFO],udp,yt,rr3.googlevideo.com,10.0.0.2:5000,,1.2.3.4:443,phone,pixel")
    assert rec is not None
    assert rec.protocol == "UDP"
    assert rec.host_set == "yt"
    assert rec.source_alias == "phone"
    assert rec.device_name == "pixel"


def test_csv_parser_unknown_protocol_passthrough() -> None:
    rec = parse("2025/10/13 22:41:13,Quic,,a.example.com,10.0.0.2:5000,,1.2.3.4:443")
    assert rec is not None
    assert rec.protocol == "Quic"


def test_csv_parser_rejects_short_lines() -> None:
    assert parse("2025/10/13 22:41:13,TCP,,a.example.com,10.0.0.2:5000,") is None
    assert parse("") is None
    assert parse("garbage") is None


def test_instant_keeps_full_precision() -> None:
    rec = parse("2025-10-13 22:41:12.466126 [INFO],TCP,,a.com,s:1,,d:2")
    assert rec is not None
    assert rec.timestamp == "2025-10-13 22:41:12"
    assert rec.instant == datetime(2025, 10, 13, 22, 41, 12, 466126)


def test_instant_unparsable_timestamp() -> None:
    rec = parse("yesterday,TCP,,a.com,s:1,,d:2")
    assert rec is not None
    assert rec.instant is None


def test_sni_parser_legacy_line() -> None:
    line = "2025/10/13 22:41:12.466126 [INFO] SNI TCP: assets.example.com 192.168.1.100:38894 -> 92.123.206.67:443"
    rec = SniLineParser().parse(line)
    assert rec is not None
    assert rec.timestamp == "2025/10/13 22:41:12"
    assert rec.protocol == "TCP"
    assert rec.domain == "assets.example.com"
    assert rec.source == "192.168.1.100:38894"
    assert rec.destination == "92.123.206.67:443"
    assert rec.host_set == ""


def test_sni_parser_target_marker() -> None:
    rec = SniLineParser().parse(
        "2025/10/13 22:41:12.466126 [INFO] SNI UDP TARGET: www.youtube.com 10.0.0.2:1 -> 1.2.3.4:443"
    )
    assert rec is not None
    assert rec.protocol == "UDP"
    assert rec.host_set == "target"


def test_default_parser_chain() -> None:
    parser = default_parser()
    assert parser.parse("2025/10/13 22:41:13,TCP,,a.com,s:1,,d:2") is not None
    assert parser.parse("2025/10/13 22:41:12.1 [INFO] SNI TCP: a.com s:1 -> d:2") is not None
    assert parser.parse("hello world") is None


def test_composite_parser_first_match_wins() -> None:
    parser = CompositeParser(parsers=[SniLineParser(), CsvLineParser()])
    rec = parser.parse("2025/10/13 22:41:13,TCP,,a.com,s:1,,d:2")
    assert rec is not None
    assert rec.domain == "a.com"
