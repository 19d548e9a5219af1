"""Candidate match patterns for domains and IP addresses.

Used to offer "add to block-list" choices, most specific first.
"""

from __future__ import annotations

IPV6_MASKS: tuple[int, ...] = (128, 64, 48, 32)


def strip_port(address: str) -> str:
    """Strip a port suffix and IPv6 brackets from an address literal.

    ``[2001:db8::1]:443`` -> ``2001:db8::1``, ``203.0.113.7:443`` -> ``203.0.113.7``.
    Bare IPv6 literals (several colon groups, no brackets) are returned as-is.
    """
    s = address.strip()
    if s.startswith("["):
        return s[1:].split("]", 1)[0]
    if s.count(":") > 1:
        return s
    return s.split(":", 1)[0]


def is_ipv6_literal(address: str) -> bool:
    """Bracket notation or more than one colon group means IPv6."""
    s = address.strip()
    return s.startswith("[") or s.count(":") > 1


def domain_variants(domain: str) -> list[str]:
    """Return ``a.b.example.com`` -> ``[a.b.example.com, b.example.com, example.com]``."""
    parts = domain.split(".")
    return [".".join(parts[i:]) for i in range(len(parts) - 1)]


def _valid_octet(part: str) -> bool:
    # ASCII only: str.isdigit also accepts superscripts and non-Latin digits
    if not (part.isascii() and part.isdigit()):
        return False
    return 0 <= int(part) <= 255


def ip_variants(address: str) -> list[str]:
    """Return CIDR candidates for an address, most specific first.

    IPv4 yields /32, /24, /16 and /8 with the trailing octets zeroed. IPv6 pairs
    the literal address text with /128, /64, /48 and /32. Invalid dotted-quads
    yield an empty list.
    """
    if is_ipv6_literal(address):
        addr = strip_port(address)
        if not addr:
            return []
        return [f"{addr}/{mask}" for mask in IPV6_MASKS]

    parts = strip_port(address).split(".")
    if len(parts) != 4 or not all(_valid_octet(p) for p in parts):
        return []

    return [
        f"{'.'.join(parts)}/32",
        f"{'.'.join(parts[:3])}.0/24",
        f"{'.'.join(parts[:2])}.0.0/16",
        f"{parts[0]}.0.0.0/8",
    ]
