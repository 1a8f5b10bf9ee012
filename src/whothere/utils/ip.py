"""IP address utility functions."""

import ipaddress
from typing import Optional, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def parse_ip(value) -> Optional[IPAddress]:
    """Parse an IP address from any supported representation.

    Accepts dotted/colon strings, ``ipaddress`` objects, 4-tuples of octets
    and 8-tuples of 16-bit IPv6 groups (the shape servers hand over as the
    transport remote address).

    Returns:
        Parsed address, or None if the value is not a valid IPv4/IPv6 address
    """
    if value is None:
        return None
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value
    if isinstance(value, bytes):
        value = value.decode("latin-1")
    if isinstance(value, str):
        candidate = value.strip()
        # Brackets appear on IPv6 literals copied from Host/Forwarded headers
        if candidate.startswith("[") and candidate.endswith("]"):
            candidate = candidate[1:-1]
        if not candidate:
            return None
        try:
            return ipaddress.ip_address(candidate)
        except ValueError:
            return None
    if isinstance(value, tuple):
        return _parse_ip_tuple(value)
    return None


def _parse_ip_tuple(parts: tuple) -> Optional[IPAddress]:
    if not all(isinstance(p, int) and not isinstance(p, bool) for p in parts):
        return None
    try:
        if len(parts) == 4 and all(0 <= p <= 0xFF for p in parts):
            return ipaddress.IPv4Address(bytes(parts))
        if len(parts) == 8 and all(0 <= p <= 0xFFFF for p in parts):
            packed = b"".join(p.to_bytes(2, "big") for p in parts)
            return ipaddress.IPv6Address(packed)
    except ValueError:
        return None
    return None


def is_valid_ip(value) -> bool:
    """Check whether a value parses as an IPv4 or IPv6 address."""
    return parse_ip(value) is not None


def format_ip(value) -> Optional[str]:
    """Return the canonical string form of an address, or None if invalid."""
    parsed = parse_ip(value)
    return str(parsed) if parsed is not None else None


def to_tuple(address: IPAddress) -> tuple[int, ...]:
    """Convert an address to its octet (IPv4) or 16-bit group (IPv6) tuple."""
    packed = address.packed
    if address.version == 4:
        return tuple(packed)
    return tuple(int.from_bytes(packed[i:i + 2], "big") for i in range(0, 16, 2))
