"""
Address formatting for raw header addresses.

The shape of the output is chosen purely by the length of the raw byte
sequence:
- 6 bytes  -> MAC  ("00:11:22:33:44:FF")
- 4 bytes  -> IPv4 ("192.168.1.1")
- 16 bytes -> IPv6 (compressed, "fe80::1")
- anything else -> the octets rendered as a list ("[1, 2, 3]")

Anything that is not a byte sequence (ports, None, already formatted
strings) is returned unchanged.
"""
from __future__ import annotations

import ipaddress
from typing import Any, List

MAC_LEN = 6
IPV4_LEN = 4
IPV6_LEN = 16


def prettify_addr(raw: Any) -> Any:
    """Format raw address bytes as MAC/IPv4/IPv6 depending on length."""
    octets = _unsigned_octets(raw)
    if octets is None:
        return raw

    if len(octets) == MAC_LEN:
        return format_mac(octets)
    if len(octets) == IPV4_LEN:
        return format_ipv4(octets)
    if len(octets) == IPV6_LEN:
        return format_ipv6(octets)
    return "[{}]".format(", ".join(str(b) for b in octets))


def format_mac(octets) -> str:
    return ":".join("{:02X}".format(b & 0xFF) for b in octets)


def format_ipv4(octets) -> str:
    return ".".join(str(b & 0xFF) for b in octets)


def format_ipv6(octets) -> str:
    return str(ipaddress.IPv6Address(bytes(b & 0xFF for b in octets)))


def _unsigned_octets(raw: Any):
    # Lists of ints are accepted too; negative values (signed bytes) are
    # masked so 0xFF never renders as "-1".
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return list(bytes(raw))
    if isinstance(raw, (list, tuple)) and all(isinstance(b, int) and not isinstance(b, bool) for b in raw):
        octets: List[int] = [b & 0xFF for b in raw]
        return octets
    return None
