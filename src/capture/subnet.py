"""
Subnet guessing for IPv4 address strings.

This is a wild guess based on the private network classes of RFC 1918 and
assumes no CIDR is used. Only the string prefix of the address is looked
at: there is no netmask resolution and no validation of the address.
Public or malformed addresses simply yield NetworkClass.UNKNOWN.
"""
from __future__ import annotations

from typing import Optional

from models.packet import NetworkClass, SubnetGuess

# Tested in this order; "192.168." must win over any shorter prefix.
_CLASS_PREFIXES = (
    ("192.168.", NetworkClass.CLASS_C),
    ("10.", NetworkClass.CLASS_A),
    ("172.", NetworkClass.CLASS_B),
)

# Number of leading octets kept for the network address.
_KEPT_OCTETS = {
    NetworkClass.CLASS_A: 1,
    NetworkClass.CLASS_B: 2,
    NetworkClass.CLASS_C: 3,
}

_MASKS = {
    NetworkClass.CLASS_A: ("255.0.0.0", 8),
    NetworkClass.CLASS_B: ("255.255.0.0", 16),
    NetworkClass.CLASS_C: ("255.255.255.0", 24),
}


def network_class(ip_addr) -> NetworkClass:
    """Determine the RFC 1918 network class from the address prefix."""
    if not isinstance(ip_addr, str):
        return NetworkClass.UNKNOWN
    for prefix, n_class in _CLASS_PREFIXES:
        if ip_addr.startswith(prefix):
            return n_class
    return NetworkClass.UNKNOWN


def guess_subnet(ip_addr) -> Optional[str]:
    """Guess the network address, e.g. '192.168.1.7' -> '192.168.1.0'."""
    kept = _KEPT_OCTETS.get(network_class(ip_addr))
    if kept is None:
        return None
    octets = ip_addr.split(".")[:kept]
    return ".".join(octets + ["0"] * (4 - kept))


def guess_subnet_mask(ip_addr) -> Optional[str]:
    mask = _MASKS.get(network_class(ip_addr))
    return mask[0] if mask else None


def guess_subnet_mask_bits(ip_addr) -> Optional[int]:
    mask = _MASKS.get(network_class(ip_addr))
    return mask[1] if mask else None


def guess(ip_addr) -> SubnetGuess:
    """Return all subnet guesses for an address at once."""
    n_class = network_class(ip_addr)
    if n_class is NetworkClass.UNKNOWN:
        return SubnetGuess(network_class=n_class)
    mask, bits = _MASKS[n_class]
    return SubnetGuess(
        network_class=n_class,
        network=guess_subnet(ip_addr),
        mask=mask,
        mask_bits=bits,
    )
