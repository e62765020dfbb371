# Packet data model
"""
Packet data models for pcapmap.

THESE MODELS ARE IMMUTABLE - records are computed fresh for every packet
and never mutated afterwards. They hold copied strings and numbers, never
references into the captured packet they were derived from.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

PacketRecord = Dict[str, Dict[str, Any]]
"""Category key (e.g. 'NetworkLayer', 'Tcp') -> field name -> value."""


class NetworkClass(Enum):
    """Private network classes as defined in RFC 1918 (no CIDR)."""
    CLASS_A = "class-a"
    CLASS_B = "class-b"
    CLASS_C = "class-c"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SubnetGuess:
    """
    Best-effort subnet guess for an IPv4 address string.

    Fully determined by the address prefix. All derived fields are None
    for addresses outside the known private ranges.
    """
    network_class: NetworkClass
    network: Optional[str] = None
    mask: Optional[str] = None
    mask_bits: Optional[int] = None


@dataclass(frozen=True)
class CaptureMetadata:
    """
    Capture-time metadata of one packet (not a protocol header).
    """
    kind: str
    """Record key the metadata is stored under, e.g. 'PcapHeader'"""

    timestamp_nanos: int
    """Nanoseconds since Unix epoch (1970-01-01)."""

    wire_len: int
    """Bytes on the wire (original packet size)"""

    def to_dict(self) -> PacketRecord:
        return {
            self.kind: {
                "timestampInNanos": self.timestamp_nanos,
                "wirelen": self.wire_len,
            }
        }


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of parsing a single packet.

    Either `record` is set (success) or `error` is set (failure). A failure
    carries the raw serialized bytes of the packet when they could still be
    retrieved, so the packet can be inspected or replayed later.
    """
    record: Optional[PacketRecord] = None
    error: Optional[str] = None
    raw: Optional[bytes] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, record: PacketRecord) -> "ParseResult":
        return cls(record=record)

    @classmethod
    def failure(cls, error: str, raw: Optional[bytes] = None) -> "ParseResult":
        return cls(error=error, raw=raw)
