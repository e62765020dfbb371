"""
Lossless byte representation of captured packets.

Handy for debugging: the byte form of a packet can be logged, stored and
turned back into an equivalent scapy packet later.

Layout (big-endian):

    timestamp_ns : u64   capture time, nanoseconds since epoch
    wirelen      : u32   bytes on the wire
    linktype     : u32   libpcap DLT_* of the outermost layer
    caplen       : u32   number of packet bytes that follow
    data         : caplen bytes
"""
from __future__ import annotations

import struct
from decimal import Decimal
from typing import Iterable, List, Optional

from scapy.config import conf
from scapy.packet import Packet

STATE_HEADER = struct.Struct("!QIII")
NANOS_PER_SECOND = 1_000_000_000


class PacketCodecError(ValueError):
    """Packet cannot be converted to or from its byte representation."""


def timestamp_nanos(packet: Packet) -> int:
    """Capture time of a packet in integer nanoseconds (no float rounding)."""
    return int(Decimal(str(packet.time)) * NANOS_PER_SECOND)


def wire_length(packet: Packet, caplen: Optional[int] = None) -> int:
    wirelen = getattr(packet, "wirelen", None)
    if wirelen is None:
        return caplen if caplen is not None else len(bytes(packet))
    return int(wirelen)


def link_type(packet: Packet) -> int:
    linktype = conf.l2types.layer2num.get(type(packet))
    if linktype is None:
        raise PacketCodecError(
            f"No link type registered for layer {type(packet).__name__}"
        )
    return linktype


def packet_size(packet: Packet) -> int:
    """Total size of the byte representation of `packet`."""
    return STATE_HEADER.size + len(bytes(packet))


def packet_to_bytes(packet: Packet) -> bytes:
    """Serialize capture state and packet data into a single byte string."""
    data = bytes(packet)
    buffer = bytearray(STATE_HEADER.size + len(data))
    STATE_HEADER.pack_into(
        buffer,
        0,
        timestamp_nanos(packet),
        wire_length(packet, len(data)),
        link_type(packet),
        len(data),
    )
    buffer[STATE_HEADER.size:] = data
    return bytes(buffer)


def packet_to_byte_list(packet: Packet) -> List[int]:
    """Byte representation as a list of unsigned decimal values."""
    return list(packet_to_bytes(packet))


def format_byte_dump(data: Iterable[int]) -> str:
    """Render bytes as 'Packet Start (size: N): [b0, b1, ...] Packet End'."""
    values = list(data)
    return "Packet Start (size: {}): [{}] Packet End".format(
        len(values), ", ".join(str(b) for b in values)
    )


def packet_from_bytes(data: bytes) -> Packet:
    """Rebuild a packet from the output of packet_to_bytes()."""
    data = bytes(data)
    if len(data) < STATE_HEADER.size:
        raise PacketCodecError(
            f"Buffer too short: {len(data)} bytes, state header needs {STATE_HEADER.size}"
        )
    ts_nanos, wirelen, linktype, caplen = STATE_HEADER.unpack_from(data, 0)
    payload = data[STATE_HEADER.size:]
    if len(payload) != caplen:
        raise PacketCodecError(
            f"Packet data length mismatch: expected {caplen}, got {len(payload)}"
        )

    cls = conf.l2types.num2layer.get(linktype)
    if cls is None:
        raise PacketCodecError(f"Unsupported link type {linktype}")

    packet = cls(payload)
    packet.time = Decimal(ts_nanos) / NANOS_PER_SECOND
    packet.wirelen = wirelen
    return packet
