"""
Simple packet consumers that print records or raw bytes to stdout.

The record forwarders are built by factories so that one PacketParser
(and its header views) is reused for the whole packet stream.
"""
from __future__ import annotations

from pprint import pformat
from typing import Any, Callable, Optional

from scapy.packet import Packet

from capture.packet_codec import format_byte_dump, packet_to_byte_list
from capture.packet_parser import PacketParser

Forwarder = Callable[[Packet], None]


def _printable(value: Any) -> Any:
    # Sets have no stable order; sort them so output is reproducible.
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if isinstance(value, dict):
        return {k: _printable(v) for k, v in value.items()}
    return value


def format_record(record) -> str:
    return pformat(_printable(record))


def stdout_byte_array_forwarder(packet: Packet) -> None:
    """Print the byte representation of a packet."""
    print(format_byte_dump(packet_to_byte_list(packet)) + "\n\n")


def stdout_forwarder_fn(parser: Optional[PacketParser] = None) -> Forwarder:
    """Return a forwarder printing the parsed record of each packet."""
    parser = parser or PacketParser()

    def forward(packet: Packet) -> None:
        result = parser.parse(packet)
        if result.ok:
            print(format_record(result.record))

    return forward


def stdout_combined_forwarder_fn(parser: Optional[PacketParser] = None) -> Forwarder:
    """Return a forwarder printing both the record and the byte representation."""
    print_record = stdout_forwarder_fn(parser)

    def forward(packet: Packet) -> None:
        print_record(packet)
        stdout_byte_array_forwarder(packet)

    return forward
