"""
Packet-level parsing entry point.

PacketParser.parse() combines the capture metadata and the protocol
headers of one packet into a PacketRecord. It never raises for a packet
that fails to decode: the failure is logged together with a raw byte dump
and reported as a failed ParseResult, so a stream of packets keeps going.
"""
from __future__ import annotations

from typing import Iterable, Iterator, Optional

from scapy.packet import Packet

from capture.config import ExtractorConfig
from capture.header_extractor import HeaderExtractor
from capture.packet_codec import (
    format_byte_dump,
    packet_to_bytes,
    timestamp_nanos,
    wire_length,
)
from models.packet import CaptureMetadata, PacketRecord, ParseResult
from utils.logging_utils import get_logger

LOGGER = get_logger(__name__)

CAPTURE_METADATA_KIND = "PcapHeader"


def capture_metadata(packet: Packet) -> CaptureMetadata:
    return CaptureMetadata(
        kind=CAPTURE_METADATA_KIND,
        timestamp_nanos=timestamp_nanos(packet),
        wire_len=wire_length(packet),
    )


class PacketParser:
    """
    Parse scapy packets into records, one packet at a time.

    Owns a HeaderExtractor and therefore must not be used from more than
    one thread at once. Create one parser per worker thread.
    """

    def __init__(self, config: Optional[ExtractorConfig] = None,
                 extractor: Optional[HeaderExtractor] = None):
        self.config = config or (extractor.config if extractor else ExtractorConfig())
        self.extractor = extractor or HeaderExtractor(self.config)

    def parse_header(self, packet: Packet) -> PacketRecord:
        """Capture metadata of `packet` as a single-entry record."""
        return capture_metadata(packet).to_dict()

    def parse(self, packet: Optional[Packet]) -> ParseResult:
        if packet is None:
            return ParseResult.failure("No packet to parse")

        try:
            record = self.parse_header(packet)
        except Exception as e:
            return self._failure("Error parsing the pcap packet header!", packet, e)

        try:
            record.update(self.extractor.extract(packet))
        except Exception as e:
            return self._failure("Error parsing the pcap packet!", packet, e)

        return ParseResult.success(record)

    def parse_all(self, packets: Iterable[Packet]) -> Iterator[ParseResult]:
        """Parse a stream of packets; failures only affect their own packet."""
        for packet in packets:
            yield self.parse(packet)

    def _failure(self, message: str, packet: Packet, error: Exception) -> ParseResult:
        LOGGER.error(message, exc_info=error)

        raw = None
        try:
            raw = packet_to_bytes(packet)
        except Exception as dump_error:
            LOGGER.error("Packet raw data could not be retrieved: %s", dump_error)
        else:
            if self.config.dump_raw_on_error:
                LOGGER.error("Packet raw data was:")
                LOGGER.error(format_byte_dump(raw))

        return ParseResult.failure(f"{message} {type(error).__name__}: {error}", raw)
