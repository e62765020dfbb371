"""
Header extraction configuration.
"""
from dataclasses import dataclass
from typing import Tuple

from capture.headers import HTTP_FIELDS, HttpField


@dataclass(frozen=True)
class ExtractorConfig:
    """Settings shared by a HeaderExtractor and its PacketParser."""

    destination_subnet_from_source: bool = True
    """Derive destinationNetwork/destinationNetmaskBits from the IPv4 *source*
    address. This reproduces the historical record layout; set False to use
    the destination address instead."""

    http_fields: Tuple[HttpField, ...] = HTTP_FIELDS
    """HTTP fields copied into the 'Http' category when present."""

    dump_raw_on_error: bool = True
    """Log the raw byte dump of packets that fail to parse."""
