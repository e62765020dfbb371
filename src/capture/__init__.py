"""
Packet header extraction subsystem.
"""

from .config import ExtractorConfig
from .header_extractor import EXTRACTION_RULES, HeaderExtractor
from .packet_codec import PacketCodecError, packet_from_bytes, packet_to_bytes
from .packet_parser import PacketParser

__all__ = [
    'EXTRACTION_RULES',
    'ExtractorConfig',
    'HeaderExtractor',
    'PacketCodecError',
    'PacketParser',
    'packet_from_bytes',
    'packet_to_bytes',
]
