"""
Packet record data models.
"""

from .packet import (
    CaptureMetadata,
    NetworkClass,
    PacketRecord,
    ParseResult,
    SubnetGuess,
)

__all__ = [
    'CaptureMetadata',
    'NetworkClass',
    'PacketRecord',
    'ParseResult',
    'SubnetGuess',
]
