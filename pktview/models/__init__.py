"""
pktview - Data Models
"""

from .packets import (
    DetailValue,
    CaptureFormat,
    PacketRecord,
    ParseResult,
    DEFAULT_PROTOCOL,
    DEFAULT_ENDPOINT
)

from .documents import (
    FlatPacketDocument,
    LayeredCaptureDocument,
    CaptureDocument,
    decode_document
)

__all__ = [
    # Packets
    "DetailValue",
    "CaptureFormat",
    "PacketRecord",
    "ParseResult",
    "DEFAULT_PROTOCOL",
    "DEFAULT_ENDPOINT",

    # JSON documents
    "FlatPacketDocument",
    "LayeredCaptureDocument",
    "CaptureDocument",
    "decode_document"
]
