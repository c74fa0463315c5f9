"""
pktview - Packet capture text viewer
Normalizes textual capture exports into uniform packet records
"""

from .models import CaptureFormat, PacketRecord, ParseResult
from .parsers import detect_format, parse_packet_data

__version__ = "0.1.0"

__all__ = [
    "CaptureFormat",
    "PacketRecord",
    "ParseResult",
    "detect_format",
    "parse_packet_data"
]
