"""
pktview - Packet Models
Normalized packet record and parse result definitions
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any, Union
from enum import Enum


# Values stored in the details bag (JSON-like, may nest)
DetailValue = Union[str, int, float, bool, None, List[Any], Dict[str, Any]]

DEFAULT_PROTOCOL = "Unknown"
DEFAULT_ENDPOINT = "Unknown"


class CaptureFormat(Enum):
    """Detected input format"""
    WIRESHARK = "wireshark"
    TCPDUMP = "tcpdump"
    JSON = "json"
    CSV = "csv"
    UNKNOWN = "unknown"


@dataclass
class PacketRecord:
    """One decoded packet"""
    protocol: str = DEFAULT_PROTOCOL
    source: str = DEFAULT_ENDPOINT
    destination: str = DEFAULT_ENDPOINT
    length: int = 0
    info: str = ""
    timestamp: Optional[str] = None

    # Format-specific raw fields (insertion ordered)
    details: Dict[str, DetailValue] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            "protocol": self.protocol,
            "source": self.source,
            "destination": self.destination,
            "length": self.length,
            "info": self.info,
            "timestamp": self.timestamp,
            "details": self.details
        }


@dataclass
class ParseResult:
    """Packets extracted from one payload"""
    format: CaptureFormat
    packets: List[PacketRecord] = field(default_factory=list)

    @property
    def total_packets(self) -> int:
        return len(self.packets)

    def to_dict(self) -> Dict:
        return {
            "packets": [p.to_dict() for p in self.packets],
            "format": self.format.value,
            "totalPackets": self.total_packets
        }

    def summary(self) -> Dict:
        """Result summary without packet bodies"""
        protocol_counts = {}
        for packet in self.packets:
            protocol_counts[packet.protocol] = protocol_counts.get(packet.protocol, 0) + 1

        return {
            "format": self.format.value,
            "totalPackets": self.total_packets,
            "protocols": protocol_counts
        }
