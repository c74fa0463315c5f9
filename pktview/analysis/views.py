"""
pktview - Packet Views
Read-only filtering, pagination and statistics over parsed packets

None of these functions mutate the packets or the list they are given.
"""

import math
import re
from dataclasses import dataclass, field
from typing import List, Dict, Union, Any, Optional

from ..models import PacketRecord
from ..parsers.elasticsearch import TCP_FLAGS


ALL_PROTOCOLS = "all"

# Protocol filter choices offered by the viewer
PROTOCOL_FILTERS = ["all", "tcp", "udp", "http", "https", "dns", "icmp", "arp"]

ELLIPSIS = "..."


def filter_by_protocol(packets: List[PacketRecord], protocol: str) -> List[PacketRecord]:
    """Keep packets whose protocol contains the given name (case-insensitive)"""
    if not protocol or protocol.lower() == ALL_PROTOCOLS:
        return list(packets)
    needle = protocol.lower()
    return [p for p in packets if needle in p.protocol.lower()]


def search_packets(packets: List[PacketRecord], query: str) -> List[PacketRecord]:
    """Substring search over source, destination, protocol and info"""
    query = (query or "").strip().lower()
    if not query:
        return list(packets)

    return [
        p for p in packets
        if query in p.source.lower()
        or query in p.destination.lower()
        or query in p.protocol.lower()
        or query in p.info.lower()
    ]


def filter_packets(packets: List[PacketRecord], query: str = "",
                   protocol: str = ALL_PROTOCOLS) -> List[PacketRecord]:
    """Apply the protocol filter, then the text search"""
    return search_packets(filter_by_protocol(packets, protocol), query)


def protocol_stats(packets: List[PacketRecord]) -> Dict[str, int]:
    """Packet count per protocol, in order of first appearance"""
    counts: Dict[str, int] = {}
    for packet in packets:
        counts[packet.protocol] = counts.get(packet.protocol, 0) + 1
    return counts


@dataclass
class Page:
    """One page of a (possibly filtered) packet list"""
    packets: List[PacketRecord]
    page: int
    page_size: int
    total_items: int
    total_pages: int
    page_numbers: List[Union[int, str]] = field(default_factory=list)

    @property
    def start(self) -> int:
        """1-based index of the first packet on this page (0 when empty)"""
        if not self.total_items:
            return 0
        return (self.page - 1) * self.page_size + 1

    @property
    def end(self) -> int:
        return min(self.page * self.page_size, self.total_items)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def to_dict(self) -> Dict:
        return {
            "packets": [p.to_dict() for p in self.packets],
            "page": self.page,
            "page_size": self.page_size,
            "total_items": self.total_items,
            "total_pages": self.total_pages,
            "start": self.start,
            "end": self.end,
            "has_previous": self.has_previous,
            "has_next": self.has_next,
            "page_numbers": self.page_numbers
        }


def page_numbers(current: int, total_pages: int, max_visible: int = 5) -> List[Union[int, str]]:
    """
    Page buttons to display, with ellipsis markers for skipped ranges

    e.g. page 6 of 20 -> [1, "...", 4, 5, 6, 7, 8, "...", 20]
    """
    if total_pages <= max_visible:
        return list(range(1, total_pages + 1))

    start_page = max(1, current - max_visible // 2)
    end_page = min(total_pages, start_page + max_visible - 1)

    pages: List[Union[int, str]] = []
    if start_page > 1:
        pages.append(1)
        if start_page > 2:
            pages.append(ELLIPSIS)

    pages.extend(range(start_page, end_page + 1))

    if end_page < total_pages:
        if end_page < total_pages - 1:
            pages.append(ELLIPSIS)
        pages.append(total_pages)

    return pages


def paginate(packets: List[PacketRecord], page: int = 1, page_size: int = 20) -> Page:
    """
    Slice one page out of a packet list

    Args:
        packets: Packets to paginate
        page: 1-based page number, clamped to the valid range
        page_size: Packets per page (must be positive)

    Returns:
        Page with the visible packets and pager metadata
    """
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")

    total_items = len(packets)
    total_pages = math.ceil(total_items / page_size)
    page = min(max(page, 1), max(total_pages, 1))

    offset = (page - 1) * page_size
    return Page(
        packets=packets[offset:offset + page_size],
        page=page,
        page_size=page_size,
        total_items=total_items,
        total_pages=total_pages,
        page_numbers=page_numbers(page, total_pages)
    )


# ==================== Packet Breakdown ====================

BREAKDOWN_TCP_FLAGS = TCP_FLAGS + [("tcp.flags.urg", "URG")]

# Longest names first so "AUS Eastern ..." is not cut to "AUS EST"
TIMEZONE_ABBREVIATIONS = [
    ("AUS Eastern Standard Time", "AEST"),
    ("AUS Eastern Daylight Time", "AEDT"),
    ("Eastern Standard Time", "EST"),
    ("Eastern Daylight Time", "EDT"),
    ("Pacific Standard Time", "PST"),
    ("Pacific Daylight Time", "PDT"),
]

FRAME_TIME_PATTERN = re.compile(r'(\w{3} \d{1,2}, \d{4}) (\d{2}:\d{2}:\d{2})\.(\d{3})\d* (.+)')


def format_timestamp(timestamp: Optional[str]) -> str:
    """
    Shorten a tshark frame.time value to millisecond precision

    "Jul 18, 2025 19:52:34.397787000 AUS Eastern Standard Time"
    -> "Jul 18, 2025 19:52:34.397 AEST"
    """
    if not timestamp or timestamp == "N/A":
        return "N/A"

    match = FRAME_TIME_PATTERN.match(timestamp)
    if not match:
        return timestamp

    date, time, millis, timezone = match.groups()
    for name, abbreviation in TIMEZONE_ABBREVIATIONS:
        timezone = timezone.replace(name, abbreviation)
    return f"{date} {time}.{millis} {timezone}"


def _layer(packet: PacketRecord, detail_key: str, layer_key: str) -> Dict[str, Any]:
    """Flattened layer from details, else the same layer from details["layers"]"""
    value = packet.details.get(detail_key)
    if isinstance(value, dict) and value:
        return value

    layers = packet.details.get("layers")
    if isinstance(layers, dict) and isinstance(layers.get(layer_key), dict):
        return layers[layer_key]
    return {}


def _field(layer: Dict[str, Any], key: str, default: str = "Unknown") -> str:
    value = layer.get(key)
    return str(value) if value else default


def _subfield(layer: Dict[str, Any], tree: str, key: str) -> str:
    subtree = layer.get(tree)
    return _field(subtree, key) if isinstance(subtree, dict) else "Unknown"


def packet_breakdown(packet: PacketRecord) -> Dict[str, Any]:
    """
    Per-layer view of a packet parsed from a layered capture document

    Sections for layers the packet does not carry are None. Packets from
    other formats only get the frame section, filled from the record itself.
    """
    frame = _layer(packet, "frame", "frame")
    eth = _layer(packet, "ethernet", "eth")
    ip = _layer(packet, "ip", "ip")
    tcp = _layer(packet, "tcp", "tcp")
    udp = _layer(packet, "udp", "udp")

    protocols = frame.get("frame.protocols")
    breakdown: Dict[str, Any] = {
        "frame": {
            "number": _field(frame, "frame.number", "N/A"),
            "length": _field(frame, "frame.len", str(packet.length)),
            "timestamp": format_timestamp(
                str(frame.get("frame.time") or packet.timestamp or "N/A")
            ),
            "protocols": str(protocols).split(":") if protocols else [],
            "interface": _subfield(frame, "frame.interface_id_tree", "frame.interface_description")
        },
        "ethernet": None,
        "ip": None,
        "tcp": None,
        "udp": None
    }

    if eth:
        breakdown["ethernet"] = {
            "src_mac": _field(eth, "eth.src"),
            "dst_mac": _field(eth, "eth.dst"),
            "src_vendor": _subfield(eth, "eth.src_tree", "eth.src.oui_resolved"),
            "dst_vendor": _subfield(eth, "eth.dst_tree", "eth.dst.oui_resolved"),
            "type": _field(eth, "eth.type")
        }

    if ip:
        breakdown["ip"] = {
            "version": _field(ip, "ip.version"),
            "src_ip": _field(ip, "ip.src"),
            "dst_ip": _field(ip, "ip.dst"),
            "protocol": _field(ip, "ip.proto"),
            "ttl": _field(ip, "ip.ttl"),
            "length": _field(ip, "ip.len"),
            "id": _field(ip, "ip.id"),
            "flags": _field(ip, "ip.flags")
        }

    if tcp:
        flags_tree = tcp.get("tcp.flags_tree")
        flags_tree = flags_tree if isinstance(flags_tree, dict) else {}
        breakdown["tcp"] = {
            "src_port": _field(tcp, "tcp.srcport"),
            "dst_port": _field(tcp, "tcp.dstport"),
            "seq": _field(tcp, "tcp.seq"),
            "ack": _field(tcp, "tcp.ack"),
            "window": _field(tcp, "tcp.window_size_value"),
            "stream": _field(tcp, "tcp.stream"),
            "flags": [label for key, label in BREAKDOWN_TCP_FLAGS if flags_tree.get(key) == "1"]
        }

    if udp:
        breakdown["udp"] = {
            "src_port": _field(udp, "udp.srcport"),
            "dst_port": _field(udp, "udp.dstport"),
            "length": _field(udp, "udp.length"),
            "checksum": _field(udp, "udp.checksum")
        }

    return breakdown
