"""
pktview - Exporters
Re-serialize parsed packets to plain text, JSON or CSV

JSON export is an array of packet objects and re-imports with the same
fields. CSV export quotes every cell and carries a "Source" header: it
re-imports as csv with the same packet count, but since the CSV parser does
not strip quotes the cell values come back quoted and lengths as 0.
"""

import csv
import io
import json
from typing import List, Dict, Callable

from ..models import PacketRecord


CSV_HEADERS = ["Protocol", "Source", "Destination", "Length", "Info", "Timestamp"]

MIME_TYPES = {
    "text": "text/plain",
    "json": "application/json",
    "csv": "text/csv"
}

FILE_EXTENSIONS = {
    "text": "txt",
    "json": "json",
    "csv": "csv"
}


def to_text(packets: List[PacketRecord]) -> str:
    """One line per packet: [timestamp] protocol source -> destination length info"""
    lines = []
    for number, packet in enumerate(packets, start=1):
        prefix = f"{number} {packet.timestamp} " if packet.timestamp else f"{number} "
        lines.append(
            f"{prefix}{packet.protocol} {packet.source} -> {packet.destination} "
            f"len={packet.length} {packet.info}".rstrip()
        )
    return "\n".join(lines)


def to_json(packets: List[PacketRecord], indent: int = 2) -> str:
    return json.dumps([p.to_dict() for p in packets], indent=indent, ensure_ascii=False)


def to_csv(packets: List[PacketRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for packet in packets:
        writer.writerow([
            packet.protocol,
            packet.source,
            packet.destination,
            str(packet.length),
            packet.info,
            packet.timestamp or ""
        ])
    return buffer.getvalue()


EXPORTERS: Dict[str, Callable[[List[PacketRecord]], str]] = {
    "text": to_text,
    "json": to_json,
    "csv": to_csv
}


def export_packets(packets: List[PacketRecord], fmt: str) -> str:
    """
    Serialize packets in the requested format

    Args:
        packets: Packets to export
        fmt: One of "text", "json", "csv"

    Returns:
        Serialized document

    Raises:
        ValueError: Unsupported format
    """
    exporter = EXPORTERS.get((fmt or "").lower())
    if exporter is None:
        raise ValueError(f"Unsupported export format: {fmt}")
    return exporter(packets)
