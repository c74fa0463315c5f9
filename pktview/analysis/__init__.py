"""
pktview - Analysis
Views and exporters over parsed packet results
"""

from .views import (
    ALL_PROTOCOLS,
    PROTOCOL_FILTERS,
    Page,
    filter_by_protocol,
    search_packets,
    filter_packets,
    protocol_stats,
    paginate,
    format_timestamp,
    packet_breakdown
)
from .export import (
    CSV_HEADERS,
    MIME_TYPES,
    FILE_EXTENSIONS,
    export_packets
)

__all__ = [
    "ALL_PROTOCOLS",
    "PROTOCOL_FILTERS",
    "Page",
    "filter_by_protocol",
    "search_packets",
    "filter_packets",
    "protocol_stats",
    "paginate",
    "format_timestamp",
    "packet_breakdown",
    "CSV_HEADERS",
    "MIME_TYPES",
    "FILE_EXTENSIONS",
    "export_packets"
]
