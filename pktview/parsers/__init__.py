"""
pktview - Parsers
Format-specific parsers for textual capture exports
"""

from typing import Dict, Type

from .base import BaseParser
from .detector import DETECTION_RULES, detect_format
from .wireshark import WiresharkTextParser
from .tcpdump import TcpdumpLineParser
from .json_document import JsonDocumentParser
from .elasticsearch import normalize_layers
from .csv_table import CsvTableParser
from .generic import GenericFallbackParser
from ..models import CaptureFormat, ParseResult

__all__ = [
    "BaseParser",
    "DETECTION_RULES",
    "detect_format",
    "WiresharkTextParser",
    "TcpdumpLineParser",
    "JsonDocumentParser",
    "normalize_layers",
    "CsvTableParser",
    "GenericFallbackParser",
    "PARSERS",
    "get_parser_for_format",
    "get_parser_for_content",
    "get_all_parsers",
    "parse_packet_data"
]


PARSERS: Dict[CaptureFormat, Type[BaseParser]] = {
    CaptureFormat.JSON: JsonDocumentParser,
    CaptureFormat.CSV: CsvTableParser,
    CaptureFormat.WIRESHARK: WiresharkTextParser,
    CaptureFormat.TCPDUMP: TcpdumpLineParser,
    CaptureFormat.UNKNOWN: GenericFallbackParser,
}


def get_parser_for_format(capture_format: CaptureFormat) -> BaseParser:
    """Return a fresh Parser instance for a detected format"""
    return PARSERS[capture_format]()


def get_parser_for_content(content: str) -> BaseParser:
    """
    Automatically select the Parser for a payload

    Args:
        content: Full payload text

    Returns:
        Parser for the first matching detection rule
    """
    return get_parser_for_format(detect_format(content))


def get_all_parsers():
    """Return all Parser instances"""
    return [parser_class() for parser_class in PARSERS.values()]


def parse_packet_data(content: str) -> ParseResult:
    """
    Detect the payload format and parse it into packet records

    Args:
        content: Complete text payload

    Returns:
        Parse result with packets in original order
    """
    return get_parser_for_content(content).parse(content)
