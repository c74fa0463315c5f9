"""
pktview - Format Detector
Classifies a raw payload into one capture format

Detection is an ordered list of (predicate, format) rules evaluated top to
bottom; the first matching rule wins and no scoring is done. Ambiguous
payloads therefore always take the earliest branch:

    json > csv > wireshark > tcpdump > unknown
"""

import re
from typing import Callable, Tuple
import logging

from .base import load_json
from ..models import CaptureFormat

logger = logging.getLogger("parser.detector")

WIRESHARK_MARKERS = ("Frame ", "Ethernet II", "Internet Protocol")

TIMESTAMP_PATTERN = re.compile(r'\d{2}:\d{2}:\d{2}\.\d+')


def looks_like_json(content: str) -> bool:
    """Whole payload parses as JSON"""
    try:
        load_json(content)
    except (ValueError, RecursionError):
        return False
    return True


def looks_like_csv(content: str) -> bool:
    """First non-blank line is a header mentioning a source column"""
    for line in content.split("\n"):
        if line.strip():
            return "," in line and "source" in line.lower()
    return False


def looks_like_wireshark(content: str) -> bool:
    """Payload contains protocol-analyzer section markers"""
    return any(marker in content for marker in WIRESHARK_MARKERS)


def looks_like_tcpdump(content: str) -> bool:
    """Payload has an HH:MM:SS.fraction timestamp and a ' > ' arrow"""
    return " > " in content and TIMESTAMP_PATTERN.search(content) is not None


DETECTION_RULES: Tuple[Tuple[Callable[[str], bool], CaptureFormat], ...] = (
    (looks_like_json, CaptureFormat.JSON),
    (looks_like_csv, CaptureFormat.CSV),
    (looks_like_wireshark, CaptureFormat.WIRESHARK),
    (looks_like_tcpdump, CaptureFormat.TCPDUMP),
)


def detect_format(content: str) -> CaptureFormat:
    """
    Detect the capture format of a payload

    Args:
        content: Full payload text

    Returns:
        First format whose rule matches, CaptureFormat.UNKNOWN otherwise
    """
    for predicate, capture_format in DETECTION_RULES:
        if predicate(content):
            logger.debug(f"Detected format: {capture_format.value}")
            return capture_format

    return CaptureFormat.UNKNOWN
