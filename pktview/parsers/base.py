"""
pktview - Base Parser
Base class for all capture format parsers
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Any
import json
import logging
import math
import re

from ..models import CaptureFormat, ParseResult


class BaseParser(ABC):
    """
    Parser base class

    Each Parser handles one textual capture format (protocol-analyzer dumps,
    tcpdump logs, JSON, CSV, ...) and turns a complete payload into a
    ParseResult. Parsers are total: degenerate input yields an empty result
    rather than an exception.
    """

    format: CaptureFormat = CaptureFormat.UNKNOWN

    def __init__(self, name: str = "base"):
        self.name = name
        self.logger = logging.getLogger(f"parser.{name}")

    @abstractmethod
    def parse(self, content: str) -> ParseResult:
        """
        Parse a complete text payload

        Args:
            content: Full payload text

        Returns:
            Parse result tagged with this parser's format
        """
        pass

    def _result(self, packets: List) -> ParseResult:
        result = ParseResult(format=self.format, packets=packets)
        self.logger.debug(f"Parsed {result.total_packets} packets as {self.format.value}")
        return result

    @staticmethod
    def _split_lines(content: str) -> List[str]:
        """Split payload into lines, dropping blank ones"""
        return [line for line in content.split("\n") if line.strip()]

    @staticmethod
    def _search_group(pattern: "re.Pattern", text: str) -> Optional[str]:
        match = pattern.search(text)
        return match.group(1) if match else None


def coerce_length(value: Any) -> int:
    """Coerce a length value to a non-negative int (0 on failure)"""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return max(int(value), 0)

    match = re.match(r'\s*(\d+)', str(value))
    if match:
        return int(match.group(1))
    return 0


def _reject_constant(name: str):
    raise ValueError(f"Invalid JSON constant: {name}")


def load_json(content: str) -> Any:
    """json.loads that rejects NaN, Infinity and -Infinity"""
    return json.loads(content, parse_constant=_reject_constant)
