"""
pktview - tcpdump Line Parser
One-line-per-packet capture log parser

    12:00:00.123456 IP 1.2.3.4.80 > 5.6.7.8.443: Flags [S], length 40

Lines without both a timestamp and a "SRC > DST:" connection are skipped.
"""

import re
from typing import List

from .base import BaseParser
from ..models import CaptureFormat, PacketRecord, ParseResult, DEFAULT_PROTOCOL


class TcpdumpLineParser(BaseParser):
    """tcpdump / windump text output Parser"""

    format = CaptureFormat.TCPDUMP

    # Checked in order, first hit wins
    PROTOCOL_KEYWORDS = ("UDP", "TCP", "ICMP", "ARP", "DNS")

    def __init__(self):
        super().__init__(name="tcpdump")

        self.timestamp_pattern = re.compile(r'(\d{2}:\d{2}:\d{2}\.\d+)')
        # Source token must start at a word boundary so a long token is scanned once
        self.connection_pattern = re.compile(r'(?<!\S)(\S+) > (\S+):')
        self.length_pattern = re.compile(r'length (\d+)')

    def parse(self, content: str) -> ParseResult:
        packets: List[PacketRecord] = []

        for line in self._split_lines(content):
            packet = self._parse_line(line)
            if packet is not None:
                packets.append(packet)

        return self._result(packets)

    def _parse_line(self, line: str):
        timestamp_match = self.timestamp_pattern.search(line)
        connection_match = self.connection_pattern.search(line)
        if not timestamp_match or not connection_match:
            return None

        length = self._search_group(self.length_pattern, line)

        return PacketRecord(
            protocol=self._detect_protocol(line),
            source=connection_match.group(1),
            destination=connection_match.group(2),
            length=int(length) if length else 0,
            info=self._extract_info(line),
            timestamp=timestamp_match.group(1),
            details={"raw_line": line}
        )

    def _detect_protocol(self, line: str) -> str:
        upper = line.upper()
        for keyword in self.PROTOCOL_KEYWORDS:
            if keyword in upper:
                return keyword
        return DEFAULT_PROTOCOL

    @staticmethod
    def _extract_info(line: str) -> str:
        """Text after the first ': ', or the whole line"""
        _, sep, rest = line.partition(": ")
        if sep and rest:
            return rest
        return line
