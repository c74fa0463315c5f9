"""
pktview - Generic Fallback Parser
Last-resort line parser for unrecognized text
"""

import re
from typing import List

from .base import BaseParser
from ..models import CaptureFormat, PacketRecord, ParseResult, DEFAULT_PROTOCOL


class GenericFallbackParser(BaseParser):
    """
    Generic line Parser

    Every non-blank line becomes exactly one packet. The first two IPv4
    addresses on a line are taken as source and destination by position.
    """

    format = CaptureFormat.UNKNOWN

    def __init__(self):
        super().__init__(name="generic")

        self.ipv4_pattern = re.compile(r'(?<!\d)\d+\.\d+\.\d+\.\d+')
        self.protocol_pattern = re.compile(
            r'\b(TCP|UDP|ICMP|HTTP|HTTPS|FTP|SSH|DNS)\b',
            re.IGNORECASE
        )

    def parse(self, content: str) -> ParseResult:
        packets: List[PacketRecord] = []

        for line in self._split_lines(content):
            packet = PacketRecord(info=line, details={"raw_line": line})

            addresses = self.ipv4_pattern.findall(line)
            if len(addresses) >= 2:
                packet.source = addresses[0]
                packet.destination = addresses[1]

            protocol = self._search_group(self.protocol_pattern, line)
            packet.protocol = protocol.upper() if protocol else DEFAULT_PROTOCOL

            packets.append(packet)

        return self._result(packets)
