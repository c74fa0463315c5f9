"""
pktview - Wireshark Text Parser
Protocol-analyzer text dump parser

Parses the human-readable packet dissection printed by Wireshark
("File > Export Packet Dissections > As Plain Text") or `tshark -V`:

    Frame 1: 74 bytes on wire (592 bits), 74 bytes captured (592 bits)
    Ethernet II, Src: 00:11:22:33:44:55, Dst: 66:77:88:99:aa:bb
    Internet Protocol Version 4, Src: 192.168.1.10, Dst: 93.184.216.34
        Protocol: TCP (6)
        Total Length: 60

Each "Frame " line opens a new packet block.
"""

import re
from typing import List, Optional

from .base import BaseParser
from ..models import CaptureFormat, PacketRecord, ParseResult, DEFAULT_PROTOCOL


class WiresharkTextParser(BaseParser):
    """
    Wireshark text dump Parser

    Scans lines in order keeping one in-progress packet. A block is only
    emitted when an explicit "Protocol: " line gave it a protocol; blocks
    that never set one are dropped, whether they end at the next "Frame "
    line or at end of input.
    """

    format = CaptureFormat.WIRESHARK

    def __init__(self):
        super().__init__(name="wireshark")

        # Layer address patterns
        self.mac_src_pattern = re.compile(r'Src: ([0-9A-Fa-f:]+)')
        self.mac_dst_pattern = re.compile(r'Dst: ([0-9A-Fa-f:]+)')
        self.ip_src_pattern = re.compile(r'Src: (\d+\.\d+\.\d+\.\d+)')
        self.ip_dst_pattern = re.compile(r'Dst: (\d+\.\d+\.\d+\.\d+)')

        self.protocol_pattern = re.compile(r'Protocol: (\w+)')
        self.length_pattern = re.compile(r'Length: (\d+)')

    def parse(self, content: str) -> ParseResult:
        packets: List[PacketRecord] = []
        current: Optional[PacketRecord] = None

        for line in self._split_lines(content):
            if line.startswith("Frame "):
                self._flush(current, packets)
                current = PacketRecord()

            # Lines before the first frame have no packet to attach to
            if current is None:
                continue

            self._apply_line(current, line)

        self._flush(current, packets)
        return self._result(packets)

    def _flush(self, packet: Optional[PacketRecord], packets: List[PacketRecord]):
        if packet is not None and packet.protocol != DEFAULT_PROTOCOL:
            packets.append(packet)

    def _apply_line(self, packet: PacketRecord, line: str):
        """Update the in-progress packet from one dissection line"""
        if "Ethernet II" in line:
            self._set_endpoints(packet, line, self.mac_src_pattern, self.mac_dst_pattern)

        # IP addresses overwrite the MAC addresses set above
        if "Internet Protocol" in line:
            self._set_endpoints(packet, line, self.ip_src_pattern, self.ip_dst_pattern)

        if "Protocol: " in line:
            protocol = self._search_group(self.protocol_pattern, line)
            if protocol:
                packet.protocol = protocol

        if "Length: " in line:
            length = self._search_group(self.length_pattern, line)
            if length:
                packet.length = int(length)

        # Frame lines carry fields but are not kept as details
        if line.startswith("Frame "):
            return

        key, sep, value = line.partition(":")
        if sep and key.strip() and value.strip():
            packet.details[key.strip()] = value.strip()

    def _set_endpoints(self, packet: PacketRecord, line: str, src_pattern, dst_pattern):
        source = self._search_group(src_pattern, line)
        destination = self._search_group(dst_pattern, line)
        if source:
            packet.source = source
        if destination:
            packet.destination = destination
