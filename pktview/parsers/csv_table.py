"""
pktview - CSV Table Parser
Header-driven CSV packet table parser

The header row is matched against column roles by substring, e.g. a
Wireshark "Export Packet Dissections > As CSV" header:

    "No.","Time","Source","Destination","Protocol","Length","Info"

Rows are split on literal commas only: quoted fields containing commas shift
every following column. Quote characters are not stripped.
"""

from typing import Dict, List, Optional, Tuple

from .base import BaseParser, coerce_length
from ..models import CaptureFormat, PacketRecord, ParseResult, DEFAULT_PROTOCOL, DEFAULT_ENDPOINT


# Role -> header substrings, checked per role over the whole header
COLUMN_ROLES: List[Tuple[str, Tuple[str, ...]]] = [
    ("source", ("source", "src")),
    ("destination", ("destination", "dst")),
    ("protocol", ("protocol",)),
    ("length", ("length", "size")),
    ("info", ("info", "description")),
]


class CsvTableParser(BaseParser):
    """CSV packet table Parser"""

    format = CaptureFormat.CSV

    def __init__(self):
        super().__init__(name="csv")

    def parse(self, content: str) -> ParseResult:
        lines = self._split_lines(content)
        if not lines:
            return self._result([])

        headers = [h.strip().lower() for h in lines[0].split(",")]
        columns = self._map_columns(headers)
        self.logger.debug(f"Column roles: {columns}")

        packets = [self._parse_row(row, headers, columns) for row in lines[1:]]
        return self._result(packets)

    @staticmethod
    def _map_columns(headers: List[str]) -> Dict[str, Optional[int]]:
        """First header containing one of a role's keywords wins the role"""
        columns: Dict[str, Optional[int]] = {}
        for role, keywords in COLUMN_ROLES:
            columns[role] = next(
                (i for i, header in enumerate(headers) if any(k in header for k in keywords)),
                None
            )
        return columns

    def _parse_row(self, row: str, headers: List[str], columns: Dict[str, Optional[int]]) -> PacketRecord:
        values = row.split(",")

        def cell(role: str) -> str:
            index = columns[role]
            if index is None or index >= len(values):
                return ""
            return values[index].strip()

        packet = PacketRecord(
            protocol=cell("protocol") or DEFAULT_PROTOCOL,
            source=cell("source") or DEFAULT_ENDPOINT,
            destination=cell("destination") or DEFAULT_ENDPOINT,
            length=coerce_length(cell("length")),
            info=cell("info")
        )

        # Every column, mapped or not, is kept under its lowercased header
        for index, header in enumerate(headers):
            if index < len(values) and values[index]:
                packet.details[header] = values[index].strip()

        return packet
