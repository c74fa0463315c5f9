"""
pktview - JSON Document Parser
JSON capture export parser

Accepts a JSON array of packet objects, a single packet object, or
Elasticsearch / `tshark -T ek` documents carrying _source.layers.
"""

from typing import List, Any

from .base import BaseParser, coerce_length, load_json
from .elasticsearch import normalize_layers
from ..models import (
    CaptureFormat,
    PacketRecord,
    ParseResult,
    FlatPacketDocument,
    LayeredCaptureDocument,
    decode_document,
    DEFAULT_PROTOCOL,
    DEFAULT_ENDPOINT
)


class JsonDocumentParser(BaseParser):
    """
    JSON export Parser

    Invalid JSON yields an empty result tagged json; there is no fallback to
    another parser.
    """

    format = CaptureFormat.JSON

    def __init__(self):
        super().__init__(name="json")

    def parse(self, content: str) -> ParseResult:
        try:
            data = load_json(content)
        except (ValueError, RecursionError) as e:
            self.logger.warning(f"JSON parse error: {e}")
            return self._result([])

        elements: List[Any] = data if isinstance(data, list) else [data]
        packets = [self._to_packet(element) for element in elements]

        return self._result(packets)

    def _to_packet(self, element: Any) -> PacketRecord:
        document = decode_document(element)

        if isinstance(document, LayeredCaptureDocument):
            return normalize_layers(document)
        return self._from_flat(document)

    @staticmethod
    def _from_flat(document: FlatPacketDocument) -> PacketRecord:
        return PacketRecord(
            protocol=document.protocol or DEFAULT_PROTOCOL,
            source=document.source or DEFAULT_ENDPOINT,
            destination=document.destination or DEFAULT_ENDPOINT,
            length=coerce_length(document.length),
            info=document.info or "",
            timestamp=document.timestamp,
            details=document.raw
        )
