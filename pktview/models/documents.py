"""
pktview - JSON Document Models
Typed variants for elements of a JSON capture export

A JSON element is either a flat packet object ({"protocol": ..., "src": ...})
or a layered capture document as produced by `tshark -T ek/json`
({"_source": {"layers": {"frame": ..., "ip": ...}}}).
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Any, Union


def _as_mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _first_present(element: Dict[str, Any], *keys: str) -> Any:
    """Return the first truthy value among keys"""
    for key in keys:
        value = element.get(key)
        if value:
            return value
    return None


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


@dataclass
class FlatPacketDocument:
    """Flat object with packet fields at the top level"""
    protocol: Optional[str] = None
    source: Optional[str] = None
    destination: Optional[str] = None
    length: Any = None
    info: Optional[str] = None
    timestamp: Optional[str] = None

    # Original element, unmodified
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_element(cls, element: Any) -> "FlatPacketDocument":
        if not isinstance(element, dict):
            return cls(raw={"value": element})

        return cls(
            protocol=_as_text(_first_present(element, "protocol")),
            source=_as_text(_first_present(element, "source", "src")),
            destination=_as_text(_first_present(element, "destination", "dst")),
            length=_first_present(element, "length", "size"),
            info=_as_text(_first_present(element, "info", "description")),
            timestamp=_as_text(_first_present(element, "timestamp", "time")),
            raw=element
        )


@dataclass
class LayeredCaptureDocument:
    """Document with per-protocol layers under _source.layers"""
    layers: Dict[str, Any]
    frame: Dict[str, Any] = field(default_factory=dict)
    eth: Dict[str, Any] = field(default_factory=dict)
    ip: Dict[str, Any] = field(default_factory=dict)
    tcp: Dict[str, Any] = field(default_factory=dict)
    udp: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_layers(cls, layers: Dict[str, Any]) -> "LayeredCaptureDocument":
        return cls(
            layers=layers,
            frame=_as_mapping(layers.get("frame")),
            eth=_as_mapping(layers.get("eth")),
            ip=_as_mapping(layers.get("ip")),
            tcp=_as_mapping(layers.get("tcp")),
            udp=_as_mapping(layers.get("udp"))
        )


CaptureDocument = Union[FlatPacketDocument, LayeredCaptureDocument]


def decode_document(element: Any) -> CaptureDocument:
    """
    Decode one JSON element into its document variant

    The discriminator is the fixed path _source.layers: when it holds an
    object the element is a layered capture document, otherwise it is read
    as a flat packet object.
    """
    if isinstance(element, dict):
        source = element.get("_source")
        if isinstance(source, dict) and isinstance(source.get("layers"), dict):
            return LayeredCaptureDocument.from_layers(source["layers"])

    return FlatPacketDocument.from_element(element)
