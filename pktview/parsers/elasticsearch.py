"""
pktview - Elasticsearch Layer Normalizer
Flattens layered capture documents into packet records

Documents come from `tshark -T ek` / `tshark -T json` (and the Elasticsearch
indices fed by them), where every protocol layer is a field group:

    {"_source": {"layers": {
        "frame": {"frame.number": "1", "frame.len": "74",
                  "frame.protocols": "eth:ethertype:ip:tcp"},
        "ip":    {"ip.src": "10.0.0.1", "ip.dst": "10.0.0.2"},
        "tcp":   {"tcp.srcport": "1234", "tcp.dstport": "80",
                  "tcp.flags_tree": {"tcp.flags.syn": "1"}}
    }}}
"""

from typing import Dict, Any, List, Optional, Tuple

from .base import coerce_length
from ..models import LayeredCaptureDocument, PacketRecord, DEFAULT_PROTOCOL, DEFAULT_ENDPOINT


# Protocol stack substring -> label, outermost understood layer first
PROTOCOL_PRIORITY: List[Tuple[str, str]] = [
    ("tls", "TLS"),
    ("http", "HTTP"),
    ("tcp", "TCP"),
    ("udp", "UDP"),
    ("icmp", "ICMP"),
    ("arp", "ARP"),
    ("dns", "DNS"),
]

# tcp.flags_tree field -> flag label, in display order
TCP_FLAGS: List[Tuple[str, str]] = [
    ("tcp.flags.syn", "SYN"),
    ("tcp.flags.ack", "ACK"),
    ("tcp.flags.fin", "FIN"),
    ("tcp.flags.push", "PSH"),
    ("tcp.flags.reset", "RST"),
]


def resolve_protocol(protocols: str) -> str:
    """Pick the display protocol from a frame.protocols stack string"""
    for needle, label in PROTOCOL_PRIORITY:
        if needle in protocols:
            return label
    return DEFAULT_PROTOCOL


def active_tcp_flags(tcp: Dict[str, Any]) -> List[str]:
    flags = tcp.get("tcp.flags_tree")
    if not isinstance(flags, dict):
        return []
    return [label for field_name, label in TCP_FLAGS if flags.get(field_name) == "1"]


def _text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def _build_endpoints(document: LayeredCaptureDocument) -> Tuple[str, str]:
    source = DEFAULT_ENDPOINT
    destination = DEFAULT_ENDPOINT

    if document.ip.get("ip.src"):
        source = _text(document.ip["ip.src"])
        destination = _text(document.ip.get("ip.dst") or DEFAULT_ENDPOINT)
    elif document.eth.get("eth.src"):
        source = _text(document.eth["eth.src"])
        destination = _text(document.eth.get("eth.dst") or DEFAULT_ENDPOINT)

    # TCP ports take precedence over UDP
    for layer, prefix in ((document.tcp, "tcp"), (document.udp, "udp")):
        src_port = layer.get(f"{prefix}.srcport")
        dst_port = layer.get(f"{prefix}.dstport")
        if src_port and dst_port:
            source = f"{source}:{_text(src_port)}"
            destination = f"{destination}:{_text(dst_port)}"
            break

    return source, destination


def normalize_layers(document: LayeredCaptureDocument) -> PacketRecord:
    """
    Build one packet record from a layered capture document

    Args:
        document: Decoded layered document

    Returns:
        Normalized packet record
    """
    frame = document.frame
    frame_number = frame.get("frame.number") or "Unknown"
    protocols = _text(frame.get("frame.protocols") or "")
    timestamp: Optional[Any] = frame.get("frame.time") or frame.get("frame.time_utc")

    source, destination = _build_endpoints(document)

    info = f"Frame {_text(frame_number)}"
    if protocols:
        info += f" ({protocols})"
    flags = active_tcp_flags(document.tcp)
    if flags:
        info += f" [{', '.join(flags)}]"

    details: Dict[str, Any] = {
        "frame_number": frame_number,
        "layers": document.layers,
        "protocols": protocols
    }
    for key, layer in (("ethernet", document.eth), ("ip", document.ip),
                       ("tcp", document.tcp), ("udp", document.udp)):
        if layer:
            details[key] = layer

    return PacketRecord(
        protocol=resolve_protocol(protocols),
        source=source,
        destination=destination,
        length=coerce_length(frame.get("frame.len")),
        info=info,
        timestamp=_text(timestamp) if timestamp else None,
        details=details
    )
