from pktview import CaptureFormat, parse_packet_data
from pktview.parsers import TcpdumpLineParser


def test_basic_line():
    line = "12:00:00.123456 1.2.3.4.80 > 5.6.7.8.443: Flags [S], length 40"
    result = parse_packet_data(line)

    assert result.format == CaptureFormat.TCPDUMP
    assert result.total_packets == 1
    packet = result.packets[0]
    assert packet.timestamp == "12:00:00.123456"
    assert packet.source == "1.2.3.4.80"
    assert packet.destination == "5.6.7.8.443"
    assert packet.length == 40
    assert packet.protocol == "Unknown"
    assert packet.info == "Flags [S], length 40"
    assert packet.details == {"raw_line": line}


def test_line_without_arrow_is_dropped():
    result = TcpdumpLineParser().parse("12:00:00.123456 1.2.3.4.80 5.6.7.8.443: Flags [S]")
    assert result.packets == []
    assert result.total_packets == 0


def test_only_matching_lines_kept():
    content = (
        "tcpdump: verbose output suppressed\n"
        "12:00:00.100000 IP 10.0.0.1.5353 > 224.0.0.251.5353: UDP, length 32\n"
        "listening on eth0\n"
        "12:00:01.200000 IP 10.0.0.2 > 10.0.0.3: ICMP echo request, id 1, length 64\n"
    )
    result = TcpdumpLineParser().parse(content)
    assert result.total_packets == 2
    assert [p.protocol for p in result.packets] == ["UDP", "ICMP"]
    assert [p.length for p in result.packets] == [32, 64]


def test_protocol_order_udp_before_tcp():
    line = "12:00:00.1 a > b: tcp over udp"
    packet = TcpdumpLineParser().parse(line).packets[0]
    assert packet.protocol == "UDP"


def test_missing_length_defaults_to_zero():
    packet = TcpdumpLineParser().parse("12:00:00.1 a > b: hello").packets[0]
    assert packet.length == 0
    assert packet.info == "hello"


def test_info_falls_back_to_whole_line():
    line = "12:00:00.1 a > b:x"
    packet = TcpdumpLineParser().parse(line).packets[0]
    assert packet.source == "a"
    assert packet.destination == "b"
    assert packet.info == line
