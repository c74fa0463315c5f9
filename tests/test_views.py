import pytest

from pktview.models import PacketRecord
from pktview.analysis import filter_packets, filter_by_protocol, search_packets, paginate, protocol_stats
from pktview.analysis.views import page_numbers


def _packets():
    return [
        PacketRecord(protocol="TCP", source="10.0.0.1:80", destination="10.0.0.2:5000", info="HTTP/1.1 200 OK"),
        PacketRecord(protocol="UDP", source="10.0.0.3", destination="8.8.8.8", info="query example.com"),
        PacketRecord(protocol="HTTPS", source="10.0.0.1", destination="1.1.1.1", info="Client Hello"),
        PacketRecord(protocol="ARP", source="aa:bb", destination="ff:ff", info="Who has 10.0.0.9?"),
    ]


def test_protocol_filter_is_containment():
    packets = _packets()
    assert [p.protocol for p in filter_by_protocol(packets, "http")] == ["HTTPS"]
    assert [p.protocol for p in filter_by_protocol(packets, "TCP")] == ["TCP"]
    assert len(filter_by_protocol(packets, "all")) == 4
    assert len(filter_by_protocol(packets, "")) == 4


def test_search_covers_endpoint_protocol_and_info():
    packets = _packets()
    assert len(search_packets(packets, "10.0.0.1")) == 2
    assert [p.protocol for p in search_packets(packets, "8.8.8")] == ["UDP"]
    assert [p.protocol for p in search_packets(packets, "hello")] == ["HTTPS"]
    assert [p.protocol for p in search_packets(packets, "arp")] == ["ARP"]


def test_combined_filter_does_not_mutate():
    packets = _packets()
    filtered = filter_packets(packets, query="10.0.0.1", protocol="tcp")
    assert [p.protocol for p in filtered] == ["TCP"]
    assert len(packets) == 4
    assert filter_packets(packets) is not packets


def test_protocol_stats_in_appearance_order():
    packets = _packets() + [PacketRecord(protocol="TCP")]
    assert protocol_stats(packets) == {"TCP": 2, "UDP": 1, "HTTPS": 1, "ARP": 1}


def test_paginate_pages():
    packets = [PacketRecord(info=str(i)) for i in range(45)]

    page = paginate(packets, page=3, page_size=20)
    assert page.total_pages == 3
    assert [p.info for p in page.packets] == [str(i) for i in range(40, 45)]
    assert (page.start, page.end) == (41, 45)
    assert page.has_previous and not page.has_next


def test_paginate_clamps_page():
    packets = [PacketRecord() for _ in range(5)]
    assert paginate(packets, page=9, page_size=2).page == 3
    assert paginate(packets, page=0, page_size=2).page == 1


def test_paginate_empty():
    page = paginate([], page=1, page_size=20)
    assert page.total_pages == 0
    assert page.packets == []
    assert (page.start, page.end) == (0, 0)
    assert page.page_numbers == []


def test_paginate_rejects_bad_page_size():
    with pytest.raises(ValueError):
        paginate([], page_size=0)


def test_page_numbers_window():
    assert page_numbers(1, 3) == [1, 2, 3]
    assert page_numbers(6, 20) == [1, "...", 4, 5, 6, 7, 8, "...", 20]
    assert page_numbers(1, 20) == [1, 2, 3, 4, 5, "...", 20]
    assert page_numbers(20, 20) == [1, "...", 18, 19, 20]
