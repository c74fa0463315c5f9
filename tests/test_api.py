import json

import pytest
from fastapi.testclient import TestClient

from pktview import api, parse_packet_data


TCPDUMP = (
    "12:00:00.100000 IP 10.0.0.1.5353 > 224.0.0.251.5353: UDP, length 32\n"
    "12:00:01.200000 IP 10.0.0.2 > 10.0.0.3: ICMP echo request, id 1, length 64\n"
    "12:00:02.300000 IP 10.0.0.4.443 > 10.0.0.5.51000: Flags [P.], length 100\n"
)


@pytest.fixture
def client():
    api.results.clear()
    return TestClient(api.app)


def _upload(client, content, filename="capture.txt"):
    response = client.post(
        "/api/upload",
        files={"file": (filename, content.encode("utf-8"), "text/plain")}
    )
    assert response.status_code == 200
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_info_lists_parsers(client):
    info = client.get("/api/info").json()
    assert {p["format"] for p in info["parsers"]} == {"json", "csv", "wireshark", "tcpdump", "unknown"}


def test_upload_returns_summary(client):
    summary = _upload(client, TCPDUMP)
    assert summary["format"] == "tcpdump"
    assert summary["totalPackets"] == 3
    assert summary["protocols"] == {"UDP": 1, "ICMP": 1, "Unknown": 1}
    assert summary["filename"] == "capture.txt"

    fetched = client.get(f"/api/results/{summary['result_id']}").json()
    assert fetched["totalPackets"] == 3


def test_upload_strips_bom(client):
    payload = "\ufeff" + json.dumps([{"protocol": "TCP"}])
    summary = _upload(client, payload, filename="packets.json")
    assert summary["format"] == "json"
    assert summary["totalPackets"] == 1


def test_upload_rejects_unknown_extension(client):
    response = client.post("/api/upload", files={"file": ("evil.exe", b"x", "application/octet-stream")})
    assert response.status_code == 400


def test_upload_too_large(client, monkeypatch):
    monkeypatch.setattr(api.config, "MAX_UPLOAD_BYTES", 10)
    response = client.post("/api/upload", files={"file": ("big.txt", b"x" * 11, "text/plain")})
    assert response.status_code == 413


def test_parse_pasted_content(client):
    response = client.post("/api/parse", json={"content": "source,destination\na,b\n"})
    assert response.status_code == 200
    body = response.json()
    assert body["format"] == "csv"
    assert body["filename"] == "pasted-content.txt"


def test_parse_empty_content(client):
    response = client.post("/api/parse", json={"content": "   \n"})
    assert response.status_code == 400


def test_large_payload_parsed_in_worker(client, monkeypatch):
    monkeypatch.setattr(api.config, "OFFLOAD_THRESHOLD", 10)
    summary = _upload(client, TCPDUMP)
    assert summary["totalPackets"] == 3


def test_packets_filter_and_paginate(client):
    result_id = _upload(client, TCPDUMP)["result_id"]

    body = client.get(f"/api/results/{result_id}/packets", params={"page_size": 2}).json()
    assert body["total_pages"] == 2
    assert len(body["packets"]) == 2
    assert body["filtered_count"] == 3

    body = client.get(f"/api/results/{result_id}/packets", params={"protocol": "icmp"}).json()
    assert body["filtered_count"] == 1
    assert body["packets"][0]["source"] == "10.0.0.2"

    body = client.get(f"/api/results/{result_id}/packets", params={"query": "10.0.0.4"}).json()
    assert [p["length"] for p in body["packets"]] == [100]


def test_single_packet(client):
    result_id = _upload(client, TCPDUMP)["result_id"]

    packet = client.get(f"/api/results/{result_id}/packets/1").json()
    assert packet["index"] == 1
    assert packet["protocol"] == "ICMP"
    assert packet["details"]["raw_line"].startswith("12:00:01.200000")

    assert client.get(f"/api/results/{result_id}/packets/3").status_code == 404


def test_export_formats(client):
    result_id = _upload(client, TCPDUMP, filename="trace.log")["result_id"]

    response = client.get(f"/api/results/{result_id}/export", params={"format": "csv"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="trace.csv"' in response.headers["content-disposition"]
    assert response.text.splitlines()[0].startswith('"Protocol","Source"')

    response = client.get(f"/api/results/{result_id}/export", params={"format": "json", "protocol": "udp"})
    exported = json.loads(response.text)
    assert [p["protocol"] for p in exported] == ["UDP"]

    response = client.get(f"/api/results/{result_id}/export", params={"format": "text"})
    assert 'filename="trace.txt"' in response.headers["content-disposition"]

    assert client.get(f"/api/results/{result_id}/export", params={"format": "xml"}).status_code == 400


def test_unknown_result_and_delete(client):
    assert client.get("/api/results/missing").status_code == 404

    result_id = _upload(client, TCPDUMP)["result_id"]
    assert client.delete(f"/api/results/{result_id}").status_code == 200
    assert client.get(f"/api/results/{result_id}").status_code == 404
    assert client.delete(f"/api/results/{result_id}").status_code == 404


def test_store_evicts_oldest():
    store = api.ResultStore(max_results=2)
    first = store.add("a", parse_packet_data("x"), 1)
    store.add("b", parse_packet_data("y"), 1)
    store.add("c", parse_packet_data("z"), 1)

    assert len(store) == 2
    assert store.get(first.result_id) is None


def test_export_non_ascii_filename(client):
    response = client.post("/api/parse", json={"content": TCPDUMP, "filename": "захват.txt"})
    result_id = response.json()["result_id"]

    response = client.get(f"/api/results/{result_id}/export", params={"format": "json"})
    assert response.status_code == 200
    disposition = response.headers["content-disposition"]
    assert 'filename="packets.json"' in disposition
    assert "filename*=UTF-8''%D0%B7%D0%B0%D1%85%D0%B2%D0%B0%D1%82.json" in disposition


def test_single_packet_breakdown(client):
    document = {"_source": {"layers": {
        "frame": {"frame.number": "3", "frame.len": "66", "frame.protocols": "eth:ethertype:ip:tcp"},
        "ip": {"ip.src": "10.0.0.1", "ip.dst": "10.0.0.2", "ip.ttl": "64"},
        "tcp": {"tcp.srcport": "1234", "tcp.dstport": "80",
                "tcp.flags_tree": {"tcp.flags.syn": "1", "tcp.flags.urg": "1"}}
    }}}
    result_id = client.post("/api/parse", json={"content": json.dumps([document])}).json()["result_id"]

    packet = client.get(f"/api/results/{result_id}/packets/0").json()
    breakdown = packet["breakdown"]
    assert breakdown["frame"]["number"] == "3"
    assert breakdown["frame"]["protocols"] == ["eth", "ethertype", "ip", "tcp"]
    assert breakdown["ip"]["ttl"] == "64"
    assert breakdown["tcp"]["flags"] == ["SYN", "URG"]
    assert breakdown["ethernet"] is None
