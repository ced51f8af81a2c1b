"""Software-only simulation / demo - no real systems will be contacted or modified."""
from __future__ import annotations

from typing import Any, Dict, Optional

import pytest
from fastapi.testclient import TestClient
from scapy.layers.inet import ICMP, IP, TCP, UDP
from scapy.layers.l2 import ARP, Ether
from scapy.utils import wrpcap

from backend.app import app
from backend.config import Settings, get_settings
from backend.models.schemas import NormalizedPacket
from backend.services.packet_store import JsonFilePacketStore, get_packet_store

CAPTURE_EPOCH = 1_700_000_000


@pytest.fixture()
def store(tmp_path) -> JsonFilePacketStore:
    return JsonFilePacketStore(tmp_path / "packets.json")


@pytest.fixture()
def test_settings(tmp_path) -> Settings:
    return Settings(
        packet_store_path=str(tmp_path / "packets.json"),
        uploads_path=str(tmp_path / "uploads"),
        analysis_delay_seconds=0,
    )


@pytest.fixture()
def client(store, test_settings):
    app.dependency_overrides[get_packet_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_frame():
    def _make(
        *,
        tv_sec: int = CAPTURE_EPOCH,
        tv_usec: int = 0,
        length: int = 60,
        source=(10, 0, 0, 1),
        destination=(10, 0, 0, 2),
        protocol: str = "TCP",
        sport: Optional[int] = 51000,
        dport: Optional[int] = 443,
        with_network: bool = True,
        with_transport: bool = True,
    ) -> Dict[str, Any]:
        transport = {"sport": sport, "dport": dport} if with_transport else None
        network = None
        if with_network:
            network = {
                "saddr": {"addr": list(source)},
                "daddr": {"addr": list(destination)},
                "protocolName": protocol,
                "payload": transport,
            }
        return {
            "pcap_header": {"tv_sec": tv_sec, "tv_usec": tv_usec, "len": length},
            "payload": {"payload": network},
        }

    return _make


@pytest.fixture()
def make_packet():
    def _make(protocol: str = "TCP", *, source: str = "10.0.0.1", destination: str = "10.0.0.2", length: int = 60, port: Optional[int] = None, info: str = "", timestamp: str = "2023-11-14T22:13:20.000Z") -> NormalizedPacket:
        return NormalizedPacket(
            timestamp=timestamp,
            source=source,
            destination=destination,
            protocol=protocol,
            length=length,
            port=port,
            info=info,
        )

    return _make


@pytest.fixture()
def capture_file(tmp_path):
    src_mac, dst_mac = "02:00:00:00:00:01", "02:00:00:00:00:02"
    packets = [
        Ether(src=src_mac, dst=dst_mac) / IP(src="10.0.0.1", dst="10.0.0.2") / TCP(sport=51000, dport=443),
        Ether(src=src_mac, dst=dst_mac) / IP(src="10.0.0.2", dst="8.8.8.8") / UDP(sport=5353, dport=53),
        Ether(src=src_mac, dst=dst_mac) / IP(src="10.0.0.3", dst="10.0.0.1") / ICMP(),
        Ether(src=src_mac, dst="ff:ff:ff:ff:ff:ff")
        / ARP(hwsrc=src_mac, psrc="10.0.0.1", hwdst="00:00:00:00:00:00", pdst="10.0.0.9"),
    ]
    for index, packet in enumerate(packets):
        packet.time = CAPTURE_EPOCH + index + 0.25
    path = tmp_path / "sample.pcap"
    wrpcap(str(path), packets)
    return path
