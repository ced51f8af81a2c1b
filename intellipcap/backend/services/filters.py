"""Software-only simulation / demo - no real systems will be contacted or modified."""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Union

from ..models.schemas import NormalizedPacket

CAPTURE_PROTOCOLS = ("any", "tcp", "udp")

CAPTURE_DURATIONS: Dict[str, Optional[int]] = {
    "10s": 10,
    "30s": 30,
    "1m": 60,
    "5m": 300,
    "10m": 600,
    "unlimited": None,
}


def search_packets(packets: Sequence[NormalizedPacket], term: Optional[str]) -> List[NormalizedPacket]:
    if not term:
        return list(packets)
    lowered = term.lower()
    return [
        packet
        for packet in packets
        if term in packet.source
        or term in packet.destination
        or lowered in packet.protocol.lower()
        or lowered in packet.info.lower()
    ]


def build_port_bpf(protocol: str = "any", port: Union[int, str] = "all") -> str:
    """Translate a protocol/port selection into a BPF expression.

    ``"all"`` ports with ``"any"`` protocol captures everything (empty filter).
    """
    protocol = protocol.lower()
    if protocol not in CAPTURE_PROTOCOLS:
        raise ValueError(f"Unsupported capture protocol: {protocol}")
    if str(port).lower() == "all":
        return "" if protocol == "any" else protocol
    port_number = int(port)
    if not 0 < port_number <= 65535:
        raise ValueError(f"Port out of range: {port_number}")
    if protocol == "any":
        return f"(tcp port {port_number} or udp port {port_number})"
    return f"{protocol} port {port_number}"


def capture_duration_seconds(label: str) -> Optional[int]:
    try:
        return CAPTURE_DURATIONS[label]
    except KeyError:
        raise ValueError(f"Unknown capture duration: {label}") from None
