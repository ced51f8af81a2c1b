"""Software-only simulation / demo - no real systems will be contacted or modified."""
from __future__ import annotations

import struct
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from scapy.error import Scapy_Exception
from scapy.layers.inet import IP, TCP, UDP
from scapy.layers.l2 import Ether
from scapy.packet import Packet
from scapy.utils import PcapReader

from ..logging_config import get_logger

logger = get_logger("decoder")

# Classic libpcap (micro and nanosecond, both byte orders) and the pcapng section header block.
PCAP_MAGIC_NUMBERS = {
    b"\xa1\xb2\xc3\xd4",
    b"\xd4\xc3\xb2\xa1",
    b"\xa1\xb2\x3c\x4d",
    b"\x4d\x3c\xb2\xa1",
    b"\x0a\x0d\x0d\x0a",
}

IP_PROTOCOL_NAMES = {
    1: "ICMP",
    2: "IGMP",
    6: "TCP",
    17: "UDP",
    47: "GRE",
    50: "ESP",
    51: "AH",
    132: "SCTP",
}


class PcapParsingError(Exception):
    pass


def validate_pcap_header(file_path: Union[str, Path]) -> bool:
    """Check the capture file's magic number before handing it to scapy."""
    try:
        with open(file_path, "rb") as handle:
            magic = handle.read(4)
    except OSError as exc:
        logger.warning("pcap.header_validation_failed", error=str(exc))
        return False
    return magic in PCAP_MAGIC_NUMBERS


def protocol_name(proto: int) -> str:
    return IP_PROTOCOL_NAMES.get(proto, "Unknown")


def _split_timestamp(value: Any) -> tuple[int, int]:
    exact = Decimal(str(value))
    seconds = int(exact)
    micros = int((exact - seconds) * 1_000_000)
    return seconds, micros


def _mac_octets(mac: str) -> List[int]:
    return [int(part, 16) for part in mac.split(":")]


def _transport_layer(packet: Packet) -> Optional[Dict[str, int]]:
    for layer in (TCP, UDP):
        if packet.haslayer(layer):
            segment = packet[layer]
            return {"sport": int(segment.sport), "dport": int(segment.dport)}
    return None


def _network_layer(packet: Packet) -> Optional[Dict[str, Any]]:
    if not packet.haslayer(IP):
        return None
    ip_layer = packet[IP]
    proto = int(ip_layer.proto)
    return {
        "saddr": {"addr": [int(octet) for octet in ip_layer.src.split(".")]},
        "daddr": {"addr": [int(octet) for octet in ip_layer.dst.split(".")]},
        "protocol": proto,
        "protocolName": protocol_name(proto),
        "ttl": int(ip_layer.ttl),
        "payload": _transport_layer(packet),
    }


def _link_layer(packet: Packet) -> Dict[str, Any]:
    link: Dict[str, Any] = {}
    if packet.haslayer(Ether):
        frame = packet[Ether]
        link["shost"] = {"addr": _mac_octets(frame.src)}
        link["dhost"] = {"addr": _mac_octets(frame.dst)}
        link["ethertype"] = int(frame.type)
    link["payload"] = _network_layer(packet)
    return link


def frame_from_packet(packet: Packet) -> Dict[str, Any]:
    """Convert a scapy packet into the nested decoder frame shape.

    The frame mirrors what capture agents post to ``/live-data``: a pcap record
    header followed by link, network and transport layers, each of which may be
    missing.
    """
    seconds, micros = _split_timestamp(packet.time)
    captured = len(packet)
    wire_length = getattr(packet, "wirelen", None) or captured
    return {
        "pcap_header": {
            "tv_sec": seconds,
            "tv_usec": micros,
            "len": int(wire_length),
            "caplen": captured,
        },
        "payload": _link_layer(packet),
    }


def iter_capture_frames(file_path: Union[str, Path]) -> Iterator[Dict[str, Any]]:
    """Stream decoder frames out of a pcap or pcapng file.

    A packet that cannot be converted is skipped. A failure of the reader itself
    aborts the whole capture with :class:`PcapParsingError`.
    """
    skipped = 0
    try:
        with PcapReader(str(file_path)) as reader:
            for index, packet in enumerate(reader):
                try:
                    frame = frame_from_packet(packet)
                except (AttributeError, TypeError, ValueError) as exc:
                    skipped += 1
                    logger.warning("pcap.frame_skipped", index=index, error=str(exc))
                    continue
                yield frame
    except (Scapy_Exception, OSError, EOFError, struct.error) as exc:
        logger.warning("pcap.parse_failed", path=str(file_path), error=str(exc))
        raise PcapParsingError("Unable to parse PCAP file") from exc
    if skipped:
        logger.info("pcap.frames_skipped", path=str(file_path), skipped=skipped)
