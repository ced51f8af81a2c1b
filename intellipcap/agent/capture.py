"""Live capture agent: sniffs an interface and forwards decoded frames to the backend."""
from __future__ import annotations

from typing import Iterable, Optional

import httpx
from scapy.arch import get_if_addr
from scapy.error import Scapy_Exception
from scapy.interfaces import get_if_list
from scapy.packet import Packet
from scapy.sendrecv import sniff

from backend.logging_config import get_logger
from backend.services.decoder import frame_from_packet

logger = get_logger("agent")


def _is_loopback(name: str, address: str) -> bool:
    return name == "lo" or address.startswith("127.")


def pick_interface(candidates: Optional[Iterable[str]] = None) -> Optional[str]:
    """First non-loopback interface that carries an IPv4 address."""
    for name in candidates if candidates is not None else get_if_list():
        try:
            address = get_if_addr(name)
        except (OSError, ValueError, Scapy_Exception):
            continue
        if not address or address == "0.0.0.0" or _is_loopback(name, address):
            continue
        return name
    return None


class PacketForwarder:
    """Sniff callback that POSTs each packet to ``/live-data``.

    Send failures are logged and counted; capture keeps going.
    """

    def __init__(self, backend_url: str, client: Optional[httpx.Client] = None, timeout: float = 5.0) -> None:
        self.backend_url = backend_url
        self._client = client or httpx.Client(timeout=timeout)
        self.sent = 0
        self.failed = 0

    def __call__(self, packet: Packet) -> None:
        try:
            frame = frame_from_packet(packet)
        except (AttributeError, TypeError, ValueError) as exc:
            self.failed += 1
            logger.warning("agent.decode_failed", error=str(exc))
            return
        try:
            response = self._client.post(self.backend_url, json={"packet": frame})
            response.raise_for_status()
        except httpx.HTTPError as exc:
            self.failed += 1
            logger.warning("agent.send_failed", url=self.backend_url, error=str(exc))
            return
        self.sent += 1
        logger.debug("agent.packet_sent", response=response.text)

    def close(self) -> None:
        self._client.close()


def run_capture(interface: str, bpf: str, duration: Optional[int], forwarder: PacketForwarder) -> None:
    logger.info("agent.capture_start", interface=interface, filter=bpf or "<all>", duration=duration)
    sniff(iface=interface, filter=bpf or None, prn=forwarder, store=False, timeout=duration)
    logger.info("agent.capture_stop", interface=interface, sent=forwarder.sent, failed=forwarder.failed)
