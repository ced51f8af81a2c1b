"""Command line entry point for the live capture agent."""
from __future__ import annotations

import argparse
import logging
from typing import Sequence

from backend.config import get_settings
from backend.logging_config import get_logger, setup_logging
from backend.services.filters import CAPTURE_DURATIONS, CAPTURE_PROTOCOLS, build_port_bpf, capture_duration_seconds

from .capture import PacketForwarder, pick_interface, run_capture


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="intellipcap-agent", description="Forward live packets to the IntelliPCAP backend")
    parser.add_argument("--iface", help="Interface to sniff (default: first non-loopback IPv4 interface)")
    parser.add_argument("--protocol", choices=CAPTURE_PROTOCOLS, default="any", help="Transport protocol to capture")
    parser.add_argument("--port", default="all", help="Port number to capture, or 'all'")
    parser.add_argument("--filter", dest="bpf", help="Raw BPF expression; overrides --protocol/--port")
    parser.add_argument("--duration", choices=list(CAPTURE_DURATIONS), default="unlimited", help="Capture duration")
    parser.add_argument("--backend-url", default=settings.agent_backend_url, help="Backend /live-data endpoint")
    parser.add_argument("--verbose", action="store_true", help="Log every forwarded packet")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, json_output=False)
    logger = get_logger("agent.cli")

    interface = args.iface or pick_interface()
    if not interface:
        logger.error("agent.no_interface", message="No active network interface found.")
        return 1

    try:
        bpf = args.bpf if args.bpf is not None else build_port_bpf(args.protocol, args.port)
    except ValueError as exc:
        parser.error(str(exc))

    settings = get_settings()
    forwarder = PacketForwarder(args.backend_url, timeout=settings.agent_request_timeout_seconds)
    try:
        run_capture(interface, bpf, capture_duration_seconds(args.duration), forwarder)
    except KeyboardInterrupt:
        logger.info("agent.interrupted", sent=forwarder.sent, failed=forwarder.failed)
    finally:
        forwarder.close()
    return 0
