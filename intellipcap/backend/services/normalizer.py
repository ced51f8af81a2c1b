"""Software-only simulation / demo - no real systems will be contacted or modified."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from pydantic import ValidationError

from ..logging_config import get_logger
from ..models.schemas import DecodedFrame, NormalizedPacket, PcapHeader

logger = get_logger("normalizer")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def capture_timestamp(header: PcapHeader) -> str:
    """Render a pcap record time as ISO-8601 with millisecond precision."""
    millis = (header.tv_sec * 1_000_000 + header.tv_usec) // 1000
    moment = EPOCH + timedelta(milliseconds=millis)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def coerce_frame(raw: Union[DecodedFrame, Mapping[str, Any], None]) -> Optional[DecodedFrame]:
    if raw is None or isinstance(raw, DecodedFrame):
        return raw
    try:
        return DecodedFrame.model_validate(raw)
    except ValidationError as exc:
        logger.debug("frame.invalid", errors=exc.error_count())
        return None


def normalize_frame(raw: Union[DecodedFrame, Mapping[str, Any], None]) -> Optional[NormalizedPacket]:
    """Flatten a decoder frame, or return ``None`` when it has no network layer.

    ``port`` prefers the transport source port and falls back to the
    destination port, so one side of a conversation is dropped whenever both
    are known. Callers should not read it as a server or client port.
    """
    frame = coerce_frame(raw)
    if frame is None or frame.payload is None:
        return None
    network = frame.payload.payload
    if network is None:
        return None
    transport = network.payload
    port = None
    if transport is not None:
        # Port 0 is reserved and treated as unset.
        port = transport.sport or transport.dport or None
    return NormalizedPacket(
        timestamp=capture_timestamp(frame.pcap_header),
        source=network.saddr.dotted(),
        destination=network.daddr.dotted(),
        protocol=network.protocol_name,
        length=frame.pcap_header.len,
        port=port,
        info="",
    )


def normalize_frames(frames: Iterable[Union[DecodedFrame, Mapping[str, Any], None]]) -> Iterator[NormalizedPacket]:
    for frame in frames:
        record = normalize_frame(frame)
        if record is not None:
            yield record
