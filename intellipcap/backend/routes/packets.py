"""Software-only simulation / demo - no real systems will be contacted or modified."""
from __future__ import annotations

import asyncio
import os
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import PlainTextResponse

from ..config import Settings, get_settings
from ..logging_config import get_logger
from ..models.schemas import LiveDataRequest, NormalizedPacket
from ..services.decoder import PcapParsingError, iter_capture_frames, validate_pcap_header
from ..services.filters import search_packets
from ..services.normalizer import normalize_frame, normalize_frames
from ..services.packet_store import PacketStore, get_packet_store

logger = get_logger("packets")
router = APIRouter(tags=["packets"])

ALLOWED_EXTENSIONS = {".pcap", ".pcapng"}
UPLOAD_CHUNK_BYTES = 1024 * 1024


def _ensure_upload_dir(uploads_path: str) -> str:
    uploads_root = os.path.abspath(uploads_path)
    os.makedirs(uploads_root, exist_ok=True)
    return uploads_root


def _bad_upload(error_code: str, message: str) -> HTTPException:
    return HTTPException(status_code=400, detail={"error_code": error_code, "message": message})


def ingest_capture(file_path: str, store: PacketStore) -> int:
    """Decode, normalize and store every packet of a capture file.

    Nothing is stored if the decoder fails part-way through the file.
    """
    records = list(normalize_frames(iter_capture_frames(file_path)))
    return store.extend(records)


@router.post("/upload", response_class=PlainTextResponse)
async def upload_pcap(
    pcap: UploadFile = File(...),
    store: PacketStore = Depends(get_packet_store),
    settings: Settings = Depends(get_settings),
) -> str:
    extension = os.path.splitext(pcap.filename or "")[1].lower()
    if extension not in ALLOWED_EXTENSIONS:
        raise _bad_upload("UNSUPPORTED_FILE", "Only .pcap or .pcapng files are supported.")

    uploads_dir = _ensure_upload_dir(settings.uploads_path)
    output_path = os.path.join(uploads_dir, f"{uuid.uuid4().hex}{extension}")
    size_limit = settings.pcap_max_size_mb * 1024 * 1024
    total_bytes = 0
    try:
        with open(output_path, "wb") as destination:
            while chunk := await pcap.read(UPLOAD_CHUNK_BYTES):
                total_bytes += len(chunk)
                if total_bytes > size_limit:
                    raise _bad_upload("FILE_TOO_LARGE", f"PCAP exceeds size limit of {settings.pcap_max_size_mb} MB")
                destination.write(chunk)

        if not validate_pcap_header(output_path):
            raise _bad_upload("INVALID_PCAP", "Invalid PCAP/PCAPNG header: incorrect magic number")
        try:
            added = await asyncio.to_thread(ingest_capture, output_path, store)
        except PcapParsingError as exc:
            raise _bad_upload("PCAP_PARSE_FAILED", str(exc)) from exc
    finally:
        await pcap.close()
        if os.path.exists(output_path):
            os.remove(output_path)

    logger.info("packets.upload.parsed", filename=pcap.filename, bytes=total_bytes, packets=added)
    return "File uploaded and parsed successfully"


@router.post("/live-data", response_class=PlainTextResponse)
async def receive_live_data(
    body: LiveDataRequest,
    store: PacketStore = Depends(get_packet_store),
) -> str:
    record = normalize_frame(body.packet)
    if record is None:
        logger.debug("packets.live.dropped")
    else:
        await asyncio.to_thread(store.append, record)
    return "Live data received"


@router.get("/packets", response_model=List[NormalizedPacket])
async def list_packets(
    search: Optional[str] = Query(default=None),
    store: PacketStore = Depends(get_packet_store),
) -> List[NormalizedPacket]:
    return search_packets(await asyncio.to_thread(store.read_all), search)


@router.post("/clear", response_class=PlainTextResponse)
async def clear_packets(store: PacketStore = Depends(get_packet_store)) -> str:
    await asyncio.to_thread(store.clear)
    logger.info("packets.cleared")
    return "Packets cleared"
