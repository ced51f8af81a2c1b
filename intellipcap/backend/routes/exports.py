"""Software-only simulation / demo - no real systems will be contacted or modified."""
from __future__ import annotations

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response, StreamingResponse

from ..services.analysis import generate_report
from ..services.exporter import build_pdf, packets_to_csv, report_to_csv
from ..services.filters import search_packets
from ..services.packet_store import PacketStore, get_packet_store

router = APIRouter(prefix="/export", tags=["exports"])


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f"attachment; filename={filename}"}


@router.get("/packets.csv")
async def export_packets_csv(
    search: Optional[str] = Query(default=None),
    store: PacketStore = Depends(get_packet_store),
) -> StreamingResponse:
    packets = search_packets(await asyncio.to_thread(store.read_all), search)
    payload = packets_to_csv(packets)
    return StreamingResponse(iter([payload]), media_type="text/csv", headers=_attachment("packets.csv"))


@router.get("/report.csv")
async def export_report_csv(store: PacketStore = Depends(get_packet_store)) -> StreamingResponse:
    report = generate_report(await asyncio.to_thread(store.read_all))
    payload = report_to_csv(report)
    return StreamingResponse(iter([payload]), media_type="text/csv", headers=_attachment("ai-report.csv"))


@router.get("/report.pdf")
async def export_report_pdf(store: PacketStore = Depends(get_packet_store)) -> Response:
    packets = await asyncio.to_thread(store.read_all)
    report = generate_report(packets) if packets else None
    payload = build_pdf(report, packets)
    return Response(content=payload, media_type="application/pdf", headers=_attachment("intellipcap-report.pdf"))
