"""Software-only simulation / demo - no real systems will be contacted or modified."""
from __future__ import annotations

import asyncio
from typing import List

from fastapi import APIRouter, Depends

from ..config import Settings, get_settings
from ..models.schemas import AnalysisReport, NormalizedPacket
from ..services.analysis import generate_report_async
from ..services.packet_store import PacketStore, get_packet_store

router = APIRouter(tags=["analysis"])


@router.get("/analysis", response_model=AnalysisReport)
async def analyze_stored_packets(
    store: PacketStore = Depends(get_packet_store),
    settings: Settings = Depends(get_settings),
) -> AnalysisReport:
    packets = await asyncio.to_thread(store.read_all)
    return await generate_report_async(packets, settings.analysis_delay_seconds)


@router.post("/analysis", response_model=AnalysisReport)
async def analyze_packets(
    packets: List[NormalizedPacket],
    settings: Settings = Depends(get_settings),
) -> AnalysisReport:
    return await generate_report_async(packets, settings.analysis_delay_seconds)
