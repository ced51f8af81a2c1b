"""Software-only simulation / demo - no real systems will be contacted or modified."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..config import Settings, get_settings
from ..models.schemas import SystemHealth
from ..services.packet_store import JsonFilePacketStore, PacketStore, get_packet_store

router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root() -> str:
    return "Backend is running"


@router.get("/health", response_model=SystemHealth)
async def health(
    store: PacketStore = Depends(get_packet_store),
    settings: Settings = Depends(get_settings),
) -> SystemHealth:
    store_status = "memory"
    if isinstance(store, JsonFilePacketStore):
        store_status = "present" if store.path.exists() else "empty"
    components = {
        "store": store_status,
        "analysis_delay_seconds": str(settings.analysis_delay_seconds),
    }
    return SystemHealth(status="ok", components=components)
