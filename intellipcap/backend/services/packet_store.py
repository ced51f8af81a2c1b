"""Software-only simulation / demo - no real systems will be contacted or modified."""
from __future__ import annotations

import json
import os
import threading
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Union

from pydantic import TypeAdapter, ValidationError

from ..config import get_settings
from ..logging_config import get_logger
from ..models.schemas import NormalizedPacket

logger = get_logger("store")

_PACKET_LIST = TypeAdapter(List[NormalizedPacket])


class PacketStore:
    """Ordered, append-only collection of normalized packets.

    Mutations are serialised by a per-store mutex. Readers get a copy of the
    sequence as of their call.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def append(self, record: NormalizedPacket) -> None:
        self.extend([record])

    def extend(self, records: Iterable[NormalizedPacket]) -> int:
        incoming = list(records)
        with self._lock:
            packets = self._load()
            packets.extend(incoming)
            self._save(packets)
        return len(incoming)

    def read_all(self) -> List[NormalizedPacket]:
        return self._load()

    def clear(self) -> None:
        with self._lock:
            self._save([])

    def _load(self) -> List[NormalizedPacket]:  # pragma: no cover - abstract
        raise NotImplementedError

    def _save(self, packets: List[NormalizedPacket]) -> None:  # pragma: no cover - abstract
        raise NotImplementedError


class MemoryPacketStore(PacketStore):
    def __init__(self) -> None:
        super().__init__()
        self._packets: List[NormalizedPacket] = []

    def _load(self) -> List[NormalizedPacket]:
        return list(self._packets)

    def _save(self, packets: List[NormalizedPacket]) -> None:
        self._packets = list(packets)


class JsonFilePacketStore(PacketStore):
    """Whole-document JSON persistence; every mutation rewrites the file."""

    def __init__(self, path: Union[str, Path]) -> None:
        super().__init__()
        self.path = Path(path)

    def _load(self) -> List[NormalizedPacket]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return _PACKET_LIST.validate_python(raw)
        except (json.JSONDecodeError, ValidationError, UnicodeDecodeError) as exc:
            logger.warning("store.corrupt_document", path=str(self.path), error=str(exc))
            return []

    def _save(self, packets: List[NormalizedPacket]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [packet.model_dump() for packet in packets]
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        temp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        os.replace(temp_path, self.path)


def build_packet_store(backend: str, path: Union[str, Path]) -> PacketStore:
    if backend == "memory":
        return MemoryPacketStore()
    if backend == "file":
        return JsonFilePacketStore(path)
    raise ValueError(f"Unknown packet store backend: {backend}")


@lru_cache()
def get_packet_store() -> PacketStore:
    settings = get_settings()
    store = build_packet_store(settings.store_backend, settings.packet_store_path)
    logger.info("store.ready", backend=settings.store_backend, path=settings.packet_store_path)
    return store
