"""Software-only simulation / demo - no real systems will be contacted or modified."""
from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "IntelliPCAP"
    server_host: str = Field(default="127.0.0.1")
    server_port: int = Field(default=3001)
    packet_store_path: str = Field(default="packets.json")
    store_backend: Literal["file", "memory"] = Field(default="file")
    uploads_path: str = Field(default="uploads")
    pcap_max_size_mb: int = Field(default=50)
    analysis_delay_seconds: float = Field(default=0.8, ge=0)
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"])
    agent_backend_url: str = Field(default="http://localhost:3001/live-data")
    agent_request_timeout_seconds: float = 5.0

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
