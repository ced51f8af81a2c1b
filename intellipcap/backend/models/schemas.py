"""Software-only simulation / demo - no real systems will be contacted or modified."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BaseSchema(BaseModel):
    """Base schema with attribute extraction enabled."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class SystemHealth(BaseSchema):
    status: str
    components: Dict[str, str] = Field(default_factory=dict)


# Decoder-shaped frame. Field names follow the wire format posted by capture agents.


MAX_CAPTURE_SECONDS = 253402300799  # 9999-12-31T23:59:59Z, the last second datetime can render


class PcapHeader(BaseSchema):
    tv_sec: int = Field(ge=0, le=MAX_CAPTURE_SECONDS)
    tv_usec: int = Field(default=0, ge=0, le=999_999)
    len: int = Field(ge=0)
    caplen: Optional[int] = Field(default=None, ge=0)


class HardwareAddress(BaseSchema):
    addr: List[int]


class IPv4Address(BaseSchema):
    addr: List[int]

    @field_validator("addr")
    @classmethod
    def _check_octets(cls, value: List[int]) -> List[int]:
        if len(value) != 4 or any(octet < 0 or octet > 255 for octet in value):
            raise ValueError("IPv4 address must be four octets in 0..255")
        return value

    def dotted(self) -> str:
        return ".".join(str(octet) for octet in self.addr)


class TransportLayer(BaseSchema):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True, extra="allow")

    sport: Optional[int] = Field(default=None, ge=0, le=65535)
    dport: Optional[int] = Field(default=None, ge=0, le=65535)


class NetworkLayer(BaseSchema):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True, extra="allow")

    saddr: IPv4Address
    daddr: IPv4Address
    protocol: Optional[int] = None
    protocol_name: str = Field(default="Unknown", alias="protocolName")
    ttl: Optional[int] = None
    payload: Optional[TransportLayer] = None

    @field_validator("payload", mode="before")
    @classmethod
    def _drop_opaque_transport(cls, value: Any) -> Any:
        # Raw payload bytes or decoder-specific blobs carry no ports.
        if value is None or isinstance(value, (dict, TransportLayer)):
            return value
        return None


class LinkLayer(BaseSchema):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True, extra="allow")

    shost: Optional[HardwareAddress] = None
    dhost: Optional[HardwareAddress] = None
    ethertype: Optional[int] = None
    payload: Optional[NetworkLayer] = None


class DecodedFrame(BaseSchema):
    pcap_header: PcapHeader
    payload: Optional[LinkLayer] = None


class LiveDataRequest(BaseSchema):
    packet: Optional[Dict[str, Any]] = None


class NormalizedPacket(BaseSchema):
    timestamp: str
    source: str
    destination: str
    protocol: str
    length: int = Field(ge=0)
    port: Optional[int] = None
    info: str = ""


# Analysis report


class ReportOverview(BaseSchema):
    total_packets: int
    unique_sources: int
    unique_destinations: int
    average_packet_size: int
    overall_risk: str
    time_range: str


class ProtocolShare(BaseSchema):
    name: str
    count: int
    pct: int


class RiskEntry(BaseSchema):
    title: str
    severity: str
    detail: str


class FindingEntry(BaseSchema):
    title: str
    detail: str


class PerformanceSummary(BaseSchema):
    peak_time: Optional[str] = None
    bandwidth_utilization: str
    latency_observations: str


class AnomalySummary(BaseSchema):
    observations: List[str] = Field(default_factory=list)


class AnalysisReport(BaseSchema):
    overview: ReportOverview
    protocol_distribution: List[ProtocolShare] = Field(default_factory=list)
    risks: List[RiskEntry] = Field(default_factory=list)
    findings: List[FindingEntry] = Field(default_factory=list)
    performance: PerformanceSummary
    anomalies: AnomalySummary
    recommendations: List[str] = Field(default_factory=list)
