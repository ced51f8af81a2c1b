"""Software-only simulation / demo - no real systems will be contacted or modified."""
from __future__ import annotations

import asyncio
import math
import re
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from ..logging_config import get_logger
from ..models.schemas import (
    AnalysisReport,
    AnomalySummary,
    FindingEntry,
    NormalizedPacket,
    PerformanceSummary,
    ProtocolShare,
    ReportOverview,
    RiskEntry,
)

logger = get_logger("analysis")

RISK = "risk"
FINDING = "finding"

RECOMMENDATIONS = [
    "Enforce SSH key-based authentication and monitor login attempts",
    "Track DNS query patterns for anomalies; consider DNS filtering",
    "Rate-limit ICMP and restrict where appropriate",
    "Monitor TLS handshake metrics and certificate validity",
    "Implement segmentation for sensitive subnets and services",
]

_DNS_PATTERN = re.compile("DNS", re.IGNORECASE)


class EmptyCaptureError(ValueError):
    pass


@dataclass(frozen=True)
class AnalysisRule:
    """One independent detector: emits a single entry when any packet matches."""

    name: str
    kind: str
    predicate: Callable[[NormalizedPacket], bool]
    title: str
    detail: str
    severity: Optional[str] = None

    def matches(self, packets: Sequence[NormalizedPacket]) -> bool:
        return any(self.predicate(packet) for packet in packets)


ANALYSIS_RULES: List[AnalysisRule] = []


def register_rule(rule: AnalysisRule) -> AnalysisRule:
    if rule.kind not in (RISK, FINDING):
        raise ValueError(f"Unknown rule kind: {rule.kind}")
    if rule.kind == RISK and not rule.severity:
        raise ValueError(f"Risk rule {rule.name} needs a severity")
    if any(existing.name == rule.name for existing in ANALYSIS_RULES):
        raise ValueError(f"Rule already registered: {rule.name}")
    ANALYSIS_RULES.append(rule)
    return rule


def unregister_rule(name: str) -> bool:
    for index, rule in enumerate(ANALYSIS_RULES):
        if rule.name == name:
            del ANALYSIS_RULES[index]
            return True
    return False


def _is_dns(packet: NormalizedPacket) -> bool:
    return packet.protocol == "UDP" and (packet.port == 53 or bool(_DNS_PATTERN.search(packet.info)))


register_rule(
    AnalysisRule(
        name="ssh",
        kind=RISK,
        predicate=lambda packet: packet.protocol == "SSH",
        title="SSH activity detected",
        detail="Monitor for brute-force attempts and enforce key-based auth.",
        severity="Medium",
    )
)
register_rule(
    AnalysisRule(
        name="dns",
        kind=FINDING,
        predicate=_is_dns,
        title="DNS queries observed",
        detail="External DNS usage appears normal. Verify domain reputation as needed.",
    )
)
register_rule(
    AnalysisRule(
        name="icmp",
        kind=FINDING,
        predicate=lambda packet: packet.protocol == "ICMP",
        title="ICMP echo requests",
        detail="Likely diagnostic traffic. Ensure ICMP is rate-limited for WAN exposure.",
    )
)
register_rule(
    AnalysisRule(
        name="tls",
        kind=FINDING,
        predicate=lambda packet: packet.protocol == "TLS",
        title="TLS application data",
        detail="Encrypted traffic appears normal. Consider monitoring handshake performance.",
    )
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def protocol_distribution(packets: Sequence[NormalizedPacket]) -> List[ProtocolShare]:
    total = len(packets)
    if not total:
        return []
    counts: Counter[str] = Counter(packet.protocol for packet in packets)
    shares = [
        ProtocolShare(name=name, count=count, pct=_round_half_up(count / total * 100))
        for name, count in counts.items()
    ]
    # Counter keeps first-seen order and sorted() is stable.
    return sorted(shares, key=lambda share: share.count, reverse=True)


def overall_risk(packets: Sequence[NormalizedPacket]) -> str:
    return "Medium" if any(packet.protocol == "SSH" for packet in packets) else "Low"


def _overview(packets: Sequence[NormalizedPacket]) -> ReportOverview:
    total = len(packets)
    return ReportOverview(
        total_packets=total,
        unique_sources=len({packet.source for packet in packets}),
        unique_destinations=len({packet.destination for packet in packets}),
        average_packet_size=_round_half_up(sum(packet.length for packet in packets) / total),
        overall_risk=overall_risk(packets),
        time_range=f"{packets[0].timestamp} – {packets[-1].timestamp}",
    )


def _anomalies(packets: Sequence[NormalizedPacket]) -> AnomalySummary:
    if any(packet.protocol == "ICMP" for packet in packets):
        return AnomalySummary(observations=["ICMP present; verify intended diagnostic use"])
    return AnomalySummary(observations=["No anomalous patterns detected"])


def generate_report(
    packets: Sequence[NormalizedPacket],
    rules: Optional[Sequence[AnalysisRule]] = None,
) -> AnalysisReport:
    """Build the heuristic traffic report for ``packets``.

    Every rule is evaluated on its own; several may fire for the same capture.
    Recommendations are always the full static list.
    """
    if not packets:
        raise EmptyCaptureError("No packets to analyze")
    active_rules = ANALYSIS_RULES if rules is None else rules

    risks: List[RiskEntry] = []
    findings: List[FindingEntry] = []
    fired: Dict[str, str] = {}
    for rule in active_rules:
        if not rule.matches(packets):
            continue
        fired[rule.name] = rule.kind
        if rule.kind == RISK:
            risks.append(RiskEntry(title=rule.title, severity=rule.severity or "Low", detail=rule.detail))
        else:
            findings.append(FindingEntry(title=rule.title, detail=rule.detail))

    report = AnalysisReport(
        overview=_overview(packets),
        protocol_distribution=protocol_distribution(packets),
        risks=risks,
        findings=findings,
        performance=PerformanceSummary(
            peak_time=packets[-1].timestamp,
            bandwidth_utilization="Normal (simulated)",
            latency_observations="No significant issues detected (simulated)",
        ),
        anomalies=_anomalies(packets),
        recommendations=list(RECOMMENDATIONS),
    )
    logger.info(
        "analysis.generated",
        packets=len(packets),
        overall_risk=report.overview.overall_risk,
        rules_fired=sorted(fired),
    )
    return report


async def generate_report_async(
    packets: Sequence[NormalizedPacket],
    delay_seconds: float = 0.0,
    rules: Optional[Sequence[AnalysisRule]] = None,
) -> AnalysisReport:
    """Same as :func:`generate_report`, after an artificial pause the UI shows as "analyzing"."""
    if not packets:
        raise EmptyCaptureError("No packets to analyze")
    if delay_seconds > 0:
        await asyncio.sleep(delay_seconds)
    return generate_report(packets, rules)
