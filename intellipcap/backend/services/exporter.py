"""Software-only simulation / demo - no real systems will be contacted or modified."""
from __future__ import annotations

import csv
from io import BytesIO, StringIO
from textwrap import wrap
from typing import Any, Iterable, List, Optional, Sequence

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from ..models.schemas import AnalysisReport, NormalizedPacket

PACKET_COLUMNS = ["id", "timestamp", "source", "destination", "protocol", "length", "info", "port"]
REPORT_COLUMNS = ["section", "key", "value"]

_TOP = 750
_BOTTOM = 50
_LEFT = 40
_LINE_HEIGHT = 14
_WRAP_WIDTH = 95


def packets_to_csv(packets: Sequence[NormalizedPacket]) -> str:
    output = StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(PACKET_COLUMNS)
    for index, packet in enumerate(packets, start=1):
        writer.writerow(
            [
                index,
                packet.timestamp,
                packet.source,
                packet.destination,
                packet.protocol,
                packet.length,
                packet.info,
                "" if packet.port is None else packet.port,
            ]
        )
    return output.getvalue()


def report_rows(report: AnalysisReport) -> List[List[str]]:
    rows: List[List[str]] = []
    for key, value in report.overview.model_dump().items():
        rows.append(["Overview", key, str(value)])
    for share in report.protocol_distribution:
        rows.append(["ProtocolDistribution", share.name, f"{share.count} ({share.pct}%)"])
    for risk in report.risks:
        rows.append(["Risks", risk.title, risk.severity])
    for finding in report.findings:
        rows.append(["Findings", finding.title, finding.detail])
    for key, value in report.performance.model_dump().items():
        rows.append(["Performance", key, "" if value is None else str(value)])
    for observation in report.anomalies.observations:
        rows.append(["Anomalies", "observation", observation])
    for recommendation in report.recommendations:
        rows.append(["Recommendations", "recommendation", recommendation])
    return rows


def report_to_csv(report: AnalysisReport) -> str:
    output = StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(REPORT_COLUMNS)
    writer.writerows(report_rows(report))
    return output.getvalue()


class _PagedText:
    """Line-oriented writer over a reportlab canvas that starts new pages as needed."""

    def __init__(self, pdf: canvas.Canvas) -> None:
        self._pdf = pdf
        self._text = pdf.beginText(_LEFT, _TOP)
        self._y = _TOP

    def line(self, content: str = "") -> None:
        segments = wrap(content, _WRAP_WIDTH) or [""]
        for segment in segments:
            if self._y < _BOTTOM:
                self._pdf.drawText(self._text)
                self._pdf.showPage()
                self._text = self._pdf.beginText(_LEFT, _TOP)
                self._y = _TOP
            self._text.textLine(segment)
            self._y -= _LINE_HEIGHT

    def heading(self, title: str) -> None:
        self.line("")
        self.line(title)

    def finish(self) -> None:
        self._pdf.drawText(self._text)
        self._pdf.showPage()


def _key_values(writer: _PagedText, values: dict[str, Any]) -> None:
    for key, value in values.items():
        writer.line(f"{key}: {'N/A' if value is None else value}")


def _bullets(writer: _PagedText, items: Iterable[str], empty: str) -> None:
    items = list(items)
    if not items:
        writer.line(empty)
        return
    for item in items:
        writer.line(f"- {item}")


def build_pdf(report: Optional[AnalysisReport], packets: Sequence[NormalizedPacket]) -> bytes:
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter)
    pdf.setTitle("IntelliPCAP.AI Report")
    writer = _PagedText(pdf)

    if report is None:
        writer.line("No AI analysis available.")
    else:
        writer.line("AI-Powered Analysis")
        writer.heading("Overview")
        _key_values(writer, report.overview.model_dump())
        writer.heading("Protocol Distribution")
        _bullets(
            writer,
            (f"{share.name}: {share.count} ({share.pct}%)" for share in report.protocol_distribution),
            "No protocols recorded.",
        )
        writer.heading("Risks")
        _bullets(
            writer,
            (f"{risk.title} [{risk.severity}] {risk.detail}" for risk in report.risks),
            "No significant risks detected.",
        )
        writer.heading("Findings")
        _bullets(
            writer,
            (f"{finding.title}: {finding.detail}" for finding in report.findings),
            "No notable findings.",
        )
        writer.heading("Performance")
        _key_values(writer, report.performance.model_dump())
        writer.heading("Anomalies")
        _bullets(writer, report.anomalies.observations, "No anomalies observed.")
        writer.heading("Recommendations")
        _bullets(writer, report.recommendations, "No recommendations.")

    writer.heading("Packet Report")
    if not packets:
        writer.line("No packets available.")
    for index, packet in enumerate(packets, start=1):
        port = "" if packet.port is None else f" port {packet.port}"
        writer.line(
            f"{index}. {packet.timestamp} {packet.source} -> {packet.destination} "
            f"{packet.protocol} {packet.length}B{port}"
        )

    writer.finish()
    pdf.save()
    buffer.seek(0)
    return buffer.read()
