"""Software-only simulation / demo - no real systems will be contacted or modified."""
import csv
from io import StringIO

from backend.services.analysis import generate_report
from backend.services.exporter import PACKET_COLUMNS, build_pdf, packets_to_csv, report_rows, report_to_csv


def test_packets_csv_rows(make_packet):
    packets = [make_packet("TCP", port=443), make_packet("UDP", info='query "a, b"')]
    rows = list(csv.reader(StringIO(packets_to_csv(packets))))
    assert rows[0] == PACKET_COLUMNS
    assert rows[1] == ["1", "2023-11-14T22:13:20.000Z", "10.0.0.1", "10.0.0.2", "TCP", "60", "", "443"]
    assert rows[2][0] == "2"
    assert rows[2][6] == 'query "a, b"'
    assert rows[2][7] == ""


def test_report_csv_sections(make_packet):
    report = generate_report([make_packet(name) for name in ["TCP", "TCP", "UDP", "ICMP", "TLS"]] + [make_packet("SSH")])
    rows = list(csv.reader(StringIO(report_to_csv(report))))
    assert rows[0] == ["section", "key", "value"]
    assert ["Overview", "total_packets", "6"] in rows
    assert ["ProtocolDistribution", "TCP", "2 (33%)"] in rows
    assert ["Risks", "SSH activity detected", "Medium"] in rows
    assert ["Anomalies", "observation", "ICMP present; verify intended diagnostic use"] in rows
    sections = {row[0] for row in rows[1:]}
    assert sections == {
        "Overview",
        "ProtocolDistribution",
        "Risks",
        "Findings",
        "Performance",
        "Anomalies",
        "Recommendations",
    }
    assert len([row for row in report_rows(report) if row[0] == "Recommendations"]) == 5


def test_pdf_contains_report(make_packet):
    packets = [make_packet("TCP", port=1000 + index) for index in range(150)]
    payload = build_pdf(generate_report(packets), packets)
    assert payload.startswith(b"%PDF")
    assert len(payload) > 1000


def test_pdf_without_analysis():
    payload = build_pdf(None, [])
    assert payload.startswith(b"%PDF")
