"""Software-only simulation / demo - no real systems will be contacted or modified."""
import math
from datetime import datetime, timezone

from backend.models.schemas import DecodedFrame
from backend.services.normalizer import normalize_frame, normalize_frames


def test_normalize_full_frame(make_frame):
    record = normalize_frame(make_frame(tv_usec=123456, length=74))
    assert record is not None
    assert record.timestamp == "2023-11-14T22:13:20.123Z"
    assert record.source == "10.0.0.1"
    assert record.destination == "10.0.0.2"
    assert record.protocol == "TCP"
    assert record.length == 74
    assert record.port == 51000
    assert record.info == ""


def test_timestamp_is_floored_milliseconds(make_frame):
    for tv_sec, tv_usec in [(0, 999), (1, 1999), (1_600_000_000, 500), (1_700_000_000, 999_999)]:
        record = normalize_frame(make_frame(tv_sec=tv_sec, tv_usec=tv_usec))
        millis = math.floor(tv_sec * 1000 + tv_usec / 1000)
        expected = datetime.fromtimestamp(millis // 1000, tz=timezone.utc).replace(microsecond=(millis % 1000) * 1000)
        assert record.timestamp == expected.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def test_missing_network_layer_is_unnormalizable(make_frame):
    assert normalize_frame(make_frame(with_network=False)) is None
    assert normalize_frame({"pcap_header": {"tv_sec": 1, "tv_usec": 0, "len": 10}}) is None
    assert normalize_frame(None) is None


def test_missing_transport_layer_leaves_port_empty(make_frame):
    record = normalize_frame(make_frame(protocol="ICMP", with_transport=False))
    assert record is not None
    assert record.port is None


def test_port_prefers_source_then_destination(make_frame):
    assert normalize_frame(make_frame(sport=40000, dport=22)).port == 40000
    assert normalize_frame(make_frame(sport=None, dport=53)).port == 53
    assert normalize_frame(make_frame(sport=0, dport=80)).port == 80
    assert normalize_frame(make_frame(sport=None, dport=None)).port is None


def test_opaque_transport_payload_does_not_raise(make_frame):
    frame = make_frame()
    frame["payload"]["payload"]["payload"] = "deadbeef"
    record = normalize_frame(frame)
    assert record is not None
    assert record.port is None


def test_invalid_address_is_dropped(make_frame):
    assert normalize_frame(make_frame(source=(10, 0, 1))) is None
    assert normalize_frame(make_frame(destination=(10, 0, 0, 256))) is None


def test_accepts_validated_frame(make_frame):
    frame = DecodedFrame.model_validate(make_frame(protocol="UDP", sport=5353, dport=53))
    record = normalize_frame(frame)
    assert record.protocol == "UDP"
    assert record.port == 5353


def test_normalize_frames_skips_unusable(make_frame):
    frames = [make_frame(), make_frame(with_network=False), None, make_frame(protocol="UDP")]
    records = list(normalize_frames(frames))
    assert [record.protocol for record in records] == ["TCP", "UDP"]


def test_timestamp_beyond_datetime_range_is_dropped(make_frame):
    assert normalize_frame(make_frame(tv_sec=10**12)) is None
    assert normalize_frame(make_frame(tv_usec=1_000_000)) is None


def test_last_representable_second_normalizes(make_frame):
    record = normalize_frame(make_frame(tv_sec=253402300799, tv_usec=999_999))
    assert record is not None
    assert record.timestamp == "9999-12-31T23:59:59.999Z"
