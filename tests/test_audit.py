import pytest

from pong_relay.audit import AuditLog, utc_timestamp


def test_entries_are_newest_first():
    audit = AuditLog(10)
    audit.record("a", "baden")
    audit.record("b", "baden")

    assert [e.type for e in audit.entries()] == ["b", "a"]
    assert audit.entries()[0].data == {}


def test_oldest_entries_are_evicted_at_cap():
    audit = AuditLog(3)
    for i in range(5):
        audit.record(f"event{i}", "baden", {"i": i})

    assert len(audit) == 3
    assert [e.data["i"] for e in audit.entries()] == [4, 3, 2]


def test_limit_returns_newest():
    audit = AuditLog(10)
    for i in range(6):
        audit.record("tick", None, {"i": i})

    assert [e.data["i"] for e in audit.entries(limit=2)] == [5, 4]


def test_non_dict_detail_is_wrapped():
    audit = AuditLog(10)
    audit.record("odd", "baden", [1, 2])

    assert audit.entries()[0].data == {"value": "[1, 2]"}


def test_record_never_raises():
    audit = AuditLog(10)
    audit.record("bad", room=123)  # not a valid room name

    assert len(audit) == 0


def test_cap_must_be_positive():
    with pytest.raises(ValueError):
        AuditLog(0)


def test_timestamp_format():
    ts = utc_timestamp()

    assert ts.endswith("Z")
    assert len(ts) == len("2024-01-01T00:00:00.000Z")
