"""Tests for ingress filtering: structurally malformed entries are dropped, never raised."""

import pytest

from event_pipeline.domain.models.event import CURRENT_EVENT_VERSION
from event_pipeline.domain.validators.ingress_validator import filter_valid, missing_fields, to_envelope


def test_keeps_entries_with_id_type_and_payload(make_event):
    entries = [make_event("user.logged_in", {"userId": "u-1"}), make_event("user.logged_in", {"userId": "u-2"})]
    valid = filter_valid(entries)
    assert [e.id for e in valid] == [entries[0]["id"], entries[1]["id"]]


def test_drops_entries_missing_required_fields(make_event):
    good = make_event("user.logged_in", {"userId": "u-1"})
    no_type = {k: v for k, v in make_event("user.logged_in", {"userId": "u-2"}).items() if k != "type"}
    blank_id = make_event("user.logged_in", {"userId": "u-3"}, id="   ")
    null_payload = make_event("user.logged_in", None)
    valid = filter_valid([good, no_type, blank_id, null_payload, "not-an-event", None])
    assert [e.id for e in valid] == [good["id"]]


def test_preserves_order_of_surviving_entries(make_event):
    entries = [make_event("user.logged_in", {"userId": f"u-{i}"}) for i in range(5)]
    entries.insert(2, {"id": "x"})
    assert [e.id for e in filter_valid(entries)] == [e["id"] for e in entries if e.get("type")]


def test_payload_schema_is_not_checked_at_ingress(make_event):
    entry = make_event("donation.completed", {"campaignId": "camp-1"})
    assert len(filter_valid([entry])) == 1


def test_empty_payload_mapping_is_structurally_valid(make_event):
    assert missing_fields(make_event("user.logged_in", {})) == []


def test_missing_fields_for_non_mapping():
    assert missing_fields(42) == ["id", "type", "payload"]


def test_drop_is_logged(make_event, caplog):
    with caplog.at_level("WARNING"):
        filter_valid([{"type": "user.logged_in", "payload": {}}])
    assert any(r.getMessage() == "event_dropped_malformed" for r in caplog.records)


@pytest.mark.parametrize(
    "override",
    [
        {"version": 1},
        {"timestamp": "yesterday"},
        {"metadata": "src"},
        {"correlationId": 42},
        {"causationId": 7},
        {"version": None},
    ],
)
def test_optional_fields_never_drop_an_entry(make_event, override):
    entry = make_event("user.logged_in", {"userId": "u-1"}, **override)
    assert [e.id for e in filter_valid([entry])] == [entry["id"]]


def test_non_string_id_and_type_are_kept_as_strings(make_event):
    [envelope] = filter_valid([make_event(12345, {"userId": "u-1"}, id=987)])
    assert envelope.id == "987"
    assert envelope.type == "12345"


def test_lenient_envelope_normalises_scalars(make_event):
    envelope = to_envelope(make_event("user.logged_in", {"userId": "u-1"}, version=1, correlationId=42))
    assert envelope.version == "1"
    assert envelope.correlation_id == "42"


def test_missing_version_defaults_to_current(make_event):
    entry = make_event("user.logged_in", {"userId": "u-1"})
    del entry["version"]
    assert to_envelope(entry).version == CURRENT_EVENT_VERSION
