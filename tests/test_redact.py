from __future__ import annotations

from missiontrack._redact import redact_for_log


def test_redact_for_log_redacts_personal_fields() -> None:
    payload = {
        "id": "M1",
        "donorOrg": "Green Kitchen",
        "orphanageName": "Hope Home",
        "volunteer_name": "Sam",
        "donorPhone": "+91 99999 00000",
        "location": {"lat": 20.0, "lng": 78.0, "line1": "12 Market Road"},
    }

    redacted = redact_for_log(payload)
    assert redacted["id"] == "M1"
    assert redacted["donorOrg"] == "<redacted>"
    assert redacted["orphanageName"] == "<redacted>"
    assert redacted["volunteer_name"] == "<redacted>"
    assert redacted["donorPhone"] == "<redacted>"
    assert redacted["location"] == {"lat": 20.0, "lng": 78.0, "line1": "<redacted>"}


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_walks_lists() -> None:
    redacted = redact_for_log([{"requesterName": "A"}, 3, b"abc"])
    assert redacted == [{"requesterName": "<redacted>"}, 3, "<bytes:3b>"]
