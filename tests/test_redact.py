from __future__ import annotations

from dispatchcore._redact import redact_for_log


def test_redact_for_log_redacts_contact_details_and_credentials() -> None:
    payload = {
        "confirmation_number": "1001",
        "passenger_name": "Ada Lovelace",
        "passengerPhone": "+1 612 555 0100",
        "passenger-email": "ada@example.com",
        "headers": {"apiKey": "anon", "Authorization": "Bearer anon"},
        "legs": [{"driver_phone": "555"}],
    }

    redacted = redact_for_log(payload)
    assert redacted["confirmation_number"] == "1001"
    assert redacted["passenger_name"] == "Ada Lovelace"
    assert redacted["passengerPhone"] == "<redacted>"
    assert redacted["passenger-email"] == "<redacted>"
    assert redacted["headers"] == {"apiKey": "<redacted>", "Authorization": "<redacted>"}
    assert redacted["legs"] == [{"driver_phone": "<redacted>"}]


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"notes": long_value}, max_string=10)
    assert redacted["notes"].startswith("x" * 10)
    assert "<truncated>" in redacted["notes"]
