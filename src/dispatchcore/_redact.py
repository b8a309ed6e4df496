"""Helpers for safe debug logging.

Reservation and telemetry records carry passenger contact details and the
store credentials travel in request headers. :func:`redact_for_log` masks
those fields before anything is emitted at DEBUG level.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from dispatchcore.status import normalize

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        # Credentials
        "apikey",
        "api_key",
        "authorization",
        "token",
        "access_token",
        "refresh_token",
        "password",
        "cookie",
        # Passenger / driver contact details
        "phone",
        "email",
        "passenger_phone",
        "passenger_email",
        "passengerphone",
        "passengeremail",
        "passenger_cell",
        "driver_phone",
        "driver_email",
        "driverphone",
        "billing_email",
        "billing_phone",
        "cell_phone",
        "mobile",
        "card_number",
        "credit_card",
    }
)


def _is_sensitive(key: str) -> bool:
    return normalize(key) in _SENSITIVE_VALUE_KEYS


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs.

    Keys are matched after folding case and punctuation, so ``apiKey``
    and ``API-Key`` are both caught.
    """
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if _is_sensitive(key):
                redacted[key] = "<redacted>"
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)
