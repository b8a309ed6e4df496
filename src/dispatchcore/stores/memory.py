"""In-process reservation and telemetry stores."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from dispatchcore.ingestion.normalize import first_present, parse_date, parse_datetime, safe_timestamp


def _record_date(record: Mapping[str, Any]) -> date | None:
    explicit = parse_date(first_present(record, "pickup_date", "pickupDate"))
    if explicit is not None:
        return explicit
    combined = parse_datetime(first_present(record, "pickup_datetime", "pickup_at", "pickupAt"))
    return combined.date() if combined is not None else None


class InMemoryReservationStore:
    """Reservation store over a list of records.

    Records are returned as shallow copies so callers cannot mutate the
    store's contents.
    """

    def __init__(self, records: Iterable[Mapping[str, Any]] = ()) -> None:
        self._records: list[dict[str, Any]] = [dict(record) for record in records]

    def replace(self, records: Iterable[Mapping[str, Any]]) -> None:
        self._records = [dict(record) for record in records]

    def add(self, record: Mapping[str, Any]) -> None:
        self._records.append(dict(record))

    async def fetch_reservations(
        self,
        *,
        pickup_date: date | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        selected = [
            dict(record)
            for record in self._records
            if pickup_date is None or _record_date(record) == pickup_date
        ]
        return selected if limit is None else selected[:limit]


def _reported_at(record: Mapping[str, Any]) -> float:
    parsed: datetime | None = parse_datetime(first_present(record, "created_at", "recorded_at", "timestamp"))
    stamp = safe_timestamp(parsed)
    return float("-inf") if stamp is None else stamp


class InMemoryTelemetryStore:
    """Telemetry store over a list of location reports."""

    def __init__(self, rows: Iterable[Mapping[str, Any]] = ()) -> None:
        self._rows: list[dict[str, Any]] = [dict(row) for row in rows]

    def replace(self, rows: Iterable[Mapping[str, Any]]) -> None:
        self._rows = [dict(row) for row in rows]

    def report(self, row: Mapping[str, Any]) -> None:
        self._rows.append(dict(row))

    async def fetch_latest_positions(self, *, limit: int) -> list[dict[str, Any]]:
        newest_first = sorted(self._rows, key=_reported_at, reverse=True)
        return [dict(row) for row in newest_first[:limit]]
