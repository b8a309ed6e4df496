"""Live telemetry record model."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, ValidationError, field_validator

from dispatchcore.ingestion.normalize import parse_datetime, safe_float, safe_str, safe_timestamp
from dispatchcore.models._base import DispatchBaseModel

_logger = logging.getLogger(__name__)


class TelemetryRecord(DispatchBaseModel):
    """One location report from a driver device.

    Numeric fields are ``None`` when the value is absent or unparseable.

    Parameters
    ----------
    id : str or None
        Store row id.
    driver_id : str or None
        Reporting driver.
    vehicle_id : str or None
        Vehicle the driver is linked to, if reported.
    latitude, longitude : float or None
        Coordinates in degrees.
    heading : float or None
        Course over ground in degrees.
    speed : float or None
        Speed in metres per second.
    recorded_at : datetime or None
        When the report was created.
    """

    id: str | None = None
    driver_id: str | None = Field(default=None, validation_alias=AliasChoices("driver_id", "driverId", "user_id"))
    vehicle_id: str | None = Field(default=None, validation_alias=AliasChoices("vehicle_id", "vehicleId"))
    latitude: float | None = Field(default=None, validation_alias=AliasChoices("latitude", "lat", "gpsLatitude"))
    longitude: float | None = Field(
        default=None,
        validation_alias=AliasChoices("longitude", "lng", "lon", "gpsLongitude"),
    )
    heading: float | None = Field(default=None, validation_alias=AliasChoices("heading", "direction", "course"))
    speed: float | None = Field(default=None, validation_alias=AliasChoices("speed", "gpsSpeed"))
    recorded_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "recorded_at", "createdAt", "timestamp", "updated_at"),
    )

    @field_validator("id", "driver_id", "vehicle_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("latitude", "longitude", "heading", "speed", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("recorded_at", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> datetime | None:
        return parse_datetime(value)

    @property
    def identity(self) -> str | None:
        return self.driver_id or self.vehicle_id or self.id

    @property
    def has_fix(self) -> bool:
        """Whether the coordinates are present and on the globe."""
        if self.latitude is None or self.longitude is None:
            return False
        return -90.0 <= self.latitude <= 90.0 and -180.0 <= self.longitude <= 180.0


def _recency(record: TelemetryRecord) -> float:
    stamp = safe_timestamp(record.recorded_at)
    return float("-inf") if stamp is None else stamp


def latest_per_driver(rows: Iterable[Mapping[str, Any]]) -> list[TelemetryRecord]:
    """Parse telemetry rows and keep the most recent fix per driver.

    Rows that fail validation or lack an identity or a usable coordinate
    pair are dropped. The result preserves the order in which each driver
    was first seen.
    """
    latest: dict[str, TelemetryRecord] = {}
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        try:
            record = TelemetryRecord.model_validate(dict(row))
        except ValidationError as exc:
            _logger.debug("Skipping unreadable telemetry row: %s", exc.errors(include_url=False))
            continue
        identity = record.identity
        if identity is None or not record.has_fix:
            continue
        current = latest.get(identity)
        if current is None or _recency(record) > _recency(current):
            latest[identity] = record
    return list(latest.values())
