"""Reservation row model."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from pydantic import field_validator

from dispatchcore.ingestion.normalize import (
    combine_pickup,
    first_present,
    parse_clock_time,
    parse_date,
    safe_float,
    safe_int,
    safe_str,
)
from dispatchcore.models._base import DispatchBaseModel
from dispatchcore.models.filters import OriginBucket, StatusBucket, classify_origin, classify_status
from dispatchcore.status import CanonicalStatus, canonicalize, metadata_for, normalize


def _nested(record: Mapping[str, Any], *path: str) -> Any:
    current: Any = record
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def _format_clock(value: datetime) -> str:
    hour = value.hour % 12 or 12
    return f"{hour}:{value.minute:02d} {'PM' if value.hour >= 12 else 'AM'}"


class ReservationRow(DispatchBaseModel):
    """One trip instance as shown in the dispatch grid.

    Rows are immutable; filtering and sorting build new lists and never
    touch the loaded rows. Build rows from store records with
    :meth:`from_record`, which tolerates missing or null values in every
    column.

    Parameters
    ----------
    id : str
        Store record id.
    confirmation_number : str
        Operator-facing confirmation number.
    status : str
        Canonical status key (see :mod:`dispatchcore.status`).
    raw_status : str
        The upstream status string the canonical key was derived from.
    origin : OriginBucket
        Where the driver assignment originates.
    pickup_date : date or None
        Pickup day.
    pickup_time : str
        Pickup time as free text (``"h:mm AM/PM"`` or ``"HH:MM"``).
    pickup_at : datetime or None
        Parsed pickup wall-clock datetime, ``None`` when unparsable.
    """

    id: str = ""
    confirmation_number: str = ""
    status: str = CanonicalStatus.UNASSIGNED.value
    raw_status: str = ""
    origin: OriginBucket = OriginBucket.IN_HOUSE
    pickup_date: date | None = None
    pickup_time: str = ""
    pickup_at: datetime | None = None
    driver_id: str | None = None
    driver_name: str = ""
    vehicle_id: str | None = None
    vehicle_type: str = ""
    passenger_name: str = ""
    pickup_address: str = ""
    dropoff_address: str = ""
    company_name: str = ""
    passenger_count: int | None = None
    grand_total: float | None = None
    payment_type: str = ""
    farmout_mode: str = ""

    @field_validator("pickup_at", mode="after")
    @classmethod
    def _wall_clock(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is not None:
            return value.replace(tzinfo=None)
        return value

    @property
    def status_label(self) -> str:
        return metadata_for(self.status).label

    @property
    def status_icon(self) -> str:
        return metadata_for(self.status).icon

    @property
    def status_bucket(self) -> StatusBucket:
        return classify_status(self.status)

    @property
    def pickup_minutes(self) -> int | None:
        clock = parse_clock_time(self.pickup_time)
        if clock is None:
            return None
        return clock.hour * 60 + clock.minute

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> ReservationRow:
        """Map a reservation store record into a row."""
        farm_option = first_present(record, "farm_option", "farmOption", "origin", "farm_type")
        farmout_status = safe_str(first_present(record, "farmout_status", "farmoutStatus"))

        origin = classify_origin(farm_option)
        if farm_option is None and farmout_status and canonicalize(farmout_status) != CanonicalStatus.IN_HOUSE:
            origin = OriginBucket.FARM_OUT

        raw_status = safe_str(
            first_present(record, "status", "reservation_status", "resStatus", "trip_status")
            or _nested(record, "form_snapshot", "details", "resStatus")
        )
        if origin is OriginBucket.FARM_OUT and farmout_status:
            raw_status = farmout_status
        status = canonicalize(raw_status) or CanonicalStatus.UNASSIGNED.value

        pickup_combined = first_present(record, "pickup_datetime", "pickup_at", "pickupAt", "pickupDateTime")
        pickup_date_raw = first_present(record, "pickup_date", "pickupDate")
        pickup_time_raw = safe_str(first_present(record, "pickup_time", "pickupTime"))
        pickup_at = combine_pickup(pickup_date_raw, pickup_time_raw, pickup_combined)
        pickup_date = parse_date(pickup_date_raw)
        if pickup_date is None and pickup_at is not None:
            pickup_date = pickup_at.date()
        if pickup_time_raw is None and pickup_at is not None:
            pickup_time_raw = _format_clock(pickup_at)

        passenger_name = safe_str(first_present(record, "passenger_name", "passengerName"))
        if passenger_name is None:
            parts = [
                safe_str(first_present(record, "passenger_first_name", "passengerFirstName")),
                safe_str(first_present(record, "passenger_last_name", "passengerLastName")),
            ]
            passenger_name = " ".join(part for part in parts if part) or None

        driver_name = safe_str(
            first_present(record, "driver_name", "driverName")
            or _nested(record, "form_snapshot", "driver", "name")
            or _nested(record, "form_snapshot", "details", "driverName")
        )

        record_id = safe_str(first_present(record, "id", "reservation_id", "reservationId")) or ""
        confirmation = safe_str(
            first_present(record, "confirmation_number", "confirmationNumber", "conf", "conf_number")
        )

        return cls(
            id=record_id,
            confirmation_number=confirmation or record_id,
            status=status,
            raw_status=raw_status or "",
            origin=origin,
            pickup_date=pickup_date,
            pickup_time=pickup_time_raw or "",
            pickup_at=pickup_at,
            driver_id=safe_str(first_present(record, "assigned_driver_id", "driver_id", "driverId")),
            driver_name=driver_name or "",
            vehicle_id=safe_str(first_present(record, "assigned_vehicle_id", "vehicle_id", "vehicleId")),
            vehicle_type=safe_str(first_present(record, "vehicle_type", "vehicleType", "car_type")) or "",
            passenger_name=passenger_name or "",
            pickup_address=safe_str(
                first_present(record, "pickup_address", "pickupAddress", "pickup_location", "pickup")
            )
            or "",
            dropoff_address=safe_str(
                first_present(record, "dropoff_address", "dropoffAddress", "dropoff_location", "dropoff")
            )
            or "",
            company_name=safe_str(first_present(record, "company_name", "companyName", "affiliate_name")) or "",
            passenger_count=safe_int(first_present(record, "passenger_count", "passengerCount", "passengers", "pax")),
            grand_total=safe_float(first_present(record, "grand_total", "grandTotal", "total")),
            payment_type=safe_str(first_present(record, "payment_type", "paymentType")) or "",
            farmout_mode=normalize(first_present(record, "farmout_mode", "farmoutMode")),
            raw=dict(record),
        )
