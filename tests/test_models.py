"""Tests for record models built on DispatchBaseModel + DispatchEnum."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from dispatchcore.models.filters import FilterState, OriginBucket, StatusBucket, classify_origin, classify_status
from dispatchcore.models.position import PositionSource, TrackingMode, VehiclePosition
from dispatchcore.models.reservation import ReservationRow
from dispatchcore.models.telemetry import TelemetryRecord, latest_per_driver


# ------------------------------------------------------------------
# ReservationRow
# ------------------------------------------------------------------


def test_reservation_farm_out_takes_status_from_farmout_status() -> None:
    row = ReservationRow.from_record(
        {
            "id": "r1",
            "confirmation_number": "5001",
            "farm_option": "farm_out",
            "status": "confirmed",
            "farmout_status": "Farm-Out Assigned",
        }
    )

    assert row.origin is OriginBucket.FARM_OUT
    assert row.status == "assigned"
    assert row.raw_status == "Farm-Out Assigned"
    assert row.status_label == "Assigned"


def test_reservation_farmout_status_without_farm_option_means_farm_out() -> None:
    row = ReservationRow.from_record({"id": "r2", "farmout_status": "offered"})
    assert row.origin is OriginBucket.FARM_OUT
    assert row.status == "offered"


def test_reservation_in_house_farmout_status_stays_in_house() -> None:
    row = ReservationRow.from_record({"id": "r3", "status": "enroute", "farmout_status": "in_house"})
    assert row.origin is OriginBucket.IN_HOUSE
    assert row.status == "enroute"


@pytest.mark.parametrize(
    ("farm_option", "expected"),
    [
        ("farm-in", OriginBucket.FARM_IN),
        ("eFarm In", OriginBucket.FARM_IN),
        ("Farmout", OriginBucket.FARM_OUT),
        ("farm_out_partner", OriginBucket.FARM_OUT),
        ("in-house", OriginBucket.IN_HOUSE),
        ("partner network", OriginBucket.IN_HOUSE),
        ("", OriginBucket.IN_HOUSE),
        (None, OriginBucket.IN_HOUSE),
    ],
)
def test_classify_origin(farm_option: str | None, expected: OriginBucket) -> None:
    assert classify_origin(farm_option) is expected


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        ("completed", StatusBucket.SETTLED),
        ("Canceled", StatusBucket.SETTLED),
        ("no show", StatusBucket.SETTLED),
        ("quote request", StatusBucket.QUOTE),
        ("enroute", StatusBucket.ACTIVE),
        ("pending", StatusBucket.ACTIVE),
        ("", StatusBucket.ACTIVE),
    ],
)
def test_classify_status(status: str, expected: StatusBucket) -> None:
    assert classify_status(status) is expected


def test_reservation_status_falls_back_to_form_snapshot() -> None:
    row = ReservationRow.from_record({"id": "r4", "form_snapshot": {"details": {"resStatus": "Done"}}})
    assert row.status == "completed"
    assert row.status_bucket is StatusBucket.SETTLED


def test_reservation_missing_status_is_unassigned() -> None:
    row = ReservationRow.from_record({"id": "r5"})
    assert row.status == "unassigned"
    assert row.confirmation_number == "r5"


def test_reservation_pickup_from_date_and_time() -> None:
    row = ReservationRow.from_record({"id": "r6", "pickup_date": "2024-01-15", "pickup_time": "2:30 PM"})
    assert row.pickup_at == datetime(2024, 1, 15, 14, 30)
    assert row.pickup_date == date(2024, 1, 15)
    assert row.pickup_minutes == 870


def test_reservation_pickup_from_combined_column() -> None:
    row = ReservationRow.from_record({"id": "r7", "pickup_datetime": "2024-01-15T09:05:00+00:00"})
    assert row.pickup_at == datetime(2024, 1, 15, 9, 5)
    assert row.pickup_date == date(2024, 1, 15)
    assert row.pickup_time == "9:05 AM"


def test_reservation_tolerates_sentinels_and_aliases() -> None:
    row = ReservationRow.from_record(
        {
            "id": 42,
            "confirmationNumber": "C-42",
            "passenger_first_name": "Sarah",
            "passenger_last_name": "Johnson",
            "driver_name": "--",
            "passengers": "4",
            "grand_total": "125.50",
            "pickup_time": "whenever",
            "farm_option": None,
        }
    )

    assert row.id == "42"
    assert row.confirmation_number == "C-42"
    assert row.passenger_name == "Sarah Johnson"
    assert row.driver_name == ""
    assert row.passenger_count == 4
    assert row.grand_total == 125.5
    assert row.pickup_at is None
    assert row.pickup_minutes is None
    assert row.raw["confirmationNumber"] == "C-42"


def test_reservation_rows_are_immutable() -> None:
    row = ReservationRow.from_record({"id": "r8"})
    with pytest.raises(Exception):
        row.status = "completed"  # type: ignore[misc]


# ------------------------------------------------------------------
# FilterState
# ------------------------------------------------------------------


def test_filter_state_defaults_all_on() -> None:
    state = FilterState()
    assert all(state.to_preferences().values())
    assert set(state.to_preferences()) == {"active", "settled", "quote", "in_house", "farm_in", "farm_out"}


def test_filter_state_from_legacy_preferences() -> None:
    state = FilterState.from_preferences({"newLeg": False, "quotes": "false", "inHouse": True, "farmOut": 0})

    assert state.active is False
    assert state.quote is False
    assert state.in_house is True
    assert state.farm_out is False
    assert state.settled is True


@pytest.mark.parametrize("blob", ["garbage", None, 12, {"active": [1, 2]}])
def test_filter_state_unusable_preferences_give_defaults(blob: object) -> None:
    assert FilterState.from_preferences(blob) == FilterState()


def test_filter_state_allows_is_and_across_axes() -> None:
    state = FilterState(settled=False, farm_in=False)
    assert state.allows(StatusBucket.ACTIVE, OriginBucket.IN_HOUSE)
    assert not state.allows(StatusBucket.SETTLED, OriginBucket.IN_HOUSE)
    assert not state.allows(StatusBucket.ACTIVE, OriginBucket.FARM_IN)
    assert FilterState.all_off().allows(StatusBucket.ACTIVE, OriginBucket.IN_HOUSE) is False


def test_filter_state_with_toggle() -> None:
    state = FilterState().with_toggle(StatusBucket.SETTLED, False)
    assert state.settled is False
    assert FilterState().settled is True
    with pytest.raises(ValueError):
        state.with_toggle("bogus", True)


# ------------------------------------------------------------------
# Telemetry
# ------------------------------------------------------------------


def test_telemetry_record_accepts_aliases() -> None:
    record = TelemetryRecord.model_validate(
        {"id": 7, "driver_id": "d1", "lat": "44.9", "lng": "-93.2", "course": 90, "created_at": "2024-01-15T10:00:00Z"}
    )

    assert record.id == "7"
    assert record.latitude == 44.9
    assert record.longitude == -93.2
    assert record.heading == 90.0
    assert record.recorded_at is not None and record.recorded_at.hour == 10
    assert record.has_fix


def test_telemetry_record_without_coordinates_has_no_fix() -> None:
    record = TelemetryRecord.model_validate({"driver_id": "d1", "latitude": "abc", "longitude": -93.2})
    assert record.latitude is None
    assert not record.has_fix


def test_latest_per_driver_keeps_newest_fix() -> None:
    rows = [
        {"driver_id": "d1", "latitude": 44.90, "longitude": -93.20, "created_at": "2024-01-15T10:00:00Z"},
        {"driver_id": "d2", "latitude": None, "longitude": -93.10, "created_at": "2024-01-15T10:06:00Z"},
        {"driver_id": "d1", "latitude": 44.95, "longitude": -93.25, "created_at": "2024-01-15T10:05:00Z"},
        {"latitude": 44.0, "longitude": -93.0},
        "not a row",
    ]

    latest = latest_per_driver(rows)  # type: ignore[arg-type]

    assert [record.driver_id for record in latest] == ["d1"]
    assert latest[0].latitude == 44.95


# ------------------------------------------------------------------
# Enums and positions
# ------------------------------------------------------------------


def test_tracking_mode_folds_and_defaults() -> None:
    assert TrackingMode("LIVE") is TrackingMode.LIVE
    assert TrackingMode("simulated") is TrackingMode.SIMULATED
    assert TrackingMode("rendered") is TrackingMode.SIMULATED
    assert PositionSource is TrackingMode


def test_vehicle_position_matches_aliases() -> None:
    position = VehiclePosition(
        vehicle_id="car-suv",
        latitude=44.9,
        longitude=-93.2,
        driver_id="driver-1",
        aliases=frozenset({"veh-9"}),
    )
    assert position.matches("car-suv")
    assert position.matches("driver-1")
    assert position.matches("veh-9")
    assert not position.matches(None)
    assert not position.matches("other")
