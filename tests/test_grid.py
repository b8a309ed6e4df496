from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from dispatchcore.exceptions import StoreError
from dispatchcore.grid import ColumnSort, DispatchGrid, apply_filters, sample_rows, search_rows
from dispatchcore.models.filters import FilterState, OriginBucket, StatusBucket
from dispatchcore.models.reservation import ReservationRow
from dispatchcore.status import sort_for_presentation


def _row(**record: Any) -> ReservationRow:
    return ReservationRow.from_record(record)


def _fixture_rows() -> list[ReservationRow]:
    return [
        _row(id="a", confirmation_number="1001", status="assigned", pickup_date="2024-01-15", pickup_time="9:00 AM",
             passenger_name="John Smith"),
        _row(id="b", confirmation_number="1002", status="completed", pickup_date="2024-01-15", pickup_time="7:00 AM",
             passenger_name="Robert Williams"),
        _row(id="c", confirmation_number="1003", status="quote", passenger_name="Michael Brown"),
        _row(id="d", confirmation_number="1004", farm_option="farm_out", farmout_status="farm out assigned",
             pickup_date="2024-01-15", pickup_time="8:00 AM", company_name="North Star Limo"),
        _row(id="e", confirmation_number="1005", farm_option="farm_in", status="enroute", driver_name="Tony Arroyo"),
        _row(id="f", confirmation_number="1006", status="pending", farm_option="mystery"),
    ]


class _FakeReservationStore:
    def __init__(self, records: list[dict[str, Any]] | None = None, error: Exception | None = None) -> None:
        self.records = records or []
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def fetch_reservations(self, *, pickup_date: date | None = None, limit: int | None = None) -> list[dict[str, Any]]:
        self.calls.append({"pickup_date": pickup_date, "limit": limit})
        if self.error is not None:
            raise self.error
        return [dict(record) if isinstance(record, dict) else record for record in self.records]


# ------------------------------------------------------------------
# apply_filters
# ------------------------------------------------------------------


def test_all_toggles_on_keeps_every_row_in_presentation_order() -> None:
    rows = _fixture_rows()
    visible = apply_filters(rows, FilterState())

    assert len(visible) == len(rows)
    assert visible == sort_for_presentation(rows)
    assert visible[-1].id == "f"


def test_unclassifiable_status_and_origin_still_visible_under_defaults() -> None:
    row = next(row for row in _fixture_rows() if row.id == "f")
    assert row.status_bucket is StatusBucket.ACTIVE
    assert row.origin is OriginBucket.IN_HOUSE
    assert row in apply_filters([row], FilterState())


def test_settled_toggle_off_hides_settled_rows() -> None:
    visible = apply_filters(_fixture_rows(), FilterState(settled=False))
    assert "b" not in {row.id for row in visible}
    assert len(visible) == 5


def test_origin_toggle_combines_with_status_toggle() -> None:
    rows = _fixture_rows()

    no_in_house = apply_filters(rows, FilterState(in_house=False))
    assert {row.id for row in no_in_house} == {"d", "e"}

    farm_out_active = apply_filters(
        rows, FilterState(settled=False, quote=False, in_house=False, farm_in=False)
    )
    assert [row.id for row in farm_out_active] == ["d"]


def test_all_toggles_off_shows_nothing() -> None:
    assert apply_filters(_fixture_rows(), FilterState.all_off()) == []


def test_filtering_does_not_mutate_input() -> None:
    rows = _fixture_rows()
    snapshot = list(rows)
    apply_filters(rows, FilterState(settled=False))
    assert rows == snapshot


# ------------------------------------------------------------------
# search_rows
# ------------------------------------------------------------------


def test_search_is_case_insensitive_across_fields() -> None:
    rows = _fixture_rows()
    assert [row.id for row in search_rows(rows, "SMITH")] == ["a"]
    assert [row.id for row in search_rows(rows, "north star")] == ["d"]
    assert [row.id for row in search_rows(rows, "arroyo")] == ["e"]
    assert [row.id for row in search_rows(rows, "completed")] == ["b"]
    assert [row.id for row in search_rows(rows, "1003")] == ["c"]


def test_blank_search_keeps_everything() -> None:
    rows = _fixture_rows()
    assert search_rows(rows, "   ") == rows
    assert search_rows(rows, None) == rows


# ------------------------------------------------------------------
# ColumnSort
# ------------------------------------------------------------------


def test_column_sort_toggles_and_resets_direction() -> None:
    sort = ColumnSort()
    sort.select("pickup_time")
    assert (sort.column, sort.descending) == ("pickup_time", False)
    sort.select("pickup_time")
    assert sort.descending is True
    sort.select("passenger_name")
    assert (sort.column, sort.descending) == ("passenger_name", False)


def test_column_sort_rejects_unknown_column() -> None:
    with pytest.raises(ValueError):
        ColumnSort().select("favourite_colour")


def test_time_column_sorts_by_minutes_with_unparsable_first() -> None:
    rows = [
        _row(id="1", pickup_time="1:30 PM"),
        _row(id="2", pickup_time="9:00 AM"),
        _row(id="3", pickup_time="garbage"),
        _row(id="4", pickup_time="08:15"),
    ]
    sort = ColumnSort("pickup_time")
    assert [row.id for row in sort.apply(rows)] == ["3", "4", "2", "1"]
    sort.select("pickup_time")
    assert [row.id for row in sort.apply(rows)] == ["1", "2", "4", "3"]


def test_numeric_column_sorts_numerically() -> None:
    rows = [_row(id="x", confirmation_number="100"), _row(id="y", confirmation_number="9"), _row(id="z", confirmation_number="10")]
    assert [row.confirmation_number for row in ColumnSort("confirmation_number").apply(rows)] == ["9", "10", "100"]


def test_column_sort_is_stable_in_both_directions() -> None:
    rows = [
        _row(id="1", passenger_name="Same"),
        _row(id="2", passenger_name="Same"),
        _row(id="3", passenger_name="Alpha"),
    ]
    assert [row.id for row in ColumnSort("passenger_name").apply(rows)] == ["3", "1", "2"]
    assert [row.id for row in ColumnSort("passenger_name", descending=True).apply(rows)] == ["1", "2", "3"]


# ------------------------------------------------------------------
# DispatchGrid
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_first_load_failure_falls_back_to_sample_rows() -> None:
    error = StoreError("boom", status_code=500, table="reservations")
    grid = DispatchGrid(_FakeReservationStore(error=error))

    visible = await grid.load(date(2024, 1, 15))

    assert grid.using_sample_data is True
    assert grid.last_error is error
    assert len(grid.rows) == len(sample_rows())
    assert all(row.pickup_date == date(2024, 1, 15) for row in grid.rows)
    assert visible


@pytest.mark.asyncio
async def test_out_of_range_pickup_epoch_does_not_break_the_load() -> None:
    store = _FakeReservationStore(
        records=[
            {"id": "1", "confirmation_number": "1001", "status": "assigned", "pickup_date": "2024-01-15"},
            {"id": "2", "confirmation_number": "1002", "status": "assigned", "pickup_datetime": 1e20},
        ]
    )
    grid = DispatchGrid(store)

    visible = await grid.load()

    assert grid.using_sample_data is False
    assert [row.confirmation_number for row in visible] == ["1001", "1002"]
    assert grid.find_row("1002").pickup_at is None  # type: ignore[union-attr]


@pytest.mark.asyncio
async def test_record_that_fails_to_parse_is_skipped(monkeypatch: pytest.MonkeyPatch) -> None:
    from_record = ReservationRow.from_record.__func__  # type: ignore[attr-defined]

    def overflowing(cls: type[ReservationRow], record: dict[str, Any]) -> ReservationRow:
        if record.get("id") == "bad":
            raise OverflowError("date value out of range")
        return from_record(cls, record)

    monkeypatch.setattr(ReservationRow, "from_record", classmethod(overflowing))
    store = _FakeReservationStore(
        records=[
            {"id": "good", "confirmation_number": "1001", "status": "assigned"},
            {"id": "bad", "confirmation_number": "1002", "status": "assigned"},
        ]
    )
    grid = DispatchGrid(store)

    visible = await grid.load()

    assert [row.id for row in visible] == ["good"]
    assert grid.using_sample_data is False


@pytest.mark.asyncio
async def test_first_load_empty_falls_back_to_sample_rows() -> None:
    grid = DispatchGrid(_FakeReservationStore(records=[]))
    await grid.load()
    assert grid.using_sample_data is True


@pytest.mark.asyncio
async def test_missing_store_falls_back_to_sample_rows() -> None:
    grid = DispatchGrid(None)
    await grid.load()
    assert grid.using_sample_data is True


@pytest.mark.asyncio
async def test_sample_fallback_can_be_disabled() -> None:
    grid = DispatchGrid(_FakeReservationStore(error=StoreError("boom")), sample_fallback=False)
    assert await grid.load() == []
    assert grid.using_sample_data is False


@pytest.mark.asyncio
async def test_failure_after_real_load_keeps_previous_rows() -> None:
    store = _FakeReservationStore(records=[{"id": "r1", "confirmation_number": "1", "status": "assigned"}])
    grid = DispatchGrid(store, limit=25)

    await grid.load(date(2024, 1, 15))
    assert grid.using_sample_data is False
    assert [row.id for row in grid.rows] == ["r1"]
    assert store.calls[-1] == {"pickup_date": date(2024, 1, 15), "limit": 25}

    store.error = StoreError("down")
    await grid.load(date(2024, 1, 16))

    assert grid.using_sample_data is False
    assert [row.id for row in grid.rows] == ["r1"]
    assert isinstance(grid.last_error, StoreError)


@pytest.mark.asyncio
async def test_empty_result_after_real_load_is_shown_as_empty() -> None:
    store = _FakeReservationStore(records=[{"id": "r1", "status": "assigned"}])
    grid = DispatchGrid(store)
    await grid.load()

    store.records = []
    assert await grid.load(date(2024, 1, 16)) == []
    assert grid.using_sample_data is False


@pytest.mark.asyncio
async def test_unreadable_records_are_skipped() -> None:
    store = _FakeReservationStore(records=[{"id": "r1", "status": "assigned"}, "junk"])  # type: ignore[list-item]
    grid = DispatchGrid(store)
    await grid.load()
    assert [row.id for row in grid.rows] == ["r1"]


@pytest.mark.asyncio
async def test_grid_view_pipeline_filter_search_sort() -> None:
    records = [row.raw for row in _fixture_rows()]
    grid = DispatchGrid(_FakeReservationStore(records=records))
    await grid.load()

    assert len(grid.visible_rows()) == 6

    visible = grid.set_filter("settled", False)
    assert "b" not in {row.id for row in visible}

    visible = grid.search("smith")
    assert [row.id for row in visible] == ["a"]

    visible = grid.clear_search()
    assert len(visible) == 5

    visible = grid.sort_by("confirmation_number")
    assert [row.confirmation_number for row in visible] == ["1001", "1003", "1004", "1005", "1006"]
    visible = grid.sort_by("confirmation_number")
    assert [row.confirmation_number for row in visible][0] == "1006"

    grid.set_filters(FilterState.all_off())
    assert grid.visible_rows() == []


@pytest.mark.asyncio
async def test_find_row_ignores_filters() -> None:
    grid = DispatchGrid(_FakeReservationStore(records=[row.raw for row in _fixture_rows()]))
    await grid.load()
    grid.set_filters(FilterState.all_off())

    row = grid.find_row("1002")
    assert row is not None and row.id == "b"
    assert grid.find_row("nope") is None
