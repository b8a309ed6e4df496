"""Filtering, searching and sorting of the reservation grid."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import date
from typing import Any, Literal

from pydantic import ValidationError

from dispatchcore._redact import redact_for_log
from dispatchcore.exceptions import StoreError
from dispatchcore.grid.sample import sample_rows
from dispatchcore.ingestion.normalize import parse_time_of_day, safe_float
from dispatchcore.models.filters import FilterState, OriginBucket, StatusBucket
from dispatchcore.models.reservation import ReservationRow
from dispatchcore.status import sort_for_presentation
from dispatchcore.stores.protocols import ReservationStore

_logger = logging.getLogger(__name__)

SortKind = Literal["string", "numeric", "time"]


def apply_filters(rows: Iterable[ReservationRow], filters: FilterState) -> list[ReservationRow]:
    """Rows visible under *filters*, in presentation order.

    A row is kept iff the toggle of its status bucket and the toggle of its
    origin bucket are both on. The input is never modified.
    """
    kept = [row for row in rows if filters.allows(row.status_bucket, row.origin)]
    return sort_for_presentation(kept)


_SEARCH_FIELDS: tuple[Callable[[ReservationRow], str], ...] = (
    lambda row: row.confirmation_number,
    lambda row: row.passenger_name,
    lambda row: row.driver_name,
    lambda row: row.pickup_address,
    lambda row: row.dropoff_address,
    lambda row: row.company_name,
    lambda row: row.status_label,
)


def search_rows(rows: Sequence[ReservationRow], term: str | None) -> list[ReservationRow]:
    """Case-insensitive substring search. A blank term keeps every row."""
    needle = (term or "").strip().casefold()
    if not needle:
        return list(rows)
    return [row for row in rows if any(needle in (field(row) or "").casefold() for field in _SEARCH_FIELDS)]


def _string_value(value: Any) -> str:
    return "" if value is None else str(value).casefold()


def _numeric_value(value: Any) -> float:
    parsed = safe_float(value)
    return 0.0 if parsed is None else parsed


#: column name -> (row accessor, comparator kind)
SORTABLE_COLUMNS: dict[str, tuple[Callable[[ReservationRow], Any], SortKind]] = {
    "confirmation_number": (lambda row: row.confirmation_number, "numeric"),
    "pickup_date": (lambda row: row.pickup_date.isoformat() if row.pickup_date else "", "string"),
    "pickup_time": (lambda row: row.pickup_time, "time"),
    "status": (lambda row: row.status_label, "string"),
    "passenger_name": (lambda row: row.passenger_name, "string"),
    "driver_name": (lambda row: row.driver_name, "string"),
    "vehicle_type": (lambda row: row.vehicle_type, "string"),
    "company_name": (lambda row: row.company_name, "string"),
    "pickup_address": (lambda row: row.pickup_address, "string"),
    "dropoff_address": (lambda row: row.dropoff_address, "string"),
    "passenger_count": (lambda row: row.passenger_count, "numeric"),
    "grand_total": (lambda row: row.grand_total, "numeric"),
    "payment_type": (lambda row: row.payment_type, "string"),
}

_COMPARATORS: dict[SortKind, Callable[[Any], Any]] = {
    "string": _string_value,
    "numeric": _numeric_value,
    "time": parse_time_of_day,
}


class ColumnSort:
    """User-selected column sort layered on top of presentation order.

    Selecting the current column again flips the direction; selecting a new
    column starts ascending. With no column selected, :meth:`apply` keeps
    the input order.
    """

    def __init__(self, column: str | None = None, *, descending: bool = False) -> None:
        if column is not None and column not in SORTABLE_COLUMNS:
            raise ValueError(f"Unknown sort column: {column!r}")
        self.column = column
        self.descending = descending if column is not None else False

    def __repr__(self) -> str:
        return f"ColumnSort(column={self.column!r}, descending={self.descending})"

    def select(self, column: str) -> None:
        if column not in SORTABLE_COLUMNS:
            raise ValueError(f"Unknown sort column: {column!r}")
        if column == self.column:
            self.descending = not self.descending
        else:
            self.column = column
            self.descending = False

    def reset(self) -> None:
        self.column = None
        self.descending = False

    def apply(self, rows: Sequence[ReservationRow]) -> list[ReservationRow]:
        if self.column is None:
            return list(rows)
        accessor, kind = SORTABLE_COLUMNS[self.column]
        comparator = _COMPARATORS[kind]
        # sorted() is stable in both directions, so equal cells keep presentation order.
        return sorted(rows, key=lambda row: comparator(accessor(row)), reverse=self.descending)


class DispatchGrid:
    """Stateful reservation grid: loaded rows, filter toggles, search and sort.

    Parameters
    ----------
    store : ReservationStore or None
        Source of reservation records. ``None`` behaves like an unavailable
        store.
    filters : FilterState, optional
        Initial toggles; every toggle on by default.
    sample_fallback : bool
        Show the built-in sample rows when the first load of the session
        fails or comes back empty.
    limit : int, optional
        Maximum records requested per load.
    """

    def __init__(
        self,
        store: ReservationStore | None,
        *,
        filters: FilterState | None = None,
        sample_fallback: bool = True,
        limit: int | None = None,
    ) -> None:
        self._store = store
        self._filters = filters or FilterState()
        self._sample_fallback = sample_fallback
        self._limit = limit
        self._rows: tuple[ReservationRow, ...] = ()
        self._search_term = ""
        self._sort = ColumnSort()
        self._has_real_data = False
        self._using_sample_data = False
        self._last_error: Exception | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def rows(self) -> tuple[ReservationRow, ...]:
        """Every loaded row, unfiltered."""
        return self._rows

    @property
    def filters(self) -> FilterState:
        return self._filters

    @property
    def search_term(self) -> str:
        return self._search_term

    @property
    def column_sort(self) -> ColumnSort:
        return self._sort

    @property
    def using_sample_data(self) -> bool:
        """Whether the grid currently shows the built-in sample rows."""
        return self._using_sample_data

    @property
    def last_error(self) -> Exception | None:
        """The store failure of the most recent load, if it failed."""
        return self._last_error

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self, pickup_date: date | None = None) -> list[ReservationRow]:
        """Load rows for *pickup_date* and return the visible rows.

        Store failures are never raised. Before any real data has been
        loaded this session, a failure or an empty result shows the sample
        rows. After that, a failure keeps the previous rows and an empty
        result is shown as-is.
        """
        self._last_error = None
        records: list[dict[str, Any]] | None
        if self._store is None:
            _logger.warning("No reservation store configured")
            records = None
        else:
            try:
                records = await self._store.fetch_reservations(pickup_date=pickup_date, limit=self._limit)
            except StoreError as exc:
                _logger.warning("Reservation load failed for %s: %s", pickup_date or "all dates", exc)
                self._last_error = exc
                records = None

        if records is None:
            if not self._has_real_data:
                self._show_fallback(pickup_date)
            return self.visible_rows()

        rows = self._parse_records(records)
        if rows:
            self._rows = tuple(rows)
            self._has_real_data = True
            self._using_sample_data = False
        elif self._has_real_data:
            self._rows = ()
            self._using_sample_data = False
        else:
            _logger.info("Reservation store returned no rows for %s", pickup_date or "all dates")
            self._show_fallback(pickup_date)
        return self.visible_rows()

    def _show_fallback(self, pickup_date: date | None) -> None:
        if self._sample_fallback:
            self._rows = tuple(sample_rows(pickup_date))
            self._using_sample_data = True
        else:
            self._rows = ()
            self._using_sample_data = False

    @staticmethod
    def _parse_records(records: Iterable[Any]) -> list[ReservationRow]:
        rows: list[ReservationRow] = []
        for record in records:
            if not isinstance(record, dict):
                _logger.debug("Skipping non-mapping reservation record: %r", type(record).__name__)
                continue
            try:
                rows.append(ReservationRow.from_record(record))
            except ValidationError as exc:
                _logger.warning("Skipping unreadable reservation record: %s", exc.errors(include_url=False))
                _logger.debug("Unreadable record: %s", redact_for_log(record))
            except (ValueError, OverflowError, OSError) as exc:
                _logger.warning("Skipping unreadable reservation record: %s", exc)
                _logger.debug("Unreadable record: %s", redact_for_log(record))
        return rows

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    def visible_rows(self) -> list[ReservationRow]:
        """Filter, then search, then column sort."""
        filtered = apply_filters(self._rows, self._filters)
        return self._sort.apply(search_rows(filtered, self._search_term))

    def set_filter(self, name: StatusBucket | OriginBucket | str, value: bool) -> list[ReservationRow]:
        self._filters = self._filters.with_toggle(name, value)
        return self.visible_rows()

    def set_filters(self, filters: FilterState) -> list[ReservationRow]:
        self._filters = filters
        return self.visible_rows()

    def search(self, term: str | None) -> list[ReservationRow]:
        self._search_term = (term or "").strip()
        return self.visible_rows()

    def clear_search(self) -> list[ReservationRow]:
        return self.search("")

    def sort_by(self, column: str) -> list[ReservationRow]:
        self._sort.select(column)
        return self.visible_rows()

    def find_row(self, confirmation_number: str) -> ReservationRow | None:
        """Loaded row by confirmation number, regardless of filters."""
        wanted = str(confirmation_number).strip()
        for row in self._rows:
            if row.confirmation_number == wanted:
                return row
        return None
