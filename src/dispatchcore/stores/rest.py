"""Reservation and telemetry stores backed by :class:`RestTableClient`."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from dispatchcore.stores._transport import RestTableClient

_logger = logging.getLogger(__name__)

TELEMETRY_COLUMNS = "id,driver_id,latitude,longitude,heading,speed,created_at"


class RestReservationStore:
    """Reads reservation records from a REST table.

    Parameters
    ----------
    client : RestTableClient
        Open table client.
    table : str
        Reservation table name.
    date_column : str
        Column filtered with ``eq.<iso date>`` when a pickup date is given.
    order : str, optional
        PostgREST ``order`` clause; server order when omitted.
    """

    def __init__(
        self,
        client: RestTableClient,
        table: str = "reservations",
        *,
        date_column: str = "pickup_date",
        order: str | None = None,
    ) -> None:
        self._client = client
        self._table = table
        self._date_column = date_column
        self._order = order

    async def fetch_reservations(
        self,
        *,
        pickup_date: date | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        filters = {self._date_column: f"eq.{pickup_date.isoformat()}"} if pickup_date else None
        rows = await self._client.select(self._table, filters=filters, order=self._order, limit=limit)
        _logger.debug("Fetched %d reservation records from %s", len(rows), self._table)
        return rows


class RestTelemetryStore:
    """Reads the most recent driver location reports, newest first."""

    def __init__(self, client: RestTableClient, table: str = "driver_locations") -> None:
        self._client = client
        self._table = table

    @property
    def table(self) -> str:
        return self._table

    async def fetch_latest_positions(self, *, limit: int) -> list[dict[str, Any]]:
        return await self._client.select(
            self._table,
            columns=TELEMETRY_COLUMNS,
            order="created_at.desc",
            limit=limit,
        )
