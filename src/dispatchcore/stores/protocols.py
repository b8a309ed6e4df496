"""Structural interfaces of the collaborators the engine talks to."""

from __future__ import annotations

from datetime import date
from typing import Any, Protocol


class ReservationStore(Protocol):
    """Read access to reservation records.

    Implementations raise :class:`~dispatchcore.exceptions.StoreError` (or a
    subclass) on failure; the grid recovers from it.
    """

    async def fetch_reservations(
        self,
        *,
        pickup_date: date | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        ...


class TelemetryStore(Protocol):
    """Read access to driver location reports, newest first."""

    async def fetch_latest_positions(self, *, limit: int) -> list[dict[str, Any]]:
        ...


class PreferenceStore(Protocol):
    """Small key/value store for operator preferences (tracking mode, filters)."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...
