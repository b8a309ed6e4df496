"""High-level async facade wiring preferences, the grid and the tracker."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import aiohttp

from dispatchcore._constants import PREF_GRID_FILTERS, PREF_TRACKING_MODE
from dispatchcore.config import DispatchConfig
from dispatchcore.grid.engine import DispatchGrid
from dispatchcore.models.filters import FilterState, OriginBucket, StatusBucket
from dispatchcore.models.position import TrackingMode
from dispatchcore.models.reservation import ReservationRow
from dispatchcore.stores._transport import RestTableClient
from dispatchcore.stores.preferences import MemoryPreferenceStore
from dispatchcore.stores.protocols import PreferenceStore, ReservationStore, TelemetryStore
from dispatchcore.stores.rest import RestReservationStore, RestTelemetryStore
from dispatchcore.tracking.scheduler import Scheduler
from dispatchcore.tracking.simulator import MotionSimulator
from dispatchcore.tracking.sinks import MarkerSink
from dispatchcore.tracking.tracker import PositionTracker

_logger = logging.getLogger(__name__)


class DispatchConsole:
    """The dispatch screen's engine: reservation grid plus vehicle tracker.

    Usage::

        async with DispatchConsole(config, preferences=prefs) as console:
            console.register_sink("operations", ops_map)
            console.register_sink("fleet", fleet_map, placeholder=True)
            rows = await console.load_grid(date.today())
            console.select_reservation(rows[0].confirmation_number)

    Preferences are read once on entry. Leaving the context stops every
    timer and cancels any in-flight poll.

    Parameters
    ----------
    config : DispatchConfig, optional
        Defaults to :meth:`DispatchConfig.from_env`.
    reservations, telemetry : optional
        Store collaborators. When omitted and ``config.base_url`` is set,
        REST stores are opened for the lifetime of the context.
    preferences : PreferenceStore, optional
        Defaults to an in-memory store.
    scheduler : Scheduler, optional
        Timer factory for the tracker.
    simulator : MotionSimulator, optional
        Rendered fleet for simulated mode.
    session : aiohttp.ClientSession, optional
        Shared HTTP session for the REST stores.
    """

    def __init__(
        self,
        config: DispatchConfig | None = None,
        *,
        reservations: ReservationStore | None = None,
        telemetry: TelemetryStore | None = None,
        preferences: PreferenceStore | None = None,
        scheduler: Scheduler | None = None,
        simulator: MotionSimulator | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config or DispatchConfig.from_env()
        self._reservations = reservations
        self._telemetry = telemetry
        self._preferences: PreferenceStore = preferences if preferences is not None else MemoryPreferenceStore()
        self._scheduler = scheduler
        self._simulator = simulator
        self._session = session
        self._client: RestTableClient | None = None
        self._grid: DispatchGrid | None = None
        self._tracker: PositionTracker | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> DispatchConsole:
        if (self._reservations is None or self._telemetry is None) and self._config.base_url:
            self._client = RestTableClient(self._config, session=self._session)
            await self._client.__aenter__()
        try:
            self._open_components()
        except BaseException:
            if self._tracker is not None:
                self._tracker.stop()
            await self._close_client()
            raise
        return self

    def _open_components(self) -> None:
        if self._client is not None:
            if self._reservations is None:
                self._reservations = RestReservationStore(self._client, self._config.reservations_table)
            if self._telemetry is None:
                self._telemetry = RestTelemetryStore(self._client, self._config.telemetry_table)

        mode = TrackingMode(self._preferences.get(PREF_TRACKING_MODE, TrackingMode.SIMULATED.value))
        filters = FilterState.from_preferences(self._preferences.get(PREF_GRID_FILTERS))
        _logger.debug("Console preferences: mode=%s filters=%s", mode, filters.to_preferences())

        self._grid = DispatchGrid(
            self._reservations,
            filters=filters,
            sample_fallback=self._config.sample_fallback,
        )
        self._tracker = PositionTracker(
            config=self._config,
            simulator=self._simulator,
            telemetry=self._telemetry,
            scheduler=self._scheduler,
            mode=mode,
        )
        self._tracker.start()

    async def __aexit__(self, *args: object) -> None:
        if self._tracker is not None:
            self._tracker.stop()
        await self._close_client()

    async def _close_client(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @property
    def config(self) -> DispatchConfig:
        return self._config

    @property
    def grid(self) -> DispatchGrid:
        if self._grid is None:
            raise RuntimeError("DispatchConsole is not open; use 'async with'")
        return self._grid

    @property
    def tracker(self) -> PositionTracker:
        if self._tracker is None:
            raise RuntimeError("DispatchConsole is not open; use 'async with'")
        return self._tracker

    # ------------------------------------------------------------------
    # Grid
    # ------------------------------------------------------------------

    async def load_grid(self, pickup_date: date | None = None) -> list[ReservationRow]:
        return await self.grid.load(pickup_date)

    def set_filter(self, name: StatusBucket | OriginBucket | str, value: bool) -> list[ReservationRow]:
        """Toggle one grid filter and persist the toggles."""
        rows = self.grid.set_filter(name, value)
        self._preferences.set(PREF_GRID_FILTERS, self.grid.filters.to_preferences())
        return rows

    def search(self, term: str | None) -> list[ReservationRow]:
        return self.grid.search(term)

    def sort_by(self, column: str) -> list[ReservationRow]:
        return self.grid.sort_by(column)

    def select_reservation(self, confirmation_number: str) -> ReservationRow | None:
        """Highlight the vehicle assigned to a reservation.

        An unknown confirmation number clears the highlight.
        """
        row = self.grid.find_row(confirmation_number)
        if row is None:
            self.tracker.clear_highlight()
        else:
            self.tracker.highlight_reservation(row)
        return row

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------

    def register_sink(self, name: str, sink: MarkerSink, *, placeholder: bool = False) -> None:
        self.tracker.register_sink(name, sink, placeholder=placeholder)

    def set_tracking_mode(self, mode: TrackingMode | str) -> TrackingMode:
        """Switch the position source and persist the choice."""
        applied = self.tracker.set_mode(mode)
        self._preferences.set(PREF_TRACKING_MODE, applied.value)
        return applied

    def snapshot(self) -> dict[str, Any]:
        """Summary of the current state, for diagnostics."""
        return {
            "mode": self.tracker.mode.value,
            "positions": len(self.tracker.positions),
            "highlighted": self.tracker.highlighted,
            "rows": len(self.grid.rows),
            "visible_rows": len(self.grid.visible_rows()),
            "using_sample_data": self.grid.using_sample_data,
            "filters": self.grid.filters.to_preferences(),
        }
