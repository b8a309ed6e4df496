"""Dual-mode vehicle position tracker.

The tracker owns one position set, sourced either from the
:class:`~dispatchcore.tracking.simulator.MotionSimulator` (simulated mode) or
from periodic polls of a telemetry store (live mode), and fans it out to
every registered marker sink.

Rendering is idempotent by marker id: each sink receives an
:class:`UpsertMarker` for every current position (new or already drawn)
and a :class:`RemoveMarker` for ids that disappeared. Switching modes first
removes every marker of the previous mode.

Polls are not atomic with mode switches. Every poll captures the mode
generation when it starts and its result is dropped if the generation
changed (mode switch or :meth:`PositionTracker.stop`) while it was in
flight.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Sequence

from dispatchcore._constants import (
    CONNECTION_ERROR_MESSAGE,
    MPS_TO_MPH,
    NO_LIVE_DATA_MESSAGE,
    STORE_ERROR_MESSAGE,
    STORE_MISSING_MESSAGE,
    TABLE_NOT_PROVISIONED_MESSAGE,
)
from dispatchcore.config import DispatchConfig
from dispatchcore.exceptions import StoreError, StoreUnavailableError, TableNotProvisionedError
from dispatchcore.models.markers import ClearPlaceholder, RemoveMarker, ShowPlaceholder, UpsertMarker
from dispatchcore.models.position import PositionSource, TrackingMode, VehiclePosition
from dispatchcore.models.reservation import ReservationRow
from dispatchcore.models.telemetry import TelemetryRecord, latest_per_driver
from dispatchcore.stores.protocols import TelemetryStore
from dispatchcore.tracking.scheduler import AsyncioScheduler, PeriodicHandle, Scheduler
from dispatchcore.tracking.simulator import MotionSimulator
from dispatchcore.tracking.sinks import MarkerSink

_logger = logging.getLogger(__name__)

SIMULATED_ICON = "🚗"
LIVE_ICON = "📍"


def simulated_popup(position: VehiclePosition) -> str:
    availability = "Available" if position.status == "available" else "On Trip"
    return "\n".join(
        [
            position.name or position.vehicle_id,
            f"Driver: {position.driver_name or 'Unassigned'}",
            f"Status: {availability}",
            "🔸 Rendered Location",
        ]
    )


def live_popup(position: VehiclePosition) -> str:
    driver = f"Driver {position.driver_id[:8]}..." if position.driver_id else "Unknown Driver"
    speed = f"{position.speed * MPS_TO_MPH:.1f} mph" if position.speed else "N/A"
    updated = position.updated_at.strftime("%H:%M:%S") if position.updated_at else "Unknown"
    return "\n".join(["🟢 LIVE", f"Driver: {driver}", f"Speed: {speed}", f"Updated: {updated}"])


def live_position(record: TelemetryRecord) -> VehiclePosition:
    """Snapshot for a live telemetry record that has an identity and a fix."""
    identity = record.identity
    if identity is None or record.latitude is None or record.longitude is None:
        raise ValueError("Telemetry record has no identity or coordinates")
    aliases = frozenset(alias for alias in (record.driver_id, record.vehicle_id) if alias)
    return VehiclePosition(
        vehicle_id=identity,
        latitude=record.latitude,
        longitude=record.longitude,
        heading=record.heading or 0.0,
        speed=record.speed,
        status="available",
        source=PositionSource.LIVE,
        driver_id=record.driver_id,
        updated_at=record.recorded_at,
        aliases=aliases,
    )


@dataclasses.dataclass
class _SinkEntry:
    sink: MarkerSink
    placeholder: bool
    drawn: set[str] = dataclasses.field(default_factory=set)
    showing_placeholder: bool = False


class PositionTracker:
    """Maintain vehicle positions and publish them to marker sinks.

    Parameters
    ----------
    config : DispatchConfig, optional
        Intervals, telemetry limit and the region used for placeholders.
    simulator : MotionSimulator, optional
        Rendered fleet; built from ``config`` when omitted.
    telemetry : TelemetryStore, optional
        Live telemetry source. Without one, live mode shows the "store not
        available" placeholder.
    scheduler : Scheduler, optional
        Timer factory; :class:`AsyncioScheduler` when omitted.
    mode : TrackingMode
        Initial mode.
    """

    def __init__(
        self,
        *,
        config: DispatchConfig | None = None,
        simulator: MotionSimulator | None = None,
        telemetry: TelemetryStore | None = None,
        scheduler: Scheduler | None = None,
        mode: TrackingMode = TrackingMode.SIMULATED,
    ) -> None:
        self._config = config or DispatchConfig()
        self._simulator = simulator or MotionSimulator(region=self._config.region, profile=self._config.simulation)
        self._telemetry = telemetry
        self._scheduler = scheduler or AsyncioScheduler()
        self._mode = TrackingMode(mode)
        self._sinks: dict[str, _SinkEntry] = {}
        self._positions: tuple[VehiclePosition, ...] = ()
        self._timer: PeriodicHandle | None = None
        self._poll_task: asyncio.Task[bool] | None = None
        self._generation = 0
        self._running = False
        self._selected: ReservationRow | None = None
        self._highlighted: str | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def mode(self) -> TrackingMode:
        return self._mode

    @property
    def running(self) -> bool:
        return self._running

    @property
    def positions(self) -> tuple[VehiclePosition, ...]:
        return self._positions

    @property
    def highlighted(self) -> str | None:
        """Marker id currently elevated, if any."""
        return self._highlighted

    @property
    def simulator(self) -> MotionSimulator:
        return self._simulator

    @property
    def sink_names(self) -> list[str]:
        return list(self._sinks)

    # ------------------------------------------------------------------
    # Sinks
    # ------------------------------------------------------------------

    def register_sink(self, name: str, sink: MarkerSink, *, placeholder: bool = False) -> None:
        """Add a surface. ``placeholder=True`` routes "no data" popups to it.

        The current position set is drawn on the new sink immediately.
        """
        if name in self._sinks:
            raise ValueError(f"Sink {name!r} is already registered")
        entry = _SinkEntry(sink=sink, placeholder=placeholder)
        self._sinks[name] = entry
        self._draw(entry, self._positions)

    def unregister_sink(self, name: str) -> None:
        self._sinks.pop(name, None)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the timer for the current mode. No-op when already running."""
        if self._running:
            return
        self._running = True
        _logger.debug("Starting position tracker in %s mode", self._mode)
        self._activate()

    def stop(self) -> None:
        """Cancel timers and any in-flight poll. Safe to call repeatedly."""
        self._generation += 1
        self._cancel_timers()
        if self._running:
            _logger.debug("Stopped position tracker")
        self._running = False

    def set_mode(self, mode: TrackingMode | str) -> TrackingMode:
        """Switch the position source.

        Markers of the previous mode are removed from every sink before the
        new mode draws anything. Selecting the current mode is a no-op.
        """
        new_mode = TrackingMode(mode)
        if new_mode is self._mode:
            return self._mode
        _logger.info("Switching tracking mode %s -> %s", self._mode, new_mode)
        self._generation += 1
        self._cancel_timers()
        self._mode = new_mode
        self._positions = ()
        self._highlighted = None
        for entry in self._sinks.values():
            for marker_id in sorted(entry.drawn):
                entry.sink.apply(RemoveMarker(marker_id=marker_id))
            entry.drawn.clear()
            self._clear_placeholder(entry)
        if self._running:
            self._activate()
        return self._mode

    def _activate(self) -> None:
        if self._mode is TrackingMode.SIMULATED:
            self._publish(self._simulator.positions())
            self._timer = self._scheduler.call_every(self._config.simulation_interval, self.tick)
        else:
            self._timer = self._scheduler.call_every(self._config.poll_interval, self._schedule_poll, immediate=True)

    def _cancel_timers(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._poll_task is not None and not self._poll_task.done():
            self._poll_task.cancel()
        self._poll_task = None

    # ------------------------------------------------------------------
    # Simulated mode
    # ------------------------------------------------------------------

    def tick(self) -> tuple[VehiclePosition, ...]:
        """Advance the simulator one step. Ignored outside simulated mode."""
        if self._mode is not TrackingMode.SIMULATED:
            return self._positions
        self._publish(self._simulator.tick())
        return self._positions

    # ------------------------------------------------------------------
    # Live mode
    # ------------------------------------------------------------------

    def _schedule_poll(self) -> None:
        if self._poll_task is not None and not self._poll_task.done():
            _logger.debug("Previous live poll still in flight, skipping this interval")
            return
        task = asyncio.get_running_loop().create_task(self.poll_once())
        task.add_done_callback(self._poll_finished)
        self._poll_task = task

    @staticmethod
    def _poll_finished(task: asyncio.Task[bool]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.error("Live poll failed while publishing", exc_info=exc)

    async def poll_once(self) -> bool:
        """Poll the telemetry store once and publish the result.

        Returns ``True`` when a result was applied. Failures never raise:
        the placeholder sinks get a message and the current markers stay.
        Results of polls that outlive their mode are discarded.
        """
        if self._mode is not TrackingMode.LIVE:
            return False
        generation = self._generation

        if self._telemetry is None:
            self._report_failure(generation, STORE_MISSING_MESSAGE)
            return False

        try:
            rows = await self._telemetry.fetch_latest_positions(limit=self._config.telemetry_limit)
        except TableNotProvisionedError as exc:
            _logger.warning("Telemetry table not provisioned: %s", exc)
            table = exc.table or self._config.telemetry_table
            self._report_failure(generation, TABLE_NOT_PROVISIONED_MESSAGE.format(table=table))
            return False
        except StoreUnavailableError as exc:
            _logger.warning("Telemetry store unavailable: %s", exc)
            self._report_failure(generation, STORE_MISSING_MESSAGE)
            return False
        except StoreError as exc:
            _logger.warning("Telemetry poll failed: %s", exc)
            message = CONNECTION_ERROR_MESSAGE if exc.status_code is None else STORE_ERROR_MESSAGE
            self._report_failure(generation, message)
            return False
        except Exception:
            _logger.exception("Unexpected error polling live telemetry")
            self._report_failure(generation, CONNECTION_ERROR_MESSAGE)
            return False

        if self._is_stale(generation):
            _logger.debug("Discarding live poll result from a previous mode")
            return False

        try:
            positions = [live_position(record) for record in latest_per_driver(rows)]
        except Exception:
            _logger.exception("Unreadable live telemetry batch")
            self._report_failure(generation, STORE_ERROR_MESSAGE)
            return False
        _logger.debug("Live poll: %d rows, %d drivers with a fix", len(rows), len(positions))
        self._publish(positions)
        if positions:
            for entry in self._sinks.values():
                self._clear_placeholder(entry)
        else:
            self._show_placeholder(NO_LIVE_DATA_MESSAGE)
        return True

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation or self._mode is not TrackingMode.LIVE

    def _report_failure(self, generation: int, message: str) -> None:
        if self._is_stale(generation):
            _logger.debug("Discarding live poll failure from a previous mode")
            return
        self._show_placeholder(message)

    # ------------------------------------------------------------------
    # Highlight
    # ------------------------------------------------------------------

    def highlight_reservation(self, row: ReservationRow | None) -> str | None:
        """Elevate the marker of *row*'s assigned vehicle.

        Any previously highlighted marker is reset first. Returns the
        elevated marker id, or ``None`` when the row has no vehicle on the
        map.
        """
        self._selected = row
        target = self._resolve_highlight(self._positions)
        self._set_highlight(target)
        return target

    def clear_highlight(self) -> None:
        self._selected = None
        self._set_highlight(None)

    def _resolve_highlight(self, positions: Sequence[VehiclePosition]) -> str | None:
        row = self._selected
        if row is None:
            return None
        for identity in (row.driver_id, row.vehicle_id):
            for position in positions:
                if position.matches(identity):
                    return position.vehicle_id
        name = row.driver_name.strip().casefold()
        if name:
            for position in positions:
                if position.driver_name.strip().casefold() == name:
                    return position.vehicle_id
        return None

    def _set_highlight(self, target: str | None) -> None:
        previous = self._highlighted
        if previous == target:
            return
        by_id = {position.vehicle_id: position for position in self._positions}
        self._highlighted = target
        if previous is not None and previous in by_id:
            for entry in self._sinks.values():
                self._upsert(entry, by_id[previous])
        if target is not None and target in by_id:
            for entry in self._sinks.values():
                self._upsert(entry, by_id[target])

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _publish(self, positions: Sequence[VehiclePosition]) -> None:
        self._positions = tuple(positions)
        self._highlighted = self._resolve_highlight(self._positions)
        for entry in self._sinks.values():
            self._draw(entry, self._positions)

    def _draw(self, entry: _SinkEntry, positions: Sequence[VehiclePosition]) -> None:
        current = {position.vehicle_id for position in positions}
        for marker_id in sorted(entry.drawn - current):
            entry.sink.apply(RemoveMarker(marker_id=marker_id))
        entry.drawn &= current
        for position in positions:
            self._upsert(entry, position)

    def _upsert(self, entry: _SinkEntry, position: VehiclePosition) -> None:
        live = position.source is PositionSource.LIVE
        entry.sink.apply(
            UpsertMarker(
                marker_id=position.vehicle_id,
                latitude=position.latitude,
                longitude=position.longitude,
                heading=position.heading,
                status=position.status,
                icon=LIVE_ICON if live else SIMULATED_ICON,
                css_class=f"vehicle-marker {position.status}" + (" live-marker" if live else ""),
                popup=live_popup(position) if live else simulated_popup(position),
                highlighted=position.vehicle_id == self._highlighted,
                source=position.source,
            )
        )
        entry.drawn.add(position.vehicle_id)

    def _show_placeholder(self, message: str) -> None:
        region = self._config.region
        command = ShowPlaceholder(message=message, latitude=region.latitude, longitude=region.longitude)
        for entry in self._sinks.values():
            if entry.placeholder:
                entry.sink.apply(command)
                entry.showing_placeholder = True

    @staticmethod
    def _clear_placeholder(entry: _SinkEntry) -> None:
        if entry.showing_placeholder:
            entry.sink.apply(ClearPlaceholder())
            entry.showing_placeholder = False
