"""Data models for dispatch records, filters, positions and marker commands."""

from dispatchcore.models._base import DispatchBaseModel, DispatchEnum
from dispatchcore.models.filters import FilterState, OriginBucket, StatusBucket, classify_origin, classify_status
from dispatchcore.models.markers import (
    ClearPlaceholder,
    MarkerCommand,
    RemoveMarker,
    ShowPlaceholder,
    UpsertMarker,
)
from dispatchcore.models.position import PositionSource, TrackingMode, VehiclePosition
from dispatchcore.models.reservation import ReservationRow
from dispatchcore.models.telemetry import TelemetryRecord, latest_per_driver

__all__ = [
    "ClearPlaceholder",
    "DispatchBaseModel",
    "DispatchEnum",
    "FilterState",
    "MarkerCommand",
    "OriginBucket",
    "PositionSource",
    "RemoveMarker",
    "ReservationRow",
    "ShowPlaceholder",
    "StatusBucket",
    "TelemetryRecord",
    "TrackingMode",
    "UpsertMarker",
    "VehiclePosition",
    "classify_origin",
    "classify_status",
    "latest_per_driver",
]
