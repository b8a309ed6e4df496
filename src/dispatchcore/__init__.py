"""dispatchcore - Async dispatch status and vehicle tracking engine."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("dispatchcore")
except PackageNotFoundError:
    __version__ = "0+local"
from dispatchcore.config import DispatchConfig, MapRegion, SimulationProfile
from dispatchcore.console import DispatchConsole
from dispatchcore.exceptions import (
    DispatchConfigError,
    DispatchError,
    StoreError,
    StoreUnavailableError,
    TableNotProvisionedError,
)
from dispatchcore.grid import ColumnSort, DispatchGrid, apply_filters, search_rows
from dispatchcore.models import (
    ClearPlaceholder,
    FilterState,
    OriginBucket,
    PositionSource,
    RemoveMarker,
    ReservationRow,
    ShowPlaceholder,
    StatusBucket,
    TelemetryRecord,
    TrackingMode,
    UpsertMarker,
    VehiclePosition,
    classify_origin,
    classify_status,
)
from dispatchcore.status import (
    CanonicalStatus,
    StatusMetadata,
    canonicalize,
    compare_rows,
    metadata_for,
    normalize,
    presentation_key,
    rank_of,
    sort_for_presentation,
)
from dispatchcore.tracking import (
    AsyncioScheduler,
    MotionSimulator,
    PositionTracker,
    RecordingSink,
    SimulatedVehicle,
)

__all__ = [
    "__version__",
    "AsyncioScheduler",
    "CanonicalStatus",
    "ClearPlaceholder",
    "ColumnSort",
    "DispatchConfig",
    "DispatchConfigError",
    "DispatchConsole",
    "DispatchError",
    "DispatchGrid",
    "FilterState",
    "MapRegion",
    "MotionSimulator",
    "OriginBucket",
    "PositionSource",
    "PositionTracker",
    "RecordingSink",
    "RemoveMarker",
    "ReservationRow",
    "ShowPlaceholder",
    "SimulatedVehicle",
    "SimulationProfile",
    "StatusBucket",
    "StatusMetadata",
    "StoreError",
    "StoreUnavailableError",
    "TableNotProvisionedError",
    "TelemetryRecord",
    "TrackingMode",
    "UpsertMarker",
    "VehiclePosition",
    "apply_filters",
    "canonicalize",
    "classify_origin",
    "classify_status",
    "compare_rows",
    "metadata_for",
    "normalize",
    "presentation_key",
    "rank_of",
    "search_rows",
    "sort_for_presentation",
]
