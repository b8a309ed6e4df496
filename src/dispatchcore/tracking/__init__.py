"""Vehicle position tracking: simulator, timers, sinks and the tracker."""

from dispatchcore.tracking.scheduler import AsyncioScheduler, PeriodicHandle, Scheduler
from dispatchcore.tracking.simulator import Bounds, MotionSimulator, SimulatedVehicle, default_fleet
from dispatchcore.tracking.sinks import MarkerSink, RecordingSink
from dispatchcore.tracking.tracker import PositionTracker, live_popup, live_position, simulated_popup

__all__ = [
    "AsyncioScheduler",
    "Bounds",
    "MarkerSink",
    "MotionSimulator",
    "PeriodicHandle",
    "PositionTracker",
    "RecordingSink",
    "Scheduler",
    "SimulatedVehicle",
    "default_fleet",
    "live_popup",
    "live_position",
    "simulated_popup",
]
