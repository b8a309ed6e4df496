"""Vehicle position snapshot model."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from dispatchcore.models._base import DispatchEnum


class TrackingMode(DispatchEnum):
    """Where vehicle positions come from. Unknown preference values are simulated."""

    SIMULATED = "simulated"
    LIVE = "live"


PositionSource = TrackingMode
"""A position's source tag uses the same vocabulary as the tracker mode."""


class VehiclePosition(BaseModel):
    """Immutable snapshot of one vehicle on the map.

    Parameters
    ----------
    vehicle_id : str
        Marker identity (driver id for live data, vehicle id for rendered data).
    latitude, longitude : float
        Coordinates in degrees.
    heading : float
        Degrees, ``0`` pointing north.
    speed : float
        Simulator step in degrees per tick, or metres per second for live data.
    status : str
        Availability (``available``, ``busy``, ``enroute``, ``offline``).
    source : PositionSource
        ``simulated`` or ``live``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    vehicle_id: str
    latitude: float
    longitude: float
    heading: float = 0.0
    speed: float | None = None
    status: str = "available"
    source: PositionSource = PositionSource.SIMULATED
    name: str = ""
    driver_name: str = ""
    driver_id: str | None = None
    updated_at: datetime | None = None
    aliases: frozenset[str] = Field(default_factory=frozenset)
    """Other ids (driver/vehicle) that refer to this marker, used for highlight lookups."""

    def matches(self, identity: str | None) -> bool:
        if not identity:
            return False
        return identity == self.vehicle_id or identity == self.driver_id or identity in self.aliases
