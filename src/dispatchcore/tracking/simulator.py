"""Random-walk motion for rendered (simulated) vehicles."""

from __future__ import annotations

import dataclasses
import logging
import math
import random
from collections.abc import Iterable, Sequence

from dispatchcore.config import MapRegion, SimulationProfile
from dispatchcore.models.position import PositionSource, VehiclePosition

_logger = logging.getLogger(__name__)

#: Vehicle statuses that take part in the random walk.
MOVING_STATUSES: frozenset[str] = frozenset({"available", "busy"})


@dataclasses.dataclass
class SimulatedVehicle:
    """A rendered vehicle, advanced in place on every tick.

    ``speed`` is the step length in degrees per tick.
    """

    vehicle_id: str
    latitude: float
    longitude: float
    name: str = ""
    driver_name: str = ""
    status: str = "available"
    heading: float = 0.0
    speed: float = 0.0007
    driver_id: str | None = None

    @property
    def moving(self) -> bool:
        return self.status in MOVING_STATUSES

    def snapshot(self) -> VehiclePosition:
        aliases = frozenset(alias for alias in (self.driver_id,) if alias)
        return VehiclePosition(
            vehicle_id=self.vehicle_id,
            latitude=self.latitude,
            longitude=self.longitude,
            heading=self.heading,
            speed=self.speed,
            status=self.status,
            source=PositionSource.SIMULATED,
            name=self.name,
            driver_name=self.driver_name,
            driver_id=self.driver_id,
            aliases=aliases,
        )


@dataclasses.dataclass(frozen=True)
class Bounds:
    south: float
    north: float
    west: float
    east: float

    @classmethod
    def around(cls, region: MapRegion) -> Bounds:
        return cls(
            south=region.latitude - region.lat_span,
            north=region.latitude + region.lat_span,
            west=region.longitude - region.lng_span,
            east=region.longitude + region.lng_span,
        )

    def contains(self, latitude: float, longitude: float) -> bool:
        return self.south <= latitude <= self.north and self.west <= longitude <= self.east


def default_fleet(rng: random.Random) -> list[SimulatedVehicle]:
    """The three rendered vehicles shown before any live data exists."""
    return [
        SimulatedVehicle(
            vehicle_id="car-suv",
            latitude=44.9778,
            longitude=-93.2650,
            name="7 Passenger Suv",
            driver_name="Eric Brustad",
            status="available",
            heading=rng.random() * 360,
            speed=0.0008,
        ),
        SimulatedVehicle(
            vehicle_id="black-suv",
            latitude=44.9500,
            longitude=-93.2200,
            name="BLACK_SUV",
            driver_name="Eric B",
            status="busy",
            heading=rng.random() * 360,
            speed=0.0006,
        ),
        SimulatedVehicle(
            vehicle_id="sedan",
            latitude=45.0000,
            longitude=-93.2900,
            name="Sedan",
            driver_name="Tony Arroyo",
            status="available",
            heading=rng.random() * 360,
            speed=0.0007,
        ),
    ]


class MotionSimulator:
    """Advances a fixed set of vehicles inside a bounding rectangle.

    Each tick, every moving vehicle steps ``(cos h, sin h) * speed`` in
    ``(lat, lng)``. With probability ``heading_change_probability`` the
    heading is perturbed uniformly within ``±heading_jitter_degrees / 2``.
    A vehicle that leaves the rectangle has its heading reflected off the
    violated edge (``180 - h`` for latitude, ``360 - h`` for longitude) and
    its position clamped back inside. Never performs I/O.

    Parameters
    ----------
    vehicles : iterable of SimulatedVehicle, optional
        Fleet to animate; :func:`default_fleet` when omitted.
    region : MapRegion, optional
        Operating area the bounds are derived from.
    profile : SimulationProfile, optional
        Heading-change parameters.
    rng : random.Random, optional
        Source of randomness. Pass a seeded instance for reproducible runs.
    """

    def __init__(
        self,
        vehicles: Iterable[SimulatedVehicle] | None = None,
        *,
        region: MapRegion | None = None,
        profile: SimulationProfile | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._region = region or MapRegion()
        self._profile = profile or SimulationProfile()
        self._bounds = Bounds.around(self._region)
        fleet = list(vehicles) if vehicles is not None else default_fleet(self._rng)
        seen: set[str] = set()
        for vehicle in fleet:
            if vehicle.vehicle_id in seen:
                raise ValueError(f"Duplicate simulated vehicle id: {vehicle.vehicle_id!r}")
            seen.add(vehicle.vehicle_id)
        self._vehicles = fleet
        self._ticks = 0

    @property
    def bounds(self) -> Bounds:
        return self._bounds

    @property
    def vehicles(self) -> Sequence[SimulatedVehicle]:
        return tuple(self._vehicles)

    @property
    def ticks(self) -> int:
        return self._ticks

    def positions(self) -> list[VehiclePosition]:
        return [vehicle.snapshot() for vehicle in self._vehicles]

    def tick(self) -> list[VehiclePosition]:
        """Advance every moving vehicle one step and return fresh snapshots."""
        for vehicle in self._vehicles:
            if vehicle.moving:
                self._advance(vehicle)
        self._ticks += 1
        return self.positions()

    def _advance(self, vehicle: SimulatedVehicle) -> None:
        bounds = self._bounds
        radians = math.radians(vehicle.heading)
        vehicle.latitude += math.cos(radians) * vehicle.speed
        vehicle.longitude += math.sin(radians) * vehicle.speed

        if self._rng.random() < self._profile.heading_change_probability:
            jitter = (self._rng.random() - 0.5) * self._profile.heading_jitter_degrees
            vehicle.heading = (vehicle.heading + jitter + 360) % 360

        if vehicle.latitude > bounds.north or vehicle.latitude < bounds.south:
            vehicle.heading = (180 - vehicle.heading + 360) % 360
            vehicle.latitude = max(bounds.south, min(bounds.north, vehicle.latitude))
        if vehicle.longitude > bounds.east or vehicle.longitude < bounds.west:
            vehicle.heading = (360 - vehicle.heading) % 360
            vehicle.longitude = max(bounds.west, min(bounds.east, vehicle.longitude))
