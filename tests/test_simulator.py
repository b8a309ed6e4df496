from __future__ import annotations

import random

import pytest

from dispatchcore.config import MapRegion, SimulationProfile
from dispatchcore.models.position import PositionSource
from dispatchcore.tracking.simulator import Bounds, MotionSimulator, SimulatedVehicle, default_fleet

_STEADY = SimulationProfile(heading_change_probability=0.0)


def test_bounds_around_default_region() -> None:
    bounds = Bounds.around(MapRegion())
    assert bounds.south == pytest.approx(44.8278)
    assert bounds.north == pytest.approx(45.1278)
    assert bounds.west == pytest.approx(-93.4650)
    assert bounds.east == pytest.approx(-93.0650)


def test_default_fleet() -> None:
    fleet = default_fleet(random.Random(1))
    assert [vehicle.vehicle_id for vehicle in fleet] == ["car-suv", "black-suv", "sedan"]
    assert all(0 <= vehicle.heading < 360 for vehicle in fleet)


def test_step_follows_heading() -> None:
    vehicle = SimulatedVehicle("v1", latitude=44.9778, longitude=-93.2650, heading=0.0, speed=0.01)
    simulator = MotionSimulator([vehicle], profile=_STEADY, rng=random.Random(0))

    positions = simulator.tick()

    assert vehicle.latitude == pytest.approx(44.9878)
    assert vehicle.longitude == pytest.approx(-93.2650)
    assert positions[0].source is PositionSource.SIMULATED
    assert simulator.ticks == 1


def test_latitude_edge_reflects_heading_and_clamps() -> None:
    bounds = Bounds.around(MapRegion())
    vehicle = SimulatedVehicle("v1", latitude=bounds.north - 0.001, longitude=-93.2650, heading=0.0, speed=0.01)
    simulator = MotionSimulator([vehicle], profile=_STEADY, rng=random.Random(0))

    simulator.tick()

    assert vehicle.heading == pytest.approx(180.0)
    assert vehicle.latitude == bounds.north


def test_longitude_edge_reflects_heading_and_clamps() -> None:
    bounds = Bounds.around(MapRegion())
    vehicle = SimulatedVehicle("v1", latitude=44.9778, longitude=bounds.east - 0.001, heading=90.0, speed=0.01)
    simulator = MotionSimulator([vehicle], profile=_STEADY, rng=random.Random(0))

    simulator.tick()

    assert vehicle.heading == pytest.approx(270.0)
    assert vehicle.longitude == bounds.east


def test_vehicles_never_leave_bounds() -> None:
    simulator = MotionSimulator(
        [SimulatedVehicle("fast", latitude=44.9778, longitude=-93.2650, heading=33.0, speed=0.05)],
        profile=SimulationProfile(heading_change_probability=1.0, heading_jitter_degrees=90.0),
        rng=random.Random(7),
    )
    for _ in range(500):
        simulator.tick()
        for position in simulator.positions():
            assert simulator.bounds.contains(position.latitude, position.longitude)
            assert 0 <= position.heading < 360


def test_offline_vehicle_does_not_move() -> None:
    vehicle = SimulatedVehicle("parked", latitude=44.9, longitude=-93.2, status="offline", heading=45.0, speed=0.01)
    simulator = MotionSimulator([vehicle], rng=random.Random(0))
    simulator.tick()
    assert (vehicle.latitude, vehicle.longitude) == (44.9, -93.2)


def test_seeded_simulators_are_reproducible() -> None:
    first = MotionSimulator(rng=random.Random(42))
    second = MotionSimulator(rng=random.Random(42))
    for _ in range(20):
        first.tick()
        second.tick()
    assert first.positions() == second.positions()


def test_duplicate_vehicle_ids_rejected() -> None:
    with pytest.raises(ValueError):
        MotionSimulator([SimulatedVehicle("x", 44.9, -93.2), SimulatedVehicle("x", 44.8, -93.1)])
