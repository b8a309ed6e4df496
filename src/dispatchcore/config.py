"""Engine configuration for dispatchcore."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from dispatchcore.exceptions import DispatchConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env: Mapping[str, str], key: str, cast: type) -> Any:
    raw = env.get(key)
    if raw is None:
        return None
    try:
        return cast(raw)
    except ValueError as exc:
        raise DispatchConfigError(f"{key} must be a {cast.__name__}, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class MapRegion:
    """Centre point and half-spans of the operating area.

    The simulator keeps rendered vehicles inside
    ``[lat - lat_span, lat + lat_span] x [lng - lng_span, lng + lng_span]``
    and the "no live data" placeholder is anchored at the centre.
    """

    latitude: float = 44.9778
    longitude: float = -93.2650
    lat_span: float = 0.15
    lng_span: float = 0.2


@dataclasses.dataclass(frozen=True)
class SimulationProfile:
    """Random-walk parameters for rendered vehicle motion."""

    heading_change_probability: float = 0.3
    heading_jitter_degrees: float = 40.0


@dataclasses.dataclass(frozen=True)
class DispatchConfig:
    """Engine configuration.

    Parameters
    ----------
    base_url : str
        Base URL of the hosted REST table API (PostgREST style). Empty
        disables the bundled REST stores.
    api_key : str
        API key sent as ``apikey`` and bearer token.
    reservations_table : str
        Table holding reservation records.
    telemetry_table : str
        Table holding driver location reports.
    telemetry_limit : int
        Maximum telemetry rows fetched per poll before reducing to the
        most recent report per driver.
    simulation_interval : float
        Seconds between simulated motion ticks.
    poll_interval : float
        Seconds between live telemetry polls.
    request_timeout : float
        Per-request timeout in seconds for the REST stores.
    sample_fallback : bool
        Show the built-in sample reservations when the first load fails
        or returns nothing.
    region : MapRegion
        Operating area for the simulator and placeholders.
    simulation : SimulationProfile
        Random-walk parameters.
    """

    base_url: str = ""
    api_key: str = ""
    reservations_table: str = "reservations"
    telemetry_table: str = "driver_locations"
    telemetry_limit: int = 50
    simulation_interval: float = 3.0
    poll_interval: float = 5.0
    request_timeout: float = 10.0
    sample_fallback: bool = True
    region: MapRegion = dataclasses.field(default_factory=MapRegion)
    simulation: SimulationProfile = dataclasses.field(default_factory=SimulationProfile)

    def __post_init__(self) -> None:
        if self.simulation_interval <= 0:
            raise DispatchConfigError("simulation_interval must be positive")
        if self.poll_interval <= 0:
            raise DispatchConfigError("poll_interval must be positive")
        if self.telemetry_limit <= 0:
            raise DispatchConfigError("telemetry_limit must be positive")
        if not 0.0 <= self.simulation.heading_change_probability <= 1.0:
            raise DispatchConfigError("heading_change_probability must be within [0, 1]")

    @classmethod
    def from_env(cls, **overrides: Any) -> DispatchConfig:
        """Create configuration from ``DISPATCH_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        DispatchConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "DISPATCH_BASE_URL": "base_url",
            "DISPATCH_API_KEY": "api_key",
            "DISPATCH_RESERVATIONS_TABLE": "reservations_table",
            "DISPATCH_TELEMETRY_TABLE": "telemetry_table",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMERIC_MAP: dict[str, tuple[str, type]] = {
            "DISPATCH_TELEMETRY_LIMIT": ("telemetry_limit", int),
            "DISPATCH_SIMULATION_INTERVAL": ("simulation_interval", float),
            "DISPATCH_POLL_INTERVAL": ("poll_interval", float),
            "DISPATCH_REQUEST_TIMEOUT": ("request_timeout", float),
        }
        for env_key, (field_name, cast) in _ENV_NUMERIC_MAP.items():
            if field_name in overrides:
                continue
            parsed = _env_number(env, env_key, cast)
            if parsed is not None:
                config_kwargs[field_name] = parsed

        if "sample_fallback" not in overrides:
            config_kwargs["sample_fallback"] = _env_bool(env.get("DISPATCH_SAMPLE_FALLBACK"), True)

        region_overrides = overrides.pop("region", None)
        if isinstance(region_overrides, dict):
            config_kwargs["region"] = MapRegion(**region_overrides)
        elif isinstance(region_overrides, MapRegion):
            config_kwargs["region"] = region_overrides
        else:
            lat = _env_number(env, "DISPATCH_BASE_LATITUDE", float)
            lng = _env_number(env, "DISPATCH_BASE_LONGITUDE", float)
            if lat is not None or lng is not None:
                default = MapRegion()
                config_kwargs["region"] = dataclasses.replace(
                    default,
                    latitude=default.latitude if lat is None else lat,
                    longitude=default.longitude if lng is None else lng,
                )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
