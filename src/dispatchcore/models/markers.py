"""Commands sent to marker sinks (map surfaces)."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from dispatchcore.models.position import PositionSource


class UpsertMarker(BaseModel):
    """Create the marker, or update it in place when the id is already drawn."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["upsert"] = "upsert"
    marker_id: str
    latitude: float
    longitude: float
    heading: float = 0.0
    status: str = "available"
    icon: str = "🚗"
    css_class: str = "vehicle-marker"
    popup: str = ""
    highlighted: bool = False
    source: PositionSource = PositionSource.SIMULATED


class RemoveMarker(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["remove"] = "remove"
    marker_id: str


class ShowPlaceholder(BaseModel):
    """Show (or replace) the single "no data" popup on a surface."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["placeholder"] = "placeholder"
    message: str
    latitude: float
    longitude: float
    title: str = "🔴 Live Mode"


class ClearPlaceholder(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["clear_placeholder"] = "clear_placeholder"


MarkerCommand = Annotated[
    UpsertMarker | RemoveMarker | ShowPlaceholder | ClearPlaceholder,
    Field(discriminator="kind"),
]
