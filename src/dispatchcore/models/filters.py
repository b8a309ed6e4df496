"""Grid buckets, bucket classification and the operator's filter toggles.

The two axes fall back asymmetrically on purpose: an unclassifiable status
counts as *active* and an unclassifiable origin counts as *in-house*, so a
row with garbage in either column is still shown under the default toggles
instead of silently disappearing.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from dispatchcore._constants import ACTIVE_STATUSES, ORIGIN_ALIASES, QUOTE_STATUS, SETTLED_STATUSES
from dispatchcore.models._base import DispatchEnum
from dispatchcore.status import canonicalize, normalize

_logger = logging.getLogger(__name__)


class StatusBucket(DispatchEnum):
    """Status axis of the grid filter. Unclassifiable statuses are active."""

    ACTIVE = "active"
    SETTLED = "settled"
    QUOTE = "quote"


class OriginBucket(DispatchEnum):
    """Origin axis of the grid filter. Unclassifiable origins are in-house."""

    IN_HOUSE = "in_house"
    FARM_IN = "farm_in"
    FARM_OUT = "farm_out"


def classify_status(status: Any) -> StatusBucket:
    """Status bucket for a raw or canonical status."""
    key = canonicalize(status)
    if key in SETTLED_STATUSES:
        return StatusBucket.SETTLED
    if key == QUOTE_STATUS:
        return StatusBucket.QUOTE
    if key and key not in ACTIVE_STATUSES:
        _logger.debug("Status %r not in any bucket, treating as active", key)
    return StatusBucket.ACTIVE


def classify_origin(origin: Any) -> OriginBucket:
    """Origin bucket for a raw farm option; blank or unknown is in-house."""
    key = normalize(origin)
    if not key:
        return OriginBucket.IN_HOUSE
    bucket = ORIGIN_ALIASES.get(key)
    if bucket is None:
        if key.startswith(("farm_out", "farmout")):
            return OriginBucket.FARM_OUT
        if key.startswith(("farm_in", "farmin", "efarm_in")):
            return OriginBucket.FARM_IN
        _logger.debug("Origin %r not recognized, treating as in-house", origin)
        return OriginBucket.IN_HOUSE
    return OriginBucket(bucket)


_TOGGLE_NAMES: frozenset[str] = frozenset(
    [member.value for member in StatusBucket] + [member.value for member in OriginBucket]
)


def _coerce_toggle(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on", "checked"}
    return value


class FilterState(BaseModel):
    """Six independent toggles on two orthogonal axes.

    A row is visible iff its status bucket toggle AND its origin bucket
    toggle are both checked (logical OR within an axis, AND across axes).

    Parameters
    ----------
    active, settled, quote : bool
        Status-axis toggles. ``active`` also accepts the legacy ``newLeg``
        preference key, ``quote`` accepts ``quotes``.
    in_house, farm_in, farm_out : bool
        Origin-axis toggles.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    active: bool = Field(default=True, validation_alias=AliasChoices("active", "newLeg", "new_leg"))
    settled: bool = Field(default=True, validation_alias=AliasChoices("settled"))
    quote: bool = Field(default=True, validation_alias=AliasChoices("quote", "quotes"))
    in_house: bool = Field(default=True, validation_alias=AliasChoices("in_house", "inHouse"))
    farm_in: bool = Field(default=True, validation_alias=AliasChoices("farm_in", "farmIn"))
    farm_out: bool = Field(default=True, validation_alias=AliasChoices("farm_out", "farmOut"))

    @field_validator("active", "settled", "quote", "in_house", "farm_in", "farm_out", mode="before")
    @classmethod
    def _coerce(cls, value: Any) -> Any:
        return _coerce_toggle(value)

    @classmethod
    def all_on(cls) -> FilterState:
        return cls()

    @classmethod
    def all_off(cls) -> FilterState:
        return cls(active=False, settled=False, quote=False, in_house=False, farm_in=False, farm_out=False)

    @classmethod
    def from_preferences(cls, value: Any) -> FilterState:
        """Build from a persisted preference blob; anything unusable gives defaults."""
        if isinstance(value, FilterState):
            return value
        if not isinstance(value, Mapping):
            return cls()
        try:
            return cls.model_validate(dict(value))
        except ValidationError as exc:
            _logger.warning("Ignoring unreadable filter preferences: %s", exc.errors(include_url=False))
            return cls()

    def allows(self, status_bucket: StatusBucket, origin_bucket: OriginBucket) -> bool:
        return bool(getattr(self, status_bucket.value)) and bool(getattr(self, origin_bucket.value))

    def with_toggle(self, name: str, value: bool) -> FilterState:
        """Return a copy with one toggle changed. Accepts bucket values or enum members."""
        key = str(name)
        if key not in _TOGGLE_NAMES:
            raise ValueError(f"Unknown filter toggle: {name!r}")
        return self.model_copy(update={key: bool(value)})

    def to_preferences(self) -> dict[str, bool]:
        return self.model_dump()
