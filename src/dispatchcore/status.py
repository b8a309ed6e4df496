"""Status canonicalization.

Upstream workflows (in-house dispatch, farm-out to affiliates, legacy
imports) spell the same trip state many different ways. Everything in this
module is a pure function over the static tables in
:mod:`dispatchcore._constants`:

* :func:`normalize` folds casing and punctuation into a ``snake_case`` key.
* :func:`canonicalize` maps that key through the alias table, falling back
  to the key itself for spellings nobody has seen before.
* :func:`metadata_for` and :func:`rank_of` attach the label/icon and the
  presentation rank.
* :func:`presentation_key` orders reservation rows by rank, pickup time,
  confirmation number and record id.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import datetime
from enum import StrEnum
from typing import Any, NamedTuple, Protocol, TypeVar

from dispatchcore._constants import PLACEHOLDER_ICON, STATUS_ALIASES, STATUS_METADATA, STATUS_RANK_ORDER

_logger = logging.getLogger(__name__)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


class CanonicalStatus(StrEnum):
    """The closed vocabulary of trip/driver states."""

    UNASSIGNED = "unassigned"
    OFFERED = "offered"
    OFFERED_TO_AFFILIATE = "offered_to_affiliate"
    AFFILIATE_ASSIGNED = "affiliate_assigned"
    AFFILIATE_DRIVER_ASSIGNED = "affiliate_driver_assigned"
    ASSIGNED = "assigned"
    ENROUTE = "enroute"
    DRIVER_EN_ROUTE = "driver_en_route"
    ON_THE_WAY = "on_the_way"
    ARRIVED = "arrived"
    DRIVER_WAITING_AT_PICKUP = "driver_waiting_at_pickup"
    WAITING_AT_PICKUP = "waiting_at_pickup"
    PASSENGER_ONBOARD = "passenger_onboard"
    DRIVER_CIRCLING = "driver_circling"
    CUSTOMER_IN_CAR = "customer_in_car"
    DRIVING_PASSENGER = "driving_passenger"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    CANCELLED_BY_AFFILIATE = "cancelled_by_affiliate"
    LATE_CANCEL = "late_cancel"
    LATE_CANCELLED = "late_cancelled"
    NO_SHOW = "no_show"
    COVID19_CANCELLATION = "covid19_cancellation"
    COMPLETED = "completed"
    SETTLED = "settled"
    QUOTE = "quote"
    IN_HOUSE = "in_house"


class StatusMetadata(NamedTuple):
    label: str
    icon: str


_RANKS: dict[str, int] = {key: index for index, key in enumerate(STATUS_RANK_ORDER)}

#: Rank returned for keys missing from the rank table. Larger than every
#: real rank so unrecognized statuses sink to the bottom of the queue.
UNKNOWN_RANK: int = len(STATUS_RANK_ORDER)


def normalize(raw: Any) -> str:
    """Fold *raw* into a ``snake_case`` key.

    Lower-cases, replaces every run of characters outside ``[a-z0-9]`` with a
    single underscore and trims underscores at both ends. Idempotent.
    """
    if raw is None:
        return ""
    return _NON_ALNUM_RE.sub("_", str(raw).lower()).strip("_")


def canonicalize(raw: Any) -> str:
    """Map an arbitrary upstream status string to its canonical key.

    Never raises. Falsy input yields ``""``, which callers treat as
    ``unassigned``. Unknown spellings yield their normalized form; input made
    only of punctuation or whitespace has no such form and yields
    ``unassigned``.
    """
    if not raw:
        return ""
    key = normalize(raw)
    if not key:
        return CanonicalStatus.UNASSIGNED.value
    alias = STATUS_ALIASES.get(key)
    if alias is not None:
        return alias
    if key not in STATUS_METADATA:
        _logger.debug("Unrecognized status %r (normalized %r)", raw, key)
    return key


def is_known(key: str) -> bool:
    return key in _RANKS


def title_label(key: str) -> str:
    return " ".join(word.capitalize() for word in key.split("_") if word)


def metadata_for(key: str) -> StatusMetadata:
    """Label and icon for a canonical key, title-cased fallback for unknowns."""
    entry = STATUS_METADATA.get(key or CanonicalStatus.UNASSIGNED)
    if entry is not None:
        return StatusMetadata(*entry)
    return StatusMetadata(title_label(key), PLACEHOLDER_ICON)


def rank_of(key: str) -> int:
    return _RANKS.get(key, UNKNOWN_RANK)


class _PresentableRow(Protocol):
    id: str
    status: str
    confirmation_number: str
    pickup_at: datetime | None


TRow = TypeVar("TRow", bound=_PresentableRow)


def presentation_key(row: _PresentableRow) -> tuple[Any, ...]:
    """Sort key: rank, pickup time (unknown last), confirmation number, id.

    The record id is the final discriminator, so two distinct rows never
    produce equal keys.
    """
    pickup = row.pickup_at
    return (
        rank_of(row.status or CanonicalStatus.UNASSIGNED),
        pickup is None,
        pickup if pickup is not None else datetime.min,
        row.confirmation_number or "",
        row.id or "",
    )


def compare_rows(a: _PresentableRow, b: _PresentableRow) -> int:
    """Three-way comparison matching :func:`presentation_key`."""
    key_a = presentation_key(a)
    key_b = presentation_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


def sort_for_presentation(rows: Iterable[TRow]) -> list[TRow]:
    return sorted(rows, key=presentation_key)

