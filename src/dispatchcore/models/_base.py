"""Base model and enum for store-backed records.

Every record model inherits from :class:`DispatchBaseModel` which
provides:

* ``alias_generator=to_camel`` with ``populate_by_name`` so both the
  snake_case columns of the hosted store and the camelCase keys of legacy
  imports populate the same field.
* A ``model_validator(mode="before")`` that strips sentinel values
  (``""``, ``"--"``, ``"null"``, NaN) so the field default is used.
* A ``raw`` dict that captures the original record.

Bucket and mode enums inherit from :class:`DispatchEnum`, a ``StrEnum``
whose ``_missing_`` hook folds casing/punctuation and otherwise resolves to
the first declared member, the enum's default bucket.
"""

from __future__ import annotations

import enum
import math
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# Sentinel strings upstream records use for "not available".
_SENTINELS = frozenset({"", "--", "null", "NULL", "None", "NaN", "nan"})

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


class DispatchEnum(enum.StrEnum):
    """Base for bucket/mode enums.

    The first declared member is the default: values without a mapped member
    resolve to it instead of raising ``ValueError``.
    """

    @classmethod
    def _missing_(cls, value: object) -> DispatchEnum:
        if isinstance(value, str):
            key = _NON_ALNUM_RE.sub("_", value.lower()).strip("_")
            for member in cls:
                if member.value == key:
                    return member
        return next(iter(cls))


class DispatchBaseModel(BaseModel):
    """Base for models parsed from store records."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original store record."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_sentinels(cls, values: Any) -> Any:
        """Strip sentinel values and stash the raw record."""
        if not isinstance(values, dict):
            return values
        cleaned = DispatchBaseModel._clean_dict(values)
        # Keep an explicit raw= from keyword construction.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
