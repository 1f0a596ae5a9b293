"""Base model and enum for mission read source payloads.

Every mission payload model inherits from :class:`TrackBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase source keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that strips sentinel values
  (``""``, ``"--"``, NaN) so the field default is used.
* A ``raw`` dict that captures the original payload.

Enumerations inherit from :class:`TrackEnum` which adds an ``UNKNOWN``
member and a ``_missing_`` hook that folds spelling variants
(``"InTransit"``, ``"in transit"``) and returns ``UNKNOWN`` for anything
without a mapped member.
"""

from __future__ import annotations

import enum
import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from missiontrack.feed.normalize import normalize_status_text

# Sentinel strings the read source uses for "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan", "null", "undefined"})


class TrackEnum(enum.StrEnum):
    """Base for string enumerations coming from the read source.

    Every subclass **must** define ``UNKNOWN = "UNKNOWN"``.
    """

    @classmethod
    def _missing_(cls, value: object) -> TrackEnum:
        if isinstance(value, str):
            member = cls._value2member_map_.get(normalize_status_text(value))
            if member is not None:
                return member  # type: ignore[return-value]
        unknown: TrackEnum = cls["UNKNOWN"]
        return unknown


class TrackBaseModel(BaseModel):
    """Base for mission payload models.

    Handles:
    * camelCase → snake_case via ``alias_generator=to_camel``
    * sentinel values (``""``, ``"--"``, NaN) → dropped so the field
      default is used instead
    * Stashes the original payload dict in ``raw``
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original read source record."""

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
    def _clean_source_values(cls, values: Any) -> Any:
        """Strip sentinel values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        original = dict(values)
        cleaned = TrackBaseModel._clean_dict(original)
        # Keep an explicitly passed raw= (kwargs construction).
        if "raw" not in values:
            cleaned["raw"] = original
        return cleaned
