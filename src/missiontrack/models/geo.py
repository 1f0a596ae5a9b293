"""Geographic point model."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from missiontrack._redact import redact_for_log
from missiontrack.feed.normalize import safe_float

_logger = logging.getLogger(__name__)


class GeoPoint(BaseModel):
    """An immutable WGS84 coordinate.

    Parameters
    ----------
    lat : float
        Latitude in degrees, ``-90..90``.
    lng : float
        Longitude in degrees, ``-180..180``.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    lat: float = Field(ge=-90.0, le=90.0, validation_alias=AliasChoices("lat", "latitude"))
    lng: float = Field(ge=-180.0, le=180.0, validation_alias=AliasChoices("lng", "lon", "longitude"))

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _coerce_coordinate(cls, value: Any) -> float:
        parsed = safe_float(value)
        if parsed is None:
            raise ValueError("coordinate must be a finite number")
        return parsed

    @classmethod
    def from_value(cls, value: Any) -> GeoPoint | None:
        """Leniently build a point from a mapping, a ``(lat, lng)`` pair or a point.

        Returns ``None`` for anything that is not a usable coordinate. The
        ``(0, 0)`` pair is treated as "not set": the read source writes it
        for locations that were never geocoded.
        """
        if value is None:
            return None
        if isinstance(value, GeoPoint):
            point = value
        else:
            if isinstance(value, Mapping):
                payload: Any = dict(value)
            elif isinstance(value, Sequence) and not isinstance(value, (str, bytes)) and len(value) == 2:
                payload = {"lat": value[0], "lng": value[1]}
            else:
                return None
            try:
                point = cls.model_validate(payload)
            except ValidationError:
                _logger.debug("Ignoring unusable coordinate %s", redact_for_log(value))
                return None
        if point.lat == 0.0 and point.lng == 0.0:
            return None
        return point

    def as_tuple(self) -> tuple[float, float]:
        return (self.lat, self.lng)
