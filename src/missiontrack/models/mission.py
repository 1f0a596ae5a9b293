"""Mission model: one tracked food delivery from pickup to dropoff."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from missiontrack.exceptions import MissingCoordinateError, UnknownStatusError
from missiontrack.feed.normalize import normalize_status_text, parse_timestamp, safe_str
from missiontrack.models._base import TrackBaseModel, TrackEnum
from missiontrack.models.geo import GeoPoint


class MissionStatus(TrackEnum):
    """Delivery phase of a mission."""

    UNKNOWN = "UNKNOWN"
    OPEN = "OPEN"
    PICKUP_VERIFICATION_PENDING = "PICKUP_VERIFICATION_PENDING"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERY_VERIFICATION_PENDING = "DELIVERY_VERIFICATION_PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (MissionStatus.COMPLETED, MissionStatus.CANCELLED)

    @property
    def is_live(self) -> bool:
        """Whether a mobile agent may be reporting a position in this phase."""
        return self in _LIVE_STATUSES

    @classmethod
    def parse_strict(cls, value: Any) -> MissionStatus:
        """Parse *value*, raising :class:`UnknownStatusError` instead of returning ``UNKNOWN``."""
        if isinstance(value, MissionStatus) and value is not MissionStatus.UNKNOWN:
            return value
        if isinstance(value, str):
            member = cls._value2member_map_.get(normalize_status_text(value))
            if member is not None and member is not MissionStatus.UNKNOWN:
                return member  # type: ignore[return-value]
        raise UnknownStatusError(value)


_LIVE_STATUSES = frozenset(
    {
        MissionStatus.PICKUP_VERIFICATION_PENDING,
        MissionStatus.IN_TRANSIT,
        MissionStatus.DELIVERY_VERIFICATION_PENDING,
    }
)


class FoodCategory(TrackEnum):
    UNKNOWN = "UNKNOWN"
    VEG = "VEG"
    NON_VEG = "NON_VEG"


class Mission(TrackBaseModel):
    """A delivery as reported by the read source.

    Coordinates that are missing or unusable are ``None`` rather than a
    validation error: an entity without a needed point is simply not
    shown for that cycle.

    Parameters
    ----------
    id : str
        Stable, unique mission identifier.
    status : MissionStatus
        Current phase. Unrecognized values parse to ``UNKNOWN``.
    pickup : GeoPoint or None
        Donor location (``location`` in source payloads).
    dropoff : GeoPoint or None
        Requester location (``requesterAddress``); absent until assigned.
    live_position : GeoPoint or None
        Latest volunteer position (``volunteerLocation``); absent until
        the agent starts reporting.
    expiry_timestamp : datetime or None
        When the donated food expires (UTC).
    """

    id: str = Field(validation_alias=AliasChoices("id", "missionId", "postingId"))
    status: MissionStatus = Field(default=MissionStatus.UNKNOWN, validation_alias=AliasChoices("status"))
    pickup: GeoPoint | None = Field(default=None, validation_alias=AliasChoices("pickup", "location"))
    dropoff: GeoPoint | None = Field(default=None, validation_alias=AliasChoices("dropoff", "requesterAddress"))
    live_position: GeoPoint | None = Field(
        default=None,
        validation_alias=AliasChoices("livePosition", "volunteerLocation"),
    )
    expiry_timestamp: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("expiryTimestamp", "expiryDate", "expiry"),
    )
    food_name: str | None = None
    food_category: FoodCategory = FoodCategory.UNKNOWN
    quantity: str | None = None
    donor_name: str | None = Field(default=None, validation_alias=AliasChoices("donorOrg", "donorName"))
    requester_name: str | None = Field(default=None, validation_alias=AliasChoices("orphanageName", "requesterName"))
    volunteer_name: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("mission id must be non-empty")
        return text

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> MissionStatus:
        if isinstance(value, MissionStatus):
            return value
        return MissionStatus(str(value))

    @field_validator("food_category", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> FoodCategory:
        if isinstance(value, FoodCategory):
            return value
        return FoodCategory(str(value))

    @field_validator("pickup", "dropoff", "live_position", mode="before")
    @classmethod
    def _coerce_point(cls, value: Any) -> GeoPoint | None:
        return GeoPoint.from_value(value)

    @field_validator("expiry_timestamp", mode="before")
    @classmethod
    def _coerce_expiry(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)

    @field_validator("food_name", "quantity", "donor_name", "requester_name", "volunteer_name", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return safe_str(value)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def tracked_position(self) -> GeoPoint | None:
        """The live position, honoured only while the mission is in a live phase."""
        if not self.status.is_live:
            return None
        return self.live_position

    def require_pickup(self) -> GeoPoint:
        if self.pickup is None:
            raise MissingCoordinateError(self.id, "pickup")
        return self.pickup
