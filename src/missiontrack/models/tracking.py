"""Per-cycle tracking results derived from a mission snapshot."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from missiontrack.models.geo import GeoPoint


class Leg(StrEnum):
    """Which endpoint of the mission the agent is currently heading to."""

    PICKUP = "pickup"
    DROPOFF = "dropoff"


class ResolvedTarget(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    target_point: GeoPoint
    phase_label: str
    leg: Leg


class TrackingFrame(BaseModel):
    """Resolved display state of one mission for a single poll cycle.

    Never persisted; recomputed on every snapshot.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mission_id: str
    live_position: GeoPoint
    target_point: GeoPoint
    phase_label: str
    leg: Leg
    distance_km: float = Field(ge=0.0)
    eta_minutes: int = Field(ge=0)
    is_urgent: bool


class TrackingSummary(BaseModel):
    """Distance/ETA text shown next to the map for one tracked mission.

    ``waiting`` is ``True`` while no live signal is available, in which
    case the numeric fields are ``None``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mission_id: str
    waiting: bool = False
    distance_km: float | None = None
    eta_minutes: int | None = None
    phase_label: str | None = None

    @classmethod
    def from_frame(cls, frame: TrackingFrame) -> TrackingSummary:
        return cls(
            mission_id=frame.mission_id,
            distance_km=round(frame.distance_km, 1),
            eta_minutes=frame.eta_minutes,
            phase_label=frame.phase_label,
        )

    @classmethod
    def waiting_for_signal(cls, mission_id: str) -> TrackingSummary:
        return cls(mission_id=mission_id, waiting=True)

    @property
    def text(self) -> str:
        if self.waiting:
            return "Waiting for volunteer signal..."
        return f"Volunteer is approx {self.distance_km:.1f}km away (~{self.eta_minutes} min)."
