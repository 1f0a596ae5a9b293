"""Custom exception hierarchy for missiontrack."""

from __future__ import annotations


class MissionTrackError(Exception):
    """Base exception for all missiontrack errors."""


class MissionTrackConfigError(MissionTrackError):
    """Invalid or missing configuration."""


class FeedUnavailableError(MissionTrackError):
    """The mission read source could not be polled (network, non-200, invalid JSON).

    The feed swallows this and retries on the next tick; it is never fatal.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class MissingCoordinateError(MissionTrackError):
    """A mission lacks a point that a strict accessor asked for.

    The reconciler never raises this; it excludes the entity for the cycle.
    """

    def __init__(self, mission_id: str, field_name: str) -> None:
        self.mission_id = mission_id
        self.field_name = field_name
        super().__init__(f"Mission {mission_id!r} has no {field_name} coordinate")


class UnknownStatusError(MissionTrackError):
    """A status value outside the known mission phases."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Unknown mission status: {value!r}")


class ReconcileInProgressError(MissionTrackError):
    """A reconciliation pass was requested while another one is still running."""
