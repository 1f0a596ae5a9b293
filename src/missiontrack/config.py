"""Tracking engine configuration for missiontrack."""

from __future__ import annotations

import dataclasses
import math
import os
from collections.abc import Mapping
from typing import Any

from missiontrack._constants import (
    CHAT_POLL_INTERVAL_S,
    DEFAULT_CENTER,
    DEFAULT_SPEED_KMH,
    FOLLOW_ZOOM,
    INITIAL_ZOOM,
    POSITION_EPSILON_DEG,
    TRACKING_POLL_INTERVAL_S,
    URGENCY_WINDOW_HOURS,
)
from missiontrack.exceptions import MissionTrackConfigError


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    value = env.get(key)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise MissionTrackConfigError(f"{key} must be a number, got {value!r}") from exc


def _env_int(env: Mapping[str, str], key: str) -> int | None:
    value = env.get(key)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise MissionTrackConfigError(f"{key} must be an integer, got {value!r}") from exc


def _parse_center(key: str, value: str) -> tuple[float, float]:
    parts = [part.strip() for part in value.split(",")]
    if len(parts) != 2:
        raise MissionTrackConfigError(f"{key} must be 'lat,lng', got {value!r}")
    try:
        return float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise MissionTrackConfigError(f"{key} must be 'lat,lng', got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class TrackingConfig:
    """Tracking engine configuration.

    Parameters
    ----------
    tracking_poll_interval : float
        Seconds between mission feed polls. Defaults to 2 seconds.
    chat_poll_interval : float
        Seconds between chat message polls. Kept separate from the
        tracking interval; the tracking engine itself never reads it.
    assumed_speed_kmh : float
        Average courier speed used for ETA estimates (city delivery).
    urgency_window_hours : float
        A mission whose food expires sooner than this is urgent.
    position_epsilon_deg : float
        Coordinate movement (degrees) below which a marker is not moved.
    initial_zoom : int
        Zoom used when the map is first centered.
    follow_zoom : int
        Zoom used when centering on a viewer or a pickup point.
    default_center : tuple of float
        ``(lat, lng)`` used when no viewer location is known.
    source_base_url : str or None
        Base URL of the HTTP mission read source, if one is used.
    request_timeout : float
        Total timeout in seconds for one read source request.
    """

    tracking_poll_interval: float = TRACKING_POLL_INTERVAL_S
    chat_poll_interval: float = CHAT_POLL_INTERVAL_S
    assumed_speed_kmh: float = DEFAULT_SPEED_KMH
    urgency_window_hours: float = URGENCY_WINDOW_HOURS
    position_epsilon_deg: float = POSITION_EPSILON_DEG
    initial_zoom: int = INITIAL_ZOOM
    follow_zoom: int = FOLLOW_ZOOM
    default_center: tuple[float, float] = DEFAULT_CENTER
    source_base_url: str | None = None
    request_timeout: float = 10.0

    def __post_init__(self) -> None:
        for name in ("tracking_poll_interval", "chat_poll_interval", "assumed_speed_kmh", "request_timeout"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise MissionTrackConfigError(f"{name} must be a positive number, got {value!r}")
        if not math.isfinite(self.urgency_window_hours) or self.urgency_window_hours < 0:
            raise MissionTrackConfigError(f"urgency_window_hours must be >= 0, got {self.urgency_window_hours!r}")
        if not math.isfinite(self.position_epsilon_deg) or self.position_epsilon_deg < 0:
            raise MissionTrackConfigError(f"position_epsilon_deg must be >= 0, got {self.position_epsilon_deg!r}")
        lat, lng = self.default_center
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
            raise MissionTrackConfigError(f"default_center out of range: {self.default_center!r}")

    @classmethod
    def from_env(cls, **overrides: Any) -> TrackingConfig:
        """Create configuration from ``MISSIONTRACK_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        MissionTrackConfigError
            If a variable cannot be parsed or a value is out of range.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        _ENV_FLOAT_MAP = {
            "MISSIONTRACK_TRACKING_POLL_INTERVAL": "tracking_poll_interval",
            "MISSIONTRACK_CHAT_POLL_INTERVAL": "chat_poll_interval",
            "MISSIONTRACK_ASSUMED_SPEED_KMH": "assumed_speed_kmh",
            "MISSIONTRACK_URGENCY_WINDOW_HOURS": "urgency_window_hours",
            "MISSIONTRACK_POSITION_EPSILON_DEG": "position_epsilon_deg",
            "MISSIONTRACK_REQUEST_TIMEOUT": "request_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            parsed = _env_float(env, env_key)
            if parsed is not None:
                config_kwargs[field_name] = parsed

        _ENV_INT_MAP = {
            "MISSIONTRACK_INITIAL_ZOOM": "initial_zoom",
            "MISSIONTRACK_FOLLOW_ZOOM": "follow_zoom",
        }
        for env_key, field_name in _ENV_INT_MAP.items():
            parsed_int = _env_int(env, env_key)
            if parsed_int is not None:
                config_kwargs[field_name] = parsed_int

        center = env.get("MISSIONTRACK_DEFAULT_CENTER")
        if center is not None:
            config_kwargs["default_center"] = _parse_center("MISSIONTRACK_DEFAULT_CENTER", center)

        base_url = env.get("MISSIONTRACK_SOURCE_BASE_URL")
        if base_url:
            config_kwargs["source_base_url"] = base_url.rstrip("/")

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
