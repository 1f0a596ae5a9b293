"""Overlay identity and visual descriptors passed across the map surface contract."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

#: Reserved mission id owning the viewer's own marker.
VIEWER_MISSION_ID = "__viewer__"


class OverlayRole(StrEnum):
    PICKUP_MARKER = "pickup_marker"
    DROPOFF_MARKER = "dropoff_marker"
    LIVE_MARKER = "live_marker"
    PATH_LINE = "path_line"
    USER_MARKER = "user_marker"

    @property
    def is_path(self) -> bool:
        return self is OverlayRole.PATH_LINE


@dataclass(frozen=True, slots=True)
class OverlayKey:
    """Stable identity of one rendered map object: ``(mission_id, role)``."""

    mission_id: str
    role: OverlayRole

    def __str__(self) -> str:
        return f"{self.mission_id}:{self.role.value}"

    @classmethod
    def viewer(cls) -> OverlayKey:
        return cls(VIEWER_MISSION_ID, OverlayRole.USER_MARKER)


class MarkerVariant(BaseModel):
    """How a marker should look. Rendering specifics belong to the adapter.

    Parameters
    ----------
    icon : str
        Glyph drawn inside the marker.
    color : str
        Hex fill color.
    pulsing : bool
        Draw the animated "live" halo.
    badge : str or None
        Short badge text above the marker (e.g. ``"LIVE"``).
    z_index : int
        Stacking offset; live markers sit above everything else.
    label : str or None
        Popup text. Live markers carry phase and distance/ETA here so a
        stats change flows through the normal update path.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    icon: str
    color: str
    pulsing: bool = False
    badge: str | None = None
    z_index: int = 0
    label: str | None = None


class PathStyle(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    color: str = "#3b82f6"
    weight: int = 4
    opacity: float = 0.6
    dash_array: str | None = "10, 15"
