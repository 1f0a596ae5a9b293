"""Data models for missions, tracking frames and overlay descriptors."""

from missiontrack.models._base import TrackBaseModel, TrackEnum
from missiontrack.models.geo import GeoPoint
from missiontrack.models.mission import FoodCategory, Mission, MissionStatus
from missiontrack.models.overlay import VIEWER_MISSION_ID, MarkerVariant, OverlayKey, OverlayRole, PathStyle
from missiontrack.models.tracking import Leg, ResolvedTarget, TrackingFrame, TrackingSummary

__all__ = [
    "VIEWER_MISSION_ID",
    "FoodCategory",
    "GeoPoint",
    "Leg",
    "MarkerVariant",
    "Mission",
    "MissionStatus",
    "OverlayKey",
    "OverlayRole",
    "PathStyle",
    "ResolvedTarget",
    "TrackBaseModel",
    "TrackEnum",
    "TrackingFrame",
    "TrackingSummary",
]
