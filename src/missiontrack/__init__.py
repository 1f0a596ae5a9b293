"""missiontrack - Async live mission tracking and map overlay reconciliation."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("missiontrack")
except PackageNotFoundError:
    __version__ = "0+local"
from missiontrack.config import TrackingConfig
from missiontrack.exceptions import (
    FeedUnavailableError,
    MissingCoordinateError,
    MissionTrackConfigError,
    MissionTrackError,
    ReconcileInProgressError,
    UnknownStatusError,
)
from missiontrack.feed.http import HttpMissionSource
from missiontrack.feed.poller import MissionFeed
from missiontrack.feed.source import MissionSource, StaticMissionSource
from missiontrack.geo import distance_km, eta_minutes
from missiontrack.models import (
    FoodCategory,
    GeoPoint,
    Leg,
    MarkerVariant,
    Mission,
    MissionStatus,
    OverlayKey,
    OverlayRole,
    PathStyle,
    ResolvedTarget,
    TrackingFrame,
    TrackingSummary,
)
from missiontrack.overlay.reconciler import OverlayReconciler, ReconcileStats
from missiontrack.overlay.surface import LoggingMapSurface, MapSurface
from missiontrack.resolver import build_frame, resolve
from missiontrack.tracker import MissionTracker

__all__ = [
    "__version__",
    "FeedUnavailableError",
    "FoodCategory",
    "GeoPoint",
    "HttpMissionSource",
    "Leg",
    "LoggingMapSurface",
    "MapSurface",
    "MarkerVariant",
    "MissingCoordinateError",
    "Mission",
    "MissionFeed",
    "MissionSource",
    "MissionStatus",
    "MissionTrackConfigError",
    "MissionTrackError",
    "MissionTracker",
    "OverlayKey",
    "OverlayReconciler",
    "OverlayRole",
    "PathStyle",
    "ReconcileInProgressError",
    "ReconcileStats",
    "ResolvedTarget",
    "StaticMissionSource",
    "TrackingConfig",
    "TrackingFrame",
    "TrackingSummary",
    "UnknownStatusError",
    "build_frame",
    "distance_km",
    "eta_minutes",
    "resolve",
]
