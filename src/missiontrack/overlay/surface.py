"""Map surface contract.

The reconciler only ever talks to a map through this interface. Handles
returned by ``add_*`` are opaque to the core and never leave the
reconciler.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Sequence
from typing import Any, Protocol

from missiontrack.models.geo import GeoPoint
from missiontrack.models.overlay import MarkerVariant, OverlayKey, PathStyle


class MapSurface(Protocol):
    """Structural rendering interface.

    Calls are synchronous and side-effecting. Adapters over an
    asynchronous renderer must make each call's effect observable before
    returning.
    """

    def add_marker(self, key: OverlayKey, point: GeoPoint, variant: MarkerVariant) -> Any: ...

    def update_marker(self, handle: Any, point: GeoPoint, variant: MarkerVariant) -> None: ...

    def remove_marker(self, handle: Any) -> None: ...

    def add_path(self, key: OverlayKey, points: Sequence[GeoPoint], style: PathStyle) -> Any: ...

    def update_path(self, handle: Any, points: Sequence[GeoPoint], style: PathStyle) -> None: ...

    def remove_path(self, handle: Any) -> None: ...

    def pan_to(self, point: GeoPoint) -> None: ...

    def set_center(self, point: GeoPoint, zoom: int) -> None: ...


class LoggingMapSurface:
    """Headless surface that logs every operation.

    Useful for running the tracker without a renderer attached (scripts,
    server-side debugging). Handles are ``"<key>#<n>"`` strings.
    """

    def __init__(self, logger: logging.Logger | None = None, *, level: int = logging.INFO) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._level = level
        self._counter = itertools.count(1)
        self._objects: dict[str, GeoPoint | tuple[GeoPoint, ...]] = {}

    @property
    def objects(self) -> dict[str, GeoPoint | tuple[GeoPoint, ...]]:
        """Currently rendered objects by handle."""
        return dict(self._objects)

    def _new_handle(self, key: OverlayKey) -> str:
        return f"{key}#{next(self._counter)}"

    def add_marker(self, key: OverlayKey, point: GeoPoint, variant: MarkerVariant) -> str:
        handle = self._new_handle(key)
        self._objects[handle] = point
        self._logger.log(self._level, "add marker %s at %.5f,%.5f icon=%s", handle, point.lat, point.lng, variant.icon)
        return handle

    def update_marker(self, handle: Any, point: GeoPoint, variant: MarkerVariant) -> None:
        self._objects[handle] = point
        self._logger.log(self._level, "move marker %s to %.5f,%.5f label=%s", handle, point.lat, point.lng, variant.label)

    def remove_marker(self, handle: Any) -> None:
        self._objects.pop(handle, None)
        self._logger.log(self._level, "remove marker %s", handle)

    def add_path(self, key: OverlayKey, points: Sequence[GeoPoint], style: PathStyle) -> str:
        handle = self._new_handle(key)
        self._objects[handle] = tuple(points)
        self._logger.log(self._level, "add path %s (%d points)", handle, len(points))
        return handle

    def update_path(self, handle: Any, points: Sequence[GeoPoint], style: PathStyle) -> None:
        self._objects[handle] = tuple(points)
        self._logger.log(self._level, "update path %s", handle)

    def remove_path(self, handle: Any) -> None:
        self._objects.pop(handle, None)
        self._logger.log(self._level, "remove path %s", handle)

    def pan_to(self, point: GeoPoint) -> None:
        self._logger.log(self._level, "pan to %.5f,%.5f", point.lat, point.lng)

    def set_center(self, point: GeoPoint, zoom: int) -> None:
        self._logger.log(self._level, "center on %.5f,%.5f zoom=%d", point.lat, point.lng, zoom)
