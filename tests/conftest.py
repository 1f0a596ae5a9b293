from __future__ import annotations

import itertools
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from missiontrack.models.geo import GeoPoint
from missiontrack.models.overlay import MarkerVariant, OverlayKey, PathStyle

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

PICKUP = {"lat": 20.0, "lng": 78.0}
DROPOFF = {"lat": 20.1, "lng": 78.1}
LIVE = {"lat": 20.05, "lng": 78.05}


@dataclass
class RecordingMapSurface:
    """Map surface double that records every call and tracks live objects by handle."""

    calls: list[tuple[str, Any]] = field(default_factory=list)
    objects: dict[int, tuple[OverlayKey, tuple[GeoPoint, ...], Any]] = field(default_factory=dict)
    fail_on: set[str] = field(default_factory=set)
    _handles: itertools.count = field(default_factory=lambda: itertools.count(1))

    def _record(self, name: str, arg: Any) -> None:
        self.calls.append((name, arg))
        if name in self.fail_on:
            raise RuntimeError(f"{name} failed")

    def add_marker(self, key: OverlayKey, point: GeoPoint, variant: MarkerVariant) -> int:
        self._record("add_marker", key)
        handle = next(self._handles)
        self.objects[handle] = (key, (point,), variant)
        return handle

    def update_marker(self, handle: Any, point: GeoPoint, variant: MarkerVariant) -> None:
        key = self.objects[handle][0]
        self._record("update_marker", key)
        self.objects[handle] = (key, (point,), variant)

    def remove_marker(self, handle: Any) -> None:
        key = self.objects[handle][0]
        self._record("remove_marker", key)
        del self.objects[handle]

    def add_path(self, key: OverlayKey, points: Sequence[GeoPoint], style: PathStyle) -> int:
        self._record("add_path", key)
        handle = next(self._handles)
        self.objects[handle] = (key, tuple(points), style)
        return handle

    def update_path(self, handle: Any, points: Sequence[GeoPoint], style: PathStyle) -> None:
        key = self.objects[handle][0]
        self._record("update_path", key)
        self.objects[handle] = (key, tuple(points), style)

    def remove_path(self, handle: Any) -> None:
        key = self.objects[handle][0]
        self._record("remove_path", key)
        del self.objects[handle]

    def pan_to(self, point: GeoPoint) -> None:
        self._record("pan_to", point)

    def set_center(self, point: GeoPoint, zoom: int) -> None:
        self._record("set_center", (point, zoom))

    # Helpers --------------------------------------------------------

    @property
    def keys(self) -> set[OverlayKey]:
        return {key for key, _points, _variant in self.objects.values()}

    def position_of(self, key: OverlayKey) -> tuple[GeoPoint, ...]:
        for obj_key, points, _variant in self.objects.values():
            if obj_key == key:
                return points
        raise KeyError(key)

    def variant_of(self, key: OverlayKey) -> Any:
        for obj_key, _points, variant in self.objects.values():
            if obj_key == key:
                return variant
        raise KeyError(key)

    def names(self) -> list[str]:
        return [name for name, _arg in self.calls]

    def reset_calls(self) -> None:
        self.calls.clear()


def mission_record(mission_id: str = "M1", **overrides: Any) -> dict[str, Any]:
    """A raw mission record shaped like the web app's stored postings."""
    record: dict[str, Any] = {
        "id": mission_id,
        "status": "IN_TRANSIT",
        "foodName": "Rice and dal",
        "foodCategory": "Veg",
        "quantity": "20 meals",
        "donorOrg": "Green Kitchen",
        "orphanageName": "Hope Home",
        "volunteerName": "Sam",
        "location": {**PICKUP, "line1": "12 Market Road"},
        "requesterAddress": {**DROPOFF, "line1": "4 Lake View"},
        "volunteerLocation": dict(LIVE),
        "expiryDate": (NOW + timedelta(hours=20)).isoformat(),
    }
    record.update(overrides)
    return record


@pytest.fixture
def surface() -> RecordingMapSurface:
    return RecordingMapSurface()


@pytest.fixture
def make_record() -> Callable[..., dict[str, Any]]:
    return mission_record


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: NOW
