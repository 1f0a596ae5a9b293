"""Idempotent map overlay reconciliation.

This is the only component allowed to create, move or delete map
objects. It keeps one :class:`OverlayEntry` per ``(mission, role)`` key
and, on every pass, diffs the desired overlay against those entries:

* desired but absent → create
* present, moved beyond epsilon or restyled → update
* present but no longer desired → remove

Feeding the same input twice issues no surface calls on the second pass.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from missiontrack._constants import POSITION_EPSILON_DEG, URGENCY_WINDOW_HOURS
from missiontrack.exceptions import ReconcileInProgressError
from missiontrack.geo import is_same_position
from missiontrack.models.geo import GeoPoint
from missiontrack.models.mission import Mission
from missiontrack.models.overlay import MarkerVariant, OverlayKey, OverlayRole, PathStyle
from missiontrack.models.tracking import TrackingFrame
from missiontrack.overlay.surface import MapSurface
from missiontrack.overlay.variants import PATH_STYLE, marker_variant
from missiontrack.state.policy import is_urgent

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class OverlayEntry:
    """What is currently rendered for one key. Never exposed outside the reconciler."""

    key: OverlayKey
    last_position: tuple[GeoPoint, ...]
    last_variant: MarkerVariant | PathStyle
    handle: Any


@dataclass(frozen=True, slots=True)
class DesiredObject:
    key: OverlayKey
    points: tuple[GeoPoint, ...]
    variant: MarkerVariant | PathStyle


@dataclass(slots=True)
class ReconcileStats:
    created: int = 0
    updated: int = 0
    removed: int = 0
    unchanged: int = 0
    failed: int = 0
    panned_to: GeoPoint | None = None

    @property
    def changed(self) -> bool:
        return bool(self.created or self.updated or self.removed or self.panned_to is not None)


def desired_overlay(
    missions: Iterable[Mission],
    frames: Mapping[str, TrackingFrame],
    *,
    viewer: GeoPoint | None = None,
    now: datetime,
    urgency_window: timedelta = timedelta(hours=URGENCY_WINDOW_HOURS),
) -> dict[OverlayKey, DesiredObject]:
    """Compute the desired overlay for one cycle.

    Entities missing a coordinate are left out for this cycle.
    """
    desired: dict[OverlayKey, DesiredObject] = {}

    def _add(key: OverlayKey, points: tuple[GeoPoint, ...], variant: MarkerVariant | PathStyle) -> None:
        desired[key] = DesiredObject(key=key, points=points, variant=variant)

    if viewer is not None:
        _add(OverlayKey.viewer(), (viewer,), marker_variant(OverlayRole.USER_MARKER))

    for mission in missions:
        if mission.pickup is not None:
            _add(
                OverlayKey(mission.id, OverlayRole.PICKUP_MARKER),
                (mission.pickup,),
                marker_variant(
                    OverlayRole.PICKUP_MARKER,
                    mission=mission,
                    is_urgent=is_urgent(mission.expiry_timestamp, now, urgency_window),
                ),
            )
        if mission.dropoff is not None:
            _add(
                OverlayKey(mission.id, OverlayRole.DROPOFF_MARKER),
                (mission.dropoff,),
                marker_variant(OverlayRole.DROPOFF_MARKER, mission=mission),
            )

        live = mission.tracked_position
        if live is None:
            continue
        frame = frames.get(mission.id)
        _add(
            OverlayKey(mission.id, OverlayRole.LIVE_MARKER),
            (live,),
            marker_variant(OverlayRole.LIVE_MARKER, mission=mission, frame=frame),
        )
        if frame is not None:
            _add(OverlayKey(mission.id, OverlayRole.PATH_LINE), (live, frame.target_point), PATH_STYLE)

    return desired


class OverlayReconciler:
    """Owns every map object drawn for tracked missions.

    Parameters
    ----------
    surface
        Map surface receiving create/update/remove operations.
    position_epsilon_deg
        Movement below this (per axis, degrees) is not forwarded.
    urgency_window
        Food expiring sooner than this is drawn as urgent.
    on_select
        Called with the mission id when the user selects one of its markers.
    clock
        Returns the current UTC time.
    """

    def __init__(
        self,
        surface: MapSurface,
        *,
        position_epsilon_deg: float = POSITION_EPSILON_DEG,
        urgency_window: timedelta = timedelta(hours=URGENCY_WINDOW_HOURS),
        on_select: Callable[[str], None] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._surface = surface
        self._epsilon = position_epsilon_deg
        self._urgency_window = urgency_window
        self._on_select = on_select
        self._clock = clock
        self._entries: dict[OverlayKey, OverlayEntry] = {}
        self._last_center: tuple[GeoPoint, int] | None = None
        self._reconciling = False

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def keys(self) -> frozenset[OverlayKey]:
        return frozenset(self._entries)

    def has_live_marker(self, mission_id: str | None = None) -> bool:
        return any(
            key.role is OverlayRole.LIVE_MARKER and (mission_id is None or key.mission_id == mission_id)
            for key in self._entries
        )

    # ------------------------------------------------------------------
    # Reconciliation pass
    # ------------------------------------------------------------------

    def reconcile(
        self,
        missions: Iterable[Mission],
        frames: Mapping[str, TrackingFrame],
        *,
        viewer: GeoPoint | None = None,
        now: datetime | None = None,
    ) -> ReconcileStats:
        """Bring the map in line with *missions* and their tracking *frames*.

        Issues at most one ``pan_to`` per pass, toward the last live marker
        that was created or moved.

        Raises
        ------
        ReconcileInProgressError
            If called while another pass is still running.
        """
        if self._reconciling:
            raise ReconcileInProgressError("Overlay reconciliation is not re-entrant")
        self._reconciling = True
        try:
            desired = desired_overlay(
                missions,
                frames,
                viewer=viewer,
                now=now if now is not None else self._clock(),
                urgency_window=self._urgency_window,
            )
            stats = ReconcileStats()
            pan_target: GeoPoint | None = None

            for key, want in desired.items():
                entry = self._entries.get(key)
                if entry is None:
                    if self._create(want):
                        stats.created += 1
                        if key.role is OverlayRole.LIVE_MARKER:
                            pan_target = want.points[0]
                    else:
                        stats.failed += 1
                    continue

                moved = not self._same_points(entry.last_position, want.points)
                if not moved and entry.last_variant == want.variant:
                    stats.unchanged += 1
                    continue
                if self._update(entry, want):
                    stats.updated += 1
                    if moved and key.role is OverlayRole.LIVE_MARKER:
                        pan_target = want.points[0]
                else:
                    stats.failed += 1

            for key in [key for key in self._entries if key not in desired]:
                self._remove(key)
                stats.removed += 1

            if pan_target is not None:
                try:
                    self._surface.pan_to(pan_target)
                    stats.panned_to = pan_target
                except Exception:
                    _logger.warning("Map surface pan_to failed", exc_info=True)
        finally:
            self._reconciling = False

        if stats.changed or stats.failed:
            _logger.debug(
                "Overlay reconciled created=%d updated=%d removed=%d unchanged=%d failed=%d",
                stats.created,
                stats.updated,
                stats.removed,
                stats.unchanged,
                stats.failed,
            )
        return stats

    def _same_points(self, old: tuple[GeoPoint, ...], new: tuple[GeoPoint, ...]) -> bool:
        if len(old) != len(new):
            return False
        return all(is_same_position(a, b, self._epsilon) for a, b in zip(old, new, strict=True))

    def _create(self, want: DesiredObject) -> bool:
        try:
            if want.key.role.is_path:
                assert isinstance(want.variant, PathStyle)  # noqa: S101
                handle = self._surface.add_path(want.key, want.points, want.variant)
            else:
                assert isinstance(want.variant, MarkerVariant)  # noqa: S101
                handle = self._surface.add_marker(want.key, want.points[0], want.variant)
        except Exception:
            _logger.warning("Map surface failed to add %s", want.key, exc_info=True)
            return False
        self._entries[want.key] = OverlayEntry(
            key=want.key,
            last_position=want.points,
            last_variant=want.variant,
            handle=handle,
        )
        return True

    def _update(self, entry: OverlayEntry, want: DesiredObject) -> bool:
        try:
            if want.key.role.is_path:
                assert isinstance(want.variant, PathStyle)  # noqa: S101
                self._surface.update_path(entry.handle, want.points, want.variant)
            else:
                assert isinstance(want.variant, MarkerVariant)  # noqa: S101
                self._surface.update_marker(entry.handle, want.points[0], want.variant)
        except Exception:
            # Keep the previous state so the next pass retries the update.
            _logger.warning("Map surface failed to update %s", want.key, exc_info=True)
            return False
        entry.last_position = want.points
        entry.last_variant = want.variant
        return True

    def _remove(self, key: OverlayKey) -> None:
        entry = self._entries.pop(key)
        try:
            if key.role.is_path:
                self._surface.remove_path(entry.handle)
            else:
                self._surface.remove_marker(entry.handle)
        except Exception:
            _logger.warning("Map surface failed to remove %s", key, exc_info=True)

    # ------------------------------------------------------------------
    # Camera, selection and teardown
    # ------------------------------------------------------------------

    def center_on(self, point: GeoPoint, zoom: int) -> bool:
        """Center the map unless it is already centered there. Returns ``True`` if a call was made."""
        target = (point, zoom)
        if self._last_center is not None:
            last_point, last_zoom = self._last_center
            if last_zoom == zoom and is_same_position(last_point, point, self._epsilon):
                return False
        try:
            self._surface.set_center(point, zoom)
        except Exception:
            _logger.warning("Map surface set_center failed", exc_info=True)
            return False
        self._last_center = target
        return True

    def select(self, key: OverlayKey) -> None:
        """Forward a marker selection from the surface adapter to ``on_select``."""
        if self._on_select is None or key not in self._entries:
            return
        if key.role is OverlayRole.USER_MARKER:
            return
        try:
            self._on_select(key.mission_id)
        except Exception:
            _logger.warning("Marker selection callback failed", exc_info=True)

    def clear(self) -> int:
        """Remove every rendered object. Returns the number removed."""
        if self._reconciling:
            raise ReconcileInProgressError("Cannot clear the overlay during reconciliation")
        keys = list(self._entries)
        for key in keys:
            self._remove(key)
        self._last_center = None
        if keys:
            _logger.debug("Overlay cleared (%d objects)", len(keys))
        return len(keys)
