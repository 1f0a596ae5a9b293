"""High-level async live mission tracker."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from missiontrack.config import TrackingConfig
from missiontrack.exceptions import MissingCoordinateError
from missiontrack.feed.poller import MissionFeed
from missiontrack.feed.source import MissionSource
from missiontrack.models.geo import GeoPoint
from missiontrack.models.mission import Mission
from missiontrack.models.tracking import TrackingFrame, TrackingSummary
from missiontrack.overlay.reconciler import OverlayReconciler, ReconcileStats
from missiontrack.overlay.surface import MapSurface
from missiontrack.resolver import build_frame
from missiontrack.state.tracked import TrackedMissionSet

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class MissionTracker:
    """Poll missions, resolve targets and keep a map overlay in sync.

    Two modes mirror the two tracking views of the web app:

    * map mode (``mission_id=None``): every active mission is drawn,
      plus the viewer's own marker;
    * single mode: one mission is followed through ``get_mission``.

    Usage::

        async with MissionTracker(source, surface, on_summary=print) as tracker:
            await asyncio.sleep(60)

    Leaving the context stops polling and removes every map object.
    """

    def __init__(
        self,
        source: MissionSource,
        surface: MapSurface,
        *,
        config: TrackingConfig | None = None,
        mission_id: str | None = None,
        viewer: GeoPoint | None = None,
        on_summary: Callable[[list[TrackingSummary]], None] | None = None,
        on_select: Callable[[str], None] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config or TrackingConfig()
        self._mission_id = mission_id
        self._viewer = viewer
        self._on_summary = on_summary
        self._clock = clock
        self._urgency_window = timedelta(hours=self._config.urgency_window_hours)
        self._feed = MissionFeed(
            source,
            interval=self._config.tracking_poll_interval,
            mission_id=mission_id,
        )
        self._reconciler = OverlayReconciler(
            surface,
            position_epsilon_deg=self._config.position_epsilon_deg,
            urgency_window=self._urgency_window,
            on_select=on_select,
            clock=clock,
        )
        self._tracked = TrackedMissionSet()
        self._frames: dict[str, TrackingFrame] = {}
        self._summaries: list[TrackingSummary] = []
        self._started = False
        self._live_seen = False
        self._next_urgency_at: datetime | None = None
        self._render_count = 0

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> MissionTracker:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    def start(self) -> None:
        """Center the map and start polling. Requires a running event loop."""
        if self._started:
            return
        self._started = True
        if self._viewer is not None:
            self._reconciler.center_on(self._viewer, self._config.follow_zoom)
        else:
            lat, lng = self._config.default_center
            self._reconciler.center_on(GeoPoint(lat=lat, lng=lng), self._config.initial_zoom)
        self._feed.subscribe(
            self._config.tracking_poll_interval,
            self._on_snapshot,
            on_unchanged=self._on_unchanged,
        )

    async def stop(self) -> None:
        """Stop polling and remove every map object."""
        await self._feed.unsubscribe()
        self._reconciler.clear()
        self._tracked.clear()
        self._frames.clear()
        self._summaries = []
        self._started = False
        self._live_seen = False
        self._next_urgency_at = None

    async def refresh(self) -> bool:
        """Poll once immediately. Returns ``True`` if the overlay was re-rendered.

        An unchanged snapshot is still re-rendered when a mission has crossed
        into its urgency window since the last render.
        """
        rendered = self._render_count
        await self._feed.poll_once()
        return self._render_count != rendered

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._feed.is_running

    @property
    def reconciler(self) -> OverlayReconciler:
        return self._reconciler

    @property
    def tracked(self) -> tuple[Mission, ...]:
        return self._tracked.missions

    @property
    def frames(self) -> dict[str, TrackingFrame]:
        return dict(self._frames)

    @property
    def summaries(self) -> list[TrackingSummary]:
        return list(self._summaries)

    def summary_for(self, mission_id: str) -> TrackingSummary | None:
        for summary in self._summaries:
            if summary.mission_id == mission_id:
                return summary
        return None

    def set_viewer(self, viewer: GeoPoint | None) -> None:
        """Update the viewer location and re-render with the latest snapshot."""
        self._viewer = viewer
        if not self._started:
            return
        if viewer is not None and self._mission_id is None:
            self._reconciler.center_on(viewer, self._config.follow_zoom)
        latest = self._feed.latest
        if latest is not None:
            self._render(latest)

    # ------------------------------------------------------------------
    # Snapshot handling
    # ------------------------------------------------------------------

    def _on_snapshot(self, missions: list[Mission]) -> None:
        self._render(missions)

    def _on_unchanged(self) -> None:
        due = self._next_urgency_at
        if due is None or self._clock() <= due:
            return
        latest = self._feed.latest
        if latest is not None:
            _logger.debug("Urgency window reached at %s; re-rendering unchanged snapshot", due.isoformat())
            self._render(latest)

    def _next_urgency_boundary(self, tracked: Sequence[Mission], now: datetime) -> datetime | None:
        """Earliest instant after which a tracked, not yet urgent mission becomes urgent."""
        boundaries = [
            mission.expiry_timestamp - self._urgency_window
            for mission in tracked
            if mission.expiry_timestamp is not None and mission.expiry_timestamp - self._urgency_window >= now
        ]
        return min(boundaries, default=None)

    def _render(self, missions: Sequence[Mission]) -> ReconcileStats:
        now = self._clock()
        self._render_count += 1
        change = self._tracked.apply(missions)

        frames: dict[str, TrackingFrame] = {}
        for mission in change.tracked:
            frame = build_frame(
                mission,
                now=now,
                speed_kmh=self._config.assumed_speed_kmh,
                urgency_window=self._urgency_window,
            )
            if frame is not None:
                frames[mission.id] = frame
        self._frames = frames

        viewer = self._viewer if self._mission_id is None else None
        stats = self._reconciler.reconcile(change.tracked, frames, viewer=viewer, now=now)

        if self._mission_id is not None:
            self._center_without_signal(change.tracked)
        self._next_urgency_at = self._next_urgency_boundary(change.tracked, now)

        self._summaries = [
            TrackingSummary.from_frame(frames[mission.id])
            if mission.id in frames
            else TrackingSummary.waiting_for_signal(mission.id)
            for mission in change.tracked
        ]
        if self._on_summary is not None:
            try:
                self._on_summary(list(self._summaries))
            except Exception:
                _logger.warning("Tracking summary callback failed", exc_info=True)
        return stats

    def _center_without_signal(self, tracked: Sequence[Mission]) -> None:
        """Single mode: until a live marker has been shown, keep the pickup in view.

        Once the volunteer has appeared the camera stays with them, even if the
        signal is lost later.
        """
        if self._reconciler.has_live_marker(self._mission_id):
            self._live_seen = True
            return
        if self._live_seen:
            return
        for mission in tracked:
            if mission.id != self._mission_id:
                continue
            try:
                pickup = mission.require_pickup()
            except MissingCoordinateError as exc:
                _logger.debug("Not centering on pickup: %s", exc)
                return
            self._reconciler.center_on(pickup, self._config.follow_zoom)
            return
