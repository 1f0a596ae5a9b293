"""End-to-end tracking against an in-memory source and a recording surface."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

import pytest
from conftest import NOW, RecordingMapSurface, mission_record

from missiontrack.config import TrackingConfig
from missiontrack.exceptions import FeedUnavailableError
from missiontrack.feed.source import StaticMissionSource
from missiontrack.models.geo import GeoPoint
from missiontrack.models.mission import Mission
from missiontrack.models.overlay import OverlayKey, OverlayRole
from missiontrack.models.tracking import TrackingSummary
from missiontrack.overlay.variants import COLOR_AVAILABLE, COLOR_URGENT
from missiontrack.tracker import MissionTracker

# Long interval: tests drive polls explicitly through refresh().
CONFIG = TrackingConfig(tracking_poll_interval=3600)


class DownSource:
    async def list_active_missions(self) -> list[Mission]:
        raise FeedUnavailableError("store offline", endpoint="/missions")

    async def get_mission(self, mission_id: str) -> Mission | None:
        raise FeedUnavailableError("store offline", endpoint=f"/missions/{mission_id}")


class SummaryRecorder:
    def __init__(self) -> None:
        self.batches: list[list[TrackingSummary]] = []
        self.event = asyncio.Event()

    def __call__(self, summaries: list[TrackingSummary]) -> None:
        self.batches.append(summaries)
        self.event.set()

    async def wait(self) -> list[TrackingSummary]:
        await asyncio.wait_for(self.event.wait(), timeout=1.0)
        self.event.clear()
        return self.batches[-1]


def _tracker(source: object, surface: RecordingMapSurface, **kwargs: object) -> MissionTracker:
    return MissionTracker(source, surface, config=CONFIG, clock=lambda: NOW, **kwargs)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_map_mode_renders_and_summarizes(surface: RecordingMapSurface) -> None:
    source = StaticMissionSource([mission_record("M1"), mission_record("M2", status="COMPLETED")])
    recorder = SummaryRecorder()

    async with _tracker(source, surface, on_summary=recorder) as tracker:
        summaries = await recorder.wait()

        assert surface.calls[0] == ("set_center", (GeoPoint(lat=20.5937, lng=78.9629), 12))
        assert surface.names().count("pan_to") == 1
        assert {key.mission_id for key in surface.keys} == {"M1"}
        assert len(surface.objects) == 4

        assert [s.mission_id for s in summaries] == ["M1"]
        assert summaries[0].distance_km == 7.6
        assert summaries[0].eta_minutes == 23
        assert summaries[0].text == "Volunteer is approx 7.6km away (~23 min)."
        assert tracker.frames["M1"].phase_label == "Delivering Order"
        assert [m.id for m in tracker.tracked] == ["M1"]
        assert tracker.is_running

    assert surface.objects == {}
    assert not tracker.is_running


@pytest.mark.asyncio
async def test_completed_mission_is_removed_on_refresh(surface: RecordingMapSurface) -> None:
    source = StaticMissionSource([mission_record("M1")])
    recorder = SummaryRecorder()

    async with _tracker(source, surface, on_summary=recorder) as tracker:
        await recorder.wait()
        source.set_records([mission_record("M1", status="COMPLETED")])

        assert await tracker.refresh() is True
        assert surface.objects == {}
        assert tracker.summaries == []
        assert len(tracker.reconciler) == 0


@pytest.mark.asyncio
async def test_unchanged_refresh_does_nothing(surface: RecordingMapSurface) -> None:
    source = StaticMissionSource([mission_record("M1")])
    recorder = SummaryRecorder()

    async with _tracker(source, surface, on_summary=recorder) as tracker:
        await recorder.wait()
        surface.reset_calls()
        assert await tracker.refresh() is False
        assert surface.calls == []


@pytest.mark.asyncio
async def test_stop_clears_and_stops_polling(surface: RecordingMapSurface) -> None:
    source = StaticMissionSource([mission_record("M1")])
    recorder = SummaryRecorder()
    tracker = _tracker(source, surface, on_summary=recorder)

    tracker.start()
    await recorder.wait()
    await tracker.stop()

    assert surface.objects == {}
    assert tracker.summaries == []
    assert tracker.frames == {}
    assert not tracker.is_running

    source.set_records([mission_record("M1", volunteerLocation={"lat": 20.07, "lng": 78.07})])
    await asyncio.sleep(0.01)
    assert len(recorder.batches) == 1


@pytest.mark.asyncio
async def test_single_mode_follows_pickup_until_signal(surface: RecordingMapSurface) -> None:
    source = StaticMissionSource(
        [mission_record("M1", status="OPEN", volunteerLocation=None), mission_record("M2")]
    )
    recorder = SummaryRecorder()

    async with _tracker(source, surface, mission_id="M1", on_summary=recorder) as tracker:
        summaries = await recorder.wait()

        assert summaries == [TrackingSummary.waiting_for_signal("M1")]
        assert summaries[0].text == "Waiting for volunteer signal..."
        assert ("set_center", (GeoPoint(lat=20.0, lng=78.0), 13)) in surface.calls
        assert {key.mission_id for key in surface.keys} == {"M1"}

        source.set_records([mission_record("M1", status="PICKUP_VERIFICATION_PENDING"), mission_record("M2")])
        surface.reset_calls()
        assert await tracker.refresh() is True

        assert "set_center" not in surface.names()
        assert ("pan_to", GeoPoint(lat=20.05, lng=78.05)) in surface.calls
        assert tracker.reconciler.has_live_marker("M1")
        summary = tracker.summary_for("M1")
        assert summary is not None
        assert summary.phase_label == "Verifying Pickup"


@pytest.mark.asyncio
async def test_single_mode_ignores_viewer(surface: RecordingMapSurface) -> None:
    source = StaticMissionSource([mission_record("M1")])
    recorder = SummaryRecorder()
    viewer = GeoPoint(lat=20.3, lng=78.3)

    async with _tracker(source, surface, mission_id="M1", viewer=viewer, on_summary=recorder):
        await recorder.wait()
        assert OverlayKey.viewer() not in surface.keys


@pytest.mark.asyncio
async def test_persistent_source_failure_is_survivable(surface: RecordingMapSurface) -> None:
    async with _tracker(DownSource(), surface) as tracker:
        await asyncio.sleep(0.01)
        assert await tracker.refresh() is False
        assert tracker.is_running
        assert surface.objects == {}
        assert tracker.summaries == []


@pytest.mark.asyncio
async def test_set_viewer_adds_user_marker(surface: RecordingMapSurface) -> None:
    source = StaticMissionSource([mission_record("M1")])
    recorder = SummaryRecorder()

    async with _tracker(source, surface, on_summary=recorder) as tracker:
        await recorder.wait()
        viewer = GeoPoint(lat=20.3, lng=78.3)
        tracker.set_viewer(viewer)

        assert ("set_center", (viewer, 13)) in surface.calls
        assert OverlayKey.viewer() in surface.keys
        assert surface.variant_of(OverlayKey.viewer()).label == "You are here"

        tracker.set_viewer(None)
        assert OverlayKey.viewer() not in surface.keys


@pytest.mark.asyncio
async def test_failing_summary_callback_does_not_break_rendering(surface: RecordingMapSurface) -> None:
    source = StaticMissionSource([mission_record("M1")])

    def boom(_summaries: list[TrackingSummary]) -> None:
        raise RuntimeError("ui gone")

    async with _tracker(source, surface, on_summary=boom) as tracker:
        await asyncio.sleep(0.01)
        assert OverlayKey("M1", OverlayRole.LIVE_MARKER) in surface.keys
        assert tracker.summary_for("M1") is not None


@pytest.mark.asyncio
async def test_single_mode_keeps_camera_after_signal_loss(surface: RecordingMapSurface) -> None:
    source = StaticMissionSource([mission_record("M1")])
    recorder = SummaryRecorder()

    async with _tracker(source, surface, mission_id="M1", on_summary=recorder) as tracker:
        await recorder.wait()
        assert tracker.reconciler.has_live_marker("M1")

        source.set_records([mission_record("M1", volunteerLocation=None)])
        surface.reset_calls()
        assert await tracker.refresh() is True

        assert sorted(surface.names()) == ["remove_marker", "remove_path"]
        assert tracker.summaries == [TrackingSummary.waiting_for_signal("M1")]


@pytest.mark.asyncio
async def test_single_mode_without_pickup_does_not_center(surface: RecordingMapSurface) -> None:
    source = StaticMissionSource([mission_record("M1", status="OPEN", location=None, volunteerLocation=None)])
    recorder = SummaryRecorder()

    async with _tracker(source, surface, mission_id="M1", on_summary=recorder):
        await recorder.wait()
        assert surface.names().count("set_center") == 1


@pytest.mark.asyncio
async def test_unchanged_mission_turns_urgent_when_clock_passes_window(surface: RecordingMapSurface) -> None:
    source = StaticMissionSource([mission_record("M1", status="OPEN", volunteerLocation=None)])
    recorder = SummaryRecorder()
    now = [NOW]

    def clock() -> datetime:
        return now[0]

    tracker = MissionTracker(source, surface, config=CONFIG, clock=clock, on_summary=recorder)
    async with tracker:
        await recorder.wait()
        pickup = OverlayKey("M1", OverlayRole.PICKUP_MARKER)
        assert surface.variant_of(pickup).color == COLOR_AVAILABLE

        now[0] = NOW + timedelta(hours=7)
        assert await tracker.refresh() is False
        assert surface.variant_of(pickup).color == COLOR_AVAILABLE

        now[0] = NOW + timedelta(hours=10)
        surface.reset_calls()
        assert await tracker.refresh() is True
        assert surface.calls == [("update_marker", pickup)]
        assert surface.variant_of(pickup).color == COLOR_URGENT

        surface.reset_calls()
        assert await tracker.refresh() is False
        assert surface.calls == []
