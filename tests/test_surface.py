from __future__ import annotations

import logging

import pytest
from conftest import NOW, mission_record

from missiontrack.models.mission import Mission
from missiontrack.overlay.reconciler import OverlayReconciler
from missiontrack.overlay.surface import LoggingMapSurface
from missiontrack.resolver import build_frame


def test_logging_surface_tracks_objects(caplog: pytest.LogCaptureFixture) -> None:
    surface = LoggingMapSurface(logging.getLogger("missiontrack.test.surface"))
    reconciler = OverlayReconciler(surface)
    mission = Mission.model_validate(mission_record())
    frame = build_frame(mission, now=NOW)
    assert frame is not None

    with caplog.at_level(logging.INFO, logger="missiontrack.test.surface"):
        reconciler.reconcile([mission], {mission.id: frame}, now=NOW)

    assert len(surface.objects) == 4
    assert any(handle.startswith("M1:live_marker#") for handle in surface.objects)
    messages = [record.getMessage() for record in caplog.records]
    assert any(message.startswith("pan to 20.05000,78.05000") for message in messages)

    reconciler.clear()
    assert surface.objects == {}
