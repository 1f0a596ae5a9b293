"""Deterministic tracking policy.

This module contains *no* payload parsing. The pydantic boundary is
responsible for producing normalized missions.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from missiontrack._constants import URGENCY_WINDOW_HOURS
from missiontrack.models.mission import Mission, MissionStatus


def is_urgent(
    expiry: datetime | None,
    now: datetime,
    window: timedelta = timedelta(hours=URGENCY_WINDOW_HOURS),
) -> bool:
    """Food expiring in less than *window* from *now* is urgent.

    Already-expired food is urgent as well. A mission without an expiry
    is never urgent.
    """
    if expiry is None:
        return False
    return expiry - now < window


def is_trackable(mission: Mission) -> bool:
    """Whether a mission belongs in the tracked set for this cycle."""
    if mission.status is MissionStatus.UNKNOWN:
        return False
    return not mission.status.is_terminal
