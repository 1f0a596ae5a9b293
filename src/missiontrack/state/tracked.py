"""The set of missions currently being tracked.

A mission enters the set the first time the feed reports it with a
non-terminal status and leaves once it reaches ``COMPLETED``/``CANCELLED``
or the feed stops reporting it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from missiontrack.exceptions import UnknownStatusError
from missiontrack.models.mission import Mission, MissionStatus
from missiontrack.state.policy import is_trackable

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TrackedChange:
    """Result of applying one snapshot."""

    tracked: tuple[Mission, ...]
    entered: tuple[str, ...]
    left: tuple[str, ...]


class TrackedMissionSet:
    """In-memory tracked set, updated once per delivered snapshot."""

    def __init__(self) -> None:
        self._missions: dict[str, Mission] = {}
        self._unknown_warned: set[str] = set()

    def __contains__(self, mission_id: object) -> bool:
        return mission_id in self._missions

    def __len__(self) -> int:
        return len(self._missions)

    @property
    def missions(self) -> tuple[Mission, ...]:
        return tuple(self._missions.values())

    def get(self, mission_id: str) -> Mission | None:
        return self._missions.get(mission_id)

    def apply(self, snapshot: Iterable[Mission]) -> TrackedChange:
        """Replace the tracked set with the trackable missions of *snapshot*."""
        current: dict[str, Mission] = {}
        seen: set[str] = set()
        for mission in snapshot:
            seen.add(mission.id)
            if mission.id in current:
                _logger.debug("Duplicate mission id %s in snapshot; keeping the first record", mission.id)
                continue
            if mission.status is MissionStatus.UNKNOWN:
                if mission.id not in self._unknown_warned:
                    self._unknown_warned.add(mission.id)
                    self._warn_unknown_status(mission)
                continue
            self._unknown_warned.discard(mission.id)
            if not is_trackable(mission):
                continue
            current[mission.id] = mission

        # Warned ids are kept only while the mission is still reported.
        self._unknown_warned &= seen

        entered = tuple(mission_id for mission_id in current if mission_id not in self._missions)
        left = tuple(mission_id for mission_id in self._missions if mission_id not in current)
        self._missions = current

        if entered or left:
            _logger.debug("Tracked set changed entered=%s left=%s size=%d", entered, left, len(current))
        return TrackedChange(tracked=tuple(current.values()), entered=entered, left=left)

    @staticmethod
    def _warn_unknown_status(mission: Mission) -> None:
        try:
            MissionStatus.parse_strict(mission.raw.get("status"))
        except UnknownStatusError as exc:
            _logger.warning("Not tracking mission %s: %s", mission.id, exc)

    def clear(self) -> None:
        self._missions.clear()
        self._unknown_warned.clear()
