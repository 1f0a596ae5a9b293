"""Read source contract and the in-memory implementation."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from pydantic import ValidationError

from missiontrack._redact import redact_for_log
from missiontrack.models.mission import Mission

_logger = logging.getLogger(__name__)


class MissionSource(Protocol):
    """Structural read source interface consumed by :class:`MissionFeed`.

    The tracking core never mutates the source.
    """

    async def list_active_missions(self) -> list[Mission]: ...

    async def get_mission(self, mission_id: str) -> Mission | None: ...


def parse_mission(record: Any) -> Mission | None:
    """Parse one raw record; invalid records are logged and dropped."""
    if isinstance(record, Mission):
        return record
    if not isinstance(record, Mapping):
        _logger.debug("Dropping non-object mission record %s", redact_for_log(record))
        return None
    try:
        return Mission.model_validate(dict(record))
    except ValidationError:
        _logger.debug("Dropping invalid mission record %s", redact_for_log(record), exc_info=True)
        return None


def parse_missions(records: Iterable[Any]) -> list[Mission]:
    missions: list[Mission] = []
    for record in records:
        mission = parse_mission(record)
        if mission is not None:
            missions.append(mission)
    return missions


class StaticMissionSource:
    """In-memory read source backed by a list of raw records.

    Mirrors the key-value store the web app keeps its postings in; callers
    swap the stored records with :meth:`set_records` to simulate updates.
    """

    def __init__(self, records: Iterable[Mapping[str, Any] | Mission] = ()) -> None:
        self._records: list[Mapping[str, Any] | Mission] = list(records)

    def set_records(self, records: Iterable[Mapping[str, Any] | Mission]) -> None:
        self._records = list(records)

    async def list_active_missions(self) -> list[Mission]:
        return parse_missions(self._records)

    async def get_mission(self, mission_id: str) -> Mission | None:
        for mission in parse_missions(self._records):
            if mission.id == mission_id:
                return mission
        return None
