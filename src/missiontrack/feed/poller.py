"""Fixed-rate mission polling.

This module owns the "poll + detect change" loop. It simulates push
updates by fetching the whole mission set on a fixed period and only
handing a snapshot downstream when its content differs from the last one
delivered.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Sequence
from typing import Any

from missiontrack._constants import TRACKING_POLL_INTERVAL_S
from missiontrack.exceptions import FeedUnavailableError
from missiontrack.feed.source import MissionSource
from missiontrack.models.mission import Mission

_logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[list[Mission]], None]
UnchangedCallback = Callable[[], None]


def snapshot_fingerprint(missions: Sequence[Mission]) -> list[dict[str, Any]]:
    """Content fingerprint of a snapshot, independent of record order.

    Compares ids, statuses, coordinates and display fields; the raw payload
    is ignored so that cosmetic source changes do not trigger a re-render.
    """
    ordered = sorted(missions, key=lambda mission: mission.id)
    return [mission.model_dump(mode="json", exclude={"raw"}) for mission in ordered]


class MissionFeed:
    """Poll a :class:`MissionSource` at a fixed interval.

    Usage::

        feed = MissionFeed(source, interval=2.0)
        feed.subscribe(None, on_snapshot)
        ...
        await feed.unsubscribe()

    Ticks never overlap: one fetch plus the snapshot callback run to
    completion before the next tick is scheduled. A failed fetch is logged
    and retried on the next tick at the same interval.

    Parameters
    ----------
    source
        Read source to poll.
    interval
        Default seconds between the start of two consecutive ticks.
    mission_id
        When set, only this mission is polled (via ``get_mission``) and
        snapshots hold at most one mission.
    """

    def __init__(
        self,
        source: MissionSource,
        *,
        interval: float = TRACKING_POLL_INTERVAL_S,
        mission_id: str | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval!r}")
        self._source = source
        self._interval = interval
        self._mission_id = mission_id
        self._task: asyncio.Task[None] | None = None
        self._on_snapshot: SnapshotCallback | None = None
        self._on_unchanged: UnchangedCallback | None = None
        self._generation = 0
        self._last_fingerprint: list[dict[str, Any]] | None = None
        self._latest: list[Mission] | None = None
        self._consecutive_failures = 0
        self._tick_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def latest(self) -> list[Mission] | None:
        """Last delivered snapshot, or ``None`` before the first successful poll."""
        return list(self._latest) if self._latest is not None else None

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def subscribe(
        self,
        interval: float | None,
        on_snapshot: SnapshotCallback,
        *,
        on_unchanged: UnchangedCallback | None = None,
    ) -> None:
        """Start polling and deliver changed snapshots to *on_snapshot*.

        *on_unchanged*, if given, is called after every successful tick whose
        snapshot matched the last one delivered.

        Must be called from a running event loop. Any previous subscription
        is replaced.
        """
        if interval is not None and interval <= 0:
            raise ValueError(f"interval must be positive, got {interval!r}")
        self._cancel_task()
        self._generation += 1
        self._on_snapshot = on_snapshot
        self._on_unchanged = on_unchanged
        # A fresh subscriber always receives the first snapshot.
        self._last_fingerprint = None
        period = interval if interval is not None else self._interval
        self._task = asyncio.get_running_loop().create_task(self._run(period, self._generation))
        _logger.debug("Mission feed subscribed interval=%.2fs mission_id=%s", period, self._mission_id)

    async def unsubscribe(self) -> None:
        """Stop polling. No callback fires after this returns.

        A fetch still in flight is cancelled and its result discarded.
        """
        self._generation += 1
        self._on_snapshot = None
        self._on_unchanged = None
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        _logger.debug("Mission feed unsubscribed")

    def _cancel_task(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()

    async def _run(self, period: float, generation: int) -> None:
        loop = asyncio.get_running_loop()
        while generation == self._generation:
            started = loop.time()
            await self._tick(generation)
            elapsed = loop.time() - started
            # Fixed rate: the next tick starts one period after this one started.
            await asyncio.sleep(max(0.0, period - elapsed))

    async def poll_once(self) -> bool:
        """Run a single tick now. Returns ``True`` if a snapshot was delivered."""
        return await self._tick(self._generation)

    async def _fetch(self) -> list[Mission]:
        if self._mission_id is None:
            return list(await self._source.list_active_missions())
        mission = await self._source.get_mission(self._mission_id)
        return [mission] if mission is not None else []

    async def _tick(self, generation: int) -> bool:
        async with self._tick_lock:
            return await self._tick_locked(generation)

    async def _tick_locked(self, generation: int) -> bool:
        try:
            missions = await self._fetch()
        except asyncio.CancelledError:
            raise
        except FeedUnavailableError as exc:
            self._consecutive_failures += 1
            _logger.debug("Mission feed unavailable (%d consecutive): %s", self._consecutive_failures, exc)
            return False
        except Exception:
            self._consecutive_failures += 1
            _logger.debug(
                "Mission feed poll failed (%d consecutive)",
                self._consecutive_failures,
                exc_info=True,
            )
            return False

        if generation != self._generation:
            _logger.debug("Discarding mission snapshot fetched by a stale subscription")
            return False

        if self._consecutive_failures:
            _logger.debug("Mission feed recovered after %d failed polls", self._consecutive_failures)
        self._consecutive_failures = 0

        fingerprint = snapshot_fingerprint(missions)
        if fingerprint == self._last_fingerprint:
            on_unchanged = self._on_unchanged
            if on_unchanged is not None:
                try:
                    on_unchanged()
                except Exception:
                    _logger.warning("Mission feed idle callback failed", exc_info=True)
            return False
        self._last_fingerprint = fingerprint
        self._latest = missions

        callback = self._on_snapshot
        if callback is None:
            return True
        try:
            callback(list(missions))
        except Exception:
            _logger.warning("Mission snapshot callback failed", exc_info=True)
        return True
