"""HTTP read source for missions exposed as JSON."""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

import aiohttp

from missiontrack._constants import USER_AGENT
from missiontrack.exceptions import FeedUnavailableError
from missiontrack.feed.source import parse_mission, parse_missions
from missiontrack.models.mission import Mission

_logger = logging.getLogger(__name__)

_LIST_WRAPPER_KEYS = ("missions", "postings", "data", "items")


class HttpMissionSource:
    """Read missions from ``GET {base_url}/missions`` and ``GET {base_url}/missions/{id}``.

    Usage::

        async with HttpMissionSource("https://example.org/api") as source:
            missions = await source.list_active_missions()

    An externally owned :class:`aiohttp.ClientSession` may be injected; it is
    then left open on exit.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: aiohttp.ClientSession | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._external_session = session is not None
        self._http_session = session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def __aenter__(self) -> HttpMissionSource:
        self._require_session()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
        self._http_session = None

    def _require_session(self) -> aiohttp.ClientSession:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession(timeout=self._timeout)
        return self._http_session

    async def _get_json(self, endpoint: str) -> Any:
        """GET *endpoint* and decode the JSON body; ``None`` on 404."""
        url = f"{self._base_url}{endpoint}"
        headers = {"accept": "application/json", "user-agent": USER_AGENT}
        _logger.debug("GET %s", url)

        try:
            async with self._require_session().get(url, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status == 404:
                    return None
                if resp.status != 200:
                    raise FeedUnavailableError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except FeedUnavailableError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise FeedUnavailableError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise FeedUnavailableError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc

    async def list_active_missions(self) -> list[Mission]:
        payload = await self._get_json("/missions")
        if payload is None:
            return []
        if isinstance(payload, dict):
            for key in _LIST_WRAPPER_KEYS:
                wrapped = payload.get(key)
                if isinstance(wrapped, list):
                    payload = wrapped
                    break
        if not isinstance(payload, list):
            raise FeedUnavailableError("Mission list response is not a JSON array", endpoint="/missions")
        return parse_missions(payload)

    async def get_mission(self, mission_id: str) -> Mission | None:
        endpoint = f"/missions/{quote(mission_id, safe='')}"
        payload = await self._get_json(endpoint)
        if payload is None:
            return None
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]
        return parse_mission(payload)
