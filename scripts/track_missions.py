#!/usr/bin/env python3
"""Follow live missions from an HTTP read source without a renderer.

Every map operation the tracker issues is logged by a
``LoggingMapSurface`` and the distance/ETA summaries are printed on each
change.

Configuration comes from ``MISSIONTRACK_*`` environment variables; the
command-line flags below take precedence:

- ``--base-url`` (fallback: MISSIONTRACK_SOURCE_BASE_URL)
- ``--interval`` (fallback: MISSIONTRACK_TRACKING_POLL_INTERVAL)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from missiontrack import (  # noqa: E402
    HttpMissionSource,
    LoggingMapSurface,
    MissionTrackConfigError,
    MissionTracker,
    TrackingConfig,
)
from missiontrack.models import GeoPoint, TrackingSummary  # noqa: E402


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track live food-donation missions and log map operations")
    parser.add_argument("--base-url", default=None, help="Base URL of the mission read source.")
    parser.add_argument("--interval", type=float, default=None, help="Seconds between polls.")
    parser.add_argument(
        "--mission-id",
        default=None,
        help="Follow a single mission instead of every active one.",
    )
    parser.add_argument(
        "--viewer",
        default=None,
        help="Viewer location as 'lat,lng'; shown as the 'You are here' marker in map mode.",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=60.0,
        help="Seconds to keep tracking before exiting.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args()


def _parse_viewer(value: str | None) -> GeoPoint | None:
    if value is None:
        return None
    lat, _, lng = value.partition(",")
    return GeoPoint.from_value((lat.strip(), lng.strip()))


def _print_summaries(summaries: list[TrackingSummary]) -> None:
    if not summaries:
        print("No active missions")
        return
    for summary in summaries:
        print(f"{summary.mission_id}: {summary.text}")


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.interval is not None:
        overrides["tracking_poll_interval"] = args.interval
    if args.base_url is not None:
        overrides["source_base_url"] = args.base_url.rstrip("/")
    try:
        config = TrackingConfig.from_env(**overrides)
    except MissionTrackConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    if not config.source_base_url:
        print("A base URL is required (--base-url or MISSIONTRACK_SOURCE_BASE_URL)", file=sys.stderr)
        return 2

    async with HttpMissionSource(config.source_base_url, timeout=config.request_timeout) as source:
        tracker = MissionTracker(
            source,
            LoggingMapSurface(),
            config=config,
            mission_id=args.mission_id,
            viewer=_parse_viewer(args.viewer),
            on_summary=_print_summaries,
        )
        async with tracker:
            await asyncio.sleep(args.duration)
    return 0


def main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
