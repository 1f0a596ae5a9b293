"""Phase-aware navigation target selection.

Given a mission's status, decide whether the agent is heading to the
pickup or the dropoff and what label to show for the current phase.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from missiontrack._constants import (
    DEFAULT_SPEED_KMH,
    LABEL_DELIVERING,
    LABEL_HEADING_TO_PICKUP,
    LABEL_VERIFYING_DELIVERY,
    LABEL_VERIFYING_PICKUP,
    URGENCY_WINDOW_HOURS,
)
from missiontrack.geo import distance_km, eta_minutes
from missiontrack.models.mission import Mission, MissionStatus
from missiontrack.models.tracking import Leg, ResolvedTarget, TrackingFrame
from missiontrack.state.policy import is_urgent


def resolve(mission: Mission) -> ResolvedTarget | None:
    """Return the current navigation target, or ``None`` when there is none.

    Precedence:

    1. ``PICKUP_VERIFICATION_PENDING`` targets the pickup even when a
       dropoff is already assigned; the agent has not left the pickup site.
    2. Otherwise an assigned dropoff is the target.
    3. Otherwise the agent is heading to the pickup.

    Missions without a live position (or whose chosen endpoint has no
    coordinate) have no target. This never raises.
    """
    if mission.tracked_position is None:
        return None

    if mission.status is MissionStatus.PICKUP_VERIFICATION_PENDING:
        point, label, leg = mission.pickup, LABEL_VERIFYING_PICKUP, Leg.PICKUP
    elif mission.dropoff is not None:
        if mission.status is MissionStatus.DELIVERY_VERIFICATION_PENDING:
            label = LABEL_VERIFYING_DELIVERY
        else:
            label = LABEL_DELIVERING
        point, leg = mission.dropoff, Leg.DROPOFF
    else:
        point, label, leg = mission.pickup, LABEL_HEADING_TO_PICKUP, Leg.PICKUP

    if point is None:
        return None
    return ResolvedTarget(target_point=point, phase_label=label, leg=leg)


def build_frame(
    mission: Mission,
    *,
    now: datetime,
    speed_kmh: float = DEFAULT_SPEED_KMH,
    urgency_window: timedelta = timedelta(hours=URGENCY_WINDOW_HOURS),
) -> TrackingFrame | None:
    """Resolve the target and compute distance/ETA for one mission."""
    target = resolve(mission)
    live = mission.tracked_position
    if target is None or live is None:
        return None
    distance = distance_km(live, target.target_point)
    return TrackingFrame(
        mission_id=mission.id,
        live_position=live,
        target_point=target.target_point,
        phase_label=target.phase_label,
        leg=target.leg,
        distance_km=distance,
        eta_minutes=eta_minutes(distance, speed_kmh),
        is_urgent=is_urgent(mission.expiry_timestamp, now, urgency_window),
    )
