"""Visual variant selection.

A marker's look is a pure function of its role, the mission's display
fields and urgency, so variant changes need no reconciliation branch of
their own: the reconciler compares variants alongside positions. Popup
text lives in ``MarkerVariant.label``, which means an edited food name or
a new volunteer flows through the ordinary update path.
"""

from __future__ import annotations

from missiontrack.models.mission import FoodCategory, Mission
from missiontrack.models.overlay import MarkerVariant, OverlayRole, PathStyle
from missiontrack.models.tracking import TrackingFrame

COLOR_URGENT = "#f43f5e"
COLOR_AVAILABLE = "#10b981"
COLOR_DROPOFF = "#f97316"
COLOR_LIVE = "#3b82f6"

ICON_VEG = "🥗"
ICON_MEAL = "🍱"
ICON_DROPOFF = "📍"
ICON_LIVE = "🚴"
ICON_VIEWER = "●"

LIVE_Z_INDEX = 1000

PATH_STYLE = PathStyle(color=COLOR_LIVE, weight=4, opacity=0.6, dash_array="10, 15")

_CATEGORY_TEXT = {FoodCategory.VEG: "Veg", FoodCategory.NON_VEG: "Non-Veg"}

_LABEL_SEPARATOR = " | "


def pickup_label(mission: Mission, *, is_urgent: bool) -> str:
    """``"Rice and dal | 20 meals | Veg | Available | Pickup: Green Kitchen"``."""
    parts = [
        mission.food_name or "Food donation",
        mission.quantity,
        _CATEGORY_TEXT.get(mission.food_category),
        "Urgent" if is_urgent else "Available",
    ]
    if mission.donor_name:
        parts.append(f"Pickup: {mission.donor_name}")
    return _LABEL_SEPARATOR.join(part for part in parts if part)


def dropoff_label(mission: Mission) -> str:
    return f"Dropoff: {mission.requester_name or 'Requester'}"


def live_label(frame: TrackingFrame | None, volunteer_name: str | None = None) -> str:
    name = volunteer_name or "Volunteer"
    if frame is None:
        return name
    stats = f"{frame.phase_label}: {frame.distance_km:.1f} km, ~{frame.eta_minutes} min"
    return f"{name}{_LABEL_SEPARATOR}{stats}"


def marker_variant(
    role: OverlayRole,
    *,
    mission: Mission | None = None,
    is_urgent: bool = False,
    frame: TrackingFrame | None = None,
) -> MarkerVariant:
    """Descriptor for a marker of *role*.

    Mission markers take their popup text from *mission*; without one the
    marker carries no label.
    """
    if role is OverlayRole.PICKUP_MARKER:
        category = mission.food_category if mission is not None else FoodCategory.UNKNOWN
        return MarkerVariant(
            icon=ICON_VEG if category is FoodCategory.VEG else ICON_MEAL,
            color=COLOR_URGENT if is_urgent else COLOR_AVAILABLE,
            badge="URGENT" if is_urgent else None,
            label=pickup_label(mission, is_urgent=is_urgent) if mission is not None else None,
        )
    if role is OverlayRole.DROPOFF_MARKER:
        return MarkerVariant(
            icon=ICON_DROPOFF,
            color=COLOR_DROPOFF,
            label=dropoff_label(mission) if mission is not None else None,
        )
    if role is OverlayRole.LIVE_MARKER:
        return MarkerVariant(
            icon=ICON_LIVE,
            color=COLOR_LIVE,
            pulsing=True,
            badge="LIVE",
            z_index=LIVE_Z_INDEX,
            label=live_label(frame, mission.volunteer_name if mission is not None else None),
        )
    if role is OverlayRole.USER_MARKER:
        return MarkerVariant(icon=ICON_VIEWER, color=COLOR_LIVE, label="You are here")
    raise ValueError(f"{role} is not a marker role")
