"""Internal constants shared across the library."""

EARTH_RADIUS_KM = 6371.0

# City delivery speed assumed for ETA estimates.
DEFAULT_SPEED_KMH = 20.0

URGENCY_WINDOW_HOURS = 12.0

TRACKING_POLL_INTERVAL_S = 2.0
CHAT_POLL_INTERVAL_S = 1.0

# Roughly 0.1 m of latitude.
POSITION_EPSILON_DEG = 1e-6

DEFAULT_CENTER: tuple[float, float] = (20.5937, 78.9629)
INITIAL_ZOOM = 12
FOLLOW_ZOOM = 13

USER_AGENT = "missiontrack/0.1"

# ------------------------------------------------------------------
# Phase labels shown next to a live marker
# ------------------------------------------------------------------

LABEL_VERIFYING_PICKUP = "Verifying Pickup"
LABEL_VERIFYING_DELIVERY = "Verifying Delivery"
LABEL_DELIVERING = "Delivering Order"
LABEL_HEADING_TO_PICKUP = "Heading to Pickup"
