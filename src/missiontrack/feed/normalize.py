"""Normalization helpers.

Centralizes lenient parsing of read source payloads.
"""

from __future__ import annotations

import math
import re
from datetime import UTC, datetime
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--":
        return None
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def normalize_status_text(value: str) -> str:
    """Fold ``"PickupVerificationPending"``, ``"pickup-verification pending"`` etc. to ``PICKUP_VERIFICATION_PENDING``."""
    text = _CAMEL_BOUNDARY.sub("_", value.strip())
    return re.sub(r"[\s\-]+", "_", text).upper()


# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1e11


def parse_timestamp(value: Any) -> datetime | None:
    """Convert an ISO-8601 string or epoch (seconds **or** milliseconds) to a UTC datetime.

    Naive datetimes are assumed to be UTC. Returns ``None`` when the value
    cannot be interpreted.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            numeric = safe_float(text)
            if numeric is None:
                return None
            return parse_timestamp(numeric)
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
    ts = safe_float(value)
    if ts is None or ts <= 0:
        return None
    if ts > _MS_THRESHOLD:
        ts /= 1000.0
    return datetime.fromtimestamp(ts, tz=UTC)
