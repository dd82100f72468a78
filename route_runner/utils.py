"""General utility helpers shared across modules."""

from __future__ import annotations

from typing import Optional


def format_distance_km(meters: float) -> str:
    """Format metres as ``X.XX km``."""

    return f"{meters / 1000.0:.2f} km"


def format_pace(seconds_per_km: Optional[float]) -> str:
    """Format a pace as ``M:SS /km`` (``--:-- /km`` when unknown)."""

    if seconds_per_km is None or seconds_per_km <= 0:
        return "--:-- /km"
    total = int(round(seconds_per_km))
    mins, sec = divmod(total, 60)
    return f"{mins}:{sec:02d} /km"
