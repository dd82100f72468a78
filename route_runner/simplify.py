"""Douglas-Peucker simplification for hand-drawn routes."""

from __future__ import annotations

from typing import List, Sequence

from .geometry import perpendicular_distance_m
from .models import GeoPoint


def simplify(points: Sequence[GeoPoint], tolerance_m: float) -> List[GeoPoint]:
    """Simplify a route while preserving its endpoints and overall shape.

    Interior points are dropped unless their metric offset from the chord of
    the interval being examined is strictly greater than ``tolerance_m``. The
    result is an order-preserving subsequence of ``points``. When several
    points share the maximum offset the lowest index is kept.

    Raises:
        ValueError: If ``tolerance_m`` is negative.
    """

    if tolerance_m < 0:
        raise ValueError("tolerance_m must not be negative")
    count = len(points)
    if count < 3:
        return list(points)

    keep = [False] * count
    keep[0] = True
    keep[-1] = True
    # Explicit stack of (start, end) intervals; long strokes would otherwise
    # exceed the recursion limit.
    stack = [(0, count - 1)]
    while stack:
        start, end = stack.pop()
        if end <= start + 1:
            continue
        max_distance = 0.0
        index = start + 1
        anchor = points[start]
        floater = points[end]
        for i in range(start + 1, end):
            offset = perpendicular_distance_m(points[i], anchor, floater)
            if offset > max_distance:
                max_distance = offset
                index = i
        if max_distance > tolerance_m:
            keep[index] = True
            stack.append((index, end))
            stack.append((start, index))
    return [point for point, kept in zip(points, keep) if kept]


__all__ = ["simplify"]
