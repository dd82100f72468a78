"""Mutable route editing: freehand drawing, brush erase and undo."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .geometry import polyline_length_m, screen_distance, screen_segment_distance
from .models import GeoPoint, Route, ScreenPoint
from .simplify import simplify

_LOG = logging.getLogger(__name__)

ScreenProjection = Callable[[GeoPoint], ScreenPoint]


class RouteEditor:
    """Ordered route points plus their cached total length.

    Mutators other than :meth:`erase_near`, :meth:`simplify` and
    :meth:`reset` leave ``total_m`` stale so callers can batch edits; call
    :meth:`recalc_distance` after each logical edit.
    """

    def __init__(self, points: Optional[List[GeoPoint]] = None) -> None:
        self.points: List[GeoPoint] = list(points or [])
        self.total_m = 0.0
        self.recalc_distance()

    def __len__(self) -> int:
        return len(self.points)

    def append(self, point: GeoPoint) -> None:
        self.points.append(point)

    def recalc_distance(self) -> float:
        """Recompute and return the total route length in metres."""

        self.total_m = polyline_length_m(self.points)
        return self.total_m

    def undo_last(self) -> Optional[GeoPoint]:
        """Remove and return the last point, or ``None`` when empty."""

        if not self.points:
            return None
        return self.points.pop()

    def reset(self) -> None:
        self.points.clear()
        self.total_m = 0.0

    def erase_near(
        self,
        target: ScreenPoint,
        project: ScreenProjection,
        radius_px: float,
    ) -> int:
        """Erase points and segments touched by a circular brush.

        A vertex is removed when its projected screen position lies within
        ``radius_px`` of ``target``. Both endpoints of a segment are removed
        when the segment passes within ``radius_px`` of ``target``, so a
        brush crossing the middle of a long segment still severs it.

        Args:
            target: Brush centre in screen pixels.
            project: Maps a route point to its current screen position.
            radius_px: Brush radius in pixels (inclusive).

        Returns:
            Number of points removed.

        Raises:
            ValueError: If ``radius_px`` is negative.
        """

        if radius_px < 0:
            raise ValueError("radius_px must not be negative")
        if not self.points:
            return 0

        if len(self.points) == 1:
            if screen_distance(project(self.points[0]), target) <= radius_px:
                self.reset()
                return 1
            return 0

        screen_points = [project(point) for point in self.points]
        keep = [
            screen_distance(screen, target) > radius_px for screen in screen_points
        ]
        for i in range(1, len(screen_points)):
            if (
                screen_segment_distance(target, screen_points[i - 1], screen_points[i])
                <= radius_px
            ):
                keep[i - 1] = False
                keep[i] = False

        before = len(self.points)
        self.points = [point for point, kept in zip(self.points, keep) if kept]
        self.recalc_distance()
        removed = before - len(self.points)
        if removed:
            _LOG.debug(
                "Erased %d of %d route points; %.1f m remain",
                removed,
                before,
                self.total_m,
            )
        return removed

    def simplify(self, tolerance_m: float) -> int:
        """Simplify the route in place and return the number of dropped points."""

        before = len(self.points)
        if before > 2:
            self.points = simplify(self.points, tolerance_m)
        self.recalc_distance()
        return before - len(self.points)

    def to_route(self) -> Route:
        """Return an immutable copy of the current points for a run."""

        return Route.from_points(self.points)


__all__ = ["RouteEditor", "ScreenProjection"]
