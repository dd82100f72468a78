"""Live progress tracking of GPS samples against a fixed route."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .config import GLITCH_DISTANCE_M
from .errors import RunClosedError
from .geometry import (
    cumulative_distances,
    distance,
    interpolate,
    project_onto_polyline,
    segment_lengths,
)
from .models import DistanceTable, GeoPoint, ProgressSnapshot, Route, RouteSplit

_LOG = logging.getLogger(__name__)


class ProgressTracker:
    """Project live positions onto a route for the duration of one run.

    The route is copied at construction and never mutated; the cumulative
    distance table is derived once. A route with fewer than two points is a
    valid but degenerate state: every update reports zero progress and zero
    distance run.

    Distance run is accumulated from consecutive samples. Deltas of exactly
    zero are ignored as stationary, and deltas of ``glitch_distance_m`` or more
    are discarded as GPS jumps. This is a noise filter, not a speed cap, so a
    genuine move across the threshold between two samples goes uncounted.
    Samples must be delivered in timestamp order.
    """

    def __init__(
        self,
        route: Route,
        *,
        glitch_distance_m: float = GLITCH_DISTANCE_M,
    ) -> None:
        if glitch_distance_m <= 0:
            raise ValueError("glitch_distance_m must be greater than zero")
        self._route = Route.from_points(route)
        self._glitch_distance_m = float(glitch_distance_m)
        self._segment_lengths = segment_lengths(self._route.points)
        self._cumulative = cumulative_distances(self._route.points)
        self._lats = np.asarray([p.lat for p in self._route.points], dtype=float)
        self._lons = np.asarray([p.lon for p in self._route.points], dtype=float)
        self._last_sample: Optional[GeoPoint] = None
        self._distance_run_m = 0.0
        self._last_delta_m: Optional[float] = None
        self._last_delta_accepted = False
        self._closed = False
        _LOG.debug(
            "Progress tracker created for %d route points (%.1f m)",
            len(self._route),
            self.total_length_m,
        )

    def __enter__(self) -> "ProgressTracker":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.cleanup()

    @property
    def route(self) -> Route:
        return self._route

    @property
    def glitch_distance_m(self) -> float:
        return self._glitch_distance_m

    @property
    def cumulative_distances(self) -> DistanceTable:
        """Read-only copy of the cumulative distance table."""

        table = self._cumulative.copy()
        table.setflags(write=False)
        return table

    @property
    def total_length_m(self) -> float:
        return float(self._cumulative[-1])

    @property
    def distance_run_m(self) -> float:
        return self._distance_run_m

    @property
    def last_sample(self) -> Optional[GeoPoint]:
        return self._last_sample

    @property
    def last_delta_m(self) -> Optional[float]:
        """Distance between the two most recent samples, if any."""

        return self._last_delta_m

    @property
    def last_delta_accepted(self) -> bool:
        """Whether the most recent delta was added to the distance run."""

        return self._last_delta_accepted

    @property
    def closed(self) -> bool:
        return self._closed

    def update(self, sample: GeoPoint) -> ProgressSnapshot:
        """Consume a position sample and return the resulting progress.

        Raises:
            RunClosedError: If :meth:`cleanup` has already been called.
        """

        if self._closed:
            raise RunClosedError("Progress tracker has been cleaned up")
        if self._route.is_empty:
            _LOG.debug("No route points available for progress tracking")
            return ProgressSnapshot(distance_run_m=0.0, route_progress=0.0)

        self._accumulate(sample)

        distances, fractions = project_onto_polyline(sample, self._lats, self._lons)
        # argmin returns the first index on ties.
        nearest = int(np.argmin(distances))
        fraction = float(fractions[nearest])
        segment_length = float(self._segment_lengths[nearest])
        covered = float(self._cumulative[nearest]) + fraction * segment_length
        total = self.total_length_m
        progress = covered / total if total > 0 else 0.0
        progress = min(max(progress, 0.0), 1.0)

        split = self._split(nearest, fraction)
        _LOG.debug(
            "Progress: %.1f / %.1f m (%.1f%%); distance run %.1f m",
            covered,
            total,
            progress * 100.0,
            self._distance_run_m,
        )
        return ProgressSnapshot(
            distance_run_m=self._distance_run_m,
            route_progress=progress,
            covered_distance_m=covered,
            nearest_index=nearest,
            position=sample,
            split=split,
        )

    def cleanup(self) -> None:
        """End the run; later updates raise :class:`RunClosedError`."""

        if self._closed:
            return
        self._closed = True
        _LOG.debug(
            "Progress tracker closed after %.1f m run", self._distance_run_m
        )

    def _accumulate(self, sample: GeoPoint) -> None:
        self._last_delta_m = None
        self._last_delta_accepted = False
        if self._last_sample is not None:
            delta = distance(self._last_sample, sample)
            self._last_delta_m = delta
            if 0.0 < delta < self._glitch_distance_m:
                self._distance_run_m += delta
                self._last_delta_accepted = True
            elif delta >= self._glitch_distance_m:
                _LOG.debug("Discarding GPS jump of %.1f m", delta)
        self._last_sample = sample

    def _split(self, nearest: int, fraction: float) -> RouteSplit:
        points = self._route.points
        projection = interpolate(points[nearest], points[nearest + 1], fraction)
        completed = points[: nearest + 1] + (projection,)
        remaining = (projection,) + points[nearest + 1 :]
        return RouteSplit(completed=completed, projection=projection, remaining=remaining)


__all__ = ["ProgressTracker"]
