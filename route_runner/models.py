"""Dataclasses describing routes, position samples and progress results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

LatLon = Tuple[float, float]
DistanceTable = NDArray[np.float64]


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """Latitude/longitude pair in degrees."""

    lat: float
    lon: float

    def as_tuple(self) -> LatLon:
        return (self.lat, self.lon)


@dataclass(frozen=True, slots=True)
class ScreenPoint:
    """Pixel coordinate in the current map viewport."""

    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Route:
    """Ordered, immutable sequence of route points.

    Index ``i`` connects to index ``i + 1`` with a straight segment. A route
    with fewer than two points has zero length and is treated as empty for
    progress tracking.
    """

    points: Tuple[GeoPoint, ...] = ()

    @classmethod
    def from_points(cls, points: Iterable[GeoPoint]) -> "Route":
        return cls(tuple(points))

    @classmethod
    def from_latlon(cls, pairs: Iterable[Sequence[float]]) -> "Route":
        """Build a route from ``(lat, lon)`` pairs."""

        return cls(tuple(GeoPoint(float(lat), float(lon)) for lat, lon in pairs))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[GeoPoint]:
        return iter(self.points)

    def __getitem__(self, index: int) -> GeoPoint:
        return self.points[index]

    @property
    def is_empty(self) -> bool:
        return len(self.points) < 2

    @property
    def length_m(self) -> float:
        """Total route length in metres (haversine per segment)."""

        from .geometry import polyline_length_m

        return polyline_length_m(self.points)

    def cumulative_distances(self) -> DistanceTable:
        """Return the cumulative distance (metres) at each route point."""

        from .geometry import cumulative_distances

        return cumulative_distances(self.points)

    def latlon(self) -> List[LatLon]:
        return [point.as_tuple() for point in self.points]


@dataclass(frozen=True, slots=True)
class RouteSplit:
    """Completed and remaining portions of a route around the runner."""

    completed: Tuple[GeoPoint, ...]
    projection: GeoPoint
    remaining: Tuple[GeoPoint, ...]


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    """Result of a single position update against a route.

    ``distance_run_m`` is the filtered distance actually travelled by the
    runner; ``route_progress`` is the covered fraction of the route. The
    remaining fields are rendering data and are ``None`` when the route is
    degenerate.
    """

    distance_run_m: float
    route_progress: float
    covered_distance_m: float = 0.0
    nearest_index: Optional[int] = None
    position: Optional[GeoPoint] = None
    split: Optional[RouteSplit] = None


@dataclass(frozen=True, slots=True)
class PositionSample:
    """GPS fix delivered by a position source."""

    point: GeoPoint
    timestamp_s: Optional[float] = None


@dataclass(slots=True)
class RunStatus:
    """Progress snapshot enriched with timing data for a run session."""

    snapshot: ProgressSnapshot
    elapsed_s: Optional[float] = None
    pace_s_per_km: Optional[float] = None
    completed: bool = False
    diagnostics: dict = field(default_factory=dict)

    @property
    def distance_run_m(self) -> float:
        return self.snapshot.distance_run_m

    @property
    def route_progress(self) -> float:
        return self.snapshot.route_progress


__all__ = [
    "DistanceTable",
    "GeoPoint",
    "LatLon",
    "PositionSample",
    "ProgressSnapshot",
    "Route",
    "RouteSplit",
    "RunStatus",
    "ScreenPoint",
]
