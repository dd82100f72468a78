"""Stateless geometry helpers for routes, GPS samples and screen points.

Geodesic lengths use the haversine formula. Segment projection treats
latitude/longitude as planar coordinates, which holds at the scale of a
hand-drawn running route (tens of metres per segment).
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from .config import EARTH_RADIUS_M
from .models import DistanceTable, GeoPoint, ScreenPoint

FloatArray = NDArray[np.float64]


def distance(first: GeoPoint, second: GeoPoint) -> float:
    """Return the great-circle distance in metres between two points."""

    if first == second:
        return 0.0
    sin = math.sin
    cos = math.cos
    radians = math.radians
    atan2 = math.atan2
    sqrt = math.sqrt
    lat1_rad = radians(first.lat)
    lat2_rad = radians(second.lat)
    delta_lat = lat2_rad - lat1_rad
    delta_lon = radians(second.lon - first.lon)
    sin_half_lat = sin(delta_lat / 2.0)
    sin_half_lon = sin(delta_lon / 2.0)
    a = sin_half_lat**2 + cos(lat1_rad) * cos(lat2_rad) * sin_half_lon**2
    c = 2.0 * atan2(sqrt(a), sqrt(1.0 - a))
    return EARTH_RADIUS_M * c


def project_onto_segment(
    point: GeoPoint, start: GeoPoint, end: GeoPoint
) -> Tuple[float, float]:
    """Project ``point`` onto segment ``start``-``end`` in lat/lon space.

    Returns:
        Tuple of the planar distance (degrees) from ``point`` to its clamped
        projection, and the projection fraction in ``[0, 1]``. A degenerate
        segment yields fraction 0 and the distance to ``start``.
    """

    return _project_planar(
        point.lat, point.lon, start.lat, start.lon, end.lat, end.lon
    )


def interpolate(start: GeoPoint, end: GeoPoint, fraction: float) -> GeoPoint:
    """Linearly interpolate latitude and longitude independently."""

    lat = start.lat + (end.lat - start.lat) * fraction
    lon = start.lon + (end.lon - start.lon) * fraction
    return GeoPoint(lat, lon)


def perpendicular_distance_m(
    point: GeoPoint, start: GeoPoint, end: GeoPoint
) -> float:
    """Return the metric offset of ``point`` from the chord ``start``-``end``.

    The foot of the perpendicular is found in planar lat/lon space and the
    offset to it is measured with the haversine distance.
    """

    if start == end:
        return distance(start, point)
    _, fraction = project_onto_segment(point, start, end)
    return distance(interpolate(start, end, fraction), point)


def screen_distance(first: ScreenPoint, second: ScreenPoint) -> float:
    """Return the pixel distance between two screen points."""

    return math.hypot(first.x - second.x, first.y - second.y)


def screen_segment_distance(
    point: ScreenPoint, start: ScreenPoint, end: ScreenPoint
) -> float:
    """Return the pixel distance from ``point`` to segment ``start``-``end``."""

    dist, _ = _project_planar(point.x, point.y, start.x, start.y, end.x, end.y)
    return dist


def polyline_length_m(points: Sequence[GeoPoint]) -> float:
    """Return the summed haversine length of a polyline (0 below two points)."""

    if len(points) < 2:
        return 0.0
    total = 0.0
    previous = points[0]
    for current in points[1:]:
        total += distance(previous, current)
        previous = current
    return total


def segment_lengths(points: Sequence[GeoPoint]) -> DistanceTable:
    """Return the haversine length of each consecutive segment."""

    if len(points) < 2:
        return np.zeros(0, dtype=float)
    return np.asarray(
        [distance(points[i - 1], points[i]) for i in range(1, len(points))],
        dtype=float,
    )


def cumulative_distances(points: Sequence[GeoPoint]) -> DistanceTable:
    """Return cumulative distances along a polyline, starting at 0."""

    lengths = segment_lengths(points)
    return np.concatenate(([0.0], np.cumsum(lengths)))


def project_onto_polyline(
    point: GeoPoint,
    lats: FloatArray,
    lons: FloatArray,
) -> Tuple[FloatArray, FloatArray]:
    """Project ``point`` onto every segment of a polyline at once.

    Args:
        point: Position to project.
        lats: Latitudes of the polyline vertices.
        lons: Longitudes of the polyline vertices.

    Returns:
        Tuple of per-segment planar distances and clamped fractions, each of
        length ``len(lats) - 1``. Degenerate segments report fraction 0 and
        the distance to their start vertex.
    """

    if len(lats) < 2:
        empty = np.zeros(0, dtype=float)
        return empty, empty.copy()
    start_lat = lats[:-1]
    start_lon = lons[:-1]
    seg_lat = lats[1:] - start_lat
    seg_lon = lons[1:] - start_lon
    to_lat = point.lat - start_lat
    to_lon = point.lon - start_lon
    seg_len2 = seg_lat * seg_lat + seg_lon * seg_lon
    degenerate = seg_len2 == 0
    safe_len2 = np.where(degenerate, 1.0, seg_len2)
    fractions = (to_lat * seg_lat + to_lon * seg_lon) / safe_len2
    fractions = np.where(degenerate, 0.0, np.clip(fractions, 0.0, 1.0))
    proj_lat = start_lat + fractions * seg_lat
    proj_lon = start_lon + fractions * seg_lon
    distances = np.hypot(point.lat - proj_lat, point.lon - proj_lon)
    return distances, fractions


def _project_planar(
    px: float, py: float, ax: float, ay: float, bx: float, by: float
) -> Tuple[float, float]:
    abx = bx - ax
    aby = by - ay
    apx = px - ax
    apy = py - ay
    ab2 = abx * abx + aby * aby
    if ab2 == 0:
        return math.hypot(apx, apy), 0.0
    fraction = (apx * abx + apy * aby) / ab2
    fraction = max(0.0, min(1.0, fraction))
    proj_x = ax + fraction * abx
    proj_y = ay + fraction * aby
    return math.hypot(px - proj_x, py - proj_y), fraction


__all__ = [
    "cumulative_distances",
    "distance",
    "interpolate",
    "perpendicular_distance_m",
    "polyline_length_m",
    "project_onto_polyline",
    "project_onto_segment",
    "screen_distance",
    "screen_segment_distance",
    "segment_lengths",
]
