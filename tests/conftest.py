"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable routes and a simple screen
projector so editing and tracking tests share the same geometry.
"""
from __future__ import annotations

import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from route_runner.models import GeoPoint, Route, ScreenPoint


# --- Factory helpers -------------------------------------------------
class LinearProjector:
    """Flat viewport: 1 degree maps to ``scale`` pixels, north is up."""

    def __init__(self, origin: GeoPoint = GeoPoint(0.0, 0.0), scale: float = 100_000.0):
        self.origin = origin
        self.scale = scale

    def to_screen(self, point: GeoPoint) -> ScreenPoint:
        return ScreenPoint(
            (point.lon - self.origin.lon) * self.scale,
            (self.origin.lat - point.lat) * self.scale,
        )

    def to_geo(self, screen: ScreenPoint) -> GeoPoint:
        return GeoPoint(
            self.origin.lat - screen.y / self.scale,
            self.origin.lon + screen.x / self.scale,
        )


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def projector() -> LinearProjector:
    return LinearProjector()


@pytest.fixture
def straight_route() -> Route:
    """Two-point route roughly 111 m long heading north from the origin."""

    return Route.from_latlon([(0.0, 0.0), (0.001, 0.0)])


@pytest.fixture
def l_shaped_route() -> Route:
    """Three-point route: north then east, two equal legs."""

    return Route.from_latlon([(0.0, 0.0), (0.001, 0.0), (0.001, 0.001)])
