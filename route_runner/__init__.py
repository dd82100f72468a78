"""Route geometry and run progress tracking engine."""

from .editor import RouteEditor
from .errors import RouteInputError, RouteRunnerError, RunClosedError, SampleOrderError
from .models import (
    GeoPoint,
    PositionSample,
    ProgressSnapshot,
    Route,
    RouteSplit,
    RunStatus,
    ScreenPoint,
)
from .sessions import DrawingSession, RunSession
from .simplify import simplify
from .tracker import ProgressTracker

__all__ = [
    "DrawingSession",
    "GeoPoint",
    "PositionSample",
    "ProgressSnapshot",
    "ProgressTracker",
    "Route",
    "RouteEditor",
    "RouteInputError",
    "RouteRunnerError",
    "RouteSplit",
    "RunClosedError",
    "RunSession",
    "RunStatus",
    "SampleOrderError",
    "ScreenPoint",
    "simplify",
]
