"""Editing and run sessions wiring the route engine to its collaborators.

Both sessions are invoked explicitly by the surrounding application, one
event at a time, from a single thread or event loop.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional, Protocol

from .config import (
    DRAW_MIN_PIXEL_DELTA,
    ERASE_RADIUS_PX,
    GLITCH_DISTANCE_M,
    ROUTE_COMPLETION_THRESHOLD,
    STROKE_SIMPLIFICATION_TOLERANCE_M,
    STROKE_SIMPLIFY_ENABLED,
)
from .editor import RouteEditor
from .errors import RunClosedError, SampleOrderError
from .events import DrawPoint, EditEvent, ErasePoint, ResetRoute, StrokeEnded, UndoLast
from .models import GeoPoint, PositionSample, Route, RunStatus, ScreenPoint
from .tracker import ProgressTracker

_LOG = logging.getLogger(__name__)


class ScreenProjector(Protocol):
    """Maps between route coordinates and the current map viewport."""

    def to_screen(self, point: GeoPoint) -> ScreenPoint: ...

    def to_geo(self, screen: ScreenPoint) -> GeoPoint: ...


class DrawingSession:
    """Turn draw/erase gestures into route edits."""

    def __init__(
        self,
        projector: ScreenProjector,
        editor: Optional[RouteEditor] = None,
        *,
        min_pixel_delta: float = DRAW_MIN_PIXEL_DELTA,
        erase_radius_px: float = ERASE_RADIUS_PX,
        stroke_tolerance_m: float = STROKE_SIMPLIFICATION_TOLERANCE_M,
        simplify_on_stroke_end: bool = STROKE_SIMPLIFY_ENABLED,
    ) -> None:
        if min_pixel_delta < 0:
            raise ValueError("min_pixel_delta must not be negative")
        if erase_radius_px < 0:
            raise ValueError("erase_radius_px must not be negative")
        self.projector = projector
        self.editor = editor if editor is not None else RouteEditor()
        self.min_pixel_delta = float(min_pixel_delta)
        self.erase_radius_px = float(erase_radius_px)
        self.stroke_tolerance_m = float(stroke_tolerance_m)
        self.simplify_on_stroke_end = simplify_on_stroke_end
        self._last_screen: Optional[ScreenPoint] = None

    @property
    def total_m(self) -> float:
        return self.editor.total_m

    def draw(self, screen: ScreenPoint) -> bool:
        """Add a point under the finger unless it barely moved.

        Returns:
            True when a route point was appended.
        """

        last = self._last_screen
        if last is not None:
            dx = last.x - screen.x
            dy = last.y - screen.y
            if dx * dx + dy * dy < self.min_pixel_delta * self.min_pixel_delta:
                return False
        self._last_screen = screen
        self.editor.append(self.projector.to_geo(screen))
        self.editor.recalc_distance()
        return True

    def erase(self, screen: ScreenPoint) -> int:
        return self.editor.erase_near(
            screen, self.projector.to_screen, self.erase_radius_px
        )

    def end_stroke(self) -> None:
        self._last_screen = None
        if self.simplify_on_stroke_end:
            dropped = self.editor.simplify(self.stroke_tolerance_m)
            if dropped:
                _LOG.debug("Stroke simplification dropped %d points", dropped)

    def undo(self) -> Optional[GeoPoint]:
        removed = self.editor.undo_last()
        self.editor.recalc_distance()
        return removed

    def reset(self) -> None:
        self._last_screen = None
        self.editor.reset()

    def handle(self, event: EditEvent) -> None:
        """Apply a single editing event."""

        if isinstance(event, DrawPoint):
            self.draw(event.screen)
        elif isinstance(event, ErasePoint):
            self.erase(event.screen)
        elif isinstance(event, StrokeEnded):
            self.end_stroke()
        elif isinstance(event, UndoLast):
            self.undo()
        elif isinstance(event, ResetRoute):
            self.reset()
        else:
            raise TypeError(f"Unsupported edit event: {event!r}")

    def consume(self, events: Iterable[EditEvent]) -> float:
        """Apply events in order and return the resulting route length."""

        for event in events:
            self.handle(event)
        return self.editor.total_m

    def to_route(self) -> Route:
        return self.editor.to_route()


class RunSession:
    """One run against a fixed route, with elapsed time, pace and completion."""

    def __init__(
        self,
        route: Route,
        *,
        glitch_distance_m: float = GLITCH_DISTANCE_M,
        completion_threshold: float = ROUTE_COMPLETION_THRESHOLD,
    ) -> None:
        if not 0.0 < completion_threshold <= 1.0:
            raise ValueError("completion_threshold must be within (0, 1]")
        self.tracker = ProgressTracker(route, glitch_distance_m=glitch_distance_m)
        self.completion_threshold = float(completion_threshold)
        self._start_s: Optional[float] = None
        self._last_timestamp_s: Optional[float] = None
        self._completed = False
        if self.tracker.route.is_empty:
            _LOG.warning("Run started on a route with fewer than two points")

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def finished(self) -> bool:
        return self.tracker.closed

    def record(self, sample: PositionSample) -> RunStatus:
        """Feed one position sample and return the run status.

        Raises:
            RunClosedError: If the run has been finished.
            SampleOrderError: If the timestamp is older than the previous one.
        """

        if self.tracker.closed:
            raise RunClosedError("Run session has already finished")
        timestamp = sample.timestamp_s
        if timestamp is not None:
            if self._last_timestamp_s is not None and timestamp < self._last_timestamp_s:
                raise SampleOrderError(
                    f"Sample at {timestamp} s arrived after {self._last_timestamp_s} s"
                )
            if self._start_s is None:
                self._start_s = timestamp
            self._last_timestamp_s = timestamp

        snapshot = self.tracker.update(sample.point)
        elapsed = self.elapsed_s
        pace = _pace_s_per_km(snapshot.distance_run_m, elapsed)
        if not self._completed and snapshot.route_progress >= self.completion_threshold:
            self._completed = True
            _LOG.info(
                "Route completed: %.1f m run, progress %.1f%%",
                snapshot.distance_run_m,
                snapshot.route_progress * 100.0,
            )
        return RunStatus(
            snapshot=snapshot,
            elapsed_s=elapsed,
            pace_s_per_km=pace,
            completed=self._completed,
            diagnostics={
                "sample_delta_m": self.tracker.last_delta_m,
                "sample_delta_accepted": self.tracker.last_delta_accepted,
            },
        )

    def run(self, source: Iterable[PositionSample]) -> Iterator[RunStatus]:
        """Yield a status for every sample delivered by ``source``."""

        for sample in source:
            yield self.record(sample)

    @property
    def elapsed_s(self) -> Optional[float]:
        if self._start_s is None or self._last_timestamp_s is None:
            return None
        return self._last_timestamp_s - self._start_s

    def finish(self) -> None:
        if self.tracker.closed:
            return
        self.tracker.cleanup()
        _LOG.info(
            "Run finished: %.1f m run, completed=%s",
            self.tracker.distance_run_m,
            self._completed,
        )


def _pace_s_per_km(distance_m: float, elapsed_s: Optional[float]) -> Optional[float]:
    if elapsed_s is None or elapsed_s <= 0 or distance_m <= 0:
        return None
    return elapsed_s / (distance_m / 1000.0)


__all__ = ["DrawingSession", "RunSession", "ScreenProjector"]
