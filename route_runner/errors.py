"""Central error types used across the application."""

from __future__ import annotations


class RouteRunnerError(RuntimeError):
    """Base error for route editing and run tracking failures."""


class RunClosedError(RouteRunnerError):
    """Raised when a sample is delivered to a run that has already ended."""


class SampleOrderError(RouteRunnerError):
    """Raised when position samples arrive with decreasing timestamps."""


class RouteInputError(RouteRunnerError, ValueError):
    """Raised when a route or recorded run cannot be loaded."""


__all__ = [
    "RouteRunnerError",
    "RunClosedError",
    "SampleOrderError",
    "RouteInputError",
]
