"""Replay a recorded run against a route and report progress per sample."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import pandas as pd
from polyline import decode as polyline_decode

from ..config import (
    GLITCH_DISTANCE_M,
    REPLAY_LOG_EVERY_N_SAMPLES,
    ROUTE_COMPLETION_THRESHOLD,
)
from ..errors import RouteInputError, SampleOrderError
from ..models import GeoPoint, PositionSample, Route
from ..sessions import RunSession
from ..simplify import simplify
from ..utils import format_distance_km, format_pace

PathLike = Union[str, Path]

LOGGER = logging.getLogger("replay_run")

REPLAY_COLUMNS = [
    "lat",
    "lon",
    "timestamp",
    "distance_run_m",
    "route_progress",
    "covered_distance_m",
    "nearest_index",
    "elapsed_s",
    "pace_s_per_km",
    "completed",
]


def decode_route_polyline(encoded: str) -> Route:
    """Decode an encoded polyline string into a route."""

    if not encoded:
        raise RouteInputError("Encoded polyline is empty")
    try:
        decoded = polyline_decode(encoded)
    except (ValueError, TypeError, IndexError) as exc:
        raise RouteInputError("Unable to decode polyline") from exc
    return Route.from_latlon(decoded)


def load_route_csv(path: PathLike) -> Route:
    """Load route points from a CSV with ``lat`` and ``lon`` columns."""

    frame = _read_latlon_csv(path)
    return Route.from_latlon(zip(frame["lat"], frame["lon"]))


def load_samples_csv(path: PathLike) -> List[PositionSample]:
    """Load position samples from a CSV with ``lat``, ``lon`` and optional ``timestamp``."""

    frame = _read_latlon_csv(path)
    has_timestamps = "timestamp" in frame.columns
    if has_timestamps and frame["timestamp"].isna().any():
        raise RouteInputError(f"{path}: timestamp column has missing values")
    samples: List[PositionSample] = []
    for row in frame.itertuples(index=False):
        timestamp = float(getattr(row, "timestamp")) if has_timestamps else None
        samples.append(
            PositionSample(
                point=GeoPoint(float(row.lat), float(row.lon)),
                timestamp_s=timestamp,
            )
        )
    return samples


def replay_run(
    route: Route,
    samples: Sequence[PositionSample],
    *,
    glitch_distance_m: float = GLITCH_DISTANCE_M,
    completion_threshold: float = ROUTE_COMPLETION_THRESHOLD,
) -> Tuple[pd.DataFrame, RunSession]:
    """Feed recorded samples through a run session.

    Returns:
        Tuple of a per-sample DataFrame (columns ``REPLAY_COLUMNS``) and the
        finished :class:`RunSession`.
    """

    session = RunSession(
        route,
        glitch_distance_m=glitch_distance_m,
        completion_threshold=completion_threshold,
    )
    rows = []
    for index, status in enumerate(session.run(samples), start=1):
        sample = samples[index - 1]
        snapshot = status.snapshot
        lat, lon = sample.point.as_tuple()
        rows.append(
            {
                "lat": lat,
                "lon": lon,
                "timestamp": sample.timestamp_s,
                "distance_run_m": snapshot.distance_run_m,
                "route_progress": snapshot.route_progress,
                "covered_distance_m": snapshot.covered_distance_m,
                "nearest_index": snapshot.nearest_index,
                "elapsed_s": status.elapsed_s,
                "pace_s_per_km": status.pace_s_per_km,
                "completed": status.completed,
            }
        )
        if REPLAY_LOG_EVERY_N_SAMPLES > 0 and index % REPLAY_LOG_EVERY_N_SAMPLES == 0:
            LOGGER.info(
                "Replayed %d/%d samples: progress %.1f%%",
                index,
                len(samples),
                snapshot.route_progress * 100.0,
            )
    session.finish()
    return pd.DataFrame(rows, columns=REPLAY_COLUMNS), session


def route_frame(route: Route) -> pd.DataFrame:
    """Return the route points as a ``lat``/``lon`` DataFrame."""

    return pd.DataFrame(route.latlon(), columns=["lat", "lon"])


def _read_latlon_csv(path: PathLike) -> pd.DataFrame:
    try:
        frame = pd.read_csv(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise RouteInputError(f"Unable to read CSV '{path}': {exc}") from exc
    frame.columns = [str(col).strip().lower() for col in frame.columns]
    missing = {"lat", "lon"} - set(frame.columns)
    if missing:
        raise RouteInputError(f"{path}: missing columns {sorted(missing)}")
    if frame[["lat", "lon"]].isna().any().any():
        raise RouteInputError(f"{path}: lat/lon columns have missing values")
    for column in ("lat", "lon", "timestamp"):
        if column not in frame.columns:
            continue
        values = pd.to_numeric(frame[column], errors="coerce")
        bad = values.isna() & frame[column].notna()
        if bad.any():
            row = int(bad.idxmax())
            raise RouteInputError(
                f"{path}: non-numeric {column} value {frame.at[row, column]!r}"
            )
        frame[column] = values
    return frame


def _build_parser() -> argparse.ArgumentParser:
    """Return the CLI argument parser for the replay tool."""

    parser = argparse.ArgumentParser(
        description="Replay recorded GPS samples against a drawn route."
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--route", type=Path, help="Route CSV with lat,lon columns")
    source.add_argument("--polyline", help="Route as an encoded polyline string")
    parser.add_argument(
        "--samples",
        type=Path,
        required=True,
        help="Samples CSV with lat,lon[,timestamp] columns",
    )
    parser.add_argument(
        "--simplify-tolerance-m",
        type=float,
        help="Simplify the route with this tolerance (metres) before replaying",
    )
    parser.add_argument(
        "--glitch-distance-m",
        type=float,
        default=GLITCH_DISTANCE_M,
        help=f"Discard sample deltas at or above this distance (default: {GLITCH_DISTANCE_M:g})",
    )
    parser.add_argument(
        "--completion-threshold",
        type=float,
        default=ROUTE_COMPLETION_THRESHOLD,
        help="Route progress fraction counted as completion",
    )
    parser.add_argument("--output", type=Path, help="Optional per-sample CSV output")
    parser.add_argument(
        "--route-output",
        type=Path,
        help="Optional CSV output of the replayed (possibly simplified) route",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point used via ``python -m route_runner.tools.replay_run``."""

    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.polyline is not None:
            route = decode_route_polyline(args.polyline)
        else:
            route = load_route_csv(args.route)
        samples = load_samples_csv(args.samples)
    except (RouteInputError, FileNotFoundError) as exc:
        LOGGER.error("Failed to load replay input: %s", exc)
        return 1

    if args.simplify_tolerance_m is not None:
        before = len(route)
        try:
            route = Route.from_points(simplify(route.points, args.simplify_tolerance_m))
        except ValueError as exc:
            LOGGER.error("%s", exc)
            return 1
        LOGGER.info("Simplified route from %d to %d points", before, len(route))

    LOGGER.info(
        "Replaying %d samples against a %d-point route (%s)",
        len(samples),
        len(route),
        format_distance_km(route.length_m),
    )
    try:
        frame, session = replay_run(
            route,
            samples,
            glitch_distance_m=args.glitch_distance_m,
            completion_threshold=args.completion_threshold,
        )
    except (ValueError, SampleOrderError) as exc:
        LOGGER.error("Failed to replay run: %s", exc)
        return 1

    if frame.empty:
        LOGGER.warning("No samples to replay")
    else:
        last = frame.iloc[-1]
        LOGGER.info(
            "Distance run %s, progress %.1f%%, pace %s, completed=%s",
            format_distance_km(float(last["distance_run_m"])),
            float(last["route_progress"]) * 100.0,
            format_pace(session_pace(frame)),
            bool(session.completed),
        )

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(args.output, index=False)
        LOGGER.info("Replay results written to %s", args.output)
    if args.route_output is not None:
        args.route_output.parent.mkdir(parents=True, exist_ok=True)
        route_frame(route).to_csv(args.route_output, index=False)
        LOGGER.info("Route written to %s", args.route_output)
    return 0


def session_pace(frame: pd.DataFrame) -> Optional[float]:
    """Return the last known pace in a replay frame, if any."""

    paces = frame["pace_s_per_km"].dropna()
    if paces.empty:
        return None
    return float(paces.iloc[-1])


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
