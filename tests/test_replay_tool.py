"""Tests for the replay CLI helper."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from route_runner.errors import RouteInputError
from route_runner.models import GeoPoint, PositionSample, Route
from route_runner.tools.replay_run import (
    REPLAY_COLUMNS,
    decode_route_polyline,
    load_route_csv,
    load_samples_csv,
    main,
    replay_run,
    route_frame,
)


def _write_route(path: Path) -> Path:
    path.write_text("lat,lon\n0.0,0.0\n0.001,0.0\n0.001,0.001\n", encoding="utf-8")
    return path


def _write_samples(path: Path, *, timestamps: bool = True) -> Path:
    rows = [(0.0, 0.0), (0.0005, 0.0), (0.001, 0.0), (0.001, 0.0005), (0.001, 0.001)]
    if timestamps:
        lines = ["lat,lon,timestamp"] + [
            f"{lat},{lon},{i * 30}" for i, (lat, lon) in enumerate(rows)
        ]
    else:
        lines = ["lat,lon"] + [f"{lat},{lon}" for lat, lon in rows]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_load_route_csv(tmp_path: Path) -> None:
    route = load_route_csv(_write_route(tmp_path / "route.csv"))
    assert len(route) == 3
    assert route[1] == GeoPoint(0.001, 0.0)


def test_load_route_csv_requires_columns(tmp_path: Path) -> None:
    path = tmp_path / "bad.csv"
    path.write_text("latitude,longitude\n1,2\n", encoding="utf-8")
    with pytest.raises(RouteInputError):
        load_route_csv(path)


def test_load_samples_csv_with_and_without_timestamps(tmp_path: Path) -> None:
    timed = load_samples_csv(_write_samples(tmp_path / "timed.csv"))
    untimed = load_samples_csv(_write_samples(tmp_path / "untimed.csv", timestamps=False))
    assert timed[2].timestamp_s == 60.0
    assert untimed[2].timestamp_s is None
    assert timed[3].point == GeoPoint(0.001, 0.0005)


def test_decode_route_polyline() -> None:
    route = decode_route_polyline("_p~iF~ps|U_ulLnnqC_mqNvxq`@")
    assert route.latlon() == [
        pytest.approx((38.5, -120.2)),
        pytest.approx((40.7, -120.95)),
        pytest.approx((43.252, -126.453)),
    ]


def test_decode_empty_polyline_rejected() -> None:
    with pytest.raises(RouteInputError):
        decode_route_polyline("")


def test_replay_run_builds_frame(tmp_path: Path) -> None:
    route = load_route_csv(_write_route(tmp_path / "route.csv"))
    samples = load_samples_csv(_write_samples(tmp_path / "samples.csv"))
    frame, session = replay_run(route, samples)
    assert list(frame.columns) == REPLAY_COLUMNS
    assert len(frame) == len(samples)
    assert frame["route_progress"].iloc[-1] == pytest.approx(1.0)
    assert frame["distance_run_m"].is_monotonic_increasing
    assert bool(frame["completed"].iloc[-1])
    assert session.finished


def test_replay_run_on_empty_route() -> None:
    samples = [PositionSample(GeoPoint(0.0, 0.0), 0.0)]
    frame, session = replay_run(Route(), samples)
    assert frame["route_progress"].tolist() == [0.0]
    assert not session.completed


def test_main_writes_output(tmp_path: Path) -> None:
    route_path = _write_route(tmp_path / "route.csv")
    samples_path = _write_samples(tmp_path / "samples.csv")
    output = tmp_path / "out" / "replay.csv"
    code = main(
        [
            "--route",
            str(route_path),
            "--samples",
            str(samples_path),
            "--simplify-tolerance-m",
            "2",
            "--output",
            str(output),
        ]
    )
    assert code == 0
    frame = pd.read_csv(output)
    assert list(frame.columns) == REPLAY_COLUMNS
    assert len(frame) == 5


def test_main_with_polyline(tmp_path: Path) -> None:
    samples_path = tmp_path / "samples.csv"
    samples_path.write_text("lat,lon\n38.5,-120.2\n", encoding="utf-8")
    assert main(["--polyline", "_p~iF~ps|U_ulLnnqC_mqNvxq`@", "--samples", str(samples_path)]) == 0


def test_main_reports_bad_input(tmp_path: Path) -> None:
    bad = tmp_path / "bad.csv"
    bad.write_text("x,y\n1,2\n", encoding="utf-8")
    samples_path = _write_samples(tmp_path / "samples.csv")
    assert main(["--route", str(bad), "--samples", str(samples_path)]) == 1
    assert main(["--route", str(tmp_path / "missing.csv"), "--samples", str(samples_path)]) == 1


def test_main_reports_out_of_order_samples(tmp_path: Path) -> None:
    route_path = _write_route(tmp_path / "route.csv")
    samples_path = tmp_path / "samples.csv"
    samples_path.write_text(
        "lat,lon,timestamp\n0.0,0.0,10\n0.0001,0.0,5\n", encoding="utf-8"
    )
    assert main(["--route", str(route_path), "--samples", str(samples_path)]) == 1


def test_load_samples_csv_rejects_non_numeric_coordinates(tmp_path: Path) -> None:
    path = tmp_path / "samples.csv"
    path.write_text("lat,lon\nabc,0\n", encoding="utf-8")
    with pytest.raises(RouteInputError, match="non-numeric lat"):
        load_samples_csv(path)


def test_load_samples_csv_rejects_text_timestamps(tmp_path: Path) -> None:
    path = tmp_path / "samples.csv"
    path.write_text("lat,lon,timestamp\n0.0,0.0,2024-01-01T00:00:00\n", encoding="utf-8")
    with pytest.raises(RouteInputError, match="non-numeric timestamp"):
        load_samples_csv(path)


def test_load_route_csv_rejects_non_numeric_coordinates(tmp_path: Path) -> None:
    path = tmp_path / "route.csv"
    path.write_text("lat,lon\n0.0,0.0\n0.001,east\n", encoding="utf-8")
    with pytest.raises(RouteInputError, match="non-numeric lon"):
        load_route_csv(path)


def test_main_reports_non_numeric_input(tmp_path: Path) -> None:
    route_path = _write_route(tmp_path / "route.csv")
    bad_coords = tmp_path / "coords.csv"
    bad_coords.write_text("lat,lon\nabc,0\n", encoding="utf-8")
    bad_times = tmp_path / "times.csv"
    bad_times.write_text(
        "lat,lon,timestamp\n0.0,0.0,2024-01-01T00:00:00\n", encoding="utf-8"
    )
    assert main(["--route", str(route_path), "--samples", str(bad_coords)]) == 1
    assert main(["--route", str(route_path), "--samples", str(bad_times)]) == 1


def test_replay_frame_carries_sample_coordinates() -> None:
    samples = [
        PositionSample(GeoPoint(0.0, 0.0), 0.0),
        PositionSample(GeoPoint(0.0005, 0.0002), 10.0),
    ]
    frame, _ = replay_run(Route.from_latlon([(0.0, 0.0), (0.001, 0.0)]), samples)
    assert frame[["lat", "lon"]].values.tolist() == [[0.0, 0.0], [0.0005, 0.0002]]


def test_main_writes_simplified_route(tmp_path: Path) -> None:
    route_path = tmp_path / "route.csv"
    route_path.write_text(
        "lat,lon\n0.0,0.0\n0.0005,0.0\n0.001,0.0\n", encoding="utf-8"
    )
    samples_path = _write_samples(tmp_path / "samples.csv")
    route_output = tmp_path / "out" / "route.csv"
    code = main(
        [
            "--route",
            str(route_path),
            "--samples",
            str(samples_path),
            "--simplify-tolerance-m",
            "2",
            "--route-output",
            str(route_output),
        ]
    )
    assert code == 0
    written = load_route_csv(route_output)
    assert written.latlon() == [(0.0, 0.0), (0.001, 0.0)]
    assert route_frame(written).equals(pd.read_csv(route_output))
