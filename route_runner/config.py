"""Central configuration for the route runner engine.

All values are constants imported by the rest of the package. Tuning values
can be overridden through environment variables (optionally via a local
`.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except ImportError:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------
# Mean earth radius (metres) used by the haversine distance.
EARTH_RADIUS_M = 6_371_000.0


# ---------------------------------------------------------------------------
# Route drawing
# ---------------------------------------------------------------------------
# Minimum finger movement (pixels) before another draw point is accepted.
DRAW_MIN_PIXEL_DELTA = _env_float("DRAW_MIN_PIXEL_DELTA", 4.0)

# Eraser brush radius (pixels). Defined in screen space so the brush feels
# the same at every zoom level.
ERASE_RADIUS_PX = _env_float("ERASE_RADIUS_PX", 18.0)

# Douglas-Peucker tolerance (metres) applied when a draw stroke ends.
STROKE_SIMPLIFICATION_TOLERANCE_M = _env_float(
    "STROKE_SIMPLIFICATION_TOLERANCE_M", 2.0
)

# Simplify the route automatically at the end of each draw stroke.
STROKE_SIMPLIFY_ENABLED = _env_bool("STROKE_SIMPLIFY_ENABLED", True)


# ---------------------------------------------------------------------------
# Run tracking
# ---------------------------------------------------------------------------
# GPS deltas at or above this distance (metres) are treated as glitches and
# not added to the distance run. Tuned for pedestrian GPS noise; sources with
# larger sample gaps need a bigger value.
GLITCH_DISTANCE_M = _env_float("GLITCH_DISTANCE_M", 100.0)

# Route progress fraction at which a run counts as completed.
ROUTE_COMPLETION_THRESHOLD = _env_float("ROUTE_COMPLETION_THRESHOLD", 0.99)

# Rows logged per progress report when replaying a recorded run.
REPLAY_LOG_EVERY_N_SAMPLES = _env_int("REPLAY_LOG_EVERY_N_SAMPLES", 50)
