"""Editing events consumed synchronously by a drawing session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .models import ScreenPoint


@dataclass(frozen=True, slots=True)
class DrawPoint:
    """Finger moved to ``screen`` while in draw mode."""

    screen: ScreenPoint


@dataclass(frozen=True, slots=True)
class ErasePoint:
    """Finger moved to ``screen`` while in erase mode."""

    screen: ScreenPoint


@dataclass(frozen=True, slots=True)
class StrokeEnded:
    """Touch ended or was cancelled."""


@dataclass(frozen=True, slots=True)
class UndoLast:
    """Remove the most recently drawn point."""


@dataclass(frozen=True, slots=True)
class ResetRoute:
    """Discard the whole route."""


EditEvent = Union[DrawPoint, ErasePoint, StrokeEnded, UndoLast, ResetRoute]

__all__ = [
    "DrawPoint",
    "EditEvent",
    "ErasePoint",
    "ResetRoute",
    "StrokeEnded",
    "UndoLast",
]
