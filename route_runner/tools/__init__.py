"""Utility entry points for supplementary route runner tooling."""

from .replay_run import replay_run

__all__ = ["replay_run"]
