#!/usr/bin/env python3
"""Convenience runner for replaying a recorded run against a route.

Usage:
    python run.py --route route.csv --samples run.csv
"""
import logging
from route_runner.tools.replay_run import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    raise SystemExit(main())
