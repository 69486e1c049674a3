#!/usr/bin/env python3
"""Convenience runner for the IGC track analyzer.

Usage:
    python run.py tracks/*.json --svg maps/tracks.svg
"""
import logging
from igc_analyzer.main import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    raise SystemExit(main())
