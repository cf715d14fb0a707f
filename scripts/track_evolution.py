#!/usr/bin/env python3
"""Evolution tracking: update the evolution log on startup/usage/shutdown, or write the JSON report.

Usage:
  python scripts/track_evolution.py [startup|usage|shutdown|report] [operation] [details-json] [--debug]
Config path from DEVTOOLS_CONFIG (default config/config.yaml).
"""

import logging
import os
import sys

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _PROJECT_ROOT)

debug = "--debug" in sys.argv
argv = [a for a in sys.argv[1:] if a != "--debug"]

logging.basicConfig(
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    level=logging.DEBUG if debug else logging.INFO,
)

from src.evolution.tracker import main

if __name__ == "__main__":
    sys.exit(main(argv))
