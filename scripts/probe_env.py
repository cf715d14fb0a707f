#!/usr/bin/env python3
"""Probe the env-check edge function and print which variables the backend sees.

Usage:
  python scripts/probe_env.py [--function NAME] [--config PATH] [--debug]
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

from src.probes.cli import env_main

if __name__ == "__main__":
    sys.exit(env_main(argv))
