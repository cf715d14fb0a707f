#!/usr/bin/env python3
"""Probe AI proxy max_tokens validation with one request per provider/limit case.

Usage:
  python scripts/probe_ai_proxy.py [--function NAME] [--config PATH] [--debug]
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

from src.probes.cli import ai_proxy_main

if __name__ == "__main__":
    sys.exit(ai_proxy_main(argv))
