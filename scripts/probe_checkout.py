#!/usr/bin/env python3
"""Probe the hosted checkout function: POST priceId/mode/successUrl/cancelUrl, print the response.

Usage:
  python scripts/probe_checkout.py [--function NAME] [--product ID] [--config PATH] [--debug]
Requires the anon key in the env var named by probes.anon_key_env (or in .env).
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

from src.probes.cli import checkout_main

if __name__ == "__main__":
    sys.exit(checkout_main(argv))
