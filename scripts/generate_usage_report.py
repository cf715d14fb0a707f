#!/usr/bin/env python3
"""Generate the markdown usage report from the evolution log.

Usage:
  python scripts/generate_usage_report.py [--config PATH] [--input LOG_JSON] [--output REPORT_MD] [--debug]
Defaults come from config report.evolution_log / report.output. Exit 0 on success, 1 on any error.
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

from src.report.usage_report import main

if __name__ == "__main__":
    sys.exit(main(argv))
