#!/usr/bin/env python3
"""Start the backend server (launcher.command in launcher.cwd) and forward SIGINT/SIGTERM to it.

The child inherits stdin/stdout/stderr; this process waits for it and logs its exit code.

Usage:
  python scripts/start_server.py [config_path] [--debug]
"""

import logging
import os
import sys

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _PROJECT_ROOT)

from src.launcher.server_launcher import main as launch


def main() -> int:
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        level=logging.DEBUG if "--debug" in sys.argv else logging.INFO,
    )
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    config_path = args[0] if args else None
    if config_path and not os.path.isabs(config_path):
        config_path = os.path.join(_PROJECT_ROOT, config_path)
    return launch(config_path)


if __name__ == "__main__":
    sys.exit(main())
