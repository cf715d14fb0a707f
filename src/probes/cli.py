"""Command-line entries for the edge-function probes (scripts/probe_*.py)."""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from src.config.settings import PROJECT_ROOT, get_probe_config, read_config
from src.probes.edge_functions import (
    EdgeFunctionProbe,
    probe_ai_proxy_limits,
    probe_checkout,
    probe_environment,
)
from src.probes.products import PRODUCTS, get_product

logger = logging.getLogger(__name__)


def _parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", default=None, help="Config file (default config/config.yaml or DEVTOOLS_CONFIG)")
    parser.add_argument("--function", default=None, help="Edge function name (default from config probes.*)")
    return parser


def probe_from_config(config_path: Optional[str]) -> Tuple[Optional[EdgeFunctionProbe], dict]:
    """Build probe from probes config; anon key from env (.env loaded). (None, cfg) when key missing."""
    load_dotenv(PROJECT_ROOT / ".env")
    config, _ = read_config(config_path)
    probe_cfg = get_probe_config(config)
    if not probe_cfg.get("anon_key"):
        logger.warning("Probe key env %s is empty; not sending requests", probe_cfg.get("anon_key_env"))
        print(f"{probe_cfg.get('anon_key_env')} is not set - cannot authenticate probe requests", file=sys.stderr)
        return None, probe_cfg
    probe = EdgeFunctionProbe(probe_cfg["base_url"], probe_cfg["anon_key"], origin=probe_cfg.get("origin"))
    return probe, probe_cfg


def checkout_main(argv: Optional[List[str]] = None) -> int:
    parser = _parser("Probe the hosted checkout function with one POST")
    parser.add_argument(
        "--product",
        default=None,
        choices=[p.id for p in PRODUCTS],
        help="Product to check out (default probes.product)",
    )
    args = parser.parse_args(argv)
    probe, cfg = probe_from_config(args.config)
    if probe is None:
        return 1
    product = get_product(args.product or cfg.get("product") or "")
    if product is None:
        print(f"Unknown product: {args.product or cfg.get('product')}", file=sys.stderr)
        return 1
    probe_checkout(
        probe,
        args.function or cfg["checkout_function"],
        product,
        success_url=cfg["success_url"],
        cancel_url=cfg["cancel_url"],
    )
    return 0


def env_main(argv: Optional[List[str]] = None) -> int:
    args = _parser("Probe the env-check function and list variable status").parse_args(argv)
    probe, cfg = probe_from_config(args.config)
    if probe is None:
        return 1
    probe_environment(probe, args.function or cfg["env_function"])
    return 0


def ai_proxy_main(argv: Optional[List[str]] = None) -> int:
    args = _parser("Probe AI proxy max_tokens validation").parse_args(argv)
    probe, cfg = probe_from_config(args.config)
    if probe is None:
        return 1
    probe_ai_proxy_limits(probe, args.function or cfg["ai_proxy_function"])
    return 0
