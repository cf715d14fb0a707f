"""Usage report: read evolution log usage_patterns, render markdown summary, write to output path.

Input shape: { evolution_metrics?: { usage_patterns?: { <operation>: <count> } } }.
Count is a non-negative integer, null (treated as 0), or a tracker entry {"count": N, ...}.
Missing evolution_metrics / usage_patterns means no operations; a present value of the wrong
shape raises UsageLogError.
"""

import argparse
import json
import logging
import sys
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from src.config.settings import get_report_config, read_config
from src.core.logging_utils import log_usage_report

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Docker Sidecar - Usage Pattern Report"
SUCCESS_MESSAGE = "Usage report generated successfully"

PathLike = Union[str, Path]


class UsageLogError(ValueError):
    """Evolution log parsed but usage_patterns has an invalid shape or count."""


def load_evolution_log(path: PathLike) -> Any:
    """Read and parse the evolution log. Missing file or invalid JSON propagates."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _optional_mapping(parent: Dict[str, Any], key: str, where: str) -> Dict[str, Any]:
    """parent[key] as mapping; {} when absent or null, UsageLogError when another type."""
    if key not in parent or parent[key] is None:
        return {}
    value = parent[key]
    if not isinstance(value, dict):
        raise UsageLogError(f"{where}.{key} must be an object, got {type(value).__name__}")
    return value


def extract_usage_patterns(log: Any) -> Dict[str, Any]:
    """Return evolution_metrics.usage_patterns in insertion order ({} if any level is missing)."""
    if not isinstance(log, dict):
        raise UsageLogError(f"evolution log must be a JSON object, got {type(log).__name__}")
    metrics = _optional_mapping(log, "evolution_metrics", "log")
    return _optional_mapping(metrics, "usage_patterns", "evolution_metrics")


def count_value(operation: str, value: Any) -> int:
    """Normalize one usage count. null -> 0; tracker entry -> its count; negatives rejected."""
    if isinstance(value, dict):
        return count_value(operation, value.get("count"))
    if value is None:
        return 0
    # bool is an int subclass; true/false are not counts
    if isinstance(value, bool):
        raise UsageLogError(f"count for {operation!r} must be a number, got boolean")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise UsageLogError(f"count for {operation!r} must be a non-negative integer, got {value!r}")
    if value < 0:
        raise UsageLogError(f"count for {operation!r} must be non-negative, got {value}")
    return value


def total_operations(patterns: Dict[str, Any]) -> int:
    return sum(count_value(op, v) for op, v in patterns.items())


def render_usage_report(
    patterns: Dict[str, Any],
    title: str = DEFAULT_TITLE,
    today: Optional[date] = None,
) -> str:
    """Render markdown: title, Generated date, Summary total, Operations bullets (source order)."""
    today = today or datetime.now(timezone.utc).date()
    lines = [
        f"# {title}",
        "",
        f"**Generated:** {today.isoformat()}",
        "",
        "## Summary",
        "",
        f"Total operations tracked: {total_operations(patterns)}",
        "",
        "## Operations",
        "",
    ]
    for operation, value in patterns.items():
        lines.append(f"- **{operation}**: {count_value(operation, value)}")
    return "\n".join(lines) + "\n"


def generate_usage_report(
    input_path: PathLike,
    output_path: PathLike,
    title: str = DEFAULT_TITLE,
    today: Optional[date] = None,
) -> str:
    """Read log, render, overwrite output_path. Returns the markdown written.

    The report is fully rendered before the output file is opened, so read/parse/shape errors
    leave any existing output untouched.
    """
    log = load_evolution_log(input_path)
    patterns = extract_usage_patterns(log)
    report = render_usage_report(patterns, title=title, today=today)
    Path(output_path).write_text(report, encoding="utf-8")
    log_usage_report(
        str(input_path),
        str(output_path),
        total=total_operations(patterns),
        operations=len(patterns),
    )
    return report


def main(argv: Optional[list] = None) -> int:
    """CLI: --input/--output override config report.evolution_log / report.output. Exit 0 or 1."""
    parser = argparse.ArgumentParser(description="Generate markdown usage report from the evolution log")
    parser.add_argument("--config", default=None, help="Config file (default config/config.yaml or DEVTOOLS_CONFIG)")
    parser.add_argument("--input", default=None, help="Evolution log JSON path")
    parser.add_argument("--output", default=None, help="Markdown report path (overwritten)")
    args = parser.parse_args(argv)

    try:
        config, _ = read_config(args.config)
        report_cfg = get_report_config(config)
        input_path = args.input or report_cfg["evolution_log"]
        output_path = args.output or report_cfg["output"]
        generate_usage_report(input_path, output_path, title=report_cfg["title"] or DEFAULT_TITLE)
    except Exception as e:
        logger.debug("Usage report failed", exc_info=True)
        print(f"Error generating usage report: {e}", file=sys.stderr)
        return 1
    print(SUCCESS_MESSAGE)
    return 0
