"""Structured logging for usage reports, usage tracking, child process exit and probe responses."""

import logging
import uuid
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def _ensure_trace_id(extra: dict) -> str:
    trace_id = extra.get("trace_id")
    if not trace_id:
        trace_id = str(uuid.uuid4())[:8]
        extra["trace_id"] = trace_id
    return trace_id


def _emit(event: str, extra: Dict[str, Any], level: int = logging.INFO) -> None:
    msg = event + " " + " ".join(f"{k}={v}" for k, v in sorted(extra.items()))
    logger.log(level, msg)


def log_usage_report(
    input_path: str,
    output_path: str,
    total: int,
    operations: int,
    trace_id: Optional[str] = None,
    extra: Optional[dict] = None,
) -> None:
    """Log a written usage report as structured key-value."""
    extra = extra or {}
    if trace_id:
        extra["trace_id"] = trace_id
    _ensure_trace_id(extra)
    extra["input"] = input_path
    extra["output"] = output_path
    extra["total"] = total
    extra["operations"] = operations
    _emit("usage_report", extra)


def log_usage_tracked(
    operation: str,
    count: int,
    details_kept: Optional[int] = None,
    trace_id: Optional[str] = None,
    extra: Optional[dict] = None,
) -> None:
    """Log one usage increment in the evolution log."""
    extra = extra or {}
    if trace_id:
        extra["trace_id"] = trace_id
    _ensure_trace_id(extra)
    extra["operation"] = operation
    extra["count"] = count
    if details_kept is not None:
        extra["details_kept"] = details_kept
    _emit("usage_tracked", extra)


def log_child_exit(
    pid: Optional[int],
    returncode: Optional[int],
    signal_forwarded: Optional[str] = None,
    extra: Optional[dict] = None,
) -> None:
    """Log child process exit: pid, returncode, last forwarded signal."""
    extra = extra or {}
    _ensure_trace_id(extra)
    extra["pid"] = pid
    extra["returncode"] = returncode
    if signal_forwarded:
        extra["signal_forwarded"] = signal_forwarded
    _emit("child_exit", extra)


def log_probe_response(
    method: str,
    url: str,
    status: Optional[int],
    error: Optional[str] = None,
    extra: Optional[dict] = None,
) -> None:
    """Log probe request outcome. Errors at WARNING."""
    extra = extra or {}
    _ensure_trace_id(extra)
    extra["method"] = method
    extra["url"] = url
    extra["status"] = status
    if error:
        extra["error"] = error
    _emit("probe_response", extra, logging.WARNING if error else logging.INFO)
