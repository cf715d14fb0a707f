"""Core utilities shared by report, tracker, launcher and probes."""

from src.core.logging_utils import log_child_exit, log_probe_response, log_usage_report, log_usage_tracked

__all__ = ["log_child_exit", "log_probe_response", "log_usage_report", "log_usage_tracked"]
