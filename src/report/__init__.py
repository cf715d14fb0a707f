"""Usage pattern report over the evolution log."""

from src.report.usage_report import UsageLogError, generate_usage_report, render_usage_report

__all__ = ["UsageLogError", "generate_usage_report", "render_usage_report"]
