"""Tests for the usage report: extraction defaults, totals, markdown layout, CLI exit codes."""

from datetime import date

import pytest

from src.report.usage_report import (
    DEFAULT_TITLE,
    SUCCESS_MESSAGE,
    UsageLogError,
    count_value,
    extract_usage_patterns,
    generate_usage_report,
    main,
    render_usage_report,
    total_operations,
)

TODAY = date(2025, 7, 14)


def _log(patterns):
    return {"evolution_metrics": {"usage_patterns": patterns}}


def _operations_lines(report: str):
    section = report.split("## Operations\n\n", 1)[1]
    return [line for line in section.splitlines() if line.startswith("- ")]


class TestExtractUsagePatterns:
    def test_missing_evolution_metrics_is_empty(self):
        assert extract_usage_patterns({"meta": {}}) == {}

    def test_missing_usage_patterns_is_empty(self):
        assert extract_usage_patterns({"evolution_metrics": {"total_evolutions": 3}}) == {}

    def test_null_levels_are_empty(self):
        assert extract_usage_patterns({"evolution_metrics": None}) == {}
        assert extract_usage_patterns({"evolution_metrics": {"usage_patterns": None}}) == {}

    def test_preserves_insertion_order(self):
        patterns = extract_usage_patterns(_log({"zeta": 1, "alpha": 2, "mid": 3}))
        assert list(patterns) == ["zeta", "alpha", "mid"]

    def test_wrong_shape_rejected(self):
        with pytest.raises(UsageLogError):
            extract_usage_patterns({"evolution_metrics": {"usage_patterns": ["build", 3]}})
        with pytest.raises(UsageLogError):
            extract_usage_patterns({"evolution_metrics": "oops"})
        with pytest.raises(UsageLogError):
            extract_usage_patterns([1, 2, 3])


class TestCountValue:
    def test_null_is_zero(self):
        assert count_value("x", None) == 0

    def test_zero_and_positive(self):
        assert count_value("x", 0) == 0
        assert count_value("x", 7) == 7

    def test_integral_float_accepted(self):
        assert count_value("x", 3.0) == 3

    def test_tracker_entry_uses_count(self):
        assert count_value("x", {"count": 4, "last_used": None, "details": []}) == 4
        assert count_value("x", {"last_used": None}) == 0

    @pytest.mark.parametrize("bad", [-1, 2.5, "3", True, [1]])
    def test_invalid_counts_rejected(self, bad):
        with pytest.raises(UsageLogError):
            count_value("x", bad)


class TestRender:
    def test_total_and_order(self):
        patterns = {"build": 3, "deploy": 0, "test": 5}
        assert total_operations(patterns) == 8
        report = render_usage_report(patterns, today=TODAY)
        assert "Total operations tracked: 8" in report
        assert _operations_lines(report) == ["- **build**: 3", "- **deploy**: 0", "- **test**: 5"]

    def test_exact_layout(self):
        report = render_usage_report({"build": 2}, title="T", today=TODAY)
        assert report == (
            "# T\n\n"
            "**Generated:** 2025-07-14\n\n"
            "## Summary\n\n"
            "Total operations tracked: 2\n\n"
            "## Operations\n\n"
            "- **build**: 2\n"
        )

    def test_null_count_rendered_as_zero(self):
        report = render_usage_report({"x": None}, today=TODAY)
        assert "Total operations tracked: 0" in report
        assert _operations_lines(report) == ["- **x**: 0"]

    def test_empty_operations_section(self):
        report = render_usage_report({}, today=TODAY)
        assert "Total operations tracked: 0" in report
        assert _operations_lines(report) == []
        assert report.endswith("## Operations\n\n")

    def test_default_title_and_today(self):
        report = render_usage_report({})
        assert report.startswith(f"# {DEFAULT_TITLE}\n")
        assert "**Generated:** " in report


class TestGenerateUsageReport:
    def test_writes_output(self, write_log, tmp_path):
        src = write_log(_log({"build": 3, "deploy": 0, "test": 5}))
        out = tmp_path / "usage-report.md"
        report = generate_usage_report(src, out, today=TODAY)
        assert out.read_text(encoding="utf-8") == report
        assert "Total operations tracked: 8" in report

    def test_missing_metrics_succeeds(self, write_log, tmp_path):
        src = write_log({"meta": {"created": "2025-01-01"}})
        out = tmp_path / "r.md"
        report = generate_usage_report(src, out, today=TODAY)
        assert "Total operations tracked: 0" in report
        assert _operations_lines(report) == []

    def test_overwrites_existing(self, write_log, tmp_path):
        out = tmp_path / "r.md"
        out.write_text("old report", encoding="utf-8")
        generate_usage_report(write_log(_log({"a": 1})), out, today=TODAY)
        assert "old report" not in out.read_text(encoding="utf-8")

    def test_malformed_json_raises_and_no_output(self, write_log, tmp_path):
        src = write_log("{not json")
        out = tmp_path / "r.md"
        with pytest.raises(ValueError):
            generate_usage_report(src, out)
        assert not out.exists()

    def test_runs_differ_only_in_generated_line(self, write_log, tmp_path):
        src = write_log(_log({"build": 3, "test": 5}))
        first = generate_usage_report(src, tmp_path / "a.md", today=date(2025, 1, 1))
        second = generate_usage_report(src, tmp_path / "b.md", today=date(2025, 1, 2))
        diff = [(a, b) for a, b in zip(first.splitlines(), second.splitlines()) if a != b]
        assert len(first.splitlines()) == len(second.splitlines())
        assert len(diff) == 1
        assert diff[0][0].startswith("**Generated:**")

    def test_same_day_runs_identical(self, write_log, tmp_path):
        src = write_log(_log({"build": 3}))
        generate_usage_report(src, tmp_path / "a.md", today=TODAY)
        generate_usage_report(src, tmp_path / "b.md", today=TODAY)
        assert (tmp_path / "a.md").read_bytes() == (tmp_path / "b.md").read_bytes()


class TestMain:
    def test_success_exit_zero(self, write_log, tmp_path, capsys):
        src = write_log(_log({"build": 1}))
        out = tmp_path / "r.md"
        assert main(["--input", str(src), "--output", str(out)]) == 0
        assert SUCCESS_MESSAGE in capsys.readouterr().out
        assert out.exists()

    def test_malformed_exit_one_stderr(self, write_log, tmp_path, capsys):
        src = write_log("not json at all")
        out = tmp_path / "r.md"
        assert main(["--input", str(src), "--output", str(out)]) == 1
        captured = capsys.readouterr()
        assert "Error generating usage report" in captured.err
        assert SUCCESS_MESSAGE not in captured.out
        assert not out.exists()

    def test_missing_file_exit_one(self, tmp_path, capsys):
        assert main(["--input", str(tmp_path / "missing.json"), "--output", str(tmp_path / "r.md")]) == 1
        assert "Error generating usage report" in capsys.readouterr().err

    def test_negative_count_exit_one_no_output(self, write_log, tmp_path, capsys):
        src = write_log(_log({"build": -2}))
        out = tmp_path / "r.md"
        assert main(["--input", str(src), "--output", str(out)]) == 1
        assert "non-negative" in capsys.readouterr().err
        assert not out.exists()

    def test_paths_from_config(self, write_log, tmp_path):
        src = write_log(_log({"deploy": 2}))
        out = tmp_path / "from-config.md"
        cfg = tmp_path / "c.yaml"
        cfg.write_text(
            f"report:\n  evolution_log: {src}\n  output: {out}\n  title: Config Title\n",
            encoding="utf-8",
        )
        assert main(["--config", str(cfg)]) == 0
        text = out.read_text(encoding="utf-8")
        assert text.startswith("# Config Title\n")
        assert "- **deploy**: 2" in text
