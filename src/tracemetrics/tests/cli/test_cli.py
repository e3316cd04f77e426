from __future__ import annotations

import json

from click.testing import CliRunner

from tracemetrics.cli import cli


def _write_trace(trace, tmp_path):
    trace.navigation("NAV-1", 100_000)
    trace.fcp(600_000, "NAV-1")
    trace.dcl(700_000)
    trace.task(800_000, 200_000)
    return trace.write(tmp_path / "trace.json")


class TestListCommand:
    def test_lists_handlers_with_dependencies(self) -> None:
        result = CliRunner().invoke(cli, ["list", "handlers"])

        assert result.exit_code == 0
        assert "Handlers:" in result.output
        assert "Meta" in result.output
        assert "deps: Meta, Renderer" in result.output


class TestAnalyzeCommand:
    def test_prints_main_frame_metrics(self, trace, tmp_path) -> None:
        path = _write_trace(trace, tmp_path)

        result = CliRunner().invoke(cli, ["analyze", str(path)])

        assert result.exit_code == 0, result.output
        assert f"Main frame: {trace.MAIN_FRAME}" in result.output
        assert "Navigation NAV-1 (https://example.com/)" in result.output
        assert "0.5s" in result.output
        assert "150ms" in result.output
        assert "(estimated)" in result.output
        assert "Markers:" in result.output

    def test_json_output(self, trace, tmp_path) -> None:
        path = _write_trace(trace, tmp_path)

        result = CliRunner().invoke(cli, ["analyze", str(path), "--json"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        metrics = payload["frames"][trace.MAIN_FRAME]["NAV-1"]["metrics"]
        assert [metric["metric"] for metric in metrics] == ["FCP", "DCL", "TBT"]
        assert metrics[-1]["estimated"] is True
        assert payload["first_fcp_ts"] == 600_000

    def test_unreadable_trace_fails_cleanly(self, tmp_path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{broken")

        result = CliRunner().invoke(cli, ["analyze", str(path)])

        assert result.exit_code == 1
        assert "Failed to parse trace" in result.output

    def test_integrity_errors_are_reported(self, trace, tmp_path) -> None:
        trace.navigation("NAV-1", 100_000)
        trace.fcp(600_000, None)
        path = trace.write(tmp_path / "trace.json")

        result = CliRunner().invoke(cli, ["analyze", str(path)])

        assert result.exit_code == 1
        assert "no navigation ID" in result.output

    def test_missing_file_is_a_usage_error(self, tmp_path) -> None:
        result = CliRunner().invoke(cli, ["analyze", str(tmp_path / "missing.json")])

        assert result.exit_code == 2
