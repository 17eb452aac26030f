"""Tests for the taskload CLI."""

import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from taskload.cli import app

runner = CliRunner()

SMALL_SUITE = {
    "name": "CLI suite",
    "loadTests": [
        {
            "concurrentPlayers": 2,
            "testDuration": 2,
            "tasksPerPlayer": 2,
            "rampUpTime": 1,
            "rampDownTime": 1,
        }
    ],
    "stressTests": {
        "name": "CLI stress",
        "scenarios": [
            {
                "name": "tiny",
                "config": {"concurrentActors": 3, "testDuration": 2, "rampUpTime": 1},
            }
        ],
    },
    "capacityScenarios": [{"name": "Steady", "userGrowthRate": 5}],
}


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestPlanCommand:
    """Tests for `taskload plan`."""

    def test_target_text(self) -> None:
        """A target prints a single projection."""
        result = runner.invoke(app, ["plan", "--target", "1000"])

        assert result.exit_code == 0
        assert "Projection for 1000 users" in result.output
        assert "horizontal" in result.output

    def test_target_json(self) -> None:
        """JSON output uses camelCase keys."""
        result = runner.invoke(app, ["plan", "--target", "1000", "--current", "100", "-f", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["targetUsers"] == 1000
        assert data["requiredInstances"] == 8
        assert data["scalingStrategy"] == "horizontal"

    def test_scenario_is_case_insensitive(self) -> None:
        """Scenario names match regardless of case."""
        result = runner.invoke(app, ["plan", "--scenario", "conservative growth", "-f", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["scenario"]["name"] == "Conservative Growth"
        assert len(data["projections"]) == 12

    def test_scenario_table(self) -> None:
        """Text output for a scenario shows the yearly total."""
        result = runner.invoke(app, ["plan", "-s", "Seasonal Business"])

        assert result.exit_code == 0
        assert "Total cost:" in result.output

    def test_unknown_scenario(self) -> None:
        """An unknown scenario exits with an error."""
        result = runner.invoke(app, ["plan", "--scenario", "Hypergrowth"])

        assert result.exit_code == 1
        assert "Unknown scenario" in result.output

    @pytest.mark.parametrize(
        "args",
        [
            ["plan"],
            ["plan", "--target", "500", "--scenario", "Viral Growth"],
        ],
    )
    def test_requires_exactly_one_mode(self, args: list[str]) -> None:
        """Exactly one of --target and --scenario is required."""
        result = runner.invoke(app, args)

        assert result.exit_code == 1


class TestScenariosCommand:
    """Tests for `taskload scenarios`."""

    def test_lists_both_tables(self) -> None:
        """Stress and growth scenarios are listed."""
        result = runner.invoke(app, ["scenarios"])

        assert result.exit_code == 0
        assert "Stress scenarios" in result.output
        assert "Growth scenarios" in result.output
        assert "Baseline" in result.output
        assert "Viral" in result.output


class TestRunCommand:
    """Tests for `taskload run`."""

    def test_runs_suite_file(self, tmp_path: Path) -> None:
        """A suite file runs end to end and writes a JSON report."""
        suite_file = tmp_path / "suite.json"
        suite_file.write_text(json.dumps(SMALL_SUITE))
        output = tmp_path / "report.json"

        result = runner.invoke(
            app,
            [
                "run",
                "--format",
                "json",
                "--output",
                str(output),
                "--seed",
                "3",
                "--latency-ms",
                "5",
                "--log-level",
                "WARNING",
                str(suite_file),
            ],
        )

        assert result.exit_code == 0, result.output
        report = json.loads(output.read_text())
        assert report["suiteName"] == "CLI suite"
        assert len(report["loadTestResults"]) == 1
        assert report["stressReport"]["scenarioResults"]["tiny"]["totalRequests"] > 0
        assert len(report["capacityPlans"]) == 1

    def test_markdown_to_file(self, tmp_path: Path) -> None:
        """Markdown is the default format."""
        suite_file = tmp_path / "suite.json"
        suite_file.write_text(json.dumps(SMALL_SUITE))
        output = tmp_path / "report.md"

        result = runner.invoke(
            app, ["run", "--output", str(output), "--log-level", "WARNING", str(suite_file)]
        )

        assert result.exit_code == 0, result.output
        assert output.read_text().startswith("# Comprehensive Load Test Report")

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing suite file exits with an error."""
        result = runner.invoke(app, ["run", str(tmp_path / "nope.json")])

        assert result.exit_code == 1

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Malformed JSON exits with an error."""
        suite_file = tmp_path / "suite.json"
        suite_file.write_text("{not json")

        result = runner.invoke(app, ["run", str(suite_file)])

        assert result.exit_code == 1

    def test_invalid_suite(self, tmp_path: Path) -> None:
        """A suite failing validation exits with an error."""
        suite_file = tmp_path / "suite.json"
        suite_file.write_text(json.dumps({"name": "No stress suite"}))

        result = runner.invoke(app, ["run", str(suite_file)])

        assert result.exit_code == 1

    def test_unknown_format(self) -> None:
        """Unsupported formats are rejected before running anything."""
        result = runner.invoke(app, ["run", "--format", "xml"])

        assert result.exit_code == 1
