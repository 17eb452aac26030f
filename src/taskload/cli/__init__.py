"""CLI commands for taskload.

Provides command-line interface using Typer:
- taskload run: Run a comprehensive load test suite against the simulator
- taskload plan: Project capacity for a target user count or growth scenario
- taskload scenarios: List built-in stress and growth scenarios

Usage:
    taskload --help
    taskload run --format json --output report.json suite.json
    taskload plan --target 1000 --current 100
    taskload plan --scenario "Aggressive Growth"
    taskload scenarios
"""

import typer

from taskload.cli.plan_cmd import app as plan_app
from taskload.cli.run_cmd import app as run_app
from taskload.cli.scenarios_cmd import app as scenarios_app

# Main CLI application
app = typer.Typer(
    name="taskload",
    help="taskload: load, stress and capacity testing for task queue systems",
    no_args_is_help=True,
)

# Add subcommands
app.add_typer(run_app, name="run")
app.add_typer(plan_app, name="plan")
app.add_typer(scenarios_app, name="scenarios")


@app.callback()
def callback() -> None:
    """taskload: load, stress and capacity testing for task queue systems."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
