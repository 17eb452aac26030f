"""CLI command listing built-in scenarios.

Usage:
    taskload scenarios
"""

from __future__ import annotations

import typer

app = typer.Typer(help="List built-in stress and growth scenarios")


@app.callback(invoke_without_command=True)
def scenarios() -> None:
    """Show the standard stress scenarios and growth scenarios."""
    from rich.console import Console
    from rich.table import Table

    from taskload.capacity import create_growth_scenarios
    from taskload.stress import create_standard_stress_scenarios

    console = Console()

    stress = Table(title="Stress scenarios")
    stress.add_column("Name")
    stress.add_column("Actors", justify="right")
    stress.add_column("Duration (s)", justify="right")
    stress.add_column("Tasks/actor", justify="right")
    stress.add_column("Description")
    for scenario in create_standard_stress_scenarios():
        config = scenario.config
        stress.add_row(
            scenario.name,
            str(config.concurrent_actors),
            f"{config.test_duration:g}",
            str(config.tasks_per_actor),
            scenario.description,
        )
    console.print(stress)

    growth = Table(title="Growth scenarios")
    growth.add_column("Name")
    growth.add_column("Monthly growth", justify="right")
    growth.add_column("Peak multiplier", justify="right")
    growth.add_column("Description")
    for scenario in create_growth_scenarios():
        growth.add_row(
            scenario.name,
            f"{scenario.monthly_growth_rate:g}%",
            f"{scenario.peak_multiplier:g}x",
            scenario.description,
        )
    console.print(growth)
