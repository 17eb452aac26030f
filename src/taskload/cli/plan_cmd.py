"""CLI command for capacity planning.

Usage:
    taskload plan --target 1000
    taskload plan --target 400 --current 100 --format json
    taskload plan --scenario "Conservative Growth" --current 250
"""

from __future__ import annotations

import typer

app = typer.Typer(help="Project capacity and cost")


@app.callback(invoke_without_command=True)
def plan(
    target: int | None = typer.Option(
        None,
        "--target",
        "-t",
        min=0,
        help="Target user count for a single scaling projection",
    ),
    scenario: str | None = typer.Option(
        None,
        "--scenario",
        "-s",
        help="Built-in growth scenario for a 12-month capacity plan",
    ),
    current: int = typer.Option(
        100,
        "--current",
        "-c",
        min=1,
        help="Current user count",
    ),
    output_format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: text, json",
    ),
) -> None:
    """Project resources, instances and monthly cost.

    Give --target for one projection or --scenario for a 12-month plan.
    """
    import orjson
    from rich.console import Console
    from rich.table import Table

    from taskload.capacity import CapacityPlanner, create_growth_scenarios

    console = Console()

    if (target is None) == (scenario is None):
        typer.echo("Error: Specify exactly one of --target or --scenario", err=True)
        raise typer.Exit(code=1)

    planner = CapacityPlanner()

    if target is not None:
        projection = planner.create_scaling_projection(target, current)
        if output_format == "json":
            typer.echo(
                orjson.dumps(
                    projection.model_dump(mode="json", by_alias=True),
                    option=orjson.OPT_INDENT_2,
                ).decode()
            )
            return

        resources = projection.resource_requirements
        console.print(f"[bold]Projection for {projection.target_users} users[/bold]")
        console.print(f"  Strategy:   {projection.scaling_strategy.value}")
        console.print(f"  Timeline:   {projection.timeline}")
        console.print(f"  Instances:  {projection.required_instances}")
        console.print(
            f"  Resources:  {resources.cpu:g} cores, {resources.memory:g} GB memory, "
            f"{resources.storage:g} GB storage, {resources.network:g} Mbps"
        )
        console.print(f"  Cost:       ${projection.estimated_cost:,.2f}/month")
        for risk in projection.risks:
            console.print(f"  [yellow]![/yellow] {risk}")
        return

    scenarios = {s.name.lower(): s for s in create_growth_scenarios()}
    growth = scenarios.get(scenario.lower())
    if growth is None:
        console.print(f"[red]Unknown scenario:[/red] {scenario}")
        console.print(f"Available: {', '.join(s.name for s in scenarios.values())}")
        raise typer.Exit(code=1)

    capacity_plan = planner.create_capacity_plan(growth, current)
    if output_format == "json":
        typer.echo(
            orjson.dumps(
                capacity_plan.model_dump(mode="json", by_alias=True),
                option=orjson.OPT_INDENT_2,
            ).decode()
        )
        return

    table = Table(title=f"{growth.name} ({growth.monthly_growth_rate:g}% monthly)")
    table.add_column("Month", justify="right")
    table.add_column("Peak users", justify="right")
    table.add_column("Instances", justify="right")
    table.add_column("Strategy")
    table.add_column("Monthly cost", justify="right")
    for month, projection in enumerate(capacity_plan.projections, 1):
        table.add_row(
            str(month),
            str(projection.target_users),
            str(projection.required_instances),
            projection.scaling_strategy.value,
            f"${projection.estimated_cost:,.2f}",
        )
    console.print(table)
    console.print(f"[bold]Total cost:[/bold] ${capacity_plan.total_cost:,.2f}/year")
    console.print(f"[bold]Milestones:[/bold] {len(capacity_plan.milestones)}")
    for risk in capacity_plan.risk_assessment.technical_risks + capacity_plan.risk_assessment.business_risks:
        console.print(f"  [yellow]![/yellow] {risk}")
