"""CLI command for running a comprehensive test suite.

Usage:
    taskload run
    taskload run --version 2.1.0 --environment staging suite.json
    taskload run --format json --output report.json suite.json
    taskload run --failure-rate 0.02 --latency-ms 50 --seed 7
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import typer

if TYPE_CHECKING:
    from rich.console import Console

    from taskload.models.suite import ComprehensiveTestReport, LoadTestSuite

app = typer.Typer(help="Run a comprehensive load test suite")


@app.callback(invoke_without_command=True)
def run(
    suite_file: Path | None = typer.Argument(
        None,
        help="JSON suite definition (standard suite when omitted)",
    ),
    version: str = typer.Option(
        "1.0.0",
        "--version",
        help="Version label of the benchmark suite",
    ),
    environment: str = typer.Option(
        "test",
        "--environment",
        "-e",
        help="Environment label of the benchmark suite",
    ),
    output_format: str = typer.Option(
        "markdown",
        "--format",
        "-f",
        help="Output format: markdown, json",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the report to this file instead of stdout",
    ),
    seed: int | None = typer.Option(
        None,
        "--seed",
        help="Seed for all simulated randomness",
    ),
    virtual_time: bool = typer.Option(
        True,
        "--virtual-time/--real-time",
        help="Skip simulated pauses instead of waiting on the wall clock",
    ),
    latency_ms: float = typer.Option(
        0.0,
        "--latency-ms",
        help="Simulated backend latency per call",
    ),
    jitter_ms: float = typer.Option(
        0.0,
        "--jitter-ms",
        help="Upper bound of random latency added per call",
    ),
    failure_rate: float = typer.Option(
        0.0,
        "--failure-rate",
        min=0.0,
        max=1.0,
        help="Probability that a backend call fails",
    ),
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    ),
) -> None:
    """Run load tests, the stress suite, the benchmark and capacity plans.

    Everything runs against the in-memory task backend simulation.
    """
    from rich.console import Console

    from taskload.config import settings
    from taskload.observability.logging import configure_logging

    console = Console(stderr=True)
    configure_logging(json_format=settings.log_json, level=log_level)

    if output_format not in ("markdown", "json"):
        console.print(f"[red]Unknown format:[/red] {output_format}")
        raise typer.Exit(code=1)

    suite = _load_suite(suite_file, console)

    console.print(f"[blue]Running suite:[/blue] {suite.name}")
    report = asyncio.run(
        _run_suite(
            suite,
            version,
            environment,
            seed if seed is not None else settings.random_seed,
            virtual_time,
            latency_ms,
            jitter_ms,
            failure_rate,
        )
    )

    rendered = _render(report, output_format)
    if output is not None:
        output.write_text(rendered, encoding="utf-8")
        console.print(f"[green]✓[/green] Report written to {output}")
    else:
        typer.echo(rendered)

    console.print("[bold]Scores:[/bold]")
    console.print(f"  Performance: {report.performance_score}/100")
    console.print(f"  Scalability: {report.scalability_score}/100")
    console.print(f"  Reliability: {report.reliability_score}/100")


def _load_suite(suite_file: Path | None, console: Console) -> LoadTestSuite:
    """Parse and validate the suite file, or build the standard suite."""
    import orjson
    from pydantic import ValidationError

    from taskload.models.suite import LoadTestSuite
    from taskload.runner import ComprehensiveTestRunner

    if suite_file is None:
        return ComprehensiveTestRunner.create_standard_load_test_suite()

    try:
        return LoadTestSuite.model_validate(orjson.loads(suite_file.read_bytes()))
    except FileNotFoundError:
        console.print(f"[red]Suite file not found:[/red] {suite_file}")
        raise typer.Exit(code=1)
    except orjson.JSONDecodeError as e:
        console.print(f"[red]✗[/red] {suite_file}: Invalid JSON - {e}")
        raise typer.Exit(code=1)
    except ValidationError as e:
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            console.print(f"    [red]└[/red] {loc}: {error['msg']}")
        console.print(f"[red]✗[/red] {suite_file}: {e.error_count()} validation error(s)")
        raise typer.Exit(code=1)


async def _run_suite(
    suite: LoadTestSuite,
    version: str,
    environment: str,
    seed: int | None,
    virtual_time: bool,
    latency_ms: float,
    jitter_ms: float,
    failure_rate: float,
) -> ComprehensiveTestReport:
    """Async implementation of the run command."""
    from taskload.load.engine import LoadTestEngine
    from taskload.runner import ComprehensiveTestRunner
    from taskload.simulation.backend import InMemoryTaskBackend
    from taskload.simulation.clock import SystemClock, VirtualClock

    clock = VirtualClock() if virtual_time else SystemClock()
    backend = InMemoryTaskBackend(
        clock=clock,
        latency_ms=latency_ms,
        jitter_ms=jitter_ms,
        failure_rate=failure_rate,
        seed=seed,
    )
    engine = LoadTestEngine(backend, clock=clock, seed=seed)
    runner = ComprehensiveTestRunner(engine)
    return await runner.execute_comprehensive_test_suite(suite, version, environment)


def _render(report: ComprehensiveTestReport, output_format: str) -> str:
    if output_format == "json":
        import orjson

        return orjson.dumps(
            report.model_dump(mode="json", by_alias=True),
            option=orjson.OPT_INDENT_2,
        ).decode()

    from taskload.reporting import render_comprehensive_report

    return render_comprehensive_report(report)
