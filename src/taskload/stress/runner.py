"""Stress test orchestration.

Runs a StressSuite's scenarios through the load engine in batches of at
most ``max_concurrent_tests``. Scenarios inside a batch run concurrently
and a failing scenario never blocks its batch-mates. A recovery pause
separates consecutive batches.

Example:
    runner = StressTestRunner(engine)
    report = await runner.execute_stress_test_suite(create_comprehensive_stress_suite())
    print(report.stress_analysis.breaking_point)
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from uuid import uuid4

from taskload.config import settings
from taskload.errors import SuiteAlreadyRunningError
from taskload.load.engine import LoadTestEngine
from taskload.models.load_test import LoadTestResult
from taskload.models.stress import StressReport, StressScenario, StressSuite
from taskload.observability.logging import LogContext
from taskload.observability.metrics import get_metrics
from taskload.simulation.clock import Clock
from taskload.stress.analysis import (
    analyze_stress_results,
    generate_stress_recommendations,
    merge_overall_metrics,
)
from taskload.stress.scenarios import (
    create_comprehensive_stress_suite,
    create_standard_stress_scenarios,
)

logger = logging.getLogger(__name__)


def create_scenario_batches(
    scenarios: list[StressScenario], max_concurrent: int
) -> list[list[StressScenario]]:
    """Split scenarios into consecutive batches of at most ``max_concurrent``."""
    return [
        scenarios[start : start + max_concurrent]
        for start in range(0, len(scenarios), max_concurrent)
    ]


class StressTestRunner:
    """Executes stress suites on top of a LoadTestEngine.

    Only one suite may run at a time on a runner.
    """

    def __init__(
        self,
        engine: LoadTestEngine,
        clock: Clock | None = None,
        recovery_pause: float | None = None,
    ) -> None:
        self.engine = engine
        self.clock = clock or engine.clock
        self.recovery_pause = (
            settings.stress_recovery_pause if recovery_pause is None else recovery_pause
        )
        self._running = False
        self._stop_requested = False
        self._current_suite: StressSuite | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def current_suite(self) -> StressSuite | None:
        return self._current_suite

    async def execute_stress_test_suite(self, suite: StressSuite) -> StressReport:
        """Run every scenario of the suite and analyze the merged results.

        Raises:
            SuiteAlreadyRunningError: If a suite is already running
        """
        if self._running:
            raise SuiteAlreadyRunningError("Stress test suite")

        self._running = True
        self._stop_requested = False
        self._current_suite = suite

        report = StressReport(
            suite_id=f"stress-suite-{uuid4().hex[:12]}",
            suite_name=suite.name,
            start_time=datetime.fromtimestamp(self.clock.time(), tz=timezone.utc),
        )

        with LogContext(suite_id=report.suite_id):
            logger.info(f"Starting stress test suite: {suite.name}")
            try:
                batches = create_scenario_batches(suite.scenarios, suite.max_concurrent_tests)
                for index, batch in enumerate(batches):
                    if self._stop_requested:
                        logger.warning(
                            f"Stress suite stopped, skipping {len(batches) - index} batch(es)"
                        )
                        break

                    await self._execute_batch(batch, report)

                    if index < len(batches) - 1:
                        await self.clock.sleep(self.recovery_pause)

                self._analyze(report)

            except Exception as e:
                logger.error(f"Stress test suite failed: {e}")
                report.recommendations.append(f"Suite execution failed: {e}")
            finally:
                self._running = False
                self._current_suite = None
                report.end_time = datetime.fromtimestamp(self.clock.time(), tz=timezone.utc)

            get_metrics().stress_suites_total.inc()

        return report

    async def _execute_batch(self, batch: list[StressScenario], report: StressReport) -> None:
        logger.info(f"Executing batch of {len(batch)} stress scenarios")

        outcomes = await asyncio.gather(
            *(self._run_scenario(scenario, report) for scenario in batch),
            return_exceptions=True,
        )
        for scenario, outcome in zip(batch, outcomes):
            if isinstance(outcome, Exception):
                logger.error(f"Stress scenario {scenario.name} failed: {outcome}")

    async def _run_scenario(self, scenario: StressScenario, report: StressReport) -> LoadTestResult:
        with LogContext(scenario=scenario.name):
            logger.info(f"Starting stress scenario: {scenario.name}")
            result = await self.engine.execute_load_test(scenario.config)

            report.scenario_results[scenario.name] = result
            merge_overall_metrics(report.overall_metrics, result)

            logger.info(f"Completed stress scenario: {scenario.name}")
            return result

    def _analyze(self, report: StressReport) -> None:
        results = list(report.scenario_results.values())
        report.stress_analysis = analyze_stress_results(results)
        report.recommendations = generate_stress_recommendations(report.stress_analysis)

        logger.info(
            f"Stress analysis complete. Breaking point: "
            f"{report.stress_analysis.breaking_point} actors, "
            f"stability score: {report.stress_analysis.stability_score}/100"
        )

    def stop_stress_test(self) -> None:
        """Stop running scenarios at their next round and skip remaining batches."""
        self._stop_requested = True
        self.engine.stop_current_test()

    @staticmethod
    def create_standard_stress_scenarios() -> list[StressScenario]:
        return create_standard_stress_scenarios()

    @staticmethod
    def create_comprehensive_stress_suite() -> StressSuite:
        return create_comprehensive_stress_suite()
