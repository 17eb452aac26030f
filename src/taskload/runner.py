"""Comprehensive test runner.

Sequences every layer into one ComprehensiveTestReport:

1. Load tests, one after another, with a pause after each
2. The stress suite
3. A benchmark suite over both (compared against a baseline when the
   suite names one)
4. One capacity plan per growth scenario, from a planner fed with the load
   results, the stress report and the benchmark history
5. Scores and three tiers of recommendations

Runtime failures are caught at the top level and reported as an immediate
action; the partial report is still returned. Re-entrant invocation and a
missing benchmark baseline are caller errors and raise.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from uuid import uuid4

from taskload.benchmark.scorer import PerformanceBenchmark
from taskload.capacity.planner import CapacityPlanner
from taskload.capacity.scenarios import create_growth_scenarios
from taskload.config import settings
from taskload.errors import BaselineNotFoundError, SuiteAlreadyRunningError
from taskload.load.engine import LoadTestEngine
from taskload.models.benchmark import BenchmarkSuite, OptimizationValidation
from taskload.models.capacity import CapacityPlan, GrowthScenario
from taskload.models.load_test import LoadTestConfig, LoadTestResult, PerformanceThresholds
from taskload.models.stress import StressReport
from taskload.models.suite import ComprehensiveTestReport, LoadTestSuite
from taskload.observability.logging import LogContext
from taskload.stress.runner import StressTestRunner
from taskload.stress.scenarios import DEFAULT_MIX, create_comprehensive_stress_suite

logger = logging.getLogger(__name__)

# Stress results at or below this many actors describe the current load
CURRENT_USERS_CEILING = 200
DEFAULT_CURRENT_USERS = 100


def calculate_scalability_score(stress_report: StressReport) -> int:
    """70% stability plus a bonus for a high breaking point."""
    analysis = stress_report.stress_analysis
    score = analysis.stability_score * 0.7

    if analysis.breaking_point >= 1000:
        score += 30
    elif analysis.breaking_point >= 500:
        score += 20
    elif analysis.breaking_point >= 250:
        score += 10

    return min(100, round(score))


def calculate_reliability_score(results: Sequence[LoadTestResult]) -> int:
    """Step score from the aggregate error rate of all load tests."""
    if not results:
        return 0

    total_requests = sum(r.total_requests for r in results)
    total_errors = sum(r.failed_requests for r in results)
    error_rate = total_errors / total_requests * 100 if total_requests > 0 else 0.0

    if error_rate <= 0.1:
        return 100
    if error_rate <= 0.5:
        return 90
    if error_rate <= 1.0:
        return 80
    if error_rate <= 2.0:
        return 70
    if error_rate <= 5.0:
        return 60
    return 40


def current_user_count(stress_report: StressReport) -> int:
    """Actor count of the first stress scenario small enough to be "today"."""
    for result in stress_report.scenario_results.values():
        if result.config.concurrent_actors <= CURRENT_USERS_CEILING:
            return result.config.concurrent_actors or DEFAULT_CURRENT_USERS
    return DEFAULT_CURRENT_USERS


def _metric_value(suite: BenchmarkSuite | None, name: str) -> float:
    if suite is None:
        return 0.0
    metric = suite.get_metric(name)
    return metric.value if metric is not None else 0.0


def _find_plan(plans: Sequence[CapacityPlan], scenario_name: str) -> CapacityPlan | None:
    return next((plan for plan in plans if plan.scenario.name == scenario_name), None)


def generate_immediate_actions(report: ComprehensiveTestReport) -> list[str]:
    actions: list[str] = []

    if report.performance_score < 70:
        actions.append("Investigate performance bottlenecks immediately")

    if report.reliability_score < 80:
        actions.append("Review and fix error handling mechanisms")

    if _metric_value(report.benchmark_suite, "Peak Memory Usage") > 1500:
        actions.append("Optimize memory usage to prevent out-of-memory errors")

    if _metric_value(report.benchmark_suite, "Average Response Time") > 2000:
        actions.append("Optimize response times to improve user experience")

    return actions


def generate_short_term_recommendations(report: ComprehensiveTestReport) -> list[str]:
    """Recommendations for the next 1-3 months."""
    recommendations: list[str] = []

    if report.scalability_score < 80:
        recommendations.append("Implement horizontal scaling capabilities")
        recommendations.append("Add load balancing and auto-scaling policies")

    conservative = _find_plan(report.capacity_plans, "Conservative Growth")
    if conservative is not None and len(conservative.projections) > 2:
        if conservative.projections[2].required_instances > 5:
            recommendations.append("Plan infrastructure scaling for next quarter growth")

    if report.performance_score < 85:
        recommendations.append("Implement caching layer for frequently accessed data")
        recommendations.append("Optimize database queries and add appropriate indexes")

    return recommendations


def generate_long_term_recommendations(report: ComprehensiveTestReport) -> list[str]:
    """Recommendations for the next 6-12 months."""
    recommendations: list[str] = []

    aggressive = _find_plan(report.capacity_plans, "Aggressive Growth")
    if aggressive is not None and aggressive.projections:
        if aggressive.projections[-1].target_users > 10000:
            recommendations.append("Consider microservices architecture for better scalability")
            recommendations.append("Plan for database sharding or clustering")

    if report.stress_report is not None and report.stress_report.stress_analysis.breaking_point < 1000:
        recommendations.append("Evaluate serverless architecture for better auto-scaling")
        recommendations.append(
            "Consider container orchestration (Kubernetes) for resource efficiency"
        )

    recommendations.append("Implement comprehensive APM (Application Performance Monitoring)")
    recommendations.append("Set up predictive scaling based on usage patterns")

    return recommendations


class ComprehensiveTestRunner:
    """Runs load, stress, benchmark and capacity phases as one suite.

    Args:
        engine: Load engine shared by the load and stress phases
        benchmark: Scorer holding suite history and baselines
        planner: Capacity planner
        stress_runner: Stress orchestrator (built on ``engine`` when omitted)
        inter_test_pause: Seconds paused after each load test
    """

    def __init__(
        self,
        engine: LoadTestEngine,
        benchmark: PerformanceBenchmark | None = None,
        planner: CapacityPlanner | None = None,
        stress_runner: StressTestRunner | None = None,
        inter_test_pause: float | None = None,
    ) -> None:
        self.engine = engine
        self.clock = engine.clock
        self.benchmark = benchmark or PerformanceBenchmark(clock=self.clock)
        self.planner = planner or CapacityPlanner(clock=self.clock)
        self.stress_runner = stress_runner or StressTestRunner(engine)
        self.inter_test_pause = (
            settings.inter_test_pause if inter_test_pause is None else inter_test_pause
        )
        self._running = False
        self._stop_requested = False

    @property
    def is_running(self) -> bool:
        return self._running

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self.clock.time(), tz=timezone.utc)

    async def execute_comprehensive_test_suite(
        self,
        suite: LoadTestSuite,
        version: str = "1.0.0",
        environment: str = "test",
    ) -> ComprehensiveTestReport:
        """Run every phase of the suite and return the composed report.

        Raises:
            SuiteAlreadyRunningError: If a suite is already running
            BaselineNotFoundError: If the suite names a benchmark baseline
                that was never registered for the environment
        """
        if self._running:
            raise SuiteAlreadyRunningError("Load test suite")
        if suite.benchmark_baseline and not self.benchmark.has_baseline(
            suite.benchmark_baseline, environment
        ):
            raise BaselineNotFoundError(suite.benchmark_baseline, environment)

        self._running = True
        self._stop_requested = False

        report = ComprehensiveTestReport(
            suite_id=f"comprehensive-test-{uuid4().hex[:12]}",
            suite_name=suite.name,
            start_time=self._now(),
        )

        with LogContext(suite_id=report.suite_id):
            logger.info(f"Starting comprehensive test suite: {suite.name}")
            try:
                logger.info("Phase 1: executing load tests")
                report.load_test_results = await self.execute_load_tests(suite.load_tests)

                logger.info("Phase 2: executing stress tests")
                report.stress_report = await self.stress_runner.execute_stress_test_suite(
                    suite.stress_suite
                )

                logger.info("Phase 3: generating performance benchmark")
                report.benchmark_suite = self.benchmark.create_benchmark_suite(
                    report.load_test_results, report.stress_report, version, environment
                )
                if suite.benchmark_baseline:
                    report.baseline_comparison = self.benchmark.compare_to_baseline(
                        report.benchmark_suite, suite.benchmark_baseline
                    )

                logger.info("Phase 4: creating capacity plans")
                report.capacity_plans = self.create_capacity_plans(
                    suite.capacity_scenarios, report.load_test_results, report.stress_report
                )

                logger.info("Phase 5: analyzing results")
                self.analyze_results(report)

                logger.info("Comprehensive test suite completed")

            except Exception as e:
                logger.error(f"Comprehensive test suite failed: {e}")
                report.immediate_actions.append(f"Test suite execution failed: {e}")
            finally:
                self._running = False
                report.end_time = self._now()

        return report

    async def execute_load_tests(self, configs: Sequence[LoadTestConfig]) -> list[LoadTestResult]:
        results: list[LoadTestResult] = []
        for config in configs:
            if self._stop_requested:
                logger.warning("Load test phase stopped before all tests ran")
                break
            logger.info(f"Executing load test with {config.concurrent_actors} concurrent actors")
            results.append(await self.engine.execute_load_test(config))
            await self.clock.sleep(self.inter_test_pause)
        return results

    def create_capacity_plans(
        self,
        scenarios: Sequence[GrowthScenario],
        results: Sequence[LoadTestResult],
        stress_report: StressReport,
    ) -> list[CapacityPlan]:
        """One plan per scenario; a failing scenario is logged and skipped."""
        self.planner.add_historical_data(results)
        self.planner.add_stress_test_data([stress_report])
        self.planner.calibrate_capacity_model(self.benchmark.get_benchmark_history())

        current_users = current_user_count(stress_report)
        plans: list[CapacityPlan] = []
        for scenario in scenarios:
            try:
                plans.append(self.planner.create_capacity_plan(scenario, current_users))
            except Exception as e:
                logger.error(f"Failed to create capacity plan for {scenario.name}: {e}")
        return plans

    def analyze_results(self, report: ComprehensiveTestReport) -> None:
        """Fill in the three scores and the recommendation tiers."""
        report.performance_score = (
            report.benchmark_suite.overall_score if report.benchmark_suite else 0
        )
        report.scalability_score = (
            calculate_scalability_score(report.stress_report) if report.stress_report else 0
        )
        report.reliability_score = calculate_reliability_score(report.load_test_results)

        report.immediate_actions = generate_immediate_actions(report)
        report.short_term_recommendations = generate_short_term_recommendations(report)
        report.long_term_recommendations = generate_long_term_recommendations(report)

    async def validate_optimization(
        self,
        optimization_name: str,
        before_suite: LoadTestSuite,
        after_suite: LoadTestSuite,
        version: str = "1.0.0",
        environment: str = "test",
    ) -> OptimizationValidation:
        """Run a suite before and after an optimization and compare benchmarks."""
        logger.info(f"Validating optimization: {optimization_name}")

        before = await self.execute_comprehensive_test_suite(
            before_suite, f"{version}-before", environment
        )
        after = await self.execute_comprehensive_test_suite(
            after_suite, f"{version}-after", environment
        )
        if before.benchmark_suite is None or after.benchmark_suite is None:
            raise RuntimeError(
                f"Optimization {optimization_name} could not be validated: "
                "a suite produced no benchmark"
            )

        return self.benchmark.validate_optimization(
            optimization_name, before.benchmark_suite, after.benchmark_suite
        )

    def generate_test_report(self, report: ComprehensiveTestReport) -> str:
        from taskload.reporting import render_comprehensive_report

        return render_comprehensive_report(report)

    def stop_current_test(self) -> None:
        """Request a cooperative stop of every running phase."""
        self._stop_requested = True
        self.engine.stop_current_test()
        self.stress_runner.stop_stress_test()

    @staticmethod
    def create_standard_load_test_suite() -> LoadTestSuite:
        """Three load tests (50, 100, 250 actors), the full stress suite and
        the built-in growth scenarios."""

        def load_test(
            actors: int,
            duration: float,
            tasks: int,
            max_response_ms: float,
            max_error_rate: float,
            max_memory_mb: float,
            ramp_up: float,
            ramp_down: float,
        ) -> LoadTestConfig:
            return LoadTestConfig(
                concurrent_actors=actors,
                test_duration=duration,
                tasks_per_actor=tasks,
                task_type_distribution=DEFAULT_MIX,
                thresholds=PerformanceThresholds(
                    max_response_time_ms=max_response_ms,
                    max_error_rate=max_error_rate,
                    max_memory_usage_mb=max_memory_mb,
                ),
                ramp_up_time=ramp_up,
                ramp_down_time=ramp_down,
            )

        return LoadTestSuite(
            name="Standard Task Queue Load Test Suite",
            description=(
                "Comprehensive testing of task queue system under various load conditions"
            ),
            load_tests=[
                load_test(50, 60, 5, 1000, 0.01, 500, 10, 5),
                load_test(100, 120, 10, 1500, 0.015, 750, 15, 10),
                load_test(250, 180, 15, 2000, 0.02, 1000, 20, 15),
            ],
            stress_suite=create_comprehensive_stress_suite(),
            capacity_scenarios=create_growth_scenarios(),
        )
