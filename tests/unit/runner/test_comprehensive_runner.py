"""Tests for the comprehensive test runner."""

import asyncio
from collections.abc import Callable
from datetime import datetime, timezone

import pytest

from taskload.errors import BaselineNotFoundError, SuiteAlreadyRunningError
from taskload.load.engine import LoadTestEngine
from taskload.models.capacity import GrowthScenario
from taskload.models.load_test import LoadTestConfig, LoadTestResult
from taskload.models.stress import StressAnalysis, StressReport, StressScenario, StressSuite
from taskload.models.suite import ComprehensiveTestReport, LoadTestSuite
from taskload.runner import (
    ComprehensiveTestRunner,
    calculate_reliability_score,
    calculate_scalability_score,
    current_user_count,
    generate_immediate_actions,
    generate_long_term_recommendations,
    generate_short_term_recommendations,
)
from taskload.simulation.clock import VirtualClock

ConfigFactory = Callable[..., LoadTestConfig]
START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_result(actors: int, requests: int = 1000, failed: int = 0) -> LoadTestResult:
    return LoadTestResult(
        test_id=f"load-test-{actors}",
        start_time=START,
        config=LoadTestConfig(concurrent_actors=actors),
        total_requests=requests,
        successful_requests=requests - failed,
        failed_requests=failed,
    )


def make_stress_report(
    breaking_point: int = 500, stability: int = 80, actor_counts: tuple[int, ...] = ()
) -> StressReport:
    return StressReport(
        suite_id="stress-suite-fixed",
        suite_name="Fixed",
        start_time=START,
        scenario_results={f"{n} actors": make_result(n) for n in actor_counts},
        stress_analysis=StressAnalysis(breaking_point=breaking_point, stability_score=stability),
    )


def make_report(**values: object) -> ComprehensiveTestReport:
    return ComprehensiveTestReport(
        suite_id="comprehensive-test-fixed", suite_name="Fixed", start_time=START, **values
    )


def make_suite(make_config: ConfigFactory, load_actors: tuple[int, ...] = (2, 4)) -> LoadTestSuite:
    return LoadTestSuite(
        name="Unit suite",
        load_tests=[make_config(concurrent_actors=n) for n in load_actors],
        stress_suite=StressSuite(
            name="Unit stress",
            scenarios=[
                StressScenario(name="light", config=make_config(concurrent_actors=3)),
                StressScenario(name="heavy", config=make_config(concurrent_actors=6)),
            ],
            max_concurrent_tests=2,
        ),
        capacity_scenarios=[GrowthScenario(name="Steady", monthly_growth_rate=5)],
    )


class FailingEngine:
    """Engine stand-in whose load tests always crash."""

    def __init__(self, clock: VirtualClock) -> None:
        self.clock = clock

    async def execute_load_test(self, config: LoadTestConfig) -> LoadTestResult:
        raise RuntimeError("boom")

    def stop_current_test(self) -> None:
        pass


class TestScores:
    """Tests for the report scores."""

    @pytest.mark.parametrize(
        ("breaking_point", "stability", "score"),
        [
            (1000, 80, 86),
            (500, 80, 76),
            (250, 80, 66),
            (100, 50, 35),
            (2000, 100, 100),
        ],
    )
    def test_scalability(self, breaking_point: int, stability: int, score: int) -> None:
        """Stability weighs 70% with a bonus for a high breaking point."""
        report = make_stress_report(breaking_point, stability)

        assert calculate_scalability_score(report) == score

    @pytest.mark.parametrize(
        ("failed", "score"),
        [(0, 100), (1, 100), (3, 90), (10, 80), (20, 70), (50, 60), (100, 40)],
    )
    def test_reliability(self, failed: int, score: int) -> None:
        """The aggregate error percentage maps onto score steps."""
        assert calculate_reliability_score([make_result(10, failed=failed)]) == score

    def test_reliability_without_results(self) -> None:
        """No load results score 0."""
        assert calculate_reliability_score([]) == 0

    def test_reliability_without_requests(self) -> None:
        """Results without requests count as error-free."""
        assert calculate_reliability_score([make_result(0, requests=0)]) == 100


class TestCurrentUserCount:
    """Tests for deriving today's user count from a stress report."""

    def test_first_small_scenario(self) -> None:
        """The first scenario at or below 200 actors is used."""
        assert current_user_count(make_stress_report(actor_counts=(500, 150, 100))) == 150

    def test_default(self) -> None:
        """Without a small scenario the default of 100 is used."""
        assert current_user_count(make_stress_report(actor_counts=(500, 1000))) == 100
        assert current_user_count(make_stress_report(actor_counts=(0,))) == 100


class TestRecommendations:
    """Tests for the recommendation tiers."""

    def test_immediate_actions(self) -> None:
        """Low scores call for immediate action."""
        report = make_report(performance_score=50, reliability_score=70)

        assert generate_immediate_actions(report) == [
            "Investigate performance bottlenecks immediately",
            "Review and fix error handling mechanisms",
        ]

    def test_healthy_report_has_no_immediate_actions(self) -> None:
        """High scores need no immediate action."""
        report = make_report(performance_score=95, reliability_score=100)

        assert generate_immediate_actions(report) == []

    def test_short_term(self) -> None:
        """Weak scalability and performance add short-term work."""
        report = make_report(performance_score=80, scalability_score=60)

        assert generate_short_term_recommendations(report) == [
            "Implement horizontal scaling capabilities",
            "Add load balancing and auto-scaling policies",
            "Implement caching layer for frequently accessed data",
            "Optimize database queries and add appropriate indexes",
        ]

    def test_long_term_always_includes_monitoring(self) -> None:
        """Monitoring and predictive scaling are always recommended."""
        recommendations = generate_long_term_recommendations(make_report())

        assert recommendations == [
            "Implement comprehensive APM (Application Performance Monitoring)",
            "Set up predictive scaling based on usage patterns",
        ]

    def test_long_term_low_breaking_point(self) -> None:
        """A breaking point below 1000 suggests architecture changes."""
        report = make_report(stress_report=make_stress_report(breaking_point=400))

        recommendations = generate_long_term_recommendations(report)

        assert "Evaluate serverless architecture for better auto-scaling" in recommendations


class TestComprehensiveTestRunner:
    """Tests for ComprehensiveTestRunner."""

    @pytest.mark.asyncio
    async def test_full_pipeline(self, engine: LoadTestEngine, make_config: ConfigFactory) -> None:
        """Every phase contributes to the report."""
        runner = ComprehensiveTestRunner(engine, inter_test_pause=1)

        report = await runner.execute_comprehensive_test_suite(make_suite(make_config))

        assert [r.config.concurrent_actors for r in report.load_test_results] == [2, 4]
        assert report.stress_report is not None
        assert set(report.stress_report.scenario_results) == {"light", "heavy"}
        assert report.benchmark_suite is not None
        assert report.benchmark_suite.version == "1.0.0"
        assert len(report.capacity_plans) == 1
        assert len(report.capacity_plans[0].projections) == 12
        assert report.performance_score == report.benchmark_suite.overall_score
        for score in (report.scalability_score, report.reliability_score):
            assert 0 <= score <= 100
        assert report.long_term_recommendations
        assert not any(a.startswith("Test suite execution failed") for a in report.immediate_actions)
        assert report.end_time is not None
        assert report.end_time >= report.start_time
        assert runner.is_running is False

    @pytest.mark.asyncio
    async def test_pause_after_each_load_test(
        self, engine: LoadTestEngine, clock: VirtualClock, make_config: ConfigFactory
    ) -> None:
        """The load phase pauses after every test."""
        runner = ComprehensiveTestRunner(engine, inter_test_pause=50)
        start = clock.monotonic()

        await runner.execute_load_tests([make_config(), make_config()])

        assert clock.monotonic() - start >= 100

    @pytest.mark.asyncio
    async def test_zero_actor_load_test(
        self, engine: LoadTestEngine, make_config: ConfigFactory
    ) -> None:
        """A load test without actors completes with an empty result."""
        runner = ComprehensiveTestRunner(engine, inter_test_pause=0)

        report = await runner.execute_comprehensive_test_suite(
            make_suite(make_config, load_actors=(0,))
        )

        assert report.load_test_results[0].total_requests == 0
        assert report.benchmark_suite is not None
        assert not any(a.startswith("Test suite execution failed") for a in report.immediate_actions)

    @pytest.mark.asyncio
    async def test_baseline_comparison(
        self, engine: LoadTestEngine, make_config: ConfigFactory
    ) -> None:
        """A named baseline is compared against the new benchmark."""
        runner = ComprehensiveTestRunner(engine, inter_test_pause=0)
        suite = make_suite(make_config)
        first = await runner.execute_comprehensive_test_suite(suite, version="1.0.0")
        assert first.benchmark_suite is not None
        runner.benchmark.set_baseline("1.0.0", first.benchmark_suite)

        second = await runner.execute_comprehensive_test_suite(
            suite.model_copy(update={"benchmark_baseline": "1.0.0"}), version="1.1.0"
        )

        assert second.baseline_comparison is not None
        assert "Average Response Time" in second.baseline_comparison

    @pytest.mark.asyncio
    async def test_missing_baseline_raises(
        self, engine: LoadTestEngine, make_config: ConfigFactory
    ) -> None:
        """An unknown baseline is rejected before anything runs."""
        runner = ComprehensiveTestRunner(engine, inter_test_pause=0)
        suite = make_suite(make_config).model_copy(update={"benchmark_baseline": "0.9.0"})

        with pytest.raises(BaselineNotFoundError, match="0.9.0"):
            await runner.execute_comprehensive_test_suite(suite)

        assert runner.is_running is False
        assert runner.benchmark.get_benchmark_history() == []

    @pytest.mark.asyncio
    async def test_rejects_reentrant_execution(
        self, engine: LoadTestEngine, clock: VirtualClock, make_config: ConfigFactory
    ) -> None:
        """A second suite on a busy runner raises SuiteAlreadyRunningError."""
        runner = ComprehensiveTestRunner(engine, inter_test_pause=0)
        suite = make_suite(make_config)
        first = asyncio.create_task(runner.execute_comprehensive_test_suite(suite))
        await clock.sleep(0.5)

        assert runner.is_running is True
        with pytest.raises(SuiteAlreadyRunningError, match="Load test suite is already running"):
            await runner.execute_comprehensive_test_suite(suite)

        await first
        assert runner.is_running is False

    @pytest.mark.asyncio
    async def test_runtime_failure_is_reported(
        self, clock: VirtualClock, make_config: ConfigFactory
    ) -> None:
        """A crashing phase ends the run with a partial report."""
        runner = ComprehensiveTestRunner(FailingEngine(clock), inter_test_pause=0)  # type: ignore[arg-type]

        report = await runner.execute_comprehensive_test_suite(make_suite(make_config))

        assert report.immediate_actions == ["Test suite execution failed: boom"]
        assert report.stress_report is None
        assert report.end_time is not None
        assert runner.is_running is False

    @pytest.mark.asyncio
    async def test_validate_optimization(
        self, engine: LoadTestEngine, make_config: ConfigFactory
    ) -> None:
        """Before and after runs are benchmarked under suffixed versions."""
        runner = ComprehensiveTestRunner(engine, inter_test_pause=0)
        suite = make_suite(make_config)

        validation = await runner.validate_optimization("cache", suite, suite, version="2.0.0")

        assert validation.optimization_name == "cache"
        assert validation.before_metrics.version == "2.0.0-before"
        assert validation.after_metrics.version == "2.0.0-after"

    @pytest.mark.asyncio
    async def test_generate_test_report(
        self, engine: LoadTestEngine, make_config: ConfigFactory
    ) -> None:
        """The markdown report names the suite."""
        runner = ComprehensiveTestRunner(engine, inter_test_pause=0)
        report = await runner.execute_comprehensive_test_suite(make_suite(make_config))

        markdown = runner.generate_test_report(report)

        assert "Unit suite" in markdown


class TestStandardSuite:
    """Tests for the built-in suite."""

    def test_standard_suite(self) -> None:
        """Three load tests, six stress scenarios and four growth scenarios."""
        suite = ComprehensiveTestRunner.create_standard_load_test_suite()

        assert suite.name == "Standard Task Queue Load Test Suite"
        assert [c.concurrent_actors for c in suite.load_tests] == [50, 100, 250]
        assert [c.thresholds.max_response_time_ms for c in suite.load_tests] == [1000, 1500, 2000]
        assert len(suite.stress_suite.scenarios) == 6
        assert len(suite.capacity_scenarios) == 4
        assert suite.benchmark_baseline is None
