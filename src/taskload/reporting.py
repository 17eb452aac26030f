"""Markdown rendering of benchmark suites and comprehensive reports.

The output is meant for people; nothing parses it back.
"""

from __future__ import annotations

from taskload.benchmark.metrics import metric_category
from taskload.models.benchmark import BenchmarkMetric, BenchmarkSuite, MetricStatus, MetricTrend
from taskload.models.suite import ComprehensiveTestReport

STATUS_ICONS = {
    MetricStatus.PASS: "✅",
    MetricStatus.WARNING: "⚠️",
    MetricStatus.FAIL: "❌",
}

TREND_ICONS = {
    MetricTrend.IMPROVING: "📈",
    MetricTrend.STABLE: "➡️",
    MetricTrend.DEGRADING: "📉",
}


def _format_number(value: float) -> str:
    return f"{value:g}" if value != int(value) else str(int(value))


def _metric_row(metric: BenchmarkMetric) -> str:
    return (
        f"| {metric.name} | {_format_number(metric.value)} {metric.unit} "
        f"| {STATUS_ICONS[metric.status]} {metric.status.value} "
        f"| {TREND_ICONS[metric.trend]} {metric.trend.value} |"
    )


def render_benchmark_suite(suite: BenchmarkSuite) -> str:
    """Header, score (with delta from the previous version) and one table
    per metric category, in first-seen order."""
    score = f"**Overall Score:** {suite.overall_score}/100"
    if suite.previous_score is not None:
        score += f" ({suite.overall_score - suite.previous_score:+d} from previous)"

    lines = [
        "# Performance Benchmark Report",
        "",
        f"**Suite:** {suite.name}",
        f"**Version:** {suite.version}",
        f"**Environment:** {suite.environment}",
        f"**Timestamp:** {suite.timestamp.isoformat()}",
        score,
        "",
    ]

    categories: dict[str, list[BenchmarkMetric]] = {}
    for metric in suite.metrics:
        categories.setdefault(metric_category(metric.name), []).append(metric)

    for category, metrics in categories.items():
        lines.append(f"## {category}")
        lines.append("")
        lines.append("| Metric | Value | Status | Trend |")
        lines.append("|--------|-------|--------|-------|")
        lines.extend(_metric_row(metric) for metric in metrics)
        lines.append("")

    return "\n".join(lines) + "\n"


def _recommendation_section(title: str, items: list[str]) -> list[str]:
    if not items:
        return []
    return [f"### {title}", *(f"- {item}" for item in items), ""]


def render_comprehensive_report(report: ComprehensiveTestReport) -> str:
    lines = [
        "# Comprehensive Load Test Report",
        "",
        f"**Suite:** {report.suite_name}",
        f"**Suite ID:** {report.suite_id}",
    ]
    if report.end_time is not None:
        minutes = round((report.end_time - report.start_time).total_seconds() / 60)
        lines.append(f"**Duration:** {minutes} minutes")
    lines.append(f"**Timestamp:** {report.start_time.isoformat()}")
    lines.append("")

    lines.extend(
        [
            "## Executive Summary",
            "",
            f"- **Performance Score:** {report.performance_score}/100",
            f"- **Scalability Score:** {report.scalability_score}/100",
            f"- **Reliability Score:** {report.reliability_score}/100",
            "",
            "## Load Test Results",
            "",
            "| Test | Users | Requests | Success Rate | Avg Response Time |",
            "|------|-------|----------|--------------|-------------------|",
        ]
    )
    for result in report.load_test_results:
        users = result.config.concurrent_actors
        if result.total_requests > 0:
            success_rate = f"{result.successful_requests / result.total_requests * 100:.1f}%"
        else:
            success_rate = "n/a"
        lines.append(
            f"| {users} users | {users} | {result.total_requests} | {success_rate} "
            f"| {result.average_response_time:.1f}ms |"
        )
    lines.append("")

    if report.stress_report is not None:
        analysis = report.stress_report.stress_analysis
        lines.extend(
            [
                "## Stress Test Summary",
                "",
                f"- **Breaking Point:** {analysis.breaking_point} concurrent users",
                f"- **Stability Score:** {analysis.stability_score}/100",
                f"- **Recovery Time:** {round(analysis.recovery_time_ms / 1000)}s",
                "",
            ]
        )

    if report.benchmark_suite is not None:
        lines.append(render_benchmark_suite(report.benchmark_suite))

    if report.baseline_comparison:
        lines.extend(["## Baseline Comparison", "", "| Metric | Change |", "|--------|--------|"])
        lines.extend(
            f"| {name} | {change:+.1f}% |" for name, change in report.baseline_comparison.items()
        )
        lines.append("")

    if report.capacity_plans:
        lines.extend(["## Capacity Planning", ""])
        for plan in report.capacity_plans:
            lines.extend(
                [
                    f"### {plan.scenario.name}",
                    f"- **Growth Rate:** {_format_number(plan.scenario.monthly_growth_rate)}% monthly",
                    f"- **Total Cost:** ${plan.total_cost:,.2f}/year",
                    f"- **Key Milestones:** {len(plan.milestones)}",
                    "",
                ]
            )

    lines.extend(["## Recommendations", ""])
    lines.extend(_recommendation_section("Immediate Actions", report.immediate_actions))
    lines.extend(
        _recommendation_section("Short-term (1-3 months)", report.short_term_recommendations)
    )
    lines.extend(
        _recommendation_section("Long-term (6-12 months)", report.long_term_recommendations)
    )

    return "\n".join(lines) + "\n"
