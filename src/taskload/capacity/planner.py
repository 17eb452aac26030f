"""Capacity planning.

Projects resources, instance count and monthly cost for a target user
count, recommends a scaling strategy, and expands growth scenarios into
12-month capacity plans with milestones, risks and alternatives.

Resource projection per dimension (cpu, memory, storage, network):

    required = ceil((baseline + users * per_user) * (1 + overhead) * redundancy * (1 + buffer))

Instances are sized against a fixed reference shape (4 vCPU / 16 GB by
default). Monthly cost is

    instances * hourly(reference type) * 720 + storage * monthly(reference storage) + flat services

rounded to cents.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from taskload.capacity.scenarios import create_growth_scenarios
from taskload.config import settings
from taskload.models.benchmark import BenchmarkSuite
from taskload.models.capacity import (
    MONTHS_PER_PLAN,
    ArchitecturalAlternative,
    CapacityModel,
    CapacityPlan,
    CostModel,
    GrowthScenario,
    Milestone,
    ResourceRequirement,
    RiskAssessment,
    ScalingProjection,
    ScalingStrategy,
)
from taskload.models.load_test import LoadTestResult
from taskload.models.stress import StressReport
from taskload.simulation.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

HOURS_PER_MONTH = 24 * 30
DAYS_PER_PLAN_MONTH = 30
FALLBACK_INSTANCE_COST = 0.192
FALLBACK_STORAGE_COST = 0.08


def determine_scaling_strategy(target_users: int, current_users: int) -> ScalingStrategy:
    """Vertical up to 2x, hybrid up to 5x, horizontal beyond."""
    ratio = target_users / current_users
    if ratio <= 2:
        return ScalingStrategy.VERTICAL
    if ratio <= 5:
        return ScalingStrategy.HYBRID
    return ScalingStrategy.HORIZONTAL


def calculate_scaling_timeline(target_users: int, current_users: int) -> str:
    ratio = target_users / current_users
    if ratio <= 1.5:
        return "1-2 weeks"
    if ratio <= 3:
        return "3-4 weeks"
    if ratio <= 5:
        return "1-2 months"
    return "2-3 months"


def identify_scaling_risks(target_users: int, strategy: ScalingStrategy) -> list[str]:
    risks: list[str] = []

    if target_users > 1000:
        risks.append("Database performance bottlenecks at high user counts")
        risks.append("Network bandwidth limitations during peak usage")

    if strategy is ScalingStrategy.VERTICAL:
        risks.append("Single point of failure with larger instances")
        risks.append("Limited scaling headroom with vertical scaling")

    if strategy is ScalingStrategy.HORIZONTAL:
        risks.append("Increased complexity in load balancing and data consistency")
        risks.append("Higher operational overhead with multiple instances")

    if target_users > 5000:
        risks.append("Potential need for database sharding or clustering")
        risks.append("Cache invalidation complexity at scale")

    return risks


def generate_scaling_recommendations(target_users: int, strategy: ScalingStrategy) -> list[str]:
    recommendations = [
        "Implement auto-scaling policies to handle traffic spikes",
        "Set up comprehensive monitoring and alerting",
    ]

    if strategy is ScalingStrategy.HORIZONTAL:
        recommendations.append("Implement database read replicas for better performance")
        recommendations.append("Use Redis cluster for distributed caching")

    if target_users > 1000:
        recommendations.append("Consider implementing CDN for static assets")
        recommendations.append("Optimize database queries and add appropriate indexes")

    if target_users > 5000:
        recommendations.append("Plan for database partitioning or sharding")
        recommendations.append("Implement circuit breakers for external dependencies")

    return recommendations


def assess_technical_risks(projections: Sequence[ScalingProjection]) -> list[str]:
    risks: list[str] = []
    if not projections:
        return risks

    max_users = max(p.target_users for p in projections)
    max_instances = max(p.required_instances for p in projections)

    if max_users > 10000:
        risks.append("Database scalability challenges at 10K+ users")
        risks.append("Complex data synchronization requirements")

    if max_instances > 20:
        risks.append("Operational complexity with 20+ instances")
        risks.append("Increased deployment and monitoring overhead")

    rapid_growth = any(
        previous.target_users > 0 and current.target_users / previous.target_users > 2
        for previous, current in zip(projections, projections[1:])
    )
    if rapid_growth:
        risks.append("Rapid scaling may cause performance instability")
        risks.append("Potential for cascading failures during growth spikes")

    return risks


def assess_business_risks(scenario: GrowthScenario, total_cost: float) -> list[str]:
    risks: list[str] = []

    if total_cost > 100_000:
        risks.append("High infrastructure costs may impact profitability")

    if scenario.monthly_growth_rate > 20:
        risks.append("Aggressive growth assumptions may not materialize")
        risks.append("Over-provisioning risk if growth targets are missed")

    if scenario.peak_multiplier > 2.5:
        risks.append("High peak multiplier increases infrastructure waste during off-peak")

    return risks


def generate_mitigation_strategies(projections: Sequence[ScalingProjection]) -> list[str]:
    strategies = [
        "Implement gradual scaling with monitoring at each stage",
        "Use auto-scaling to optimize resource utilization",
        "Establish performance baselines and SLA monitoring",
    ]

    if projections and max(p.target_users for p in projections) > 5000:
        strategies.append("Plan database optimization and potential sharding")
        strategies.append("Implement comprehensive caching strategy")

    return strategies


def generate_alternatives(projections: Sequence[ScalingProjection]) -> list[ArchitecturalAlternative]:
    alternatives = [
        ArchitecturalAlternative(
            name="Serverless Architecture",
            description="Use managed functions and services for automatic scaling",
            cost_difference=-0.3,
            tradeoffs=["Cold start latency", "Vendor lock-in", "Limited execution time"],
        ),
        ArchitecturalAlternative(
            name="Kubernetes Deployment",
            description="Use container orchestration for better resource utilization",
            cost_difference=-0.15,
            tradeoffs=[
                "Increased operational complexity",
                "Learning curve",
                "Initial setup overhead",
            ],
        ),
    ]

    if any(p.target_users > 10000 for p in projections):
        alternatives.append(
            ArchitecturalAlternative(
                name="Multi-Cloud Strategy",
                description="Distribute load across multiple cloud providers",
                cost_difference=0.1,
                tradeoffs=[
                    "Increased complexity",
                    "Data synchronization challenges",
                    "Better disaster recovery",
                ],
            )
        )

    return alternatives


def _average_metric(suites: Sequence[BenchmarkSuite], name: str) -> float:
    values = [metric.value for suite in suites if (metric := suite.get_metric(name)) is not None]
    return sum(values) / len(values) if values else 0.0


class CapacityPlanner:
    """Resource, cost and growth planner over a calibratable model.

    Args:
        capacity_model: Initial capacity model (defaults apply when omitted)
        cost_model: Initial cost model (defaults apply when omitted)
        clock: Time source for plan dates
        reference_instance_type: Instance type priced for every instance
        reference_instance_cpu: vCPUs of the reference instance
        reference_instance_memory_gb: Memory of the reference instance
        reference_storage_type: Storage type priced for projected storage
    """

    def __init__(
        self,
        capacity_model: CapacityModel | None = None,
        cost_model: CostModel | None = None,
        clock: Clock | None = None,
        reference_instance_type: str | None = None,
        reference_instance_cpu: int | None = None,
        reference_instance_memory_gb: int | None = None,
        reference_storage_type: str | None = None,
    ) -> None:
        self._capacity_model = (capacity_model or CapacityModel()).model_copy(deep=True)
        self._cost_model = (cost_model or CostModel()).model_copy(deep=True)
        self.clock = clock or SystemClock()
        self.reference_instance_type = reference_instance_type or settings.reference_instance_type
        self.reference_instance_cpu = reference_instance_cpu or settings.reference_instance_cpu
        self.reference_instance_memory_gb = (
            reference_instance_memory_gb or settings.reference_instance_memory_gb
        )
        self.reference_storage_type = reference_storage_type or settings.reference_storage_type
        self._historical_data: list[LoadTestResult] = []
        self._stress_data: list[StressReport] = []

    # Inputs

    def add_historical_data(self, results: Sequence[LoadTestResult]) -> None:
        self._historical_data.extend(results)

    def add_stress_test_data(self, reports: Sequence[StressReport]) -> None:
        self._stress_data.extend(reports)

    def calibrate_capacity_model(self, suites: Sequence[BenchmarkSuite]) -> None:
        """Refit memory and CPU per-user factors from benchmark history.

        Uses average peak memory (MB) and average CPU (%) over the average
        concurrent user limit. No-op without suites or without a user limit.
        """
        if not suites:
            return

        memory_mb = _average_metric(suites, "Peak Memory Usage")
        cpu_pct = _average_metric(suites, "Average CPU Usage")
        users = _average_metric(suites, "Concurrent User Limit")

        if users > 0:
            factors = self._capacity_model.scaling_factors
            factors.memory = (memory_mb / 1024) / users
            factors.cpu = (cpu_pct / 100) / users
            logger.info(
                f"Capacity model calibrated: cpu {factors.cpu:.6f} cores/user, "
                f"memory {factors.memory:.6f} GB/user"
            )

    def get_current_capacity(self) -> int:
        """Latest stress breaking point, else the model's baseline users."""
        if self._stress_data:
            return self._stress_data[-1].stress_analysis.breaking_point
        return self._capacity_model.baseline_users

    # Projection

    def calculate_required_resources(self, target_users: int) -> ResourceRequirement:
        model = self._capacity_model
        base = model.baseline_resources
        factors = model.scaling_factors
        overhead = model.overhead_factors.total

        return ResourceRequirement(
            cpu=math.ceil((base.cpu + target_users * factors.cpu) * overhead),
            memory=math.ceil((base.memory + target_users * factors.memory) * overhead),
            storage=math.ceil((base.storage + target_users * factors.storage) * overhead),
            network=math.ceil((base.network + target_users * factors.network) * overhead),
        )

    def calculate_required_instances(self, resources: ResourceRequirement) -> int:
        return max(
            math.ceil(resources.cpu / self.reference_instance_cpu),
            math.ceil(resources.memory / self.reference_instance_memory_gb),
        )

    def calculate_monthly_cost(self, resources: ResourceRequirement, instances: int) -> float:
        cost_model = self._cost_model
        hourly = cost_model.instance_costs.get(self.reference_instance_type, FALLBACK_INSTANCE_COST)
        per_gb = cost_model.storage_costs.get(self.reference_storage_type, FALLBACK_STORAGE_COST)

        instance_cost = hourly * instances * HOURS_PER_MONTH
        storage_cost = per_gb * resources.storage
        service_cost = sum(cost_model.additional_services.values())
        return round(instance_cost + storage_cost + service_cost, 2)

    def create_scaling_projection(
        self, target_users: int, current_users: int = 100
    ) -> ScalingProjection:
        """Project resources, instances, cost and strategy for target_users.

        Pure with respect to the planner state: identical inputs and model
        yield identical projections.
        """
        if current_users <= 0:
            raise ValueError(f"current_users must be positive, got {current_users}")

        resources = self.calculate_required_resources(target_users)
        instances = self.calculate_required_instances(resources)
        strategy = determine_scaling_strategy(target_users, current_users)

        return ScalingProjection(
            target_users=target_users,
            current_capacity=self.get_current_capacity(),
            required_instances=instances,
            resource_requirements=resources,
            estimated_cost=self.calculate_monthly_cost(resources, instances),
            scaling_strategy=strategy,
            timeline=calculate_scaling_timeline(target_users, current_users),
            risks=identify_scaling_risks(target_users, strategy),
            recommendations=generate_scaling_recommendations(target_users, strategy),
        )

    # Growth plans

    def project_monthly_peaks(self, scenario: GrowthScenario, current_users: int) -> list[int]:
        """Peak users for each of the 12 months of a scenario.

        The compounded user count is kept unrounded; only each month's peak
        is rounded. With positive growth, a month whose seasonal factor does
        not fall is at least one user above the previous month.
        """
        users = float(current_users)
        growth = 1 + scenario.monthly_growth_rate / 100
        factors = scenario.seasonal_factors
        peaks: list[int] = []

        for month in range(MONTHS_PER_PLAN):
            users *= growth
            peak = round(users * factors[month] * scenario.peak_multiplier)
            if (
                peaks
                and scenario.monthly_growth_rate > 0
                and factors[month] >= factors[month - 1]
            ):
                peak = max(peak, peaks[-1] + 1)
            peaks.append(peak)

        return peaks

    def create_capacity_plan(self, scenario: GrowthScenario, current_users: int = 100) -> CapacityPlan:
        """Expand a growth scenario into twelve monthly projections."""
        now = datetime.fromtimestamp(self.clock.time(), tz=timezone.utc)
        projections: list[ScalingProjection] = []
        milestones: list[Milestone] = []

        for month, peak_users in enumerate(self.project_monthly_peaks(scenario, current_users), 1):
            projection = self.create_scaling_projection(peak_users, current_users)
            previous_instances = projections[-1].required_instances if projections else 1
            projections.append(projection)

            if projection.required_instances > previous_instances:
                milestones.append(
                    Milestone(
                        date=(now + timedelta(days=DAYS_PER_PLAN_MONTH * month)).date(),
                        users=peak_users,
                        action=f"Scale to {projection.required_instances} instances",
                        cost=projection.estimated_cost,
                    )
                )

        total_cost = round(sum(p.estimated_cost for p in projections), 2)

        plan = CapacityPlan(
            plan_id=f"capacity-plan-{uuid4().hex[:12]}",
            scenario=scenario,
            projections=projections,
            total_cost=total_cost,
            risk_assessment=RiskAssessment(
                technical_risks=assess_technical_risks(projections),
                business_risks=assess_business_risks(scenario, total_cost),
                mitigation_strategies=generate_mitigation_strategies(projections),
            ),
            milestones=milestones,
            alternatives=generate_alternatives(projections),
        )

        logger.info(
            f"Capacity plan for {scenario.name}: ${total_cost:,.2f}/year, "
            f"{len(milestones)} milestone(s)"
        )
        return plan

    @staticmethod
    def create_growth_scenarios() -> list[GrowthScenario]:
        return create_growth_scenarios()

    # Model access

    def update_cost_model(
        self,
        instance_costs: dict[str, float] | None = None,
        storage_costs: dict[str, float] | None = None,
        network_costs: dict[str, float] | None = None,
        additional_services: dict[str, float] | None = None,
    ) -> None:
        """Merge the given entries into the cost tables."""
        cost_model = self._cost_model
        if instance_costs:
            cost_model.instance_costs.update(instance_costs)
        if storage_costs:
            cost_model.storage_costs.update(storage_costs)
        if network_costs:
            cost_model.network_costs.update(network_costs)
        if additional_services:
            cost_model.additional_services.update(additional_services)

    def get_capacity_model(self) -> CapacityModel:
        return self._capacity_model.model_copy(deep=True)

    def get_cost_model(self) -> CostModel:
        return self._cost_model.model_copy(deep=True)
