"""Capacity model, cost model, growth scenario and capacity plan models.

Resource units: CPU in cores, memory and storage in GB, network in Mbps.
Costs are in dollars; instance costs are hourly, storage costs are per
GB-month.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import AliasChoices, ConfigDict, Field, field_validator

from taskload.models import StrictModel

MONTHS_PER_PLAN = 12


class ResourceRequirement(StrictModel):
    """Resource figures along the four projected dimensions."""

    cpu: float = Field(default=0, ge=0, description="CPU cores")
    memory: float = Field(default=0, ge=0, description="Memory (GB)")
    storage: float = Field(default=0, ge=0, description="Storage (GB)")
    network: float = Field(default=0, ge=0, description="Network bandwidth (Mbps)")


class ScalingFactors(StrictModel):
    """Per-user increment of each resource dimension."""

    cpu: float = Field(default=0.01, ge=0)
    memory: float = Field(default=0.02, ge=0)
    storage: float = Field(default=0.1, ge=0)
    network: float = Field(default=0.5, ge=0)


class OverheadFactors(StrictModel):
    """Multipliers applied on top of the raw per-user requirement."""

    system_overhead: float = Field(default=0.2, ge=0, alias="systemOverhead")
    redundancy: float = Field(default=1.5, ge=1)
    peak_buffer: float = Field(default=0.3, ge=0, alias="peakBuffer")

    @property
    def total(self) -> float:
        """Combined multiplier: (1 + overhead) * redundancy * (1 + buffer)."""
        return (1 + self.system_overhead) * self.redundancy * (1 + self.peak_buffer)


class CapacityModel(StrictModel):
    """Calibratable linear model of resource need per user."""

    baseline_users: int = Field(default=100, gt=0, alias="baselineUsers")
    baseline_resources: ResourceRequirement = Field(
        default_factory=lambda: ResourceRequirement(cpu=2, memory=4, storage=20, network=100),
        alias="baselineResources",
    )
    scaling_factors: ScalingFactors = Field(default_factory=ScalingFactors, alias="scalingFactors")
    overhead_factors: OverheadFactors = Field(
        default_factory=OverheadFactors, alias="overheadFactors"
    )


def _default_instance_costs() -> dict[str, float]:
    return {
        "t3.small": 0.0208,
        "t3.medium": 0.0416,
        "t3.large": 0.0832,
        "t3.xlarge": 0.1664,
        "c5.large": 0.085,
        "c5.xlarge": 0.17,
        "m5.large": 0.096,
        "m5.xlarge": 0.192,
    }


class CostModel(StrictModel):
    """Keyed price tables. Updated through ``CapacityPlanner.update_cost_model``."""

    instance_costs: dict[str, float] = Field(
        default_factory=_default_instance_costs, alias="instanceCosts"
    )
    storage_costs: dict[str, float] = Field(
        default_factory=lambda: {"gp3": 0.08, "io2": 0.125}, alias="storageCosts"
    )
    network_costs: dict[str, float] = Field(
        default_factory=lambda: {"data_transfer": 0.09}, alias="networkCosts"
    )
    additional_services: dict[str, float] = Field(
        default_factory=lambda: {"load_balancer": 22.5, "database": 50.0, "monitoring": 10.0},
        alias="additionalServices",
    )


class GrowthScenario(StrictModel):
    """Monthly growth assumptions expanded into a 12-month capacity plan."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: str = ""
    timeframe: str = "12 months"
    monthly_growth_rate: float = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("monthlyGrowthRate", "userGrowthRate"),
        serialization_alias="monthlyGrowthRate",
        description="Monthly user growth in percent",
    )
    peak_multiplier: float = Field(default=1.0, gt=0, alias="peakMultiplier")
    seasonal_factors: list[float] = Field(
        default_factory=lambda: [1.0] * MONTHS_PER_PLAN, alias="seasonalFactors"
    )

    @field_validator("seasonal_factors")
    @classmethod
    def _twelve_positive_factors(cls, value: list[float]) -> list[float]:
        if len(value) != MONTHS_PER_PLAN:
            raise ValueError(
                f"seasonalFactors must contain exactly {MONTHS_PER_PLAN} values, got {len(value)}"
            )
        if any(factor <= 0 for factor in value):
            raise ValueError("seasonalFactors must all be positive")
        return value


class ScalingStrategy(str, Enum):
    """How additional capacity is provisioned."""

    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"
    HYBRID = "hybrid"


class ScalingProjection(StrictModel):
    """Resources, instances and cost needed to serve a target user count."""

    target_users: int = Field(..., ge=0, alias="targetUsers")
    current_capacity: int = Field(..., ge=0, alias="currentCapacity")
    required_instances: int = Field(..., ge=0, alias="requiredInstances")
    resource_requirements: ResourceRequirement = Field(..., alias="resourceRequirements")
    estimated_cost: float = Field(..., ge=0, alias="estimatedCost")
    scaling_strategy: ScalingStrategy = Field(..., alias="scalingStrategy")
    timeline: str
    risks: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class RiskAssessment(StrictModel):
    technical_risks: list[str] = Field(default_factory=list, alias="technicalRisks")
    business_risks: list[str] = Field(default_factory=list, alias="businessRisks")
    mitigation_strategies: list[str] = Field(default_factory=list, alias="mitigationStrategies")


class Milestone(StrictModel):
    """A month where the required instance count increases."""

    date: dt.date
    users: int
    action: str
    cost: float


class ArchitecturalAlternative(StrictModel):
    name: str
    description: str
    cost_difference: float = Field(
        ..., alias="costDifference", description="Relative cost delta (-0.3 == 30% cheaper)"
    )
    tradeoffs: list[str] = Field(default_factory=list)


class CapacityPlan(StrictModel):
    """Twelve monthly projections for one growth scenario."""

    plan_id: str = Field(..., alias="planId")
    scenario: GrowthScenario
    projections: list[ScalingProjection] = Field(default_factory=list)
    total_cost: float = Field(default=0.0, alias="totalCost")
    risk_assessment: RiskAssessment = Field(default_factory=RiskAssessment, alias="riskAssessment")
    milestones: list[Milestone] = Field(default_factory=list)
    alternatives: list[ArchitecturalAlternative] = Field(default_factory=list)
