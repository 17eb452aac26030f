"""Built-in growth scenarios."""

from __future__ import annotations

from taskload.models.capacity import GrowthScenario


def create_growth_scenarios() -> list[GrowthScenario]:
    """Conservative, aggressive, viral and seasonal growth assumptions."""
    return [
        GrowthScenario(
            name="Conservative Growth",
            description="Steady, predictable growth pattern",
            timeframe="12 months",
            monthly_growth_rate=5,
            peak_multiplier=1.5,
            seasonal_factors=[1.0, 1.0, 1.1, 1.1, 1.2, 1.2, 1.3, 1.3, 1.2, 1.1, 1.0, 1.0],
        ),
        GrowthScenario(
            name="Aggressive Growth",
            description="Rapid expansion with marketing campaigns",
            timeframe="12 months",
            monthly_growth_rate=15,
            peak_multiplier=2.0,
            seasonal_factors=[1.0, 1.1, 1.2, 1.3, 1.4, 1.5, 1.6, 1.7, 1.6, 1.4, 1.2, 1.1],
        ),
        GrowthScenario(
            name="Viral Growth",
            description="Exponential growth from viral adoption",
            timeframe="6 months",
            monthly_growth_rate=30,
            peak_multiplier=3.0,
            seasonal_factors=[1.0, 1.2, 1.5, 2.0, 2.5, 3.0, 3.0, 3.0, 2.5, 2.0, 1.5, 1.2],
        ),
        GrowthScenario(
            name="Seasonal Business",
            description="High seasonal variation in usage",
            timeframe="12 months",
            monthly_growth_rate=8,
            peak_multiplier=2.5,
            seasonal_factors=[0.8, 0.8, 0.9, 1.0, 1.2, 1.5, 2.0, 2.5, 2.0, 1.5, 1.0, 0.9],
        ),
    ]
