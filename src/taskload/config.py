from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TASKLOAD_", env_file=".env", extra="ignore")

    app_name: str = "taskload"
    env: str = "dev"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Metrics
    enable_metrics: bool = True

    # Simulation
    random_seed: int | None = Field(default=None, description="Seed for all simulated randomness")
    sample_interval: float = Field(default=1.0, gt=0, description="Metrics sampling period (s)")
    activity_pause: float = Field(default=0.1, gt=0, description="Pause between activity rounds (s)")
    actor_queue_capacity: int = Field(default=50, gt=0)

    # Orchestration pauses (seconds)
    stress_recovery_pause: float = Field(default=5.0, ge=0)
    inter_test_pause: float = Field(default=5.0, ge=0)

    # Latency percentile approximations (multipliers of the average)
    p95_latency_factor: float = Field(default=1.5, gt=0)
    p99_latency_factor: float = Field(default=2.0, gt=0)

    # Safety margin applied to the recommended max actor count
    capacity_safety_margin: float = Field(default=0.8, gt=0, le=1)

    # Capacity planning reference shapes
    reference_instance_type: str = "m5.xlarge"
    reference_instance_cpu: int = 4
    reference_instance_memory_gb: int = 16
    reference_storage_type: str = "gp3"


settings = Settings()
