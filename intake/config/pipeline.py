"""Run-level configuration for the fetch orchestrator.

`RunConfig` is immutable and passed to every `run()` call; the remaining
models are injected once at construction time.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RunConfig(BaseModel):
    """Per-run policy.

    Attributes:
        batch_size: Maximum number of accepted items per run
        score_threshold: Minimum score an item needs to be staged
    """

    model_config = ConfigDict(frozen=True)

    batch_size: int = Field(default=50, ge=1, le=100)
    score_threshold: int = Field(default=30, ge=0, le=100)


class RetryPolicy(BaseModel):
    """Retry and timeout policy applied to every connector call.

    Attributes:
        max_attempts: Total attempts including the first call
        timeout_seconds: Per-attempt timeout
        backoff_multiplier: Exponential backoff multiplier (seconds)
        backoff_min: Minimum wait between attempts (seconds)
        backoff_max: Maximum wait between attempts (seconds)
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1, le=10)
    timeout_seconds: float = Field(default=10.0, gt=0, le=120.0)
    backoff_multiplier: float = Field(default=1.0, ge=0)
    backoff_min: float = Field(default=0.5, ge=0)
    backoff_max: float = Field(default=8.0, ge=0)

    @model_validator(mode="after")
    def check_backoff(self) -> "RetryPolicy":
        """Validate that backoff_min <= backoff_max."""
        if self.backoff_min > self.backoff_max:
            raise ValueError("backoff_min must not exceed backoff_max")
        return self


class OrchestratorConfig(BaseModel):
    """Settings the orchestrator keeps across runs.

    Attributes:
        retry: Connector retry policy
        evaluation_multiplier: Evaluated-candidate cap as a multiple of batch_size
        max_concurrency: Maximum connectors in flight at once
        max_reported_errors: Upper bound on RunResult.errors length
        use_oracle: Whether to consult the scoring oracle
    """

    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    evaluation_multiplier: int = Field(default=3, ge=1, le=20)
    max_concurrency: int = Field(default=8, ge=1, le=64)
    max_reported_errors: int = Field(default=50, ge=1, le=1000)
    use_oracle: bool = Field(default=True)


__all__ = [
    "OrchestratorConfig",
    "RetryPolicy",
    "RunConfig",
]
