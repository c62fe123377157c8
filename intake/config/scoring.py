"""Scoring and eligibility configuration models.

Numeric knobs carry complete defaults in the models; the domain vocabulary
lives only in config/defaults.yaml and is read when a ScoringConfig is built
without one. `from_defaults()` overlays the whole `scoring` / `eligibility`
section.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from intake.config.validators import normalize_string_list, validate_ascending
from intake.core.config_loader import load_section


def _default_vocabulary() -> list[str]:
    """Read the domain vocabulary from the `scoring` section of defaults.yaml."""
    return list(load_section("scoring").get("vocabulary") or [])


class FreshnessBand(BaseModel):
    """Points awarded to items no older than `max_age_days`."""

    max_age_days: int = Field(..., ge=0)
    points: int = Field(..., ge=0, le=20)


def _default_bands() -> list[FreshnessBand]:
    return [
        FreshnessBand(max_age_days=7, points=20),
        FreshnessBand(max_age_days=30, points=15),
        FreshnessBand(max_age_days=90, points=10),
        FreshnessBand(max_age_days=180, points=5),
        FreshnessBand(max_age_days=365, points=2),
    ]


class ScoringConfig(BaseModel):
    """Configuration for rule-based content scoring.

    Factor caps are fixed (quality 30, relevance 30, freshness 20,
    completeness 20); the knobs here shape how points are earned within them.
    """

    # Relevance
    vocabulary: list[str] = Field(default_factory=_default_vocabulary, validate_default=True)
    points_per_keyword: int = Field(default=3, ge=1, le=30)

    # Quality
    title_points: int = Field(default=5, ge=0, le=10)
    description_points: int = Field(default=5, ge=0, le=10)
    long_description_length: int = Field(default=100, ge=1)
    long_description_points: int = Field(default=10, ge=0, le=10)
    extended_description_length: int = Field(default=300, ge=1)
    extended_description_points: int = Field(default=10, ge=0, le=10)

    # Freshness
    freshness_bands: list[FreshnessBand] = Field(default_factory=_default_bands, min_length=1)

    # Confidence & recommendation tiers
    confidence_description_length: int = Field(default=50, ge=0)
    min_confidence: float = Field(default=0.4, ge=0, le=1)
    review_below: int = Field(default=50, ge=0, le=100)
    approve_below: int = Field(default=75, ge=0, le=100)

    # Oracle blend
    oracle_min_score: int = Field(default=40, ge=0, le=100)
    oracle_max_boost: int = Field(default=20, ge=0, le=20)

    @field_validator("vocabulary", mode="before")
    @classmethod
    def normalize_vocabulary(cls, v: Any) -> list[str]:
        """Lowercase and de-duplicate vocabulary terms."""
        return normalize_string_list(v)

    @model_validator(mode="after")
    def check_thresholds(self) -> "ScoringConfig":
        """Validate tier cut-offs and freshness band ordering."""
        if self.review_below > self.approve_below:
            raise ValueError("review_below must not exceed approve_below")
        if self.long_description_length > self.extended_description_length:
            raise ValueError("long_description_length must not exceed extended_description_length")
        validate_ascending(
            [band.max_age_days for band in self.freshness_bands], "freshness_bands.max_age_days"
        )
        return self

    @classmethod
    def from_defaults(cls) -> "ScoringConfig":
        """Build a config from the `scoring` section of defaults.yaml."""
        return cls.model_validate(load_section("scoring"))


class EligibilityConfig(BaseModel):
    """Configuration for category eligibility rules.

    Violations produce warnings; `warning_score_floor` is the minimum
    eligibility score an ineligible item keeps.
    """

    min_description_length: int = Field(default=50, ge=0)
    penalty_per_reason: int = Field(default=25, ge=1, le=100)
    warning_score_floor: int = Field(default=10, ge=1, le=100)

    # Projects
    min_team_size: int = Field(default=1, ge=0)
    max_team_size: int = Field(default=10, ge=1)
    max_funding_raised: float = Field(default=500_000, ge=0)
    launch_window_days: int = Field(default=730, ge=1)

    # Funding programs
    max_program_amount: float = Field(default=1_000_000, ge=0)

    # Resources
    resource_max_age_days: int = Field(default=30, ge=1)

    @model_validator(mode="after")
    def check_team_bounds(self) -> "EligibilityConfig":
        """Validate that min_team_size <= max_team_size."""
        if self.min_team_size > self.max_team_size:
            raise ValueError("min_team_size must not exceed max_team_size")
        return self

    @classmethod
    def from_defaults(cls) -> "EligibilityConfig":
        """Build a config from the `eligibility` section of defaults.yaml."""
        return cls.model_validate(load_section("eligibility"))


__all__ = [
    "EligibilityConfig",
    "FreshnessBand",
    "ScoringConfig",
]
