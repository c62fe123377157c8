"""Deduplication, staging and approval configuration models.

All fields have defaults - can be used without any configuration.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from intake.config.validators import normalize_string_list

DEFAULT_TRACKING_PARAMS = [
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
    "ref",
    "fbclid",
    "gclid",
]


class DedupConfig(BaseModel):
    """Configuration for content deduplication.

    URLs are compared after lower-casing, dropping `www.`, the trailing
    slash, the fragment and every query parameter listed here.
    """

    tracking_params: list[str] = Field(default_factory=lambda: list(DEFAULT_TRACKING_PARAMS))
    use_fingerprint: bool = Field(
        default=True, description="Also match on a title+source fingerprint"
    )

    @field_validator("tracking_params", mode="before")
    @classmethod
    def normalize_params(cls, v: Any) -> list[str]:
        """Lowercase tracking parameter names."""
        return normalize_string_list(v)


class StagingConfig(BaseModel):
    """Configuration for the staging gate."""

    min_description_length: int = Field(
        default=20, ge=0, description="Shortest description accepted into a queue"
    )


class ApprovalConfig(BaseModel):
    """Configuration for approval workflows."""

    auto_approve_page_size: int = Field(
        default=100, ge=1, le=1000, description="Maximum records per auto-approval pass"
    )
    auto_reviewer: str = Field(default="auto-approval", description="Reviewer id for policy runs")
    reconcile_page_size: int = Field(default=200, ge=1, le=5000)


__all__ = [
    "DEFAULT_TRACKING_PARAMS",
    "ApprovalConfig",
    "DedupConfig",
    "StagingConfig",
]
