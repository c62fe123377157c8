"""Optional LLM scoring oracle.

The oracle rates an item on a 0-1 scale. It is safe to omit entirely:
without credentials every call returns None and scoring stays rule-based.
"""

import json
import re
from typing import Protocol

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from intake.core.exceptions import OracleError
from intake.core.logging import get_logger
from intake.infrastructure.llm import LLMClient, LLMConfig, LLMError
from intake.services.collector.base import ContentItem

logger = get_logger(__name__)

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

SYSTEM_PROMPT = (
    "You evaluate content for a directory that helps early-stage builders find "
    "projects, funding programs and learning resources. Respond with a single JSON "
    "object and nothing else."
)

USER_PROMPT_TEMPLATE = """Rate this {category} item.

Title: {title}
Source: {source}
URL: {url}
Description: {description}

Return JSON with these keys:
relevance, quality, urgency, authority, overall (numbers between 0 and 1),
reasoning (one sentence), categories (list of strings),
sentiment ("positive", "neutral" or "negative"),
recommendation ("reject", "review", "approve" or "feature")."""


class OracleScore(BaseModel):
    """Oracle rating for one item."""

    overall: float = Field(ge=0.0, le=1.0)
    relevance: float = Field(default=0.0, ge=0.0, le=1.0)
    quality: float = Field(default=0.0, ge=0.0, le=1.0)
    urgency: float = Field(default=0.0, ge=0.0, le=1.0)
    authority: float = Field(default=0.0, ge=0.0, le=1.0)
    reasoning: str = ""
    categories: list[str] = Field(default_factory=list)
    sentiment: str = "neutral"
    recommendation: str | None = None


class ScoringOracle(Protocol):
    """Anything that can rate a content item."""

    async def score_content(self, item: ContentItem) -> OracleScore | None:
        """Rate an item, or return None when no rating is available."""
        ...


class LLMScoringOracle:
    """Scoring oracle backed by an LLM through LiteLLM.

    Example:
        >>> oracle = LLMScoringOracle(llm_client, model="openai/gpt-4o-mini")
        >>> rating = await oracle.score_content(item)
    """

    def __init__(
        self,
        llm_client: LLMClient,
        model: str,
        enabled: bool = True,
        max_tokens: int = 500,
        description_chars: int = 1500,
    ):
        """Initialize oracle.

        Args:
            llm_client: LLM client
            model: LiteLLM model identifier
            enabled: False when no credentials are configured
            max_tokens: Response token budget
            description_chars: Description prefix sent to the model
        """
        self._llm_client = llm_client
        self._config = LLMConfig(model=model, max_tokens=max_tokens, temperature=0.0)
        self.enabled = enabled
        self._description_chars = description_chars

    async def score_content(self, item: ContentItem) -> OracleScore | None:
        """Rate an item.

        Args:
            item: Item to rate

        Returns:
            OracleScore, or None when disabled or when the call fails
        """
        if not self.enabled:
            return None

        prompt = USER_PROMPT_TEMPLATE.format(
            category=item.category.value,
            title=item.title,
            source=item.source,
            url=item.url or "n/a",
            description=item.description[: self._description_chars] or "n/a",
        )

        try:
            response = await self._llm_client.complete(
                config=self._config,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
            return parse_oracle_response(response.content)
        except (LLMError, OracleError) as e:
            logger.warning("Oracle unavailable", title=item.title[:50], error=str(e))
            return None


def parse_oracle_response(content: str) -> OracleScore:
    """Parse the model's reply into an OracleScore.

    Tolerates prose or code fences around the JSON object.

    Args:
        content: Raw model output

    Returns:
        Parsed rating

    Raises:
        OracleError: If no valid JSON object can be extracted
    """
    match = _JSON_OBJECT.search(content)
    if match is None:
        raise OracleError("Oracle response contained no JSON object", {"content": content[:200]})
    try:
        return OracleScore.model_validate(json.loads(match.group(0)))
    except (json.JSONDecodeError, PydanticValidationError) as e:
        raise OracleError(f"Invalid oracle response: {e}", {"content": content[:200]}) from e


__all__ = [
    "LLMScoringOracle",
    "OracleScore",
    "ScoringOracle",
    "parse_oracle_response",
]
