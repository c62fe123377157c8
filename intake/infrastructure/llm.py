"""LLM client abstraction using LiteLLM.

Provides a provider-agnostic completion call; model names follow the
LiteLLM `provider/model-name` convention.
"""

from dataclasses import dataclass
from typing import Any

import litellm
from litellm import acompletion

from intake.core.exceptions import IntakeError
from intake.core.logging import get_logger

logger = get_logger(__name__)

litellm.drop_params = True  # Drop unsupported params for each provider


class LLMError(IntakeError):
    """LLM operation failed."""


@dataclass
class LLMConfig:
    """LLM configuration for a specific use case.

    Attributes:
        model: Model identifier (e.g., "openai/gpt-4o-mini")
        max_tokens: Maximum tokens in response
        temperature: Sampling temperature (0-1)
        timeout: Request timeout in seconds
    """

    model: str
    max_tokens: int = 1000
    temperature: float = 0.2
    timeout: int = 30


@dataclass
class LLMResponse:
    """Standardized LLM response.

    Attributes:
        content: Generated text content
        model: Model used for generation
        usage: Token usage statistics
        raw_response: Raw response from provider
    """

    content: str
    model: str
    usage: dict[str, int]
    raw_response: Any = None


class LLMClient:
    """Unified LLM client using LiteLLM.

    Example:
        >>> client = LLMClient(openai_api_key="sk-...")
        >>> response = await client.complete(
        ...     config=LLMConfig(model="openai/gpt-4o-mini"),
        ...     messages=[{"role": "user", "content": "Hello!"}]
        ... )
        >>> print(response.content)
    """

    def __init__(self, anthropic_api_key: str = "", openai_api_key: str = "") -> None:
        """Initialize LLM client with provider API keys.

        Args:
            anthropic_api_key: Anthropic API key
            openai_api_key: OpenAI API key
        """
        if anthropic_api_key:
            litellm.api_key = anthropic_api_key
        if openai_api_key:
            litellm.openai_key = openai_api_key

        logger.info("LLMClient initialized")

    async def complete(
        self,
        config: LLMConfig,
        messages: list[dict[str, str]],
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate completion from LLM.

        Args:
            config: LLM configuration
            messages: List of message dicts with 'role' and 'content'
            **kwargs: Additional parameters passed to the model

        Returns:
            LLMResponse with generated content

        Raises:
            LLMError: If generation fails
        """
        try:
            logger.debug(
                "LLM request",
                model=config.model,
                max_tokens=config.max_tokens,
                message_count=len(messages),
            )

            response = await acompletion(
                model=config.model,
                messages=messages,
                max_tokens=config.max_tokens,
                temperature=config.temperature,
                timeout=config.timeout,
                **kwargs,
            )

            content = response.choices[0].message.content or ""

            usage = {}
            if response.usage:
                usage = {
                    "prompt_tokens": response.usage.prompt_tokens or 0,
                    "completion_tokens": response.usage.completion_tokens or 0,
                    "total_tokens": response.usage.total_tokens or 0,
                }

            logger.debug(
                "LLM response",
                model=response.model,
                content_length=len(content),
                usage=usage,
            )

            return LLMResponse(
                content=content,
                model=response.model or config.model,
                usage=usage,
                raw_response=response,
            )

        except Exception as e:
            logger.error(
                "LLM request failed",
                model=config.model,
                error=str(e),
                exc_info=True,
            )
            raise LLMError(f"LLM request failed: {e}") from e


__all__ = ["LLMClient", "LLMConfig", "LLMError", "LLMResponse"]
