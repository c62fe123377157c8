"""Infrastructure clients shared across services.

- HTTPClient: pooled httpx client used by source connectors
- LLMClient: LiteLLM wrapper used by the scoring oracle
"""

from intake.infrastructure.http_client import HTTPClient
from intake.infrastructure.llm import LLMClient, LLMConfig, LLMError, LLMResponse

__all__ = [
    "HTTPClient",
    "LLMClient",
    "LLMConfig",
    "LLMError",
    "LLMResponse",
]
