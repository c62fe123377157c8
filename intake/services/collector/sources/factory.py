"""Source factory for config-driven connector instantiation."""

from typing import Any

from intake.core.logging import get_logger
from intake.infrastructure.http_client import HTTPClient
from intake.services.collector.base import BaseSource
from intake.services.collector.sources.devto import DevToSource
from intake.services.collector.sources.github import GitHubSource
from intake.services.collector.sources.hackernews import HackerNewsSource

logger = get_logger(__name__)

# Source name to class mapping
SOURCE_CLASSES: dict[str, type[BaseSource[Any]]] = {
    "hackernews": HackerNewsSource,
    "github": GitHubSource,
    "devto": DevToSource,
}


def get_source_class(source_name: str) -> type[BaseSource[Any]] | None:
    """Get the source class for a given source name.

    Args:
        source_name: Name of the source (e.g., "hackernews", "github")

    Returns:
        Source class or None if source type is unknown
    """
    return SOURCE_CLASSES.get(source_name)


def create_source(
    source_name: str,
    overrides: dict[str, Any] | None = None,
    http_client: HTTPClient | None = None,
) -> BaseSource[Any]:
    """Create a source instance from name and config overrides.

    Args:
        source_name: Name of the source
        overrides: Configuration overrides
        http_client: Shared HTTP client for connection reuse

    Returns:
        Source instance

    Raises:
        ValueError: If source type is unknown
    """
    source_class = get_source_class(source_name)
    if source_class is None:
        raise ValueError(f"Unknown source type: {source_name}")

    config = source_class.build_config(overrides or {})
    return source_class(config=config, http_client=http_client)


def create_sources(
    source_names: list[str],
    http_client: HTTPClient | None = None,
    overrides: dict[str, dict[str, Any]] | None = None,
) -> list[BaseSource[Any]]:
    """Create every known source in the list, skipping unknown names.

    Args:
        source_names: Source names, usually Config.enabled_sources
        http_client: Shared HTTP client
        overrides: Per-source configuration overrides

    Returns:
        Source instances in list order
    """
    overrides = overrides or {}
    sources = []
    for name in source_names:
        if name not in SOURCE_CLASSES:
            logger.warning("Unknown source skipped", source=name)
            continue
        sources.append(create_source(name, overrides.get(name), http_client=http_client))
    return sources


def get_all_source_names() -> list[str]:
    """Get all registered source names.

    Returns:
        List of source names
    """
    return list(SOURCE_CLASSES.keys())


__all__ = [
    "SOURCE_CLASSES",
    "create_source",
    "create_sources",
    "get_all_source_names",
    "get_source_class",
]
