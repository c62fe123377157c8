"""Source connectors."""

from intake.services.collector.sources.devto import DevToSource
from intake.services.collector.sources.factory import (
    SOURCE_CLASSES,
    create_source,
    create_sources,
    get_all_source_names,
    get_source_class,
)
from intake.services.collector.sources.github import GitHubSource
from intake.services.collector.sources.hackernews import HackerNewsSource

__all__ = [
    "SOURCE_CLASSES",
    "DevToSource",
    "GitHubSource",
    "HackerNewsSource",
    "create_source",
    "create_sources",
    "get_all_source_names",
    "get_source_class",
]
