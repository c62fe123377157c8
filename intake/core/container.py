"""Dependency Injection Container.

This module provides a centralized DI container using dependency-injector.
Components are constructed once per process and passed explicitly:
- Singleton: engine, session factory, HTTP/LLM clients, configs, store
- Factory: pipeline services (cheap to build, no shared run state)

Usage:
    # In Celery / scripts
    from intake.core.container import get_container

    orchestrator = get_container().services.fetch_orchestrator()
    result = await orchestrator.run(RunConfig())

    # In tests
    with override_store(fake_store):
        ...
"""

from dependency_injector import containers, providers

from intake.config.content import ApprovalConfig, DedupConfig, StagingConfig
from intake.config.pipeline import OrchestratorConfig
from intake.config.scoring import EligibilityConfig, ScoringConfig
from intake.core.config import Config, get_config
from intake.core.database import create_engine_from_config, create_session_factory


class InfrastructureContainer(containers.DeclarativeContainer):
    """Infrastructure layer dependencies (database, external clients).

    All Singleton; nothing connects until first use.
    """

    global_config = providers.Dependency(instance_of=Config)

    # ============================================
    # Database
    # ============================================

    db_engine = providers.Singleton(
        create_engine_from_config,
        config=global_config,
    )

    db_session_factory = providers.Singleton(
        create_session_factory,
        engine=db_engine,
    )

    # ============================================
    # External clients
    # ============================================

    http_client = providers.Singleton(
        "intake.infrastructure.http_client.HTTPClient",
    )

    # Unified LLM client (LiteLLM-based, provider-agnostic)
    llm_client = providers.Singleton(
        "intake.infrastructure.llm.LLMClient",
        anthropic_api_key=global_config.provided.anthropic_api_key,
        openai_api_key=global_config.provided.openai_api_key,
    )


class ConfigContainer(containers.DeclarativeContainer):
    """Configuration models container.

    Provides typed Pydantic config models for services.
    Scoring and eligibility defaults come from config/defaults.yaml.
    """

    scoring_config = providers.Singleton(ScoringConfig.from_defaults)

    eligibility_config = providers.Singleton(EligibilityConfig.from_defaults)

    dedup_config = providers.Singleton(DedupConfig)

    staging_config = providers.Singleton(StagingConfig)

    approval_config = providers.Singleton(ApprovalConfig)

    orchestrator_config = providers.Singleton(OrchestratorConfig)


class ServiceContainer(containers.DeclarativeContainer):
    """Service layer dependencies.

    Services receive infrastructure dependencies via injection.
    """

    global_config = providers.Dependency(instance_of=Config)
    infrastructure = providers.DependenciesContainer()
    configs = providers.DependenciesContainer()

    # ============================================
    # Persistence
    # ============================================

    content_store = providers.Singleton(
        "intake.services.store.sql.SqlContentStore",
        db_session_factory=infrastructure.db_session_factory,
    )

    # ============================================
    # Collector Services
    # ============================================

    scoring_oracle = providers.Singleton(
        "intake.services.collector.oracle.LLMScoringOracle",
        llm_client=infrastructure.llm_client,
        model=global_config.provided.oracle_model,
        enabled=global_config.provided.oracle_enabled,
        max_tokens=global_config.provided.oracle_max_tokens,
    )

    content_scorer = providers.Factory(
        "intake.services.collector.scorer.ContentScorer",
        config=configs.scoring_config,
        oracle=scoring_oracle,
    )

    eligibility_filter = providers.Factory(
        "intake.services.collector.eligibility.EligibilityFilter",
        config=configs.eligibility_config,
    )

    deduplicator = providers.Factory(
        "intake.services.collector.deduplicator.ContentDeduplicator",
        index=content_store,
        config=configs.dedup_config,
    )

    sources = providers.Factory(
        "intake.services.collector.sources.factory.create_sources",
        source_names=global_config.provided.enabled_sources,
        http_client=infrastructure.http_client,
        overrides=providers.Dict(
            github=providers.Dict(token=global_config.provided.github_token),
        ),
    )

    # ============================================
    # Review Services
    # ============================================

    staging_writer = providers.Factory(
        "intake.services.review.staging.StagingWriter",
        store=content_store,
        config=configs.staging_config,
        deduplicator=deduplicator,
    )

    approval_service = providers.Factory(
        "intake.services.review.approval.ApprovalService",
        store=content_store,
        config=configs.approval_config,
    )

    # ============================================
    # Orchestrator
    # ============================================

    fetch_orchestrator = providers.Factory(
        "intake.services.collector.pipeline.FetchOrchestrator",
        sources=sources,
        scorer=content_scorer,
        eligibility=eligibility_filter,
        deduplicator=deduplicator,
        staging=staging_writer,
        config=configs.orchestrator_config,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Root application container.

    Composes all sub-containers and provides the main entry point.
    """

    # Uses get_config() to ensure same instance across the app
    config = providers.Singleton(get_config)

    infrastructure = providers.Container(
        InfrastructureContainer,
        global_config=config,
    )

    configs = providers.Container(
        ConfigContainer,
    )

    services = providers.Container(
        ServiceContainer,
        global_config=config,
        infrastructure=infrastructure,
        configs=configs,
    )

    # ============================================
    # Convenience accessors (shortcuts)
    # ============================================

    orchestrator = providers.Factory(
        lambda svc: svc,
        svc=services.fetch_orchestrator,
    )

    approval_service = providers.Factory(
        lambda svc: svc,
        svc=services.approval_service,
    )


def create_container() -> ApplicationContainer:
    """Create and configure the application container.

    Returns:
        Configured ApplicationContainer instance
    """
    return ApplicationContainer()


# Global container instance
container = create_container()


def get_container() -> ApplicationContainer:
    """Get the global container."""
    return container


# ============================================
# Testing Utilities
# ============================================


def override_store(store: object):
    """Context manager to override the content store for testing.

    Usage:
        with override_store(fake_store):
            # Staging, dedup and approval all use fake_store
            ...
    """
    return container.services.content_store.override(store)


def override_oracle(oracle: object):
    """Context manager to override the scoring oracle for testing."""
    return container.services.scoring_oracle.override(oracle)


__all__ = [
    "ApplicationContainer",
    "ConfigContainer",
    "InfrastructureContainer",
    "ServiceContainer",
    "container",
    "create_container",
    "get_config",
    "get_container",
    "override_oracle",
    "override_store",
]
