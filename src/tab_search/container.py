"""
Application DI Container (dependency-injector).

Centralizes creation of the search engine and its collaborators.

Usage::

    from tab_search.container import create_container

    container = create_container(
        sources={"ultimate-guitar": ug_source, "e-chords": echords_source},
        cache_ttl=300,
    )
    engine = container.engine()

    # In tests: override any provider:
    container.result_cache.override(providers.Object(fake_cache))

Configuration keys (environment variable in brackets):
    cache_ttl             [TAB_SEARCH_CACHE_TTL]             seconds, default 600
    cache_max_size        [TAB_SEARCH_CACHE_MAX_SIZE]        default 1000
    cleanup_interval      [TAB_SEARCH_CLEANUP_INTERVAL]      seconds, default 600
    primary_source        [TAB_SEARCH_PRIMARY_SOURCE]        default "ultimate-guitar"
    default_retry_after   [TAB_SEARCH_DEFAULT_RETRY_AFTER]   seconds, default 60
    log_buffer            [TAB_SEARCH_LOG_BUFFER]            default false
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from dependency_injector import containers, providers

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "cache_ttl": 600.0,
    "cache_max_size": 1000,
    "cleanup_interval": 600.0,
    "primary_source": "ultimate-guitar",
    "default_retry_after": 60,
    "log_buffer": False,
}

_ENV_VARS: dict[str, tuple[str, type]] = {
    "cache_ttl": ("TAB_SEARCH_CACHE_TTL", float),
    "cache_max_size": ("TAB_SEARCH_CACHE_MAX_SIZE", int),
    "cleanup_interval": ("TAB_SEARCH_CLEANUP_INTERVAL", float),
    "primary_source": ("TAB_SEARCH_PRIMARY_SOURCE", str),
    "default_retry_after": ("TAB_SEARCH_DEFAULT_RETRY_AFTER", int),
    "log_buffer": ("TAB_SEARCH_LOG_BUFFER", lambda v: str(v).lower() in ("1", "true", "yes")),
}


def _create_registry(sources: Mapping[str, Any]) -> object:
    """Lazy factory for SourceHealthRegistry (avoids top-level import)."""
    from tab_search.application.health import SourceHealthRegistry

    return SourceHealthRegistry(sources=sources)


def _create_result_cache(ttl: float, max_size: int) -> object:
    """Lazy factory for ResultCache."""
    from tab_search.infrastructure.cache import ResultCache

    return ResultCache(ttl=ttl, max_size=max_size)


def _create_log_buffer(enabled: bool) -> object | None:
    """Attach an in-memory log buffer to the package logger when enabled."""
    if not enabled:
        return None
    from tab_search.shared.log_buffer import install_log_buffer

    return install_log_buffer()


def _create_engine(
    registry: Any,
    cache: Any,
    primary_source: str,
    cleanup_interval: float,
    default_retry_after: int,
    log_buffer: Any,
) -> object:
    """Lazy factory for AggregationEngine."""
    from tab_search.application.search import AggregationEngine

    return AggregationEngine(
        registry=registry,
        cache=cache,
        primary_source=primary_source,
        cleanup_interval=cleanup_interval,
        default_retry_after=default_retry_after,
        log_buffer=log_buffer,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for the tab search engine.

    Manages creation and lifecycle of all core services:
    - ``sources``: name -> adapter mapping, in participation order
    - ``registry``: source health and eligibility
    - ``result_cache``: TTL cache of ranked results
    - ``log_buffer``: optional in-memory log buffer
    - ``engine``: the aggregation engine
    """

    config = providers.Configuration()

    sources = providers.Dict()

    registry = providers.Singleton(
        _create_registry,
        sources=sources,
    )

    result_cache = providers.Singleton(
        _create_result_cache,
        ttl=config.cache_ttl,
        max_size=config.cache_max_size,
    )

    log_buffer = providers.Singleton(
        _create_log_buffer,
        enabled=config.log_buffer,
    )

    engine = providers.Singleton(
        _create_engine,
        registry=registry,
        cache=result_cache,
        primary_source=config.primary_source,
        cleanup_interval=config.cleanup_interval,
        default_retry_after=config.default_retry_after,
        log_buffer=log_buffer,
    )


def create_container(
    sources: Mapping[str, Any] | None = None,
    **overrides: Any,
) -> ApplicationContainer:
    """
    Build a configured container.

    Precedence: keyword overrides > environment variables > defaults.
    """
    unknown = set(overrides) - set(DEFAULT_CONFIG)
    if unknown:
        from tab_search.core.exceptions import ConfigurationError

        raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    container = ApplicationContainer()
    container.config.from_dict(DEFAULT_CONFIG)
    for key, (env_name, as_) in _ENV_VARS.items():
        getattr(container.config, key).from_env(env_name, default=DEFAULT_CONFIG[key], as_=as_)
    if overrides:
        container.config.from_dict(overrides)

    if sources is not None:
        container.sources.override(providers.Object(dict(sources)))

    logger.debug(f"Container configured with {len(sources or {})} sources")
    return container


__all__ = ["ApplicationContainer", "DEFAULT_CONFIG", "create_container"]
