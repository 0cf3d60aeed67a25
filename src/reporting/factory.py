"""Build a ready-to-use Reporter from configuration."""

from __future__ import annotations

from collections.abc import Callable

from .config import ReportingConfig, load_config
from .errors import ConfigurationError
from .providers import ContextTagsProvider, EnrichmentProvider, HostnameProvider, StaticTagsProvider, ThreadNameProvider
from .reporter import Reporter
from .transports import DuckDBTransport, InMemoryTransport, NoopTransport, QueuedTransport, Transport


def _build_noop(config: ReportingConfig) -> Transport:
    return NoopTransport()


def _build_memory(config: ReportingConfig) -> Transport:
    return InMemoryTransport()


def _build_duckdb(config: ReportingConfig) -> Transport:
    return DuckDBTransport(path=config.duckdb_path, table=config.duckdb_table)


_DRIVERS: dict[str, Callable[[ReportingConfig], Transport]] = {
    "noop": _build_noop,
    "memory": _build_memory,
    "duckdb": _build_duckdb,
}


def create_transport(config: ReportingConfig) -> Transport:
    """Create the configured transport, wrapped in a queue when requested.

    Raises:
        ConfigurationError: If the transport kind is not recognized.
    """
    build = _DRIVERS.get(config.transport)
    if build is None:
        raise ConfigurationError(
            f"Unknown transport {config.transport!r}. Expected one of: {', '.join(sorted(_DRIVERS))}"
        )
    transport = build(config)
    if config.queued:
        transport = QueuedTransport(transport, max_queue_size=config.max_queue_size)
    return transport


def create_providers(config: ReportingConfig) -> list[EnrichmentProvider]:
    """Providers in run order: generic host context first, request scope last."""
    providers: list[EnrichmentProvider] = []
    if config.default_providers:
        providers.append(HostnameProvider())
        providers.append(ThreadNameProvider())
    if config.tags or config.environment is not None or config.release is not None:
        providers.append(StaticTagsProvider(config.tags, environment=config.environment, release=config.release))
    if config.default_providers:
        providers.append(ContextTagsProvider())
    return providers


def create_reporter(config: ReportingConfig | None = None) -> Reporter:
    """Create a Reporter from `config`, or from the environment when omitted."""
    config = config if config is not None else load_config()
    return Reporter(transport=create_transport(config), providers=create_providers(config))
