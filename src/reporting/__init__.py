"""Client-side event reporting.

Application code hands a message or exception to a `Reporter`, which:
- Assembles a structured, immutable `Event` through an `EventBuilder`.
- Enriches it with every registered `EnrichmentProvider`, in order.
- Dispatches it to a `Transport`, catching and logging any failure.

A thread-scoped reentrancy guard keeps the pipeline from reporting on itself.
"""

from .builder import EventBuilder
from .config import ReportingConfig, load_config
from .errors import ConfigurationError, ReportingError, TransportError
from .factory import create_reporter, create_transport
from .guard import PIPELINE_GUARD, PipelineGuardFilter, ReentrancyGuard, in_pipeline
from .models import Event, ExceptionInterface, ExceptionValue, Level, StackFrame
from .providers import (
    ContextTagsProvider,
    EnrichmentProvider,
    HostnameProvider,
    StaticTagsProvider,
    ThreadNameProvider,
    tag_context,
)
from .reporter import Reporter
from .transports import DuckDBTransport, InMemoryTransport, NoopTransport, QueuedTransport, Transport

__all__ = [
    "ConfigurationError",
    "ContextTagsProvider",
    "DuckDBTransport",
    "EnrichmentProvider",
    "Event",
    "EventBuilder",
    "ExceptionInterface",
    "ExceptionValue",
    "HostnameProvider",
    "InMemoryTransport",
    "Level",
    "NoopTransport",
    "PIPELINE_GUARD",
    "PipelineGuardFilter",
    "QueuedTransport",
    "ReentrancyGuard",
    "Reporter",
    "ReportingConfig",
    "ReportingError",
    "StackFrame",
    "StaticTagsProvider",
    "ThreadNameProvider",
    "Transport",
    "TransportError",
    "create_reporter",
    "create_transport",
    "in_pipeline",
    "load_config",
    "tag_context",
]
