"""Reporting facade.

The Reporter owns a set of enrichment providers and one active transport.
Every public send runs synchronously on the caller's thread:

    builder seeded -> providers applied in registration order -> build() -> transport.send()

Failures anywhere along that path are caught and logged here; a reporting
client must never crash the application it instruments.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from .builder import EventBuilder
from .guard import PIPELINE_GUARD, ReentrancyGuard
from .models import Event, Level
from .providers import EnrichmentProvider
from .transports import NoopTransport, Transport, close_transport

logger = logging.getLogger(__name__)


class Reporter:
    """Builds, enriches and dispatches events.

    Multiple reporters can coexist; each has its own providers and transport.
    They share the process-wide reentrancy guard so that a pipeline running
    on a thread blocks re-entry through any reporter on that thread.
    """

    def __init__(
        self,
        *,
        transport: Transport | None = None,
        providers: Iterable[EnrichmentProvider] = (),
        guard: ReentrancyGuard = PIPELINE_GUARD,
    ) -> None:
        """Create a reporter.

        Args:
            transport: Delivery backend; events are dropped until one is set.
            providers: Initial enrichment providers, in the order they run.
            guard: Reentrancy guard; override only to isolate tests.
        """
        self._lock = threading.Lock()
        # Copy-on-write: readers iterate whichever tuple they picked up.
        self._providers: tuple[EnrichmentProvider, ...] = ()
        self._transport: Transport = transport if transport is not None else NoopTransport()
        self._guard = guard
        for provider in providers:
            self.add_provider(provider)

    # -- providers -----------------------------------------------------------

    def add_provider(self, provider: EnrichmentProvider) -> None:
        """Register a provider; registering the same object twice is a no-op."""
        with self._lock:
            if any(existing is provider for existing in self._providers):
                return
            self._providers = (*self._providers, provider)
        logger.info("Added %r to the enrichment providers.", provider)

    def remove_provider(self, provider: EnrichmentProvider) -> None:
        """Unregister a provider; removing an unknown provider is a no-op."""
        with self._lock:
            remaining = tuple(existing for existing in self._providers if existing is not provider)
            if len(remaining) == len(self._providers):
                return
            self._providers = remaining
        logger.info("Removed %r from the enrichment providers.", provider)

    @property
    def providers(self) -> tuple[EnrichmentProvider, ...]:
        """Snapshot of the registered providers, in the order they run."""
        return self._providers

    def get_providers(self) -> tuple[EnrichmentProvider, ...]:
        return self.providers

    def run_providers(self, builder: EventBuilder) -> None:
        """Apply every registered provider to `builder`.

        A provider that raises is logged and skipped; the rest still run on
        the partially enriched builder.
        """
        for provider in self._providers:
            try:
                provider.enrich(builder)
            except Exception:  # noqa: BLE001 - one provider must not block the event
                logger.exception("Enrichment provider %r failed; continuing without it.", provider)

    # -- transport -----------------------------------------------------------

    @property
    def transport(self) -> Transport:
        return self._transport

    @transport.setter
    def transport(self, transport: Transport | None) -> None:
        self._transport = transport if transport is not None else NoopTransport()

    def get_transport(self) -> Transport:
        return self._transport

    def set_transport(self, transport: Transport | None) -> None:
        """Swap the active transport; events already dispatched are unaffected."""
        self.transport = transport

    def close(self) -> None:
        """Close the active transport, if it supports closing."""
        close_transport(self._transport)

    # -- sending -------------------------------------------------------------

    def send_message(self, message: str) -> str | None:
        """Send `message` as an INFO event.

        Returns the event id, or None when the event was dropped.
        """
        if message is None:
            logger.warning("send_message() called without a message; nothing sent.")
            return None
        with self._guard.enter() as acquired:
            if not acquired:
                logger.debug("Reporting pipeline re-entered on this thread; dropping message.")
                return None
            builder = EventBuilder().set_message(message).set_level(Level.INFO)
            return self._enrich_and_dispatch(builder)

    def send_exception(self, exc: BaseException) -> str | None:
        """Send `exc` as an ERROR event with its exception interface attached.

        Returns the event id, or None when the event was dropped.
        """
        with self._guard.enter() as acquired:
            if not acquired:
                logger.debug("Reporting pipeline re-entered on this thread; dropping exception.")
                return None
            try:
                builder = (
                    EventBuilder()
                    .set_message(str(exc) or type(exc).__name__)
                    .set_level(Level.ERROR)
                    .add_exception(exc)
                )
            except Exception:  # noqa: BLE001 - e.g. an exception whose __str__ raises
                logger.exception("Could not describe %s; dropping it.", type(exc).__name__)
                return None
            return self._enrich_and_dispatch(builder)

    def send_event(self, event: Event) -> str | None:
        """Dispatch a caller-assembled event as-is (no enrichment).

        Returns the event id, or None when the event was dropped.
        """
        with self._guard.enter() as acquired:
            if not acquired:
                logger.debug("Reporting pipeline re-entered on this thread; dropping event %s.", event.id)
                return None
            return self._dispatch(event)

    def _enrich_and_dispatch(self, builder: EventBuilder) -> str | None:
        self.run_providers(builder)
        try:
            event = builder.build()
        except Exception:  # noqa: BLE001 - drop the event rather than raise
            logger.exception("Failed to build event; dropping it.")
            return None
        return self._dispatch(event)

    def _dispatch(self, event: Event) -> str:
        transport = self._transport
        try:
            transport.send(event)
        except Exception:  # noqa: BLE001 - delivery failures are never surfaced
            logger.exception("An exception occurred while sending event %s.", event.id)
        return event.id
