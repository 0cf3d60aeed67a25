"""Enrichment providers.

A provider inspects an in-progress EventBuilder and attaches ambient context.
Providers run in registration order on every send, so a later provider wins
over an earlier one that set the same field: register generic providers
(hostname) before request-scoped ones.
"""

from __future__ import annotations

import socket
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Protocol

from .builder import EventBuilder


class EnrichmentProvider(Protocol):
    def enrich(self, builder: EventBuilder) -> None:
        """Attach context to `builder` using its mutators."""


class ThreadNameProvider:
    """Tags events with the name of the thread that reported them."""

    def enrich(self, builder: EventBuilder) -> None:
        builder.add_tag("thread", threading.current_thread().name)


class HostnameProvider:
    """Sets `server_name` to the local host name (resolved once)."""

    def __init__(self, hostname: str | None = None) -> None:
        self._hostname = hostname or socket.gethostname()

    @property
    def hostname(self) -> str:
        return self._hostname

    def enrich(self, builder: EventBuilder) -> None:
        builder.set_server_name(self._hostname)


class StaticTagsProvider:
    """Applies fixed tags and, optionally, environment and release."""

    def __init__(
        self,
        tags: Mapping[str, str] | None = None,
        *,
        environment: str | None = None,
        release: str | None = None,
    ) -> None:
        self._tags = dict(tags or {})
        self._environment = environment
        self._release = release

    def enrich(self, builder: EventBuilder) -> None:
        for key, value in self._tags.items():
            builder.add_tag(key, value)
        if self._environment is not None:
            builder.set_environment(self._environment)
        if self._release is not None:
            builder.set_release(self._release)

    def __repr__(self) -> str:
        return f"StaticTagsProvider(tags={self._tags!r}, environment={self._environment!r}, release={self._release!r})"


_context_tags: ContextVar[Mapping[str, str]] = ContextVar("reporting_context_tags", default=MappingProxyType({}))


@contextmanager
def tag_context(**tags: str) -> Iterator[None]:
    """Scope request-level tags to the enclosed block.

    Nested blocks merge with the enclosing tags; inner values win.
    """
    token = _context_tags.set(MappingProxyType({**_context_tags.get(), **tags}))
    try:
        yield
    finally:
        _context_tags.reset(token)


def current_context_tags() -> dict[str, str]:
    """Tags set by the enclosing `tag_context` blocks, if any."""
    return dict(_context_tags.get())


class ContextTagsProvider:
    """Copies the tags of the current `tag_context` onto the builder."""

    def enrich(self, builder: EventBuilder) -> None:
        for key, value in _context_tags.get().items():
            builder.add_tag(key, value)
