"""Mutable staging object used to assemble an Event.

A builder is owned by the call that created it and is never shared across
threads. Every mutator returns the builder so calls can be chained:

    event = EventBuilder().set_message("disk almost full").set_level(Level.WARNING).build()
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .models import EXCEPTION_INTERFACE, Event, ExceptionInterface, Level, new_event_id, utc_now


class EventBuilder:
    """Accumulates fields and interfaces until `build()` produces an Event."""

    def __init__(self) -> None:
        self._event_id: str | None = None
        self._timestamp: datetime | None = None
        self._level: Level = Level.INFO
        self._message: str = ""
        self._logger: str | None = None
        self._culprit: str | None = None
        self._server_name: str | None = None
        self._platform: str = "python"
        self._release: str | None = None
        self._environment: str | None = None
        self._tags: dict[str, str] = {}
        self._extra: dict[str, Any] = {}
        self._interfaces: dict[str, Any] = {}

    def set_event_id(self, event_id: str) -> EventBuilder:
        self._event_id = event_id
        return self

    def set_timestamp(self, timestamp: datetime) -> EventBuilder:
        if not isinstance(timestamp, datetime):
            raise ValueError(f"timestamp must be a datetime. Got: {timestamp!r}")
        self._timestamp = timestamp
        return self

    def set_level(self, level: Level | str) -> EventBuilder:
        """Set the severity; accepts a `Level` or its string value."""
        self._level = Level(level)
        return self

    def set_message(self, message: str) -> EventBuilder:
        if message is None:
            raise ValueError("message must not be None")
        self._message = str(message)
        return self

    def set_logger(self, logger: str | None) -> EventBuilder:
        self._logger = logger
        return self

    def set_culprit(self, culprit: str | None) -> EventBuilder:
        self._culprit = culprit
        return self

    def set_server_name(self, server_name: str | None) -> EventBuilder:
        self._server_name = server_name
        return self

    def set_platform(self, platform: str) -> EventBuilder:
        self._platform = platform
        return self

    def set_release(self, release: str | None) -> EventBuilder:
        self._release = release
        return self

    def set_environment(self, environment: str | None) -> EventBuilder:
        self._environment = environment
        return self

    def add_tag(self, key: str, value: Any) -> EventBuilder:
        """Add (or overwrite) a tag. Values are stored as strings."""
        self._tags[str(key)] = str(value)
        return self

    def add_extra(self, key: str, value: Any) -> EventBuilder:
        self._extra[str(key)] = value
        return self

    def add_interface(self, name: str, payload: Any) -> EventBuilder:
        """Attach `payload` under `name`, replacing any previous attachment."""
        self._interfaces[name] = payload
        return self

    def add_exception(self, exc: BaseException) -> EventBuilder:
        return self.add_interface(EXCEPTION_INTERFACE, ExceptionInterface.from_exception(exc))

    # Read access for providers that want to inspect before overriding.
    @property
    def message(self) -> str:
        return self._message

    @property
    def level(self) -> Level:
        return self._level

    @property
    def tags(self) -> dict[str, str]:
        """A copy of the tags set so far."""
        return dict(self._tags)

    @property
    def interfaces(self) -> dict[str, Any]:
        """A copy of the interfaces attached so far."""
        return dict(self._interfaces)

    def build(self) -> Event:
        """Produce an immutable Event from the current state.

        The builder's containers are copied, so mutating the builder later
        never affects an Event it already produced. An identifier and
        timestamp are generated per call unless set explicitly.
        """
        return Event(
            id=self._event_id or new_event_id(),
            timestamp=self._timestamp or utc_now(),
            level=self._level,
            message=self._message,
            logger=self._logger,
            culprit=self._culprit,
            server_name=self._server_name,
            platform=self._platform,
            release=self._release,
            environment=self._environment,
            tags=dict(self._tags),
            extra=dict(self._extra),
            interfaces=dict(self._interfaces),
        )
