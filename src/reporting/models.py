"""Event models.

Events are designed to be:
- Immutable once built, so they can be handed across threads without locking.
- Self-describing: the well-known fields plus an open mapping of named
  interfaces (typed attachments such as exception data).
- Small and forward-compatible; transports decide how they are serialized.
"""

from __future__ import annotations

import traceback
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_serializer

EXCEPTION_INTERFACE = "exception"


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(tz=timezone.utc)


def new_event_id() -> str:
    """Return a fresh 32-character hex identifier."""
    return uuid.uuid4().hex


def _read_only(value: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(value))


def _empty_mapping() -> Mapping[str, Any]:
    return MappingProxyType({})


# Validated like a dict, stored behind a read-only proxy so a built Event
# cannot be changed through its containers.
StrMapping = Annotated[Mapping[str, str], AfterValidator(_read_only)]
AnyMapping = Annotated[Mapping[str, Any], AfterValidator(_read_only)]


class Level(str, Enum):
    """Severity of an event."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


class _Model(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class StackFrame(_Model):
    filename: str
    lineno: int | None = None
    function: str
    context_line: str | None = None


class ExceptionValue(_Model):
    """A single exception in a chain, with the frames it unwound through."""

    type: str
    module: str | None = None
    value: str
    frames: tuple[StackFrame, ...] = ()

    @classmethod
    def from_exception(cls, exc: BaseException) -> ExceptionValue:
        frames = [
            StackFrame(
                filename=frame.filename,
                lineno=frame.lineno,
                function=frame.name,
                context_line=frame.line or None,
            )
            for frame in traceback.extract_tb(exc.__traceback__)
        ]
        exc_type = type(exc)
        return cls(type=exc_type.__name__, module=exc_type.__module__, value=str(exc), frames=tuple(frames))


class ExceptionInterface(_Model):
    """Exception attachment.

    `values` holds the whole `__cause__` / `__context__` chain, innermost
    first and the reported exception last. Frames within each value are
    ordered oldest call first, as `traceback` reports them.
    """

    values: tuple[ExceptionValue, ...]

    @classmethod
    def from_exception(cls, exc: BaseException) -> ExceptionInterface:
        chain: list[ExceptionValue] = []
        seen: set[int] = set()
        current: BaseException | None = exc
        while current is not None and id(current) not in seen:
            seen.add(id(current))
            chain.append(ExceptionValue.from_exception(current))
            if current.__cause__ is not None:
                current = current.__cause__
            elif current.__suppress_context__:
                current = None
            else:
                current = current.__context__
        chain.reverse()
        return cls(values=tuple(chain))

    @property
    def primary(self) -> ExceptionValue:
        """The exception that was actually reported."""
        return self.values[-1]


class Event(_Model):
    """One reportable occurrence, ready for a transport."""

    id: str = Field(default_factory=new_event_id)
    timestamp: datetime = Field(default_factory=utc_now)
    level: Level = Level.INFO
    message: str = ""

    # Ambient context, usually filled in by enrichment providers.
    logger: str | None = None
    culprit: str | None = None
    server_name: str | None = None
    platform: str = "python"
    release: str | None = None
    environment: str | None = None
    tags: StrMapping = Field(default_factory=_empty_mapping)
    extra: AnyMapping = Field(default_factory=_empty_mapping)

    # Interface name -> attachment payload.
    interfaces: AnyMapping = Field(default_factory=_empty_mapping)

    @field_serializer("tags", "extra", "interfaces")
    def serialize_mapping(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return dict(value)

    def get_interface(self, name: str) -> Any:
        """Return the attachment registered under `name`, or None."""
        return self.interfaces.get(name)
