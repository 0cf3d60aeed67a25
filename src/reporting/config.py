"""Configuration loading and validation.

This module is responsible for:

- Loading `.env` into the process environment (without overriding existing vars).
- Converting `REPORTING_*` environment variables into a strongly-typed Pydantic model.
- Validating values and providing actionable error messages.
"""

from __future__ import annotations

import os
import re
from typing import Literal, TypeVar

import dotenv
from pydantic import BaseModel, Field, field_validator

from .errors import ConfigurationError

_T = TypeVar("_T", int, float)

TransportKind = Literal["noop", "memory", "duckdb"]


def _get_env_str(name: str) -> str | None:
    """Read an optional string env var; blank counts as unset."""
    value = os.getenv(name, "").strip()
    return value or None


def _get_env_bool(name: str, default: bool) -> bool:
    """Read an on/off `REPORTING_*` flag; blank or unset gives `default`."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    normalized = raw.strip().lower()
    if normalized in {"true", "1", "yes", "y", "on"}:
        return True
    if normalized in {"false", "0", "no", "n", "off"}:
        return False
    raise ConfigurationError(f"{name} must be a boolean (true/false). Got: {raw!r}")


def _get_env_number(name: str, default: _T, cast: type[_T]) -> _T:
    """Read a numeric `REPORTING_*` setting such as the queue bound."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a {cast.__name__}. Got: {raw!r}") from exc


def parse_tags(raw: str | None) -> dict[str, str]:
    """Parse `key=value,key2=value2` into a dict. Blank input gives no tags."""
    tags: dict[str, str] = {}
    if not raw:
        return tags
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ConfigurationError(f"REPORTING_TAGS entries must look like key=value. Got: {item!r}")
        tags[key.strip()] = value.strip()
    return tags


class ReportingConfig(BaseModel):
    """Configuration for building a Reporter."""

    transport: TransportKind = Field(default="noop", description="Transport backend")
    duckdb_path: str = Field(default="events.duckdb", description="DuckDB file for the duckdb transport")
    duckdb_table: str = Field(default="events", description="DuckDB table for the duckdb transport")

    queued: bool = Field(default=False, description="Deliver from a background worker thread")
    max_queue_size: int = Field(default=1000, description="Max buffered events when queued")

    environment: str | None = Field(default=None, description="Environment name attached to every event")
    release: str | None = Field(default=None, description="Release attached to every event")
    tags: dict[str, str] = Field(default_factory=dict, description="Static tags attached to every event")
    default_providers: bool = Field(default=True, description="Register hostname/thread/context providers")

    @field_validator("duckdb_table")
    def validate_duckdb_table(cls, v: str) -> str:
        """Table names are interpolated into SQL, so only plain identifiers are allowed."""
        if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", v):
            raise ValueError(f"REPORTING_DUCKDB_TABLE must be a plain identifier. Got: {v!r}")
        return v

    @field_validator("max_queue_size")
    def validate_max_queue_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"REPORTING_MAX_QUEUE_SIZE must be > 0. Got: {v}")
        return v


def load_config() -> ReportingConfig:
    """Load reporting configuration from environment variables.

    Notes:
    - Calls `dotenv.load_dotenv()` so local `.env` values are visible to the process.
    - Raises `ValueError` (`ConfigurationError` or a pydantic `ValidationError`)
      with actionable messages when a value is malformed.
    """
    dotenv.load_dotenv()

    transport = (_get_env_str("REPORTING_TRANSPORT") or "noop").lower()
    return ReportingConfig(
        transport=transport,
        duckdb_path=_get_env_str("REPORTING_DUCKDB_PATH") or "events.duckdb",
        duckdb_table=_get_env_str("REPORTING_DUCKDB_TABLE") or "events",
        queued=_get_env_bool("REPORTING_QUEUED", False),
        max_queue_size=_get_env_number("REPORTING_MAX_QUEUE_SIZE", 1000, int),
        environment=_get_env_str("REPORTING_ENVIRONMENT"),
        release=_get_env_str("REPORTING_RELEASE"),
        tags=parse_tags(os.getenv("REPORTING_TAGS")),
        default_providers=_get_env_bool("REPORTING_DEFAULT_PROVIDERS", True),
    )
