"""Transports (event delivery backends).

A transport receives finished, immutable events. `send` is synchronous and
may block; whatever a transport raises is caught and logged by the Reporter,
so failures never reach application code. This module ships local transports
only: network delivery lives outside the core.
"""

from __future__ import annotations

import json
import logging
import queue
import re
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

import duckdb

from .errors import TransportError
from .guard import PIPELINE_GUARD, ReentrancyGuard
from .models import Event, utc_now

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Transport(Protocol):
    def send(self, event: Event) -> None:
        """Deliver a single event (may block)."""


def close_transport(transport: Transport) -> None:
    """Close `transport` if it exposes a `close()` method.

    A failing close is logged, never raised.
    """
    close = getattr(transport, "close", None)
    if not callable(close):
        return
    try:
        close()
    except Exception:  # noqa: BLE001 - shutdown must not crash the host application
        logger.exception("Failed to close transport %r.", transport)


class NoopTransport:
    """Drops every event. Used until a real transport is configured."""

    def send(self, event: Event) -> None:
        logger.debug("No transport configured; dropping event %s.", event.id)

    def close(self) -> None:  # noqa: D401 - keep interface consistent
        """No-op."""


class InMemoryTransport:
    """Keeps every event in memory; for tests and local debugging."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: list[Event] = []

    def send(self, event: Event) -> None:
        """Record the event (thread-safe)."""
        with self._lock:
            self._events.append(event)

    def close(self) -> None:  # noqa: D401 - keep interface consistent
        """No-op."""

    def snapshot(self) -> Sequence[Event]:
        """Events received so far, oldest first."""
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), sort_keys=True, default=str)


@dataclass(frozen=True)
class DuckDBOptions:
    path: Path
    table: str = "events"


class DuckDBTransport:
    """Spools events into an embedded DuckDB database.

    Useful as a durable local record of what would have been delivered.
    Tags, extra data and interfaces are stored as stable JSON.
    """

    def __init__(self, *, path: str | Path, table: str = "events") -> None:
        """Create (or open) a DuckDB-backed transport at the given path."""
        if not _IDENTIFIER.match(table):
            raise ValueError(f"table must be a plain SQL identifier. Got: {table!r}")
        self._opts = DuckDBOptions(path=Path(path), table=table)
        self._lock = threading.Lock()
        self._closed = False
        self._conn = duckdb.connect(str(self._opts.path))
        self._ensure_schema()

    @property
    def path(self) -> Path:
        return self._opts.path

    @property
    def table(self) -> str:
        return self._opts.table

    def _ensure_schema(self) -> None:
        """Create the backing table if it does not exist yet."""
        create_sql = f"""
        create table if not exists {self._opts.table} (
          event_id varchar not null,
          ts timestamptz not null,
          level varchar not null,
          message varchar not null,
          logger varchar,
          server_name varchar,
          environment varchar,
          release varchar,
          tags_json varchar not null,
          extra_json varchar not null,
          interfaces_json varchar not null
        )
        """
        with self._lock:
            self._conn.execute(create_sql)

    def send(self, event: Event) -> None:
        """Insert a single event as one row."""
        containers = event.model_dump(include={"tags", "extra", "interfaces"})
        insert_sql = f"""
        insert into {self._opts.table}
        (event_id, ts, level, message, logger, server_name, environment, release, tags_json, extra_json, interfaces_json)
        values (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        with self._lock:
            if self._closed:
                raise TransportError(f"DuckDB transport for {self._opts.path} is closed")
            self._conn.execute(
                insert_sql,
                [
                    event.id,
                    event.timestamp,
                    event.level.value,
                    event.message,
                    event.logger,
                    event.server_name,
                    event.environment,
                    event.release,
                    _to_json(containers["tags"]),
                    _to_json(containers["extra"]),
                    _to_json(containers["interfaces"]),
                ],
            )

    def close(self) -> None:
        """Close the underlying DuckDB connection. Safe to call twice."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._conn.close()


class QueuedTransport:
    """Buffers events and delivers them to `delegate` from a worker thread.

    `send` never blocks on delivery: when the queue is full the event is
    dropped and counted. The worker runs inside the reentrancy guard for its
    whole life, so anything logged while delivering cannot spawn new events.
    """

    def __init__(
        self,
        delegate: Transport,
        *,
        max_queue_size: int = 1000,
        guard: ReentrancyGuard = PIPELINE_GUARD,
    ) -> None:
        """Wrap `delegate`.

        Args:
            delegate: Transport the worker hands events to.
            max_queue_size: Bound for in-memory buffering; events are dropped
                when full rather than blocking the reporting thread.
            guard: Reentrancy guard entered by the worker thread.
        """
        if max_queue_size <= 0:
            raise ValueError(f"max_queue_size must be > 0. Got: {max_queue_size}")
        self._delegate = delegate
        self._guard = guard
        self._queue: queue.Queue[Event | None] = queue.Queue(maxsize=max_queue_size)
        self._lock = threading.Lock()
        self._worker: threading.Thread | None = None
        self._closed = False

        # Degradation tracking: counts and time window.
        self._dropped = 0
        self._write_failures = 0
        self._first_failure_at: datetime | None = None
        self._last_failure_at: datetime | None = None

    @property
    def delegate(self) -> Transport:
        return self._delegate

    def send(self, event: Event) -> None:
        """Enqueue an event for the worker (non-blocking)."""
        with self._lock:
            accepted = False
            if not self._closed:
                if self._worker is None:
                    self._worker = threading.Thread(
                        target=self._run_worker, name="reporting-queued-transport", daemon=True
                    )
                    self._worker.start()
                try:
                    self._queue.put_nowait(event)
                    accepted = True
                except queue.Full:
                    pass
            if not accepted:
                self._dropped += 1
        if not accepted:
            logger.warning("Event queue full or closed; dropping event %s.", event.id)

    def flush(self) -> None:
        """Block until every queued event has been handed to the delegate."""
        self._queue.join()

    def close(self) -> None:
        """Flush, stop the worker and close the delegate.

        Safe to call multiple times.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            worker = self._worker
        if worker is not None:
            self._queue.put(None)
            worker.join()
        close_transport(self._delegate)

    def _run_worker(self) -> None:
        """Background loop that drains the queue into the delegate."""
        with self._guard.enter():
            while True:
                item = self._queue.get()
                try:
                    if item is None:
                        return
                    self._delegate.send(item)
                except Exception:  # noqa: BLE001 - delivery must not kill the worker
                    now = utc_now()
                    with self._lock:
                        self._write_failures += 1
                        self._first_failure_at = self._first_failure_at or now
                        self._last_failure_at = now
                    logger.exception("Delegate transport failed to deliver an event.")
                finally:
                    self._queue.task_done()

    def degraded_status(self) -> dict[str, Any]:
        """Return a minimal degraded-status snapshot."""
        with self._lock:
            return {
                "dropped": self._dropped,
                "write_failures": self._write_failures,
                "first_failure_at": self._first_failure_at,
                "last_failure_at": self._last_failure_at,
            }
