"""Thread-scoped reentrancy guard for the reporting pipeline.

Reporting code frequently instruments logging. If the pipeline itself logs
(for example because a transport failed) and that record is turned back into
an event, the pipeline recurses into itself. The guard marks the current
thread as "inside the pipeline" for the duration of a send; nested sends on
the same thread are dropped and `PipelineGuardFilter` keeps the pipeline's
own log records away from any handler that reports them.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager


class _Marker(threading.local):
    # Runs once per thread, on that thread's first access.
    def __init__(self) -> None:
        self.active = False


class ReentrancyGuard:
    """Per-thread "inside the pipeline" flag with scoped acquisition."""

    def __init__(self) -> None:
        self._marker = _Marker()

    @property
    def active(self) -> bool:
        """Whether the current thread is inside the pipeline."""
        return self._marker.active

    @contextmanager
    def enter(self) -> Iterator[bool]:
        """Mark the current thread for the duration of the block.

        Yields True when this call acquired the mark, False when the thread
        was already inside the pipeline; only the acquiring call clears it.
        """
        if self._marker.active:
            yield False
            return
        self._marker.active = True
        try:
            yield True
        finally:
            self._marker.active = False


# Shared by every Reporter in the process, so a handler can tell whether any
# pipeline is running on its thread without knowing which Reporter it is.
PIPELINE_GUARD = ReentrancyGuard()


def in_pipeline() -> bool:
    """Whether the current thread is inside a reporting pipeline."""
    return PIPELINE_GUARD.active


class PipelineGuardFilter(logging.Filter):
    """Rejects log records emitted from inside the reporting pipeline.

    Attach it to any handler that forwards log records to a Reporter.
    """

    def __init__(self, guard: ReentrancyGuard = PIPELINE_GUARD, name: str = "") -> None:
        super().__init__(name)
        self._guard = guard

    def filter(self, record: logging.LogRecord) -> bool:
        return not self._guard.active
