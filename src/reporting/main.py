"""Demo entrypoint wiring a Reporter from the environment.

This module contains a small, end-to-end "smoke test" that:

- Loads configuration from environment (`REPORTING_*`, `.env`).
- Builds a Reporter with the configured transport and providers.
- Sends one message and one exception, then closes the transport.

It is **not** intended to be production bootstrap logic; it is a convenient
manual harness, e.g. `REPORTING_TRANSPORT=duckdb python -m reporting.main`.
"""

from __future__ import annotations

import logging
import uuid

from .factory import create_reporter
from .providers import tag_context
from .reporter import Reporter


def run_demo(reporter: Reporter | None = None) -> list[str | None]:
    """Send a demo message and exception; return the event ids."""
    reporter = reporter if reporter is not None else create_reporter()
    event_ids: list[str | None] = []
    try:
        event_ids.append(reporter.send_message("reporting demo: hello"))
        with tag_context(request_id=uuid.uuid4().hex):
            try:
                raise RuntimeError("reporting demo: something went wrong")
            except RuntimeError as exc:
                event_ids.append(reporter.send_exception(exc))
    finally:
        reporter.close()
    for event_id in event_ids:
        print(f"[event] {event_id}")
    return event_ids


def main() -> None:
    """CLI entrypoint for `python -m reporting.main`."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    run_demo()


if __name__ == "__main__":
    main()
