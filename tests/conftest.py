"""Pytest configuration.

Makes the `reporting` package under `src/` importable without an editable
install, so the suite also runs from a plain checkout.
"""

from __future__ import annotations

import sys
from pathlib import Path


def pytest_configure() -> None:
    """Put `src/` at the front of `sys.path` before collection."""
    src_dir = str(Path(__file__).resolve().parents[1] / "src")
    if src_dir not in sys.path:
        sys.path.insert(0, src_dir)
