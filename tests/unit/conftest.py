from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _isolated_reporting_env(monkeypatch: pytest.MonkeyPatch):
    """Run every unit test without ambient `REPORTING_*` settings.

    Also keeps `load_config()` from picking up a developer's local `.env`.
    """
    for name in list(os.environ):
        if name.startswith("REPORTING_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("reporting.config.dotenv.load_dotenv", lambda *args, **kwargs: False)
    yield
