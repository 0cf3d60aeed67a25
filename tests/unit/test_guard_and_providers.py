from __future__ import annotations

import logging
import threading

import pytest

from reporting import (
    ContextTagsProvider,
    EventBuilder,
    HostnameProvider,
    PipelineGuardFilter,
    ReentrancyGuard,
    StaticTagsProvider,
    ThreadNameProvider,
    tag_context,
)
from reporting.providers import current_context_tags


def test_guard_defaults_to_inactive_and_resets_after_block():
    guard = ReentrancyGuard()
    assert guard.active is False

    with guard.enter() as acquired:
        assert acquired is True
        assert guard.active is True
        with guard.enter() as nested:
            assert nested is False
        # The nested block must not clear the outer mark.
        assert guard.active is True

    assert guard.active is False


def test_guard_resets_when_block_raises():
    guard = ReentrancyGuard()

    with pytest.raises(RuntimeError):
        with guard.enter():
            raise RuntimeError("boom")

    assert guard.active is False


def test_guard_is_thread_local():
    guard = ReentrancyGuard()
    seen: dict[str, bool] = {}

    def _other_thread() -> None:
        seen["before"] = guard.active
        with guard.enter() as acquired:
            seen["acquired"] = acquired

    with guard.enter():
        worker = threading.Thread(target=_other_thread)
        worker.start()
        worker.join()
        assert guard.active is True

    assert seen == {"before": False, "acquired": True}


def test_pipeline_guard_filter_rejects_records_inside_pipeline():
    guard = ReentrancyGuard()
    log_filter = PipelineGuardFilter(guard)
    record = logging.LogRecord("reporting", logging.ERROR, __file__, 1, "msg", None, None)

    assert log_filter.filter(record) is True
    with guard.enter():
        assert log_filter.filter(record) is False


def test_thread_name_provider_tags_current_thread():
    builder = EventBuilder()
    ThreadNameProvider().enrich(builder)

    assert builder.tags["thread"] == threading.current_thread().name


def test_hostname_provider_sets_server_name():
    builder = EventBuilder()
    provider = HostnameProvider("test-host")
    provider.enrich(builder)

    assert provider.hostname == "test-host"
    assert builder.build().server_name == "test-host"


def test_hostname_provider_resolves_local_host_by_default():
    assert HostnameProvider().hostname


def test_static_tags_provider_sets_tags_environment_and_release():
    builder = EventBuilder()
    StaticTagsProvider({"team": "core"}, environment="staging", release="1.2.3").enrich(builder)

    event = builder.build()
    assert event.tags == {"team": "core"}
    assert event.environment == "staging"
    assert event.release == "1.2.3"


def test_static_tags_provider_leaves_unset_fields_alone():
    builder = EventBuilder().set_environment("prod")
    StaticTagsProvider({"team": "core"}).enrich(builder)

    assert builder.build().environment == "prod"


def test_tag_context_scopes_and_merges_tags():
    provider = ContextTagsProvider()

    outside = EventBuilder()
    provider.enrich(outside)
    assert outside.tags == {}

    with tag_context(request_id="r1", user="alice"):
        with tag_context(request_id="r2"):
            inner = EventBuilder()
            provider.enrich(inner)
            assert inner.tags == {"request_id": "r2", "user": "alice"}
        assert current_context_tags() == {"request_id": "r1", "user": "alice"}

    assert current_context_tags() == {}


def test_request_scoped_provider_overrides_generic_one_when_registered_later():
    builder = EventBuilder()
    with tag_context(environment_tier="request"):
        StaticTagsProvider({"environment_tier": "default"}).enrich(builder)
        ContextTagsProvider().enrich(builder)

    assert builder.tags["environment_tier"] == "request"
