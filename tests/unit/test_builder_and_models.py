from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from reporting import Event, EventBuilder, ExceptionInterface, Level


def _raise_value_error() -> None:
    raise ValueError("bad value")


def test_builder_defaults():
    event = EventBuilder().build()

    assert event.message == ""
    assert event.level is Level.INFO
    assert event.platform == "python"
    assert event.interfaces == {}
    assert len(event.id) == 32
    assert event.timestamp.tzinfo is not None


def test_builder_is_fluent_and_last_write_wins():
    builder = EventBuilder()
    assert builder.set_message("first") is builder
    assert builder.set_level(Level.DEBUG) is builder
    assert builder.add_interface("custom", {"a": 1}) is builder

    event = builder.set_message("second").set_level("warning").add_tag("k", 1).build()

    assert event.message == "second"
    assert event.level is Level.WARNING
    assert event.tags == {"k": "1"}
    assert event.get_interface("custom") == {"a": 1}
    assert event.get_interface("missing") is None


def test_build_twice_gives_same_content_with_distinct_ids():
    builder = EventBuilder().set_message("m").set_level(Level.ERROR).add_extra("n", 3)

    first = builder.build()
    second = builder.build()

    assert first.id != second.id
    assert first.model_dump(exclude={"id", "timestamp"}) == second.model_dump(exclude={"id", "timestamp"})


def test_explicit_id_and_timestamp_are_kept():
    ts = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    event = EventBuilder().set_event_id("abc").set_timestamp(ts).build()

    assert event.id == "abc"
    assert event.timestamp == ts


def test_invalid_level_and_none_message_are_rejected():
    with pytest.raises(ValueError):
        EventBuilder().set_level("catastrophic")
    with pytest.raises(ValueError):
        EventBuilder().set_message(None)  # type: ignore[arg-type]


def test_event_is_immutable():
    event = EventBuilder().set_message("m").build()

    with pytest.raises(ValidationError):
        event.message = "changed"  # type: ignore[misc]
    with pytest.raises(ValidationError):
        event.level = Level.FATAL  # type: ignore[misc]


def test_event_containers_are_read_only():
    try:
        _raise_value_error()
    except ValueError as exc:
        event = EventBuilder().add_tag("a", "1").add_extra("x", 1).add_exception(exc).build()

    with pytest.raises(TypeError):
        event.tags["a"] = "mutated"  # type: ignore[index]
    with pytest.raises(TypeError):
        event.extra["y"] = 2  # type: ignore[index]
    with pytest.raises(TypeError):
        event.interfaces["x"] = 1  # type: ignore[index]
    with pytest.raises(AttributeError):
        event.get_interface("exception").values.append(None)

    assert event.tags == {"a": "1"}
    assert event.extra == {"x": 1}
    assert set(event.interfaces) == {"exception"}


def test_event_dump_returns_plain_dicts():
    data = EventBuilder().add_tag("a", "1").add_interface("custom", {"k": "v"}).build().model_dump()

    assert type(data["tags"]) is dict
    assert data["tags"] == {"a": "1"}
    assert data["interfaces"] == {"custom": {"k": "v"}}


def test_builder_mutation_after_build_does_not_leak():
    builder = EventBuilder().add_tag("a", "1").add_extra("x", 1).add_interface("i", "payload")
    event = builder.build()

    builder.add_tag("b", "2").add_extra("y", 2).add_interface("j", "other").set_message("later")

    assert event.tags == {"a": "1"}
    assert event.extra == {"x": 1}
    assert set(event.interfaces) == {"i"}
    assert event.message == ""


def test_exception_interface_captures_type_and_frames():
    try:
        _raise_value_error()
    except ValueError as exc:
        interface = ExceptionInterface.from_exception(exc)

    assert len(interface.values) == 1
    primary = interface.primary
    assert primary.type == "ValueError"
    assert primary.module == "builtins"
    assert primary.value == "bad value"
    assert primary.frames[-1].function == "_raise_value_error"
    assert primary.frames[-1].context_line == 'raise ValueError("bad value")'
    assert primary.frames[0].function == "test_exception_interface_captures_type_and_frames"


def test_exception_interface_walks_cause_chain():
    try:
        try:
            _raise_value_error()
        except ValueError as inner:
            raise KeyError("k") from inner
    except KeyError as exc:
        interface = ExceptionInterface.from_exception(exc)

    assert [value.type for value in interface.values] == ["ValueError", "KeyError"]
    assert interface.primary.type == "KeyError"


def test_exception_interface_honours_suppressed_context():
    try:
        try:
            _raise_value_error()
        except ValueError:
            raise KeyError("k") from None
    except KeyError as exc:
        interface = ExceptionInterface.from_exception(exc)

    assert [value.type for value in interface.values] == ["KeyError"]


def test_unraised_exception_has_no_frames():
    interface = ExceptionInterface.from_exception(RuntimeError("never raised"))

    assert interface.primary.frames == ()


def test_add_exception_attaches_under_exception_name():
    event = EventBuilder().add_exception(RuntimeError("x")).build()

    assert isinstance(event.get_interface("exception"), ExceptionInterface)


def test_event_can_be_constructed_directly():
    event = Event(message="direct", level=Level.FATAL)

    assert event.message == "direct"
    assert event.level is Level.FATAL
