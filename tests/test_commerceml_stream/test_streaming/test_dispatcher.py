"""Tests for the listener dispatcher."""

from unittest.mock import MagicMock

import pytest

from commerceml_stream.shared.errors import ListenerError
from commerceml_stream.streaming.dispatcher import Dispatcher
from commerceml_stream.streaming.nodes import ElementNode

RECORD = ElementNode.build("A", {}, {})


class TestDispatcher:
    """Test listener registration and delivery."""

    def test_emit_in_registration_order(self) -> None:
        dispatcher = Dispatcher()
        calls = []
        dispatcher.on("a", lambda r: calls.append("first"))
        dispatcher.on("a", lambda r: calls.append("second"))
        assert dispatcher.emit("a", RECORD) == 2
        assert calls == ["first", "second"]

    def test_emit_without_listeners(self) -> None:
        assert Dispatcher().emit("a", RECORD) == 0

    def test_listeners_isolated_by_rule(self) -> None:
        dispatcher = Dispatcher()
        handler = MagicMock()
        dispatcher.on("a", handler)
        dispatcher.emit("b", RECORD)
        handler.assert_not_called()
        assert dispatcher.has_listeners("a")
        assert not dispatcher.has_listeners("b")

    def test_off(self) -> None:
        dispatcher = Dispatcher()
        handler = MagicMock()
        dispatcher.on("a", handler)
        assert dispatcher.off("a", handler) is True
        assert dispatcher.off("a", handler) is False
        dispatcher.emit("a", RECORD)
        handler.assert_not_called()

    def test_non_callable_rejected(self) -> None:
        with pytest.raises(TypeError, match="must be callable"):
            Dispatcher().on("a", "not callable")

    def test_failing_listener_stops_delivery(self) -> None:
        dispatcher = Dispatcher()
        later = MagicMock()
        failure = RuntimeError("boom")
        dispatcher.on("a", MagicMock(side_effect=failure))
        dispatcher.on("a", later)

        with pytest.raises(ListenerError, match="boom") as exc_info:
            dispatcher.emit("a", RECORD)
        assert exc_info.value.__cause__ is failure
        assert exc_info.value.rule_name == "a"
        later.assert_not_called()

    def test_registration_during_emit_applies_to_next_record(self) -> None:
        dispatcher = Dispatcher()
        late = MagicMock()
        dispatcher.on("a", lambda r: dispatcher.on("a", late))
        dispatcher.emit("a", RECORD)
        late.assert_not_called()
        dispatcher.emit("a", RECORD)
        late.assert_called_once_with(RECORD)
