"""Tests for the path stack."""

import pytest

from commerceml_stream.shared.errors import StructuralError
from commerceml_stream.streaming.path_stack import PathStack


class TestPathStack:
    """Test push/pop bookkeeping."""

    def test_push_and_current(self) -> None:
        stack = PathStack()
        stack.push("A")
        stack.push("B")
        assert stack.current() == ("A", "B")
        assert stack.depth == 2
        assert stack.top == "B"
        assert len(stack) == 2

    def test_pop_returns_name(self) -> None:
        stack = PathStack()
        stack.push("A")
        assert stack.pop("A") == "A"
        assert stack.current() == ()
        assert stack.top is None

    def test_current_is_a_snapshot(self) -> None:
        stack = PathStack()
        stack.push("A")
        snapshot = stack.current()
        stack.push("B")
        assert snapshot == ("A",)
        assert stack.current() == ("A", "B")

    def test_mismatched_pop(self) -> None:
        stack = PathStack()
        stack.push("A")
        stack.push("B")
        with pytest.raises(StructuralError, match="does not match") as exc_info:
            stack.pop("X")
        assert exc_info.value.expected == "B"
        assert exc_info.value.actual == "X"
        assert exc_info.value.path == ("A", "B")

    def test_pop_empty(self) -> None:
        with pytest.raises(StructuralError, match="without an open element"):
            PathStack().pop("A")

    def test_max_depth(self) -> None:
        stack = PathStack(max_depth=2)
        stack.push("A")
        stack.push("B")
        with pytest.raises(StructuralError, match="maximum nesting depth 2"):
            stack.push("C")
        assert stack.current() == ("A", "B")
