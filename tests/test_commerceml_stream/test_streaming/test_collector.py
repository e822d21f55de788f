"""Tests for the subtree collector."""

import pytest

from commerceml_stream.shared.config import CollectorConfig
from commerceml_stream.shared.errors import RuleError
from commerceml_stream.streaming.collector import SubtreeCollector
from commerceml_stream.streaming.nodes import ElementNode, TextNode
from commerceml_stream.streaming.rules import Rule


class _Driver:
    """Drives a collector the way the streaming parser does."""

    def __init__(self, collector: SubtreeCollector, rules: list) -> None:
        self.collector = collector
        self.rules = rules
        self.path: tuple = ()
        self.completed: list = []

    def start(self, name: str, **attrs: str) -> None:
        self.path = self.path + (name,)
        self.collector.start(self.path, tuple(attrs.items()))
        for rule in self.rules:
            if rule.start_path == self.path:
                self.collector.activate(rule, name, tuple(attrs.items()))

    def text(self, content: str) -> None:
        self.collector.text(content)

    def end(self) -> None:
        depth = len(self.path)
        self.path = self.path[:-1]
        self.completed.extend(self.collector.end(depth))


class TestSubtreeCollector:
    """Test retention, collapsing and buffering."""

    def test_excluded_subtree_skipped(self) -> None:
        rule = Rule.from_paths("a", "/A", ["/A/B"])
        driver = _Driver(SubtreeCollector(), [rule])
        driver.start("A")
        driver.start("X")
        driver.start("B")
        driver.text("hidden")
        driver.end()
        driver.end()
        driver.start("B")
        driver.text("kept")
        driver.end()
        driver.end()

        (completed_rule, record), = driver.completed
        assert completed_rule is rule
        assert record.to_dict() == {"B": "kept"}

    def test_root_is_always_element(self) -> None:
        rule = Rule.from_paths("a", "/A")
        driver = _Driver(SubtreeCollector(), [rule])
        driver.start("A")
        driver.text("only text")
        driver.end()

        record = driver.completed[0][1]
        assert isinstance(record, ElementNode)
        assert record.text == "only text"
        assert record.children == {}

    def test_whitespace_stripping(self) -> None:
        rule = Rule.from_paths("a", "/A")
        driver = _Driver(SubtreeCollector(CollectorConfig(strip_whitespace=False)), [rule])
        driver.start("A")
        driver.start("B")
        driver.text("  x ")
        driver.end()
        driver.end()
        assert driver.completed[0][1].first("B") == TextNode("  x ")

    def test_without_collapsing_leaves_stay_elements(self) -> None:
        rule = Rule.from_paths("a", "/A")
        driver = _Driver(SubtreeCollector(CollectorConfig(collapse_text_nodes=False)), [rule])
        driver.start("A")
        driver.start("B")
        driver.text("x")
        driver.end()
        driver.end()
        leaf = driver.completed[0][1].first("B")
        assert isinstance(leaf, ElementNode)
        assert leaf.text == "x"

    def test_buffered_nodes_released_on_completion(self) -> None:
        collector = SubtreeCollector()
        rule = Rule.from_paths("a", "/A")
        driver = _Driver(collector, [rule])
        driver.start("A")
        driver.start("B")
        assert collector.buffered_nodes == 2
        driver.end()
        driver.end()
        assert collector.buffered_nodes == 0
        assert len(collector) == 0

    def test_same_rule_cannot_activate_twice(self) -> None:
        collector = SubtreeCollector()
        rule = Rule.from_paths("a", "/A")
        collector.activate(rule, "A", ())
        with pytest.raises(RuleError, match="inside its own occurrence"):
            collector.activate(rule, "A", ())

    def test_discard(self) -> None:
        collector = SubtreeCollector()
        collector.activate(Rule.from_paths("a", "/A"), "A", ())
        collector.activate(Rule.from_paths("b", "/A"), "A", ())
        assert collector.discard() == 2
        assert collector.active == []
        assert collector.buffered_nodes == 0
