"""Tests for rules and the rule table."""

import pytest

from commerceml_stream.shared.errors import DuplicateRuleError, RuleError
from commerceml_stream.streaming.rules import Rule, RuleTable, format_path, parse_path


class TestPaths:
    """Test path parsing helpers."""

    def test_parse_string_path(self) -> None:
        assert parse_path("/A/B") == ("A", "B")
        assert parse_path("A/B/") == ("A", "B")

    def test_parse_sequence_path(self) -> None:
        assert parse_path(["A", "B"]) == ("A", "B")

    @pytest.mark.parametrize("value", ["", "/", "/A//B", [], ["A", ""]])
    def test_invalid_paths(self, value: object) -> None:
        with pytest.raises(RuleError, match="Invalid path"):
            parse_path(value)

    def test_format_path(self) -> None:
        assert format_path(("КоммерческаяИнформация", "Документ")) == (
            "/КоммерческаяИнформация/Документ"
        )


class TestRule:
    """Test rule construction and retention."""

    def test_include_paths_stored_relative(self) -> None:
        rule = Rule.from_paths("a", ["A"], [["A", "B"]])
        assert rule.start_path == ("A",)
        assert rule.include_paths == frozenset({("B",)})
        assert not rule.includes_all

    def test_no_include_keeps_everything(self) -> None:
        rule = Rule.from_paths("a", "/A/C")
        assert rule.includes_all
        assert rule.retains(("X", "Y", "Z"))

    def test_include_outside_start_rejected(self) -> None:
        with pytest.raises(RuleError, match="is not below start path"):
            Rule.from_paths("a", "/A/B", ["/A/C"])

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(RuleError, match="name cannot be empty"):
            Rule.from_paths("", "/A")

    def test_retains_include_and_descendants(self) -> None:
        rule = Rule.from_paths("a", "/A", ["/A/B"])
        assert rule.retains(())
        assert rule.retains(("B",))
        assert rule.retains(("B", "C"))
        assert not rule.retains(("X",))
        assert not rule.retains(("X", "B"))

    def test_retains_ancestors_of_deep_include(self) -> None:
        rule = Rule.from_paths("a", "/A", ["/A/B/C"])
        assert rule.retains(("B",))
        assert rule.retains(("B", "C"))
        assert rule.retains(("B", "C", "D"))
        assert not rule.retains(("B", "X"))

    def test_include_equal_to_start_keeps_everything(self) -> None:
        rule = Rule.from_paths("offer", "/A/B", ["/A/B"])
        assert rule.include_paths == frozenset({()})
        assert rule.retains(("C",))
        assert rule.retains(("C", "D"))

    def test_empty_include_keeps_root_only(self) -> None:
        rule = Rule.from_paths("root", "/A", [])
        assert rule.retains(())
        assert not rule.retains(("B",))

    def test_direct_construction_normalizes_paths(self) -> None:
        rule = Rule("a", ["A"], {("B",), ("C", "D")})
        assert rule.start_path == ("A",)
        assert rule.include_paths == frozenset({("B",), ("C", "D")})
        assert rule.retains(("C",))
        table = RuleTable([rule])
        assert table.match(("A",)) == (rule,)

    def test_describe(self) -> None:
        rule = Rule.from_paths("a", "/A", ["/A/C", "/A/B"])
        assert rule.describe() == {"name": "a", "start": "/A", "include": ["/A/B", "/A/C"]}
        assert Rule.from_paths("b", "/A").describe()["include"] == "all"


class TestRuleTable:
    """Test registration and start path lookup."""

    def test_match_in_registration_order(self) -> None:
        first = Rule.from_paths("first", "/A/B")
        second = Rule.from_paths("second", "/A/B", ["/A/B/C"])
        table = RuleTable([first, second])
        assert table.match(("A", "B")) == (first, second)
        assert table.match(("A",)) == ()
        assert table.match(("X", "A", "B")) == ()

    def test_match_result_does_not_change_table(self) -> None:
        rule = Rule.from_paths("a", "/A")
        table = RuleTable([rule])
        matched = list(table.match(("A",)))
        matched.append(Rule.from_paths("b", "/A"))
        assert table.match(("A",)) == (rule,)

    def test_duplicate_name(self) -> None:
        table = RuleTable([Rule.from_paths("a", "/A")])
        with pytest.raises(DuplicateRuleError, match="already registered"):
            table.register(Rule.from_paths("a", "/B"))

    def test_frozen_table_rejects_rules(self) -> None:
        table = RuleTable()
        table.freeze()
        assert table.frozen
        with pytest.raises(RuleError, match="after streaming has started"):
            table.register(Rule.from_paths("a", "/A"))

    def test_lookup_helpers(self) -> None:
        rule = Rule.from_paths("a", "/A")
        table = RuleTable([rule])
        assert "a" in table
        assert table.get("a") is rule
        assert table.get("missing") is None
        assert list(table) == [rule]
        assert len(table) == 1
