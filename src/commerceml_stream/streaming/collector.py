"""Incremental subtree collection for active rule matches.

Each active match owns a stack of node builders mirroring the retained part of
the open element path below its start element. Builders are finalized into
immutable nodes as their closing tags arrive, so only open matches hold memory.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from commerceml_stream.shared.config import CollectorConfig
from commerceml_stream.shared.errors import RuleError

from .nodes import Child, ElementNode, Many, Node, Single, TextNode
from .path_stack import Path
from .rules import Rule

Attributes = Sequence[Tuple[str, str]]


class _NodeBuilder:
    """Mutable element under construction."""

    __slots__ = ("name", "attributes", "children", "text_parts")

    def __init__(self, name: str, attributes: Attributes) -> None:
        self.name = name
        self.attributes: Dict[str, str] = dict(attributes)
        self.children: Dict[str, List[Node]] = {}
        self.text_parts: List[str] = []

    def add_child(self, name: str, node: Node) -> None:
        self.children.setdefault(name, []).append(node)

    def _text(self, config: CollectorConfig) -> str:
        text = "".join(self.text_parts)
        return text.strip() if config.strip_whitespace else text

    def _slots(self) -> Dict[str, Child]:
        return {
            name: Single(nodes[0]) if len(nodes) == 1 else Many(tuple(nodes))
            for name, nodes in self.children.items()
        }

    def finalize(self, config: CollectorConfig) -> Node:
        text = self._text(config)
        if config.collapse_text_nodes and not self.attributes and not self.children:
            return TextNode(text)
        return ElementNode.build(self.name, self.attributes, self._slots(), text or None)

    def finalize_root(self, config: CollectorConfig) -> ElementNode:
        # The record root stays structured so listeners always get an element.
        text = self._text(config)
        return ElementNode.build(self.name, self.attributes, self._slots(), text or None)


@dataclass
class ActiveMatch:
    """One occurrence of a rule, between its start tag and its end tag."""

    rule: Rule
    base_depth: int
    builders: List[_NodeBuilder] = field(default_factory=list)
    skip_depth: int = 0  # open elements below an excluded one
    node_count: int = 0

    @property
    def collecting(self) -> bool:
        return self.skip_depth == 0


class SubtreeCollector:
    """Maintains all active matches and feeds them the retained events."""

    def __init__(self, config: Optional[CollectorConfig] = None) -> None:
        self.config = config or CollectorConfig()
        self._matches: List[ActiveMatch] = []
        self._active_rules: Dict[str, int] = {}
        self.buffered_nodes = 0

    @property
    def active(self) -> List[ActiveMatch]:
        return list(self._matches)

    def __len__(self) -> int:
        return len(self._matches)

    def activate(self, rule: Rule, name: str, attributes: Attributes) -> ActiveMatch:
        """Open a match for ``rule`` at the element just entered.

        Raises:
            RuleError: If the rule is already collecting, which start paths
                anchored at the document root make impossible
        """
        if rule.name in self._active_rules:
            raise RuleError(f"Rule '{rule.name}' activated inside its own occurrence")
        match = ActiveMatch(rule=rule, base_depth=len(rule.start_path))
        match.builders.append(_NodeBuilder(name, attributes))
        match.node_count = 1
        self.buffered_nodes += 1
        self._matches.append(match)
        self._active_rules[rule.name] = match.base_depth
        return match

    def start(self, path: Path, attributes: Attributes) -> None:
        """Route a start tag, already pushed onto ``path``, into open matches.

        Matches activated at this very element must be opened after this call.
        """
        name = path[-1]
        for match in self._matches:
            if match.skip_depth:
                match.skip_depth += 1
            elif match.rule.retains(path[match.base_depth:]):
                match.builders.append(_NodeBuilder(name, attributes))
                match.node_count += 1
                self.buffered_nodes += 1
            else:
                match.skip_depth = 1

    def text(self, content: str) -> None:
        for match in self._matches:
            if not match.skip_depth:
                match.builders[-1].text_parts.append(content)

    def end(self, depth: int) -> List[Tuple[Rule, ElementNode]]:
        """Route an end tag closing the element at ``depth``.

        Returns:
            Completed records in completion order
        """
        completed: List[Tuple[Rule, ElementNode]] = []
        remaining: List[ActiveMatch] = []
        for match in self._matches:
            if match.skip_depth:
                match.skip_depth -= 1
                remaining.append(match)
            elif depth == match.base_depth:
                record = match.builders.pop().finalize_root(self.config)
                self.buffered_nodes -= match.node_count
                del self._active_rules[match.rule.name]
                completed.append((match.rule, record))
            else:
                builder = match.builders.pop()
                match.builders[-1].add_child(builder.name, builder.finalize(self.config))
                remaining.append(match)
        self._matches = remaining
        return completed

    def discard(self) -> int:
        """Abandon every open match without emitting anything."""
        dropped = len(self._matches)
        self._matches = []
        self._active_rules.clear()
        self.buffered_nodes = 0
        return dropped
