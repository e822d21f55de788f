"""Collected node types emitted by the streaming engine.

A collected subtree is a schema-free tree of :class:`TextNode` and
:class:`ElementNode` values. A child slot is the tagged variant
:class:`Single` or :class:`Many`; ``Many`` appears only when the same element
name occurs more than once under one parent. All nodes are immutable once
emitted.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

ATTRIBUTES_KEY = "attributes"
TEXT_KEY = "text"


@dataclass(frozen=True)
class TextNode:
    """Leaf element without attributes or children, reduced to its text."""

    value: str

    @property
    def text(self) -> str:
        return self.value

    def to_dict(self) -> str:
        return self.value


@dataclass(frozen=True)
class Single:
    """Child slot holding the only occurrence of a name."""

    node: "Node"

    def as_list(self) -> List["Node"]:
        return [self.node]

    @property
    def first(self) -> "Node":
        return self.node

    def __len__(self) -> int:
        return 1

    def to_dict(self) -> Any:
        return self.node.to_dict()


@dataclass(frozen=True)
class Many:
    """Child slot holding repeated occurrences of a name, in document order."""

    nodes: Tuple["Node", ...]

    def __post_init__(self) -> None:
        if len(self.nodes) < 2:
            raise ValueError("Many requires at least two nodes")

    def as_list(self) -> List["Node"]:
        return list(self.nodes)

    @property
    def first(self) -> "Node":
        return self.nodes[0]

    def __len__(self) -> int:
        return len(self.nodes)

    def to_dict(self) -> Any:
        return [node.to_dict() for node in self.nodes]


Child = Union[Single, Many]


@dataclass(frozen=True)
class ElementNode:
    """Element with attributes, children or both.

    ``attributes`` and ``children`` are read-only mappings. ``text`` is set only
    when the element carries non-empty text alongside attributes or children.
    """

    name: str
    attributes: Mapping[str, str]
    children: Mapping[str, Child]
    text: Optional[str] = None

    @classmethod
    def build(
        cls,
        name: str,
        attributes: Dict[str, str],
        children: Dict[str, Child],
        text: Optional[str] = None
    ) -> "ElementNode":
        """Create a node that wraps the given dictionaries read-only."""
        return cls(name, MappingProxyType(attributes), MappingProxyType(children), text)

    def get(self, name: str) -> Optional[Child]:
        """Child slot for ``name``, or ``None`` when absent."""
        return self.children.get(name)

    def first(self, name: str) -> Optional["Node"]:
        """First child named ``name``, or ``None`` when absent."""
        slot = self.children.get(name)
        return slot.first if slot is not None else None

    def all(self, name: str) -> List["Node"]:
        """Every child named ``name`` in document order; empty when absent."""
        slot = self.children.get(name)
        return slot.as_list() if slot is not None else []

    def attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.children

    def __iter__(self) -> Iterator[str]:
        return iter(self.children)

    def to_dict(self) -> Dict[str, Any]:
        """Render as plain Python data.

        Attributes go under ``"attributes"`` and mixed text under ``"text"``,
        each only when present.
        """
        result: Dict[str, Any] = {}
        if self.attributes:
            result[ATTRIBUTES_KEY] = dict(self.attributes)
        if self.text is not None:
            result[TEXT_KEY] = self.text
        for name, slot in self.children.items():
            result[name] = slot.to_dict()
        return result


Node = Union[TextNode, ElementNode]


def node_text(node: Optional[Node]) -> Optional[str]:
    """Text carried by a node of either kind."""
    if node is None:
        return None
    return node.text
