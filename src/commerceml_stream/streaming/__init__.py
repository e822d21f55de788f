"""Streaming rule-matching engine.

Key Components:
    StreamingRuleParser: Consumes start/text/end events and emits matched subtrees
    Rule / RuleTable: Start paths and include paths that drive collection
    PathStack: Currently open element names
    SubtreeCollector: Builds records for active matches
    Dispatcher: Delivers finished records to listeners
    ElementNode / TextNode / Single / Many: Emitted record structure
"""

from .collector import ActiveMatch, SubtreeCollector
from .dispatcher import Dispatcher, Listener
from .nodes import (
    Child,
    ElementNode,
    Many,
    Node,
    Single,
    TextNode,
    node_text,
)
from .parser import StreamingRuleParser
from .path_stack import Path, PathStack
from .rules import Rule, RuleTable, format_path, parse_path

__all__ = [
    "ActiveMatch",
    "Child",
    "Dispatcher",
    "ElementNode",
    "Listener",
    "Many",
    "Node",
    "Path",
    "PathStack",
    "Rule",
    "RuleTable",
    "Single",
    "StreamingRuleParser",
    "SubtreeCollector",
    "TextNode",
    "format_path",
    "node_text",
    "parse_path",
]
