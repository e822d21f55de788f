"""Exception hierarchy for streaming CommerceML parsing.

All errors raised by the library derive from :class:`StreamParserError`, so callers
can catch the whole family with a single ``except`` clause.
"""

from typing import Any, Optional, Sequence, Tuple


class StreamParserError(Exception):
    """Base exception for all library errors."""


class StructuralError(StreamParserError):
    """Raised when the event stream is not properly nested.

    Covers a closing tag that does not match the open tag, a closing tag with no
    open element, nesting beyond the configured depth limit and input that ends
    while elements are still open.
    """

    def __init__(
        self,
        message: str,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
        path: Sequence[str] = ()
    ) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual
        self.path: Tuple[str, ...] = tuple(path)


class ListenerError(StreamParserError):
    """Raised when a registered listener fails while handling a record.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, rule_name: str, handler: Any, original: BaseException) -> None:
        handler_name = getattr(handler, "__qualname__", repr(handler))
        super().__init__(
            f"Listener {handler_name} for rule '{rule_name}' failed: {original}"
        )
        self.rule_name = rule_name
        self.handler = handler
        self.original = original


class RuleError(StreamParserError):
    """Raised for an invalid rule definition or illegal rule table change."""


class DuplicateRuleError(RuleError):
    """Raised when a rule name is registered twice."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Rule '{name}' is already registered")
        self.name = name


class ReentrancyError(StreamParserError):
    """Raised when a listener feeds events into the parser that is calling it."""


class TokenizerError(StreamParserError):
    """Raised when the XML tokenizer rejects its input."""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class MappingError(StreamParserError):
    """Raised when a collected record lacks a required field or has the wrong shape."""

    def __init__(self, message: str, field_path: str = "") -> None:
        super().__init__(f"{field_path}: {message}" if field_path else message)
        self.field_path = field_path
