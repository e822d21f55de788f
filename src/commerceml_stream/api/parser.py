"""High-level parsing helpers returning complete run results.

These helpers wire a :class:`StreamingRuleParser` to a token source, collect
every emitted record per rule, and report failures through
:class:`RunResult` instead of raising. Use the engine directly when records
should be handled one at a time as they complete.
"""

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

from commerceml_stream.shared import (
    DiagnosticSeverity,
    ParserConfig,
    RunResult,
    StreamParserError,
    get_logger,
)
from commerceml_stream.streaming import ElementNode, Rule, StreamingRuleParser
from commerceml_stream.tokenization import Event, LxmlEventSource

RecordHandler = Callable[[str, ElementNode], None]


def _build_parser(
    rules: Iterable[Rule],
    config: Optional[ParserConfig],
    correlation_id: Optional[str],
    result: RunResult,
    collect: bool,
    on_record: Optional[RecordHandler]
) -> StreamingRuleParser:
    parser = StreamingRuleParser(rules, config, correlation_id)
    for rule in parser.rules:
        bucket: List[ElementNode] = result.records.setdefault(rule.name, [])

        def handle(record: ElementNode, name: str = rule.name,
                   bucket: List[ElementNode] = bucket) -> None:
            if collect:
                bucket.append(record)
            if on_record is not None:
                on_record(name, record)

        parser.on(rule.name, handle)
    return parser


def _run(
    rules: Iterable[Rule],
    feed: Callable[[StreamingRuleParser], None],
    config: Optional[ParserConfig],
    correlation_id: Optional[str],
    collect: bool,
    on_record: Optional[RecordHandler],
    component: str
) -> RunResult:
    logger = get_logger(__name__, correlation_id, component)
    result = RunResult(correlation_id=correlation_id)
    parser = _build_parser(rules, config, correlation_id, result, collect, on_record)
    result.metrics = parser.metrics

    try:
        feed(parser)
    except StreamParserError as e:
        result.success = False
        result.error = e
        result.add_diagnostic(
            DiagnosticSeverity.ERROR,
            f"{type(e).__name__}: {e}",
            component,
        )
        logger.error("Run failed", extra={"error": str(e)})
    except OSError as e:
        result.success = False
        result.error = e
        result.add_diagnostic(
            DiagnosticSeverity.CRITICAL,
            f"Unable to read input: {e}",
            component,
        )
        logger.error("Input could not be read", extra={"error": str(e)})

    result.cancelled = parser.cancelled
    return result


def parse_events(
    rules: Iterable[Rule],
    events: Iterable[Event],
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
    collect: bool = True,
    on_record: Optional[RecordHandler] = None
) -> RunResult:
    """Run rules over an in-memory event sequence.

    Args:
        rules: Collection rules
        events: Start/text/end events in document order
        config: Optional parser configuration
        correlation_id: Optional correlation ID for logging
        collect: Keep every record in ``result.records``
        on_record: Called as ``on_record(rule_name, record)`` for each record

    Returns:
        RunResult with records grouped by rule name

    Examples:
        >>> from commerceml_stream.tokenization import element
        >>> rule = Rule.from_paths("a", ["A"], [["A", "B"]])
        >>> result = parse_events([rule], element("A", element("B", "x")))
        >>> result.records["a"][0].to_dict()
        {'B': 'x'}
    """
    def feed(parser: StreamingRuleParser) -> None:
        parser.feed(events)
        parser.close()

    return _run(rules, feed, config, correlation_id, collect, on_record, "parse_events")


def parse_file(
    path: Union[str, Path],
    rules: Iterable[Rule],
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
    collect: bool = True,
    on_record: Optional[RecordHandler] = None
) -> RunResult:
    """Stream an XML file through the rules.

    Pass ``collect=False`` with ``on_record`` to handle records without
    keeping them, which keeps memory bounded on large files.
    """
    config = config or ParserConfig()

    def feed(parser: StreamingRuleParser) -> None:
        LxmlEventSource(Path(path), config.streaming, correlation_id=correlation_id).run(parser)

    return _run(rules, feed, config, correlation_id, collect, on_record, "parse_file")


def parse_string(
    xml_string: str,
    rules: Iterable[Rule],
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
    collect: bool = True,
    on_record: Optional[RecordHandler] = None
) -> RunResult:
    """Stream XML held in a string through the rules."""
    config = config or ParserConfig()

    def feed(parser: StreamingRuleParser) -> None:
        source = LxmlEventSource.from_string(
            xml_string, config.streaming, correlation_id=correlation_id
        )
        source.run(parser)

    return _run(rules, feed, config, correlation_id, collect, on_record, "parse_string")


def records_as_dicts(result: RunResult) -> Dict[str, List[object]]:
    """Render every collected record as plain Python data."""
    return {
        name: [record.to_dict() for record in records]
        for name, records in result.records.items()
    }
