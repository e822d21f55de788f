"""Streaming, path-based rule-matching parser.

:class:`StreamingRuleParser` consumes start/text/end events in one pass. After
every start tag it activates the rules whose start path equals the current path,
routes retained events into each open match, and emits a finished record to the
rule's listeners the moment the match's closing tag is processed.

Example:
    >>> parser = StreamingRuleParser()
    >>> parser.add_rule("item", "/catalog/item")
    >>> parser.on("item", print)
    >>> parser.feed(events)
    >>> parser.close()
"""

import time
from typing import Iterable, List, Optional, Sequence, Tuple

from commerceml_stream.shared.config import ParserConfig
from commerceml_stream.shared.errors import (
    ReentrancyError,
    StreamParserError,
    StructuralError,
)
from commerceml_stream.shared.logging import get_logger
from commerceml_stream.shared.result import StreamMetrics
from commerceml_stream.tokenization.events import Event, EventType
from commerceml_stream.tools.memory import MemoryTracker

from .collector import ActiveMatch, SubtreeCollector
from .dispatcher import Dispatcher, Listener
from .nodes import ElementNode
from .path_stack import Path, PathStack
from .rules import PathLike, Rule, RuleTable

MS_PER_SECOND = 1000


class StreamingRuleParser:
    """Single-document streaming parser driven by collection rules.

    One instance handles one document. State is private to the instance, so
    separate instances may run on separate threads without coordination.
    """

    def __init__(
        self,
        rules: Optional[Iterable[Rule]] = None,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the parser.

        Args:
            rules: Rules to register up front
            config: Parser configuration; defaults to ``ParserConfig()``
            correlation_id: Correlation ID for logging, overriding the config's
        """
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id or self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "streaming_parser")

        self.rules = RuleTable(rules)
        self.dispatcher = Dispatcher(self.logger.child("dispatcher"))
        self._stack = PathStack(self.config.collector.max_depth)
        self._collector = SubtreeCollector(self.config.collector)
        self.metrics = StreamMetrics()

        self._memory: Optional[MemoryTracker] = None
        if self.config.streaming.enable_memory_tracking:
            self._memory = MemoryTracker(
                self.config.streaming.memory_sample_interval,
                correlation_id=self.correlation_id,
            )

        self._started_at: Optional[float] = None
        self._dispatching = False
        self._failure: Optional[StreamParserError] = None
        self._cancelled = False
        self._closed = False

    # Configuration surface

    def register(self, rule: Rule) -> Rule:
        """Register a rule before streaming starts."""
        self.rules.register(rule)
        return rule

    def add_rule(
        self,
        name: str,
        start: PathLike,
        include: Optional[Iterable[PathLike]] = None
    ) -> Rule:
        """Build and register a rule from absolute paths."""
        return self.register(Rule.from_paths(name, start, include))

    def on(self, rule_name: str, handler: Listener) -> None:
        """Register a listener; allowed until the record it should receive completes."""
        if rule_name not in self.rules:
            self.logger.warning(
                "Listener registered for unknown rule", extra={"rule": rule_name}
            )
        self.dispatcher.on(rule_name, handler)

    def off(self, rule_name: str, handler: Listener) -> bool:
        return self.dispatcher.off(rule_name, handler)

    # State

    @property
    def depth(self) -> int:
        return self._stack.depth

    @property
    def path(self) -> Path:
        return self._stack.current()

    @property
    def active_matches(self) -> List[ActiveMatch]:
        return self._collector.active

    @property
    def failed(self) -> bool:
        return self._failure is not None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def closed(self) -> bool:
        return self._closed

    # Token source contract

    def start_element(self, name: str, attributes: Sequence[Tuple[str, str]] = ()) -> None:
        """Process an opening tag."""
        if not self._accepting():
            return
        try:
            self._stack.push(name)
        except StructuralError as e:
            self._fail(e)
            raise

        path = self._stack.current()
        self._collector.start(path, attributes)
        for rule in self.rules.match(path):
            self._collector.activate(rule, name, attributes)
            self.metrics.matches_activated += 1
            if self.logger.is_debug_enabled():
                self.logger.debug("Rule activated", extra={"rule": rule.name})

        metrics = self.metrics
        metrics.elements_seen += 1
        if len(path) > metrics.max_depth:
            metrics.max_depth = len(path)
        if len(self._collector) > metrics.peak_active_matches:
            metrics.peak_active_matches = len(self._collector)
        if self._collector.buffered_nodes > metrics.peak_buffered_nodes:
            metrics.peak_buffered_nodes = self._collector.buffered_nodes
        self._count_event()

    def text(self, content: str) -> None:
        """Process character content."""
        if not self._accepting():
            return
        if self._stack.depth:
            self._collector.text(content)
        self.metrics.text_events += 1
        self._count_event()

    def end_element(self, name: str) -> None:
        """Process a closing tag, emitting every match it completes."""
        if not self._accepting():
            return
        depth = self._stack.depth
        try:
            self._stack.pop(name)
        except StructuralError as e:
            self._fail(e)
            raise

        completed = self._collector.end(depth)
        self._count_event()
        for rule, record in completed:
            self._emit(rule, record)

    def feed(self, events: Iterable[Event]) -> None:
        """Process a sequence of events in order."""
        for event in events:
            self.dispatch(event)
            if self._cancelled:
                break

    def dispatch(self, event: Event) -> None:
        """Process a single event object."""
        if event.type is EventType.START_ELEMENT:
            self.start_element(event.name, event.attributes)
        elif event.type is EventType.TEXT:
            self.text(event.content)
        else:
            self.end_element(event.name)

    # Run control

    def close(self) -> StreamMetrics:
        """Finish the document.

        Raises:
            StructuralError: If elements are still open
        """
        if self._failure is not None:
            raise StreamParserError(f"Parser has failed: {self._failure}")
        if self._closed or self._cancelled:
            return self.metrics
        if self._stack.depth:
            error = StructuralError(
                f"Input ended with {self._stack.depth} open element(s)",
                expected=self._stack.top,
                path=self._stack.current(),
            )
            self._fail(error)
            raise error

        self._closed = True
        self._finish_metrics()
        self.logger.info(
            "Streaming run completed",
            extra={
                "events_processed": self.metrics.events_processed,
                "records_emitted": self.metrics.total_records,
                "processing_time_ms": self.metrics.processing_time_ms,
            },
        )
        return self.metrics

    def cancel(self) -> None:
        """Stop the run; open matches are dropped and later events ignored."""
        if self._cancelled or self._closed:
            return
        self._cancelled = True
        dropped = self._collector.discard()
        self._finish_metrics()
        self.logger.info("Streaming run cancelled", extra={"dropped_matches": dropped})

    def abort(self, error: StreamParserError) -> None:
        """Fail the run on an error raised outside the engine, such as by the token source.

        Open matches are discarded and later events raise.
        """
        if self._failure is None:
            self._fail(error)

    # Internals

    def _accepting(self) -> bool:
        if self._dispatching:
            raise ReentrancyError("Listeners must not feed events into their own parser")
        if self._failure is not None:
            raise StreamParserError(f"Parser has failed: {self._failure}")
        if self._closed:
            raise StreamParserError("Parser is closed")
        if self._cancelled:
            return False
        if self._started_at is None:
            self._start_run()
        return True

    def _start_run(self) -> None:
        self._started_at = time.time()
        self.rules.freeze()
        self.logger.info(
            "Streaming run started",
            extra={"rule_count": len(self.rules), "rules": [r.name for r in self.rules]},
        )

    def _count_event(self) -> None:
        self.metrics.events_processed += 1
        if self._memory is not None:
            self._memory.maybe_sample(self.metrics.events_processed)

    def _emit(self, rule: Rule, record: ElementNode) -> None:
        self.metrics.record_emission(rule.name)
        if self.logger.is_debug_enabled():
            self.logger.debug("Record completed", extra={"rule": rule.name})
        self._dispatching = True
        try:
            self.dispatcher.emit(rule.name, record)
        except StreamParserError as e:
            self._fail(e)
            raise
        finally:
            self._dispatching = False

    def _fail(self, error: StreamParserError) -> None:
        self._failure = error
        dropped = self._collector.discard()
        self._finish_metrics()
        self.logger.error(
            "Streaming run aborted",
            extra={
                "error": str(error),
                "error_type": type(error).__name__,
                "dropped_matches": dropped,
            },
        )

    def _finish_metrics(self) -> None:
        if self._started_at is not None:
            self.metrics.processing_time_ms = (
                (time.time() - self._started_at) * MS_PER_SECOND
            )
        if self._memory is not None:
            self._memory.sample(self.metrics.events_processed)
            self.metrics.peak_rss_mb = self._memory.peak_mb
