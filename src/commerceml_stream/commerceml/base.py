"""Shared machinery for the CommerceML document parsers.

A document parser owns one :class:`StreamingRuleParser`, registers its rule
table on it and converts collected records into typed models before handing
them to user callbacks. A :class:`MappingError` raised while converting a record
aborts the run like any other listener failure.
"""

from typing import Any, Callable, ClassVar, Dict, Iterable, List, Optional, Tuple

from commerceml_stream.shared.config import ParserConfig
from commerceml_stream.shared.logging import get_logger
from commerceml_stream.shared.result import StreamMetrics
from commerceml_stream.streaming import ElementNode, Path, Rule, StreamingRuleParser
from commerceml_stream.tokenization import Event, LxmlEventSource, replay
from commerceml_stream.tokenization.lxml_source import ProgressCallback, SourceType

from . import fields, tags
from .models import CommercialInformation, CompanyInfo, Counterparty, PersonInfo

RuleSpec = Tuple[Path, Optional[List[Path]]]


def document_path(*names: str) -> Path:
    """Absolute path below the ``КоммерческаяИнформация`` root."""
    return (tags.COMMERCIAL_INFORMATION,) + names


def map_commercial_information(record: ElementNode) -> CommercialInformation:
    return CommercialInformation(
        schema_version=fields.require_attribute(record, tags.SCHEMA_VERSION),
        creation_timestamp=fields.to_datetime(
            fields.attribute(record, tags.CREATION_DATE),
            f"{record.name}@{tags.CREATION_DATE}",
        ),
    )


def map_company_or_person(
    node: ElementNode
) -> Tuple[Optional[CompanyInfo], Optional[PersonInfo]]:
    """Company details when an official name is present, person details otherwise."""
    official_name = fields.optional_text(node, tags.OFFICIAL_NAME)
    if official_name is not None:
        company = CompanyInfo(
            official_name=official_name,
            inn=fields.optional_text(node, tags.INN),
            kpp=fields.optional_text(node, tags.KPP),
            okpo=fields.optional_text(node, tags.OKPO),
        )
        return company, None
    return None, PersonInfo(full_name=fields.optional_text(node, tags.FULL_NAME))


def map_counterparty(node: ElementNode) -> Counterparty:
    company, person = map_company_or_person(node)
    return Counterparty(
        id=fields.require_text(node, tags.ID),
        name=fields.require_text(node, tags.NAME),
        company_info=company,
        person_info=person,
    )


class CommerceMLParser:
    """Base class for CommerceML document parsers.

    Subclasses declare ``RULES`` as a mapping of rule name to
    ``(start_path, include_paths)`` with absolute paths, and expose ``on_*``
    methods that subscribe typed callbacks.
    """

    RULES: ClassVar[Dict[str, RuleSpec]] = {}

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id or self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, type(self).__name__)
        self.stream = StreamingRuleParser(self.build_rules(), self.config, self.correlation_id)
        self._source: Optional[LxmlEventSource] = None

    def build_rules(self) -> List[Rule]:
        return [
            Rule.from_paths(name, start, include)
            for name, (start, include) in self.RULES.items()
        ]

    def _subscribe(
        self,
        rule_name: str,
        mapper: Callable[[ElementNode], Any],
        callback: Callable[[Any], None]
    ) -> None:
        def handle(record: ElementNode) -> None:
            callback(mapper(record))

        self.stream.on(rule_name, handle)

    def on_commercial_information(
        self, callback: Callable[[CommercialInformation], None]
    ) -> None:
        """Receive the schema version and creation time of the document."""
        self._subscribe("commercial_information", map_commercial_information, callback)

    def parse(
        self,
        source: SourceType,
        progress_callback: Optional[ProgressCallback] = None
    ) -> StreamMetrics:
        """Stream a document from a path, bytes or binary file object.

        Callbacks fire while the document is read. Returns the run metrics.

        Raises:
            TokenizerError: If the XML is malformed
            ListenerError: If a callback or record mapping fails
            StructuralError: If the document ends with open elements
        """
        self._source = LxmlEventSource(
            source, self.config.streaming, progress_callback, self.correlation_id
        )
        self.logger.info("Parsing CommerceML document", extra={"rules": list(self.RULES)})
        self._source.run(self.stream)
        return self.stream.metrics

    def parse_string(self, text: str) -> StreamMetrics:
        self._source = LxmlEventSource.from_string(
            text, self.config.streaming, correlation_id=self.correlation_id
        )
        self._source.run(self.stream)
        return self.stream.metrics

    def feed(self, events: Iterable[Event]) -> None:
        """Push already tokenized events; call :meth:`close` at end of input."""
        replay(events, self.stream)

    def close(self) -> StreamMetrics:
        return self.stream.close()

    def cancel(self) -> None:
        """Stop parsing; records still being collected are dropped."""
        self.stream.cancel()
        if self._source is not None:
            self._source.cancel()

    @property
    def metrics(self) -> StreamMetrics:
        return self.stream.metrics
