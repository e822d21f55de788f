"""Tests for the lxml-backed token source."""

import io
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from commerceml_stream.shared.config import StreamingConfig
from commerceml_stream.shared.errors import StreamParserError, StructuralError, TokenizerError
from commerceml_stream.streaming import StreamingRuleParser
from commerceml_stream.tokenization.events import EndElement, StartElement, Text
from commerceml_stream.tokenization.lxml_source import LxmlEventSource, local_name

SAMPLE = """<?xml version="1.0" encoding="UTF-8"?>
<!-- header comment -->
<catalog version="2">
  <?pi data?>
  <item id="1"><name>First</name></item>
  <item id="2"><name><![CDATA[Second & more]]></name></item>
</catalog>
"""


def _collect_items(source: LxmlEventSource) -> list:
    parser = StreamingRuleParser()
    parser.add_rule("item", "/catalog/item")
    records: list = []
    parser.on("item", records.append)
    source.run(parser)
    return records


class TestLocalName:
    """Test namespace stripping."""

    def test_strips_namespace(self) -> None:
        assert local_name("{urn:1C.ru:commerceml_2}Предложение") == "Предложение"

    def test_plain_name_unchanged(self) -> None:
        assert local_name("item") == "item"


class TestLxmlEventSource:
    """Test event production from different inputs."""

    def test_events_from_string(self) -> None:
        events = list(LxmlEventSource.from_string("<a x='1'>t<b/></a>").iter_events())
        assert events == [
            StartElement("a", (("x", "1"),)),
            Text("t"),
            StartElement("b"),
            EndElement("b"),
            EndElement("a"),
        ]

    def test_comments_and_pis_dropped_cdata_kept(self) -> None:
        records = _collect_items(LxmlEventSource.from_string(SAMPLE))
        assert [r.attribute("id") for r in records] == ["1", "2"]
        assert records[1].first("name").text == "Second & more"

    def test_small_chunks_give_same_records(self) -> None:
        config = StreamingConfig(chunk_size=7)
        chunked = _collect_items(LxmlEventSource.from_string(SAMPLE, config))
        whole = _collect_items(LxmlEventSource.from_string(SAMPLE))
        assert [r.to_dict() for r in chunked] == [r.to_dict() for r in whole]

    def test_reads_file_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "catalog.xml"
            path.write_text(SAMPLE, encoding="utf-8")
            source = LxmlEventSource(path)
            records = _collect_items(source)
        assert len(records) == 2
        assert source.bytes_read == len(SAMPLE.encode("utf-8"))

    def test_reads_binary_stream(self) -> None:
        stream = io.BytesIO(SAMPLE.encode("utf-8"))
        records = _collect_items(LxmlEventSource(stream))
        assert len(records) == 2
        assert not stream.closed

    def test_windows_1251_document(self) -> None:
        xml = '<?xml version="1.0" encoding="windows-1251"?><Склад><Ид>1</Ид></Склад>'
        events = list(LxmlEventSource(xml.encode("cp1251")).iter_events())
        assert events[0] == StartElement("Склад")
        assert Text("1") in events

    def test_namespaces_stripped_by_default(self) -> None:
        xml = '<c:root xmlns:c="urn:x" c:attr="v"><c:child/></c:root>'
        events = list(LxmlEventSource.from_string(xml).iter_events())
        assert events[0] == StartElement("root", (("attr", "v"),))
        assert events[1] == StartElement("child")

    def test_namespaces_kept_on_request(self) -> None:
        xml = '<root xmlns="urn:x"/>'
        config = StreamingConfig(keep_namespaces=True)
        events = list(LxmlEventSource.from_string(xml, config).iter_events())
        assert events[0] == StartElement("{urn:x}root")

    def test_malformed_xml_raises_tokenizer_error(self) -> None:
        source = LxmlEventSource.from_string("<a><b></a>")
        with pytest.raises(TokenizerError) as exc_info:
            list(source.iter_events())
        assert exc_info.value.line == 1

    def test_records_before_syntax_error_are_delivered(self) -> None:
        xml = "<catalog><item id='1'/><item id='2'></catalog>"
        parser = StreamingRuleParser()
        parser.add_rule("item", "/catalog/item")
        records: list = []
        parser.on("item", records.append)
        with pytest.raises(TokenizerError):
            LxmlEventSource.from_string(xml).run(parser)
        assert [r.attribute("id") for r in records] == ["1"]

    def test_syntax_error_fails_parser(self) -> None:
        parser = StreamingRuleParser()
        parser.add_rule("item", "/A")
        source = LxmlEventSource(b"<A><B>x</B></X>", StreamingConfig(chunk_size=3))
        with pytest.raises(TokenizerError):
            source.run(parser)

        assert parser.failed
        assert parser.active_matches == []
        with pytest.raises(StreamParserError, match="failed"):
            parser.start_element("Z")

    def test_truncated_document(self) -> None:
        with pytest.raises(TokenizerError):
            list(LxmlEventSource.from_string("<a><b>").iter_events())

    def test_unsupported_source(self) -> None:
        with pytest.raises(TypeError, match="Unsupported XML source"):
            list(LxmlEventSource(12345).iter_events())

    def test_progress_callback(self) -> None:
        callback = MagicMock()
        config = StreamingConfig(progress_callback_interval=2)
        source = LxmlEventSource.from_string("<a><b/><c/></a>", config, progress_callback=callback)
        list(source.iter_events())
        assert callback.call_count == 3
        assert callback.call_args[0][1] == 6

    def test_cancel_stops_run(self) -> None:
        parser = StreamingRuleParser()
        parser.add_rule("item", "/catalog/item")
        records: list = []

        def handle(record: object) -> None:
            records.append(record)
            parser.cancel()

        parser.on("item", handle)
        source = LxmlEventSource.from_string(SAMPLE)
        source.run(parser)
        assert len(records) == 1
        assert source.cancelled
        assert not parser.closed

    def test_run_closes_parser(self) -> None:
        parser = StreamingRuleParser()
        LxmlEventSource.from_string(SAMPLE).run(parser)
        assert parser.closed
        assert parser.metrics.bytes_read > 0
        assert parser.metrics.elements_seen == 5

    def test_structural_errors_from_direct_feed_are_distinct(self) -> None:
        # lxml itself rejects mismatched tags, so only hand-fed events reach the engine check
        parser = StreamingRuleParser()
        parser.start_element("A")
        with pytest.raises(StructuralError):
            parser.end_element("B")
