"""lxml-backed token source.

Reads an XML document in fixed-size chunks and pushes it through an lxml
``XMLParser`` with a parser target, turning its callbacks into start/text/end
events. Only the events of the chunk being processed are buffered.
"""

import io
import os
from collections import deque
from dataclasses import replace
from pathlib import Path
from typing import IO, Any, Callable, Deque, Dict, Iterator, Optional, Union

from lxml import etree

from commerceml_stream.shared.config import StreamingConfig
from commerceml_stream.shared.errors import TokenizerError
from commerceml_stream.shared.logging import get_logger

from .events import EndElement, Event, StartElement, Text

SourceType = Union[str, os.PathLike, bytes, IO[bytes]]

ProgressCallback = Callable[[int, int], None]


def local_name(name: str) -> str:
    """Strip a ``{namespace}`` prefix from an lxml tag or attribute name."""
    if name[:1] == "{":
        return name.rsplit("}", 1)[1]
    return name


def _keep_name(name: str) -> str:
    return name


class _EventTarget:
    """Parser target collecting lxml callbacks as events."""

    def __init__(self, keep_namespaces: bool) -> None:
        self.events: Deque[Event] = deque()
        self._name = _keep_name if keep_namespaces else local_name

    def start(self, tag: str, attrib: Dict[str, str]) -> None:
        name = self._name
        self.events.append(
            StartElement(name(tag), tuple((name(k), v) for k, v in attrib.items()))
        )

    def end(self, tag: str) -> None:
        self.events.append(EndElement(self._name(tag)))

    def data(self, data: str) -> None:
        self.events.append(Text(data))

    def comment(self, text: str) -> None:
        pass

    def pi(self, target: str, data: Optional[str] = None) -> None:
        pass

    def close(self) -> None:
        return None


class LxmlEventSource:
    """Token source reading XML incrementally through lxml.

    Args:
        source: File path, raw bytes or a binary file object
        config: Streaming configuration (chunk size, encoding override,
            namespace handling)
        progress_callback: Called as ``callback(bytes_read, events_yielded)``
            every ``config.progress_callback_interval`` events
        correlation_id: Correlation ID for logging

    Example:
        >>> source = LxmlEventSource(Path("offers.xml"))
        >>> for event in source.iter_events():
        ...     print(event)
    """

    def __init__(
        self,
        source: SourceType,
        config: Optional[StreamingConfig] = None,
        progress_callback: Optional[ProgressCallback] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.source = source
        self.config = config or StreamingConfig()
        self.progress_callback = progress_callback
        self.logger = get_logger(__name__, correlation_id, "lxml_source")
        self.bytes_read = 0
        self.events_yielded = 0
        self._cancelled = False

    @classmethod
    def from_string(
        cls,
        text: str,
        config: Optional[StreamingConfig] = None,
        **kwargs: Any
    ) -> "LxmlEventSource":
        """Create a source over XML held in a string.

        The text is encoded as UTF-8 and any encoding declaration in it is
        overridden accordingly.
        """
        config = config or StreamingConfig()
        if config.encoding is None:
            config = replace(config, encoding="utf-8")
        return cls(text.encode("utf-8"), config, **kwargs)

    def cancel(self) -> None:
        """Stop reading after the event currently being yielded."""
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _open(self) -> IO[bytes]:
        if isinstance(self.source, bytes):
            return io.BytesIO(self.source)
        if isinstance(self.source, (str, os.PathLike)):
            return Path(self.source).open("rb")
        if hasattr(self.source, "read"):
            return self.source
        raise TypeError(f"Unsupported XML source type: {type(self.source).__name__}")

    def _make_parser(self, target: _EventTarget) -> "etree.XMLParser":
        return etree.XMLParser(
            target=target,
            encoding=self.config.encoding,
            resolve_entities=False,
            no_network=True,
            huge_tree=True,
        )

    def iter_events(self) -> Iterator[Event]:
        """Yield events lazily, one chunk of input at a time.

        Events parsed before a syntax error are still yielded before the error
        is raised.

        Raises:
            TokenizerError: If lxml rejects the document
        """
        target = _EventTarget(self.config.keep_namespaces)
        parser = self._make_parser(target)
        stream = self._open()
        owns_stream = stream is not self.source
        self.logger.info(
            "Reading XML source",
            extra={
                "chunk_size": self.config.chunk_size,
                "source_type": type(self.source).__name__,
            },
        )
        try:
            while not self._cancelled:
                chunk = stream.read(self.config.chunk_size)
                if not chunk:
                    break
                self.bytes_read += len(chunk)
                yield from self._feed_and_drain(parser, target, chunk)
            if not self._cancelled:
                yield from self._feed_and_drain(parser, target, None)
        finally:
            if owns_stream:
                stream.close()
            self.logger.info(
                "Finished reading XML source",
                extra={
                    "bytes_read": self.bytes_read,
                    "events_yielded": self.events_yielded,
                    "cancelled": self._cancelled,
                },
            )

    def _feed_and_drain(
        self,
        parser: "etree.XMLParser",
        target: _EventTarget,
        chunk: Optional[bytes]
    ) -> Iterator[Event]:
        try:
            if chunk is None:
                parser.close()
            else:
                parser.feed(chunk)
        except etree.XMLSyntaxError as e:
            yield from self._drain(target)
            line, column = e.position if e.position else (None, None)
            self.logger.error(
                "XML syntax error",
                extra={"error": str(e), "line": line, "column": column},
            )
            raise TokenizerError(f"Malformed XML: {e}", line=line, column=column) from e
        yield from self._drain(target)

    def _drain(self, target: _EventTarget) -> Iterator[Event]:
        events = target.events
        interval = self.config.progress_callback_interval
        while events and not self._cancelled:
            yield events.popleft()
            self.events_yielded += 1
            if self.progress_callback and self.events_yielded % interval == 0:
                self.progress_callback(self.bytes_read, self.events_yielded)
        events.clear()

    def run(self, parser: Any) -> None:
        """Push every event into ``parser`` and close it at end of input.

        ``parser`` is a :class:`~commerceml_stream.streaming.StreamingRuleParser`.
        Cancelling either the source or the parser stops the run without
        closing the parser.
        """
        events = self.iter_events()
        try:
            for event in events:
                parser.dispatch(event)
                if parser.cancelled:
                    self.cancel()
        except TokenizerError as e:
            parser.abort(e)
            raise
        finally:
            events.close()
            parser.metrics.bytes_read = self.bytes_read
        if not self._cancelled:
            parser.close()
