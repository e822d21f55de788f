"""Token sources for the streaming rule parser.

Key Components:
    StartElement / Text / EndElement: Events of the token source contract
    EventType: Enumeration of event kinds
    LxmlEventSource: Incremental lxml-backed source for files, bytes and streams
"""

from .events import (
    EndElement,
    Event,
    EventType,
    StartElement,
    Text,
    element,
    iter_events,
    replay,
)
from .lxml_source import LxmlEventSource, local_name

__all__ = [
    "EndElement",
    "Event",
    "EventType",
    "LxmlEventSource",
    "StartElement",
    "Text",
    "element",
    "iter_events",
    "local_name",
    "replay",
]
