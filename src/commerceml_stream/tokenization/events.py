"""Token events consumed by the streaming rule parser.

A token source produces an ordered, single-pass sequence of three event kinds:
element start (with attributes in source order), character text and element end.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Iterable, Iterator, List, Tuple, Union


class EventType(Enum):
    """Event kinds produced by a token source."""

    START_ELEMENT = auto()
    TEXT = auto()
    END_ELEMENT = auto()


@dataclass(frozen=True)
class StartElement:
    """Opening tag with its attributes in source order."""

    name: str
    attributes: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Element name cannot be empty")

    @property
    def type(self) -> EventType:
        return EventType.START_ELEMENT


@dataclass(frozen=True)
class Text:
    """Character content between tags."""

    content: str

    @property
    def type(self) -> EventType:
        return EventType.TEXT


@dataclass(frozen=True)
class EndElement:
    """Closing tag."""

    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Element name cannot be empty")

    @property
    def type(self) -> EventType:
        return EventType.END_ELEMENT


Event = Union[StartElement, Text, EndElement]


def element(name: str, /, *children: Union[str, List[Event]], **attributes: str) -> List[Event]:
    """Build the events of one element, mostly for tests and examples.

    String children become text events; lists are nested element events.

    Example:
        >>> element("A", element("B", "x"), element("B", "y"))
    """
    events: List[Event] = [StartElement(name, tuple(attributes.items()))]
    for child in children:
        if isinstance(child, str):
            events.append(Text(child))
        else:
            events.extend(child)
    events.append(EndElement(name))
    return events


def iter_events(groups: Iterable[Iterable[Event]]) -> Iterator[Event]:
    """Flatten several event sequences into one stream."""
    for group in groups:
        yield from group


def replay(events: Iterable[Event], parser: Any) -> None:
    """Feed recorded events into ``parser`` one at a time, stopping on cancel."""
    for event in events:
        parser.dispatch(event)
        if parser.cancelled:
            break
