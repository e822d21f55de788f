"""Typed field extraction from collected records.

Every accessor states whether a field is required. Required fields that are
absent raise :class:`MappingError`; optional ones return ``None``. No accessor
substitutes a default value.
"""

from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from commerceml_stream.shared.errors import MappingError
from commerceml_stream.streaming.nodes import Child, ElementNode, Node

TRUE_VALUES = {"true", "1", "да"}
FALSE_VALUES = {"false", "0", "нет"}


def _path(parent: ElementNode, name: str) -> str:
    return f"{parent.name}/{name}"


def optional_node(parent: ElementNode, name: str) -> Optional[Node]:
    """The single child ``name`` of ``parent``, or ``None`` when absent.

    Raises:
        MappingError: If the child occurs more than once
    """
    slot = parent.get(name)
    if slot is None:
        return None
    if len(slot) > 1:
        raise MappingError(f"expected one element, found {len(slot)}", _path(parent, name))
    return slot.first


def require_node(parent: ElementNode, name: str) -> Node:
    node = optional_node(parent, name)
    if node is None:
        raise MappingError("required element is missing", _path(parent, name))
    return node


def optional_element(parent: ElementNode, name: str) -> Optional[ElementNode]:
    """The child ``name`` as a structured element.

    An empty leaf (``<Налог/>``) counts as absent.

    Raises:
        MappingError: If the child is a leaf with text where structure is expected
    """
    node = optional_node(parent, name)
    if node is None or isinstance(node, ElementNode):
        return node
    if node.value == "":
        return None
    raise MappingError("expected a structured element, found text", _path(parent, name))


def require_element(parent: ElementNode, name: str) -> ElementNode:
    element = optional_element(parent, name)
    if element is None:
        raise MappingError("required element is missing", _path(parent, name))
    return element


def elements(parent: Optional[ElementNode], name: str) -> List[ElementNode]:
    """Every structured child ``name``, in document order.

    Raises:
        MappingError: If one of the children is a non-empty text leaf
    """
    if parent is None:
        return []
    result = []
    for node in parent.all(name):
        if isinstance(node, ElementNode):
            result.append(node)
        elif node.value:
            raise MappingError("expected a structured element, found text", _path(parent, name))
    return result


def optional_text(parent: ElementNode, name: str) -> Optional[str]:
    node = optional_node(parent, name)
    if node is None:
        return None
    return node.text


def require_text(parent: ElementNode, name: str) -> str:
    value = optional_text(parent, name)
    if value is None:
        raise MappingError("required value is missing", _path(parent, name))
    return value


def attribute(node: Optional[Node], name: str) -> Optional[str]:
    """Attribute ``name`` of ``node``; leaves carry no attributes."""
    if isinstance(node, ElementNode):
        return node.attributes.get(name)
    return None


def require_attribute(node: ElementNode, name: str) -> str:
    value = node.attributes.get(name)
    if value is None:
        raise MappingError("required attribute is missing", f"{node.name}@{name}")
    return value


# Value conversions


def to_decimal(value: Optional[str], field_path: str = "") -> Optional[Decimal]:
    """Parse a decimal number; comma decimal separators are accepted."""
    if value is None or value == "":
        return None
    try:
        return Decimal(value.replace(",", ".").replace(" ", ""))
    except InvalidOperation as e:
        raise MappingError(f"not a number: {value!r}", field_path) from e


def to_int(value: Optional[str], field_path: str = "") -> Optional[int]:
    """Parse an integer, truncating a fractional part such as ``"10.000"``."""
    number = to_decimal(value, field_path)
    if number is None:
        return None
    return int(number)


def to_bool(value: Optional[str], field_path: str = "") -> Optional[bool]:
    if value is None or value == "":
        return None
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise MappingError(f"not a boolean: {value!r}", field_path)


def to_datetime(value: Optional[str], field_path: str = "") -> Optional[datetime]:
    if value is None or value == "":
        return None
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError as e:
        raise MappingError(f"not an ISO date/time: {value!r}", field_path) from e


def to_date(value: Optional[str], field_path: str = "") -> Optional[date]:
    parsed = to_datetime(value, field_path)
    return parsed.date() if parsed is not None else None


def to_time(value: Optional[str], field_path: str = "") -> Optional[time]:
    if value is None or value == "":
        return None
    try:
        return time.fromisoformat(value.strip())
    except ValueError as e:
        raise MappingError(f"not an ISO time: {value!r}", field_path) from e


def as_list(slot: Optional[Child]) -> List[Node]:
    """Nodes of a child slot in document order; empty when absent."""
    if slot is None:
        return []
    return slot.as_list()


# Typed child values


def optional_decimal(parent: ElementNode, name: str) -> Optional[Decimal]:
    return to_decimal(optional_text(parent, name), _path(parent, name))


def optional_float(parent: ElementNode, name: str) -> Optional[float]:
    value = optional_decimal(parent, name)
    return float(value) if value is not None else None


def optional_int(parent: ElementNode, name: str) -> Optional[int]:
    return to_int(optional_text(parent, name), _path(parent, name))


def optional_bool(parent: ElementNode, name: str) -> Optional[bool]:
    return to_bool(optional_text(parent, name), _path(parent, name))


def optional_datetime(parent: ElementNode, name: str) -> Optional[datetime]:
    return to_datetime(optional_text(parent, name), _path(parent, name))
