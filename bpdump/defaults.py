"""Textual rendering of stored property values.

Values form a tree: plain Python scalars at the leaves and the container
records below for structs, arrays, sets and maps.  Rendering never fails; a
struct whose layout could not be resolved degrades to its type name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, Union

INDENT = "  "


@dataclass(frozen=True)
class PropertyTag:
    """A named property value, as stored on an object or inside a struct."""

    name: str
    value: "PropertyValue"


@dataclass(frozen=True)
class StructValue:
    type_name: str
    properties: Tuple[PropertyTag, ...] = ()


@dataclass(frozen=True)
class OpaqueStruct:
    """Struct value whose field layout is unknown."""

    type_name: str


@dataclass(frozen=True)
class ArrayValue:
    elements: Tuple["PropertyValue", ...] = ()


@dataclass(frozen=True)
class SetValue:
    elements: Tuple["PropertyValue", ...] = ()


@dataclass(frozen=True)
class MapValue:
    entries: Tuple[Tuple["PropertyValue", "PropertyValue"], ...] = ()


PropertyValue = Union[None, bool, int, float, str, StructValue, OpaqueStruct, ArrayValue, SetValue, MapValue]


def render_value(value: PropertyValue, indent: str = "") -> Optional[str]:
    """Render ``value``; nested lines are indented relative to ``indent``."""

    nested = indent + INDENT
    if isinstance(value, OpaqueStruct):
        return f"{{ {value.type_name} }}"
    if isinstance(value, StructValue):
        entries = [
            f"{prop.name} = {_text(render_value(prop.value, nested))}" for prop in value.properties
        ]
        return _block(entries, indent)
    if isinstance(value, (ArrayValue, SetValue)):
        return _block([_text(render_value(element, nested)) for element in value.elements], indent)
    if isinstance(value, MapValue):
        entries = [
            f"{_text(render_value(key, nested))} = {_text(render_value(item, nested))}"
            for key, item in value.entries
        ]
        return _block(entries, indent)
    return _scalar(value)


def _block(entries: Sequence[str], indent: str) -> str:
    if not entries:
        return "{ }"
    lines: List[str] = ["{"]
    last = len(entries) - 1
    for index, entry in enumerate(entries):
        separator = "," if index < last else ""
        lines.append(f"{indent}{INDENT}{entry}{separator}")
    lines.append(f"{indent}}}")
    return "\n".join(lines)


def _scalar(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, float):
        text = repr(value)
        return text[:-2] if text.endswith(".0") else text
    return str(value)


def _text(value: Optional[str]) -> str:
    return "" if value is None else value
