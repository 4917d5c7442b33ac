"""Display names for property pointers and object references."""

from __future__ import annotations

from typing import Optional

from .nodes import ObjectRef, PropertyPointer


def resolve_property(pointer: Optional[PropertyPointer]) -> Optional[str]:
    """Join the segments of a property path with ``.``."""

    if pointer is None:
        return None
    return ".".join(pointer.path)


def resolve_object(ref: Optional[ObjectRef]) -> Optional[str]:
    """Return ``Outer::Name`` when the object has an outer, else ``Name``."""

    if ref is None:
        return None
    if ref.outer:
        return f"{ref.outer}::{ref.name}"
    return ref.name
