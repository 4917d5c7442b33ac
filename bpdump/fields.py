"""Type labels for reflected fields and parameter triage."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .flags import PropertyFlags

OBJECT_KINDS = frozenset(
    {
        "FObjectProperty",
        "FObjectPtrProperty",
        "FWeakObjectProperty",
        "FLazyObjectProperty",
        "FSoftObjectProperty",
    }
)

DELEGATE_LABELS = {
    "FDelegateProperty": "Delegate",
    "FMulticastDelegateProperty": "Multicast Delegate",
    "FMulticastInlineDelegateProperty": "Multicast Inline Delegate",
    "FMulticastSparseDelegateProperty": "Multicast Delegate",
}


@dataclass(frozen=True)
class Field:
    """A reflected field of a class, struct or function.

    ``kind`` is the engine's field class name (``FArrayProperty``).  The
    remaining operands are only meaningful for the kinds that use them:
    ``inner`` for arrays, ``key``/``value`` for maps, ``element`` for sets,
    ``signature`` for delegates, ``class_name`` for object, interface and
    field path properties, ``meta_class`` for class references and
    ``enum``/``struct`` for byte, enum and struct properties.
    """

    kind: str
    name: str
    flags: int = 0
    property_flags: int = 0
    inner: Optional["Field"] = None
    key: Optional["Field"] = None
    value: Optional["Field"] = None
    element: Optional["Field"] = None
    signature: Optional[str] = None
    class_name: Optional[str] = None
    meta_class: Optional[str] = None
    enum: Optional[str] = None
    struct: Optional[str] = None

    @property
    def is_property(self) -> bool:
        return "Property" in self.kind


@dataclass
class FieldDescriptor:
    """Printable summary of a field for one report."""

    name: str
    type: str
    flags: int = 0
    property_flags: Optional[int] = None
    default: Optional[str] = None


class ParameterRole(Enum):
    INPUT = "Inputs"
    OUTPUT = "Outputs"
    LOCAL = "Locals"


def classify_parameter(property_flags: Optional[int]) -> ParameterRole:
    """Output parameters win over plain parameters; the rest are locals."""

    flags = property_flags or 0
    if flags & PropertyFlags.CPF_OutParm:
        return ParameterRole.OUTPUT
    if flags & PropertyFlags.CPF_Parm:
        return ParameterRole.INPUT
    return ParameterRole.LOCAL


def generic_label(kind: str) -> str:
    """``FBoolProperty`` -> ``Bool``; kinds without the suffix pass through."""

    index = kind.find("Property")
    if index < 0:
        return kind
    return kind[1:index]


def property_type_label(field: Optional[Field]) -> str:
    if field is None:
        return "None"

    kind = field.kind
    if kind == "FArrayProperty":
        return f"Array<{property_type_label(field.inner)}>"
    if kind == "FSetProperty":
        return f"Set<{property_type_label(field.element)}>"
    if kind == "FMapProperty":
        return f"Map<{property_type_label(field.key)}, {property_type_label(field.value)}>"
    if kind == "FByteProperty":
        return field.enum or "Byte"
    if kind == "FEnumProperty":
        return field.enum or generic_label(kind)
    if kind in DELEGATE_LABELS:
        return f"{field.signature} ({DELEGATE_LABELS[kind]})"
    if kind == "FFieldPathProperty":
        return f"{field.class_name} field path"
    if kind == "FInterfaceProperty":
        return f"{field.class_name} interface"
    if kind == "FClassProperty" or kind == "FClassPtrProperty":
        return f"{field.meta_class} Class"
    if kind == "FSoftClassProperty":
        return f"{field.meta_class} Class (soft)"
    if kind in OBJECT_KINDS:
        return field.class_name or generic_label(kind)
    if kind == "FStructProperty":
        return field.struct or "Struct"
    return generic_label(kind)


def describe_field(field: Field) -> FieldDescriptor:
    if field.is_property:
        return FieldDescriptor(
            name=field.name,
            type=property_type_label(field),
            flags=field.flags,
            property_flags=field.property_flags,
        )
    return FieldDescriptor(name=field.name, type=generic_label(field.kind), flags=field.flags)
