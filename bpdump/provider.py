"""Load Blueprint asset graphs from exported JSON documents.

Each asset is one JSON document below a root directory.  The document holds
the package's file versions and its exports; function exports carry their
script as a list of instruction objects tagged with ``inst``.  Operands use
the field names of the records in :mod:`bpdump.nodes`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import MISSING, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .defaults import (
    ArrayValue,
    MapValue,
    OpaqueStruct,
    PropertyTag,
    PropertyValue,
    SetValue,
    StructValue,
)
from .errors import MalformedStream
from .fields import Field
from .flags import ClassFlags, FunctionFlags, PropertyFlags, parse_flags
from .model import BlueprintAsset, ClassExport, Export, FunctionExport
from .nodes import (
    RECORD_TYPES,
    ArrayConstExpr,
    ArrayGetByRefExpr,
    AssertExpr,
    BindDelegateExpr,
    CallMulticastDelegateExpr,
    ClassCastExpr,
    ComputedJumpExpr,
    ContextExpr,
    Expr,
    FinalFunctionExpr,
    InstrumentationEventExpr,
    JumpIfNotExpr,
    LetExpr,
    LetValueOnPersistentFrameExpr,
    MapConstExpr,
    MulticastDelegateExpr,
    ObjectConstExpr,
    ObjectRef,
    PrimitiveCastExpr,
    PropertyConstExpr,
    PropertyPointer,
    ScriptText,
    SetArrayExpr,
    SetConstExpr,
    SetMapExpr,
    SetSetExpr,
    SkipExpr,
    StructConstExpr,
    StructMemberContextExpr,
    SwitchCase,
    SwitchValueExpr,
    TextConstExpr,
    TransformConstExpr,
    UnaryExpr,
    UnknownExpr,
    VariableExpr,
    VirtualFunctionExpr,
)
from .tokens import CastToken, ExprToken, InstrumentationType, TextLiteralType, coerce_token
from .versions import VersionFlags

logger = logging.getLogger(__name__)

ASSET_SUFFIX = ".uasset"
DOCUMENT_SUFFIX = ".json"

# Operand decoders by record field; unlisted fields are plain scalars.
EXPR = "expr"
EXPRS = "exprs"
PROPERTY = "property"
OBJECT = "object"
FLOATS = "floats"
CAST = "cast"
INSTRUMENTATION = "instrumentation"

OPERAND_KINDS: Dict[type, Dict[str, str]] = {
    VariableExpr: {"variable": PROPERTY},
    PropertyConstExpr: {"property": PROPERTY},
    PrimitiveCastExpr: {"conversion": CAST, "target": EXPR},
    ClassCastExpr: {"class_ref": OBJECT, "target": EXPR},
    LetExpr: {"variable": EXPR, "assignment": EXPR, "property": PROPERTY},
    LetValueOnPersistentFrameExpr: {"destination": PROPERTY, "assignment": EXPR},
    StructMemberContextExpr: {"member": PROPERTY, "struct_expression": EXPR},
    VirtualFunctionExpr: {"parameters": EXPRS},
    FinalFunctionExpr: {"function": OBJECT, "parameters": EXPRS},
    CallMulticastDelegateExpr: {"function": OBJECT, "delegate": EXPR, "parameters": EXPRS},
    UnaryExpr: {"operand": EXPR},
    ComputedJumpExpr: {"offset_expression": EXPR},
    JumpIfNotExpr: {"condition": EXPR},
    ContextExpr: {"object_expression": EXPR, "rvalue": PROPERTY, "context_expression": EXPR},
    ObjectConstExpr: {"value": OBJECT},
    TransformConstExpr: {"rotation": FLOATS, "translation": FLOATS, "scale": FLOATS},
    StructConstExpr: {"struct": OBJECT, "properties": EXPRS},
    SetArrayExpr: {"elements": EXPRS, "assigning_property": EXPR},
    ArrayConstExpr: {"inner_property": PROPERTY, "elements": EXPRS},
    SetSetExpr: {"set_property": EXPR, "elements": EXPRS},
    SetConstExpr: {"inner_property": PROPERTY, "elements": EXPRS},
    SetMapExpr: {"map_property": EXPR, "elements": EXPRS},
    MapConstExpr: {"key_property": PROPERTY, "value_property": PROPERTY, "elements": EXPRS},
    AssertExpr: {"expression": EXPR},
    SkipExpr: {"expression": EXPR},
    MulticastDelegateExpr: {"delegate": EXPR, "delegate_to_add": EXPR},
    BindDelegateExpr: {"delegate": EXPR, "object_term": EXPR},
    ArrayGetByRefExpr: {"array_variable": EXPR, "array_index": EXPR},
    InstrumentationEventExpr: {"event_type": INSTRUMENTATION},
}


class AssetProvider:
    """Index and load asset documents below ``root``."""

    def __init__(self, root: Path) -> None:
        if not root.is_dir():
            raise FileNotFoundError(f"asset root {root} does not exist or is not a directory")
        self.root = root
        self._documents: Dict[str, Path] = {}
        for document in sorted(root.rglob(f"*{DOCUMENT_SUFFIX}")):
            relative = document.relative_to(root).with_suffix(ASSET_SUFFIX)
            self._documents[relative.as_posix()] = document

    def paths(self) -> List[str]:
        return sorted(self._documents)

    def load(self, asset_path: str) -> BlueprintAsset:
        document = self._documents.get(asset_path)
        if document is None:
            raise KeyError(asset_path)
        payload = json.loads(document.read_text("utf-8"))
        return decode_asset(payload, asset_path)


# ----------------------------------------------------------------------
# assets and exports
# ----------------------------------------------------------------------
def decode_asset(payload: Mapping[str, Any], asset_path: str = "") -> BlueprintAsset:
    """Build the asset model; any badly shaped entry raises :class:`MalformedStream`."""

    if not isinstance(payload, Mapping):
        raise MalformedStream("asset document must be a JSON object")
    try:
        return _decode_asset(payload, asset_path)
    except MalformedStream:
        raise
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise MalformedStream(f"{asset_path or 'asset'}: {type(exc).__name__}: {exc}") from exc


def _decode_asset(payload: Mapping[str, Any], asset_path: str) -> BlueprintAsset:
    name = payload.get("name") or Path(asset_path).stem
    version = VersionFlags.from_file_versions(
        payload.get("file_version_ue4"), payload.get("file_version_ue5")
    )
    exports: List[Export] = []
    for entry in payload.get("exports", []):
        export = decode_export(entry)
        if export is None:
            logger.debug("skipping export %s of type %s", entry.get("name"), entry.get("type"))
            continue
        exports.append(export)
    return BlueprintAsset(name=name, path=asset_path or name, version=version, exports=exports)


def decode_export(entry: Mapping[str, Any]) -> Optional[Export]:
    kind = entry.get("type")
    fields_ = tuple(decode_field(item) for item in entry.get("fields", []))
    if kind == "Function":
        bytecode = entry.get("bytecode")
        return FunctionExport(
            name=entry["name"],
            flags=parse_flags(FunctionFlags, entry.get("flags")),
            fields=fields_,
            bytecode=None if bytecode is None else decode_script(bytecode),
        )
    if kind == "BlueprintGeneratedClass":
        defaults = entry.get("defaults")
        return ClassExport(
            name=entry["name"],
            super_name=entry.get("super", ""),
            flags=parse_flags(ClassFlags, entry.get("flags")),
            config_name=entry.get("config", ""),
            fields=fields_,
            defaults=None if defaults is None else tuple(decode_tag(tag) for tag in defaults),
        )
    return None


def decode_field(entry: Optional[Mapping[str, Any]]) -> Optional[Field]:
    if entry is None:
        return None
    return Field(
        kind=entry["kind"],
        name=entry.get("name", ""),
        flags=int(entry.get("flags", 0)),
        property_flags=parse_flags(PropertyFlags, entry.get("property_flags")),
        inner=decode_field(entry.get("inner")),
        key=decode_field(entry.get("key")),
        value=decode_field(entry.get("value")),
        element=decode_field(entry.get("element")),
        signature=entry.get("signature"),
        class_name=entry.get("class_name"),
        meta_class=entry.get("meta_class"),
        enum=entry.get("enum"),
        struct=entry.get("struct"),
    )


# ----------------------------------------------------------------------
# property values
# ----------------------------------------------------------------------
def decode_tag(entry: Mapping[str, Any]) -> PropertyTag:
    return PropertyTag(entry["name"], decode_value(entry.get("value")))


def decode_value(value: Any) -> PropertyValue:
    if isinstance(value, list):
        return ArrayValue(tuple(decode_value(item) for item in value))
    if not isinstance(value, Mapping):
        return value
    if "struct" in value:
        if value.get("opaque"):
            return OpaqueStruct(value["struct"])
        return StructValue(
            value["struct"], tuple(decode_tag(tag) for tag in value.get("properties", []))
        )
    if "array" in value:
        return ArrayValue(tuple(decode_value(item) for item in value["array"]))
    if "set" in value:
        return SetValue(tuple(decode_value(item) for item in value["set"]))
    if "map" in value:
        return MapValue(
            tuple((decode_value(key), decode_value(item)) for key, item in value["map"])
        )
    raise MalformedStream(f"unrecognised property value: {sorted(value)}")


# ----------------------------------------------------------------------
# instructions
# ----------------------------------------------------------------------
def decode_expr(node: Mapping[str, Any]) -> Expr:
    """Decode one instruction object.

    Tags without a known record decode to :class:`UnknownExpr`; the
    disassembler rejects them when it reaches them.
    """

    if not isinstance(node, Mapping) or "inst" not in node:
        raise MalformedStream(f"instruction object without 'inst': {node!r}")
    raw = node["inst"]
    token = coerce_token(raw)
    record = RECORD_TYPES.get(token) if isinstance(token, ExprToken) else None
    if record is None:
        if isinstance(token, int):
            return UnknownExpr(token, str(raw))  # type: ignore[arg-type]
        return UnknownExpr(-1, str(raw))  # type: ignore[arg-type]

    if record is TextConstExpr:
        return TextConstExpr(token, decode_text(node))
    if record is SwitchValueExpr:
        return SwitchValueExpr(
            token,
            index_term=decode_expr(_operand(node, "index_term")),
            end_offset=int(_operand(node, "end_offset")),
            cases=tuple(
                SwitchCase(
                    decode_expr(_operand(case, "value")),
                    int(_operand(case, "next_offset")),
                    decode_expr(_operand(case, "term")),
                )
                for case in node.get("cases", [])
            ),
            default_term=decode_expr(_operand(node, "default_term")),
        )

    kinds = OPERAND_KINDS.get(record, {})
    arguments: Dict[str, Any] = {}
    for spec in fields(record):
        if spec.name == "token":
            continue
        if spec.name not in node:
            if spec.default is MISSING:
                raise MalformedStream(f"{token.name} is missing operand '{spec.name}'")
            continue
        arguments[spec.name] = _decode_operand(kinds.get(spec.name), node[spec.name])
    return record(token, **arguments)


def decode_text(node: Mapping[str, Any]) -> ScriptText:
    raw_type = _operand(node, "literal_type")
    if isinstance(raw_type, str):
        member = TextLiteralType.__members__.get(raw_type)
        if member is None:
            raise MalformedStream(f"unknown text literal type {raw_type!r}")
        literal_type = int(member)
    else:
        literal_type = int(raw_type)
    return ScriptText(
        literal_type=literal_type,
        namespace=_optional_expr(node.get("namespace")),
        key=_optional_expr(node.get("key")),
        source=_optional_expr(node.get("source")),
        table_id=_optional_expr(node.get("table_id")),
        table=decode_object(node.get("table")),
    )


def decode_property(value: Any) -> Optional[PropertyPointer]:
    if value is None:
        return None
    if isinstance(value, str):
        return PropertyPointer(tuple(value.split(".")))
    if isinstance(value, Mapping):
        value = value.get("path")
        if value is None:
            return None
    return PropertyPointer(tuple(str(segment) for segment in value))


def decode_object(value: Any) -> Optional[ObjectRef]:
    if value is None:
        return None
    if isinstance(value, str):
        return ObjectRef(value)
    return ObjectRef(value["name"], value.get("outer"))


def _decode_operand(kind: Optional[str], value: Any) -> Any:
    if kind == EXPR:
        return _optional_expr(value)
    if kind == EXPRS:
        return tuple(decode_expr(item) for item in value)
    if kind == PROPERTY:
        return decode_property(value)
    if kind == OBJECT:
        return decode_object(value)
    if kind == FLOATS:
        return tuple(float(item) for item in value)
    if kind == CAST:
        return _enum_value(CastToken, value)
    if kind == INSTRUMENTATION:
        return _enum_value(InstrumentationType, value)
    return value


def _enum_value(enum_cls: type, value: Any) -> int:
    if isinstance(value, str):
        member = enum_cls.__members__.get(value)
        if member is None:
            raise MalformedStream(f"unknown {enum_cls.__name__} value {value!r}")
        return int(member)
    return int(value)


def _optional_expr(value: Any) -> Optional[Expr]:
    return None if value is None else decode_expr(value)


def _operand(node: Mapping[str, Any], name: str) -> Any:
    try:
        return node[name]
    except KeyError:
        raise MalformedStream(f"{node.get('inst')} is missing operand '{name}'") from None


def decode_script(nodes: List[Mapping[str, Any]]) -> Tuple[Expr, ...]:
    return tuple(decode_expr(node) for node in nodes)
