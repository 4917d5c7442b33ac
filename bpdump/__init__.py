"""Public package exports for the Blueprint bytecode dumper."""

from .config import DumpOptions, OperatingModes
from .defaults import render_value
from .disassembler import Disassembler, DisassemblyResult, EventLink
from .dumper import BlueprintDumper, DumpSummary
from .errors import BytecodeUnavailable, DumpError, MalformedStream, UnsupportedOpcode
from .fields import Field, describe_field
from .model import BlueprintAsset, ClassExport, FunctionExport
from .provider import AssetProvider
from .symbols import resolve_object, resolve_property
from .versions import VersionFlags

__all__ = [
    "AssetProvider",
    "BlueprintAsset",
    "BlueprintDumper",
    "BytecodeUnavailable",
    "ClassExport",
    "Disassembler",
    "DisassemblyResult",
    "DumpError",
    "DumpOptions",
    "DumpSummary",
    "EventLink",
    "Field",
    "FunctionExport",
    "MalformedStream",
    "OperatingModes",
    "UnsupportedOpcode",
    "VersionFlags",
    "describe_field",
    "render_value",
    "resolve_object",
    "resolve_property",
]
