"""In-memory view of a loaded Blueprint asset."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

from .defaults import PropertyTag
from .fields import Field
from .flags import FunctionFlags
from .nodes import Expr
from .versions import VersionFlags


@dataclass(frozen=True)
class FunctionExport:
    """A ``UFunction`` export.  ``bytecode`` is ``None`` when not loaded."""

    name: str
    flags: int = 0
    fields: Tuple[Field, ...] = ()
    bytecode: Optional[Tuple[Expr, ...]] = None

    @property
    def is_ubergraph(self) -> bool:
        return bool(self.flags & FunctionFlags.FUNC_UbergraphFunction)

    @property
    def is_delegate(self) -> bool:
        return bool(self.flags & FunctionFlags.FUNC_Delegate)


@dataclass(frozen=True)
class ClassExport:
    """A ``UBlueprintGeneratedClass`` export and its class default object."""

    name: str
    super_name: str = ""
    flags: int = 0
    config_name: str = ""
    fields: Tuple[Field, ...] = ()
    defaults: Optional[Tuple[PropertyTag, ...]] = None


Export = Union[FunctionExport, ClassExport]


@dataclass
class BlueprintAsset:
    name: str
    path: str
    version: VersionFlags = field(default_factory=VersionFlags)
    exports: List[Export] = field(default_factory=list)

    def functions(self) -> Iterator[FunctionExport]:
        return (export for export in self.exports if isinstance(export, FunctionExport))

    def classes(self) -> Iterator[ClassExport]:
        return (export for export in self.exports if isinstance(export, ClassExport))
