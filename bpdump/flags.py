"""Object, function and property flag sets and their textual form."""

from __future__ import annotations

from enum import IntFlag
from typing import Iterable, List, Optional, Union


class FunctionFlags(IntFlag):
    FUNC_None = 0x00000000
    FUNC_Final = 0x00000001
    FUNC_RequiredAPI = 0x00000002
    FUNC_BlueprintAuthorityOnly = 0x00000004
    FUNC_BlueprintCosmetic = 0x00000008
    FUNC_Net = 0x00000040
    FUNC_NetReliable = 0x00000080
    FUNC_NetRequest = 0x00000100
    FUNC_Exec = 0x00000200
    FUNC_Native = 0x00000400
    FUNC_Event = 0x00000800
    FUNC_NetResponse = 0x00001000
    FUNC_Static = 0x00002000
    FUNC_NetMulticast = 0x00004000
    FUNC_UbergraphFunction = 0x00008000
    FUNC_MulticastDelegate = 0x00010000
    FUNC_Public = 0x00020000
    FUNC_Private = 0x00040000
    FUNC_Protected = 0x00080000
    FUNC_Delegate = 0x00100000
    FUNC_NetServer = 0x00200000
    FUNC_HasOutParms = 0x00400000
    FUNC_HasDefaults = 0x00800000
    FUNC_NetClient = 0x01000000
    FUNC_DLLImport = 0x02000000
    FUNC_BlueprintCallable = 0x04000000
    FUNC_BlueprintEvent = 0x08000000
    FUNC_BlueprintPure = 0x10000000
    FUNC_EditorOnly = 0x20000000
    FUNC_Const = 0x40000000
    FUNC_NetValidate = 0x80000000


class ClassFlags(IntFlag):
    CLASS_None = 0x00000000
    CLASS_Abstract = 0x00000001
    CLASS_DefaultConfig = 0x00000002
    CLASS_Config = 0x00000004
    CLASS_Transient = 0x00000008
    CLASS_Parsed = 0x00000010
    CLASS_MatchedSerializers = 0x00000020
    CLASS_ProjectUserConfig = 0x00000040
    CLASS_Native = 0x00000080
    CLASS_NoExport = 0x00000100
    CLASS_NotPlaceable = 0x00000200
    CLASS_PerObjectConfig = 0x00000400
    CLASS_ReplicationDataIsSetUp = 0x00000800
    CLASS_EditInlineNew = 0x00001000
    CLASS_CollapseCategories = 0x00002000
    CLASS_Interface = 0x00004000
    CLASS_CustomConstructor = 0x00008000
    CLASS_Const = 0x00010000
    CLASS_LayoutChanging = 0x00020000
    CLASS_CompiledFromBlueprint = 0x00040000
    CLASS_MinimalAPI = 0x00080000
    CLASS_RequiredAPI = 0x00100000
    CLASS_DefaultToInstanced = 0x00200000
    CLASS_TokenStreamAssembled = 0x00400000
    CLASS_HasInstancedReference = 0x00800000
    CLASS_Hidden = 0x01000000
    CLASS_Deprecated = 0x02000000
    CLASS_HideDropDown = 0x04000000
    CLASS_GlobalUserConfig = 0x08000000
    CLASS_Intrinsic = 0x10000000
    CLASS_Constructed = 0x20000000
    CLASS_ConfigDoNotCheckDefaults = 0x40000000
    CLASS_NewerVersionExists = 0x80000000


class PropertyFlags(IntFlag):
    CPF_None = 0
    CPF_Edit = 0x0000000000000001
    CPF_ConstParm = 0x0000000000000002
    CPF_BlueprintVisible = 0x0000000000000004
    CPF_ExportObject = 0x0000000000000008
    CPF_BlueprintReadOnly = 0x0000000000000010
    CPF_Net = 0x0000000000000020
    CPF_EditFixedSize = 0x0000000000000040
    CPF_Parm = 0x0000000000000080
    CPF_OutParm = 0x0000000000000100
    CPF_ZeroConstructor = 0x0000000000000200
    CPF_ReturnParm = 0x0000000000000400
    CPF_DisableEditOnTemplate = 0x0000000000000800
    CPF_Transient = 0x0000000000002000
    CPF_Config = 0x0000000000004000
    CPF_DisableEditOnInstance = 0x0000000000010000
    CPF_EditConst = 0x0000000000020000
    CPF_GlobalConfig = 0x0000000000040000
    CPF_InstancedReference = 0x0000000000080000
    CPF_DuplicateTransient = 0x0000000000200000
    CPF_SaveGame = 0x0000000001000000
    CPF_NoClear = 0x0000000002000000
    CPF_ReferenceParm = 0x0000000008000000
    CPF_BlueprintAssignable = 0x0000000010000000
    CPF_Deprecated = 0x0000000020000000
    CPF_IsPlainOldData = 0x0000000040000000
    CPF_RepSkip = 0x0000000080000000
    CPF_RepNotify = 0x0000000100000000
    CPF_Interp = 0x0000000200000000
    CPF_NonTransactional = 0x0000000400000000
    CPF_EditorOnly = 0x0000000800000000
    CPF_NoDestructor = 0x0000001000000000
    CPF_AutoWeak = 0x0000004000000000
    CPF_ContainsInstancedReference = 0x0000008000000000
    CPF_AssetRegistrySearchable = 0x0000010000000000
    CPF_SimpleDisplay = 0x0000020000000000
    CPF_AdvancedDisplay = 0x0000040000000000
    CPF_Protected = 0x0000080000000000
    CPF_BlueprintCallable = 0x0000100000000000
    CPF_BlueprintAuthorityOnly = 0x0000200000000000
    CPF_TextExportTransient = 0x0000400000000000
    CPF_NonPIEDuplicateTransient = 0x0000800000000000
    CPF_ExposeOnSpawn = 0x0001000000000000
    CPF_PersistentInstance = 0x0002000000000000
    CPF_UObjectWrapper = 0x0004000000000000
    CPF_HasGetValueTypeHash = 0x0008000000000000
    CPF_NativeAccessSpecifierPublic = 0x0010000000000000
    CPF_NativeAccessSpecifierProtected = 0x0020000000000000
    CPF_NativeAccessSpecifierPrivate = 0x0040000000000000
    CPF_SkipSerialization = 0x0080000000000000


FlagInput = Union[int, str, Iterable[str], None]


def parse_flags(flag_cls: type, value: FlagInput) -> int:
    """Accept an integer, a single flag name or a list of flag names.

    Names may omit the enum's prefix (``Event`` for ``FUNC_Event``).
    """

    if value is None:
        return 0
    if isinstance(value, int):
        return value
    names = [value] if isinstance(value, str) else list(value)
    members = flag_cls.__members__
    prefix = _prefix(flag_cls)
    result = 0
    for raw in names:
        name = raw.strip()
        member = members.get(name)
        if member is None:
            member = members.get(f"{prefix}{name}")
        if member is None:
            raise ValueError(f"unknown {flag_cls.__name__} value: {raw!r}")
        result |= int(member)
    return result


def format_flags(flag_cls: type, value: int, *, strip_prefix: bool = False) -> str:
    """Render a flag set as ``A, B, C`` in ascending bit order.

    Zero renders as the enum's ``None`` member.  Bits without a member are
    appended as a hexadecimal remainder.
    """

    prefix = _prefix(flag_cls)
    if value == 0:
        return "None" if strip_prefix else f"{prefix}None"

    parts: List[str] = []
    remainder = value
    for member in sorted(flag_cls, key=int):
        bit = int(member)
        if bit == 0 or value & bit != bit:
            continue
        parts.append(member.name[len(prefix):] if strip_prefix else member.name)
        remainder &= ~bit
    if remainder:
        parts.append(f"0x{remainder:X}")
    return ", ".join(parts)


def _prefix(flag_cls: type) -> str:
    first: Optional[str] = next(iter(flag_cls.__members__), None)
    if first is None or "_" not in first:
        return ""
    return first.split("_", 1)[0] + "_"
