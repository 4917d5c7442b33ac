"""Immutable records describing decoded script instructions.

Every record carries the :class:`~bpdump.tokens.ExprToken` it was decoded
from.  Opcodes with identical operand layouts share a record; the token decides
how the disassembler sizes and labels them.  List terminators are implicit:
element tuples never contain the closing ``EX_End*`` token.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from .tokens import ExprToken


@dataclass(frozen=True)
class PropertyPointer:
    """Reference to a property by its owner-relative name path."""

    path: Tuple[str, ...]


@dataclass(frozen=True)
class ObjectRef:
    """Reference to an imported or exported object."""

    name: str
    outer: Optional[str] = None


@dataclass(frozen=True)
class Expr:
    """Common base for instruction records."""

    token: ExprToken


@dataclass(frozen=True)
class UnknownExpr(Expr):
    """Instruction whose tag could not be mapped to a known record."""

    label: Optional[str] = None


@dataclass(frozen=True)
class MarkerExpr(Expr):
    """Operand-less instruction such as ``EX_True`` or ``EX_Self``."""


@dataclass(frozen=True)
class VariableExpr(Expr):
    variable: Optional[PropertyPointer]


@dataclass(frozen=True)
class PropertyConstExpr(Expr):
    property: Optional[PropertyPointer]


@dataclass(frozen=True)
class PrimitiveCastExpr(Expr):
    conversion: int
    target: Expr


@dataclass(frozen=True)
class ClassCastExpr(Expr):
    """Interface, meta and dynamic casts to a target class."""

    class_ref: Optional[ObjectRef]
    target: Expr


@dataclass(frozen=True)
class LetExpr(Expr):
    """Assignment.  Only ``EX_Let`` serializes the ``property`` pointer."""

    variable: Expr
    assignment: Expr
    property: Optional[PropertyPointer] = None


@dataclass(frozen=True)
class LetValueOnPersistentFrameExpr(Expr):
    destination: Optional[PropertyPointer]
    assignment: Expr


@dataclass(frozen=True)
class StructMemberContextExpr(Expr):
    member: Optional[PropertyPointer]
    struct_expression: Expr


@dataclass(frozen=True)
class VirtualFunctionExpr(Expr):
    function_name: str
    parameters: Tuple[Expr, ...] = ()


@dataclass(frozen=True)
class FinalFunctionExpr(Expr):
    function: Optional[ObjectRef]
    parameters: Tuple[Expr, ...] = ()


@dataclass(frozen=True)
class CallMulticastDelegateExpr(Expr):
    function: Optional[ObjectRef]
    delegate: Expr
    parameters: Tuple[Expr, ...] = ()


@dataclass(frozen=True)
class UnaryExpr(Expr):
    """Instruction wrapping exactly one sub-expression and nothing else."""

    operand: Expr


@dataclass(frozen=True)
class ComputedJumpExpr(Expr):
    offset_expression: Expr


@dataclass(frozen=True)
class JumpExpr(Expr):
    code_offset: int


@dataclass(frozen=True)
class JumpIfNotExpr(Expr):
    code_offset: int
    condition: Expr


@dataclass(frozen=True)
class ContextExpr(Expr):
    object_expression: Expr
    skip_offset: int
    rvalue: Optional[PropertyPointer]
    context_expression: Expr


Literal = Union[int, float, str]


@dataclass(frozen=True)
class LiteralExpr(Expr):
    """Numeric, string and name constants."""

    value: Literal


@dataclass(frozen=True)
class ScriptText:
    """Operands of ``EX_TextConst``; which ones are set depends on the kind."""

    literal_type: int
    namespace: Optional[Expr] = None
    key: Optional[Expr] = None
    source: Optional[Expr] = None
    table_id: Optional[Expr] = None
    table: Optional[ObjectRef] = None


@dataclass(frozen=True)
class TextConstExpr(Expr):
    text: ScriptText


@dataclass(frozen=True)
class ObjectConstExpr(Expr):
    value: Optional[ObjectRef]


@dataclass(frozen=True)
class RotationConstExpr(Expr):
    pitch: float
    yaw: float
    roll: float


@dataclass(frozen=True)
class VectorConstExpr(Expr):
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class TransformConstExpr(Expr):
    rotation: Tuple[float, float, float, float]
    translation: Tuple[float, float, float]
    scale: Tuple[float, float, float]


@dataclass(frozen=True)
class StructConstExpr(Expr):
    struct: Optional[ObjectRef]
    struct_size: int
    properties: Tuple[Expr, ...] = ()


@dataclass(frozen=True)
class SetArrayExpr(Expr):
    """Array assignment; older assets name the inner property instead."""

    elements: Tuple[Expr, ...] = ()
    assigning_property: Optional[Expr] = None
    inner_property: Optional[str] = None


@dataclass(frozen=True)
class ArrayConstExpr(Expr):
    inner_property: Optional[PropertyPointer]
    elements: Tuple[Expr, ...] = ()


@dataclass(frozen=True)
class SetSetExpr(Expr):
    set_property: Expr
    elements: Tuple[Expr, ...] = ()


@dataclass(frozen=True)
class SetConstExpr(Expr):
    inner_property: Optional[PropertyPointer]
    elements: Tuple[Expr, ...] = ()


@dataclass(frozen=True)
class SetMapExpr(Expr):
    map_property: Expr
    elements: Tuple[Expr, ...] = ()


@dataclass(frozen=True)
class MapConstExpr(Expr):
    key_property: Optional[PropertyPointer]
    value_property: Optional[PropertyPointer]
    elements: Tuple[Expr, ...] = ()


@dataclass(frozen=True)
class AssertExpr(Expr):
    line_number: int
    debug_mode: bool
    expression: Expr


@dataclass(frozen=True)
class SkipExpr(Expr):
    code_offset: int
    expression: Expr


@dataclass(frozen=True)
class InstanceDelegateExpr(Expr):
    function_name: str


@dataclass(frozen=True)
class MulticastDelegateExpr(Expr):
    """``EX_AddMulticastDelegate`` and ``EX_RemoveMulticastDelegate``."""

    delegate: Expr
    delegate_to_add: Expr


@dataclass(frozen=True)
class BindDelegateExpr(Expr):
    function_name: str
    delegate: Expr
    object_term: Expr


@dataclass(frozen=True)
class PushExecutionFlowExpr(Expr):
    pushing_address: int


@dataclass(frozen=True)
class InstrumentationEventExpr(Expr):
    event_type: int
    event_name: Optional[str] = None


@dataclass(frozen=True)
class SwitchCase:
    value: Expr
    next_offset: int
    term: Expr


@dataclass(frozen=True)
class SwitchValueExpr(Expr):
    index_term: Expr
    end_offset: int
    cases: Tuple[SwitchCase, ...]
    default_term: Expr


@dataclass(frozen=True)
class ArrayGetByRefExpr(Expr):
    array_variable: Expr
    array_index: Expr


def _table(record: type, *tokens: ExprToken) -> Dict[ExprToken, type]:
    return {token: record for token in tokens}


T = ExprToken

RECORD_TYPES: Dict[ExprToken, type] = {
    **_table(
        MarkerExpr,
        T.EX_Nothing,
        T.EX_EndOfScript,
        T.EX_IntZero,
        T.EX_IntOne,
        T.EX_True,
        T.EX_False,
        T.EX_NoObject,
        T.EX_NoInterface,
        T.EX_Self,
        T.EX_EndParmValue,
        T.EX_Breakpoint,
        T.EX_WireTracepoint,
        T.EX_Tracepoint,
        T.EX_DeprecatedOp4A,
        T.EX_PopExecutionFlow,
    ),
    **_table(
        VariableExpr,
        T.EX_LocalVariable,
        T.EX_InstanceVariable,
        T.EX_DefaultVariable,
        T.EX_LocalOutVariable,
        T.EX_ClassSparseDataVariable,
    ),
    **_table(PropertyConstExpr, T.EX_PropertyConst),
    **_table(PrimitiveCastExpr, T.EX_Cast),
    **_table(
        ClassCastExpr,
        T.EX_ObjToInterfaceCast,
        T.EX_CrossInterfaceCast,
        T.EX_InterfaceToObjCast,
        T.EX_MetaCast,
        T.EX_DynamicCast,
    ),
    **_table(
        LetExpr,
        T.EX_Let,
        T.EX_LetObj,
        T.EX_LetWeakObjPtr,
        T.EX_LetBool,
        T.EX_LetDelegate,
        T.EX_LetMulticastDelegate,
    ),
    **_table(LetValueOnPersistentFrameExpr, T.EX_LetValueOnPersistentFrame),
    **_table(StructMemberContextExpr, T.EX_StructMemberContext),
    **_table(VirtualFunctionExpr, T.EX_VirtualFunction, T.EX_LocalVirtualFunction),
    **_table(FinalFunctionExpr, T.EX_FinalFunction, T.EX_LocalFinalFunction, T.EX_CallMath),
    **_table(CallMulticastDelegateExpr, T.EX_CallMulticastDelegate),
    **_table(
        UnaryExpr,
        T.EX_Return,
        T.EX_InterfaceContext,
        T.EX_SoftObjectConst,
        T.EX_FieldPathConst,
        T.EX_ClearMulticastDelegate,
        T.EX_PopExecutionFlowIfNot,
    ),
    **_table(ComputedJumpExpr, T.EX_ComputedJump),
    **_table(JumpExpr, T.EX_Jump),
    **_table(JumpIfNotExpr, T.EX_JumpIfNot),
    **_table(ContextExpr, T.EX_Context, T.EX_Context_FailSilent, T.EX_ClassContext),
    **_table(
        LiteralExpr,
        T.EX_IntConst,
        T.EX_Int64Const,
        T.EX_UInt64Const,
        T.EX_SkipOffsetConst,
        T.EX_FloatConst,
        T.EX_DoubleConst,
        T.EX_StringConst,
        T.EX_UnicodeStringConst,
        T.EX_NameConst,
        T.EX_ByteConst,
        T.EX_IntConstByte,
    ),
    **_table(TextConstExpr, T.EX_TextConst),
    **_table(ObjectConstExpr, T.EX_ObjectConst),
    **_table(RotationConstExpr, T.EX_RotationConst),
    **_table(VectorConstExpr, T.EX_VectorConst),
    **_table(TransformConstExpr, T.EX_TransformConst),
    **_table(StructConstExpr, T.EX_StructConst),
    **_table(SetArrayExpr, T.EX_SetArray),
    **_table(ArrayConstExpr, T.EX_ArrayConst),
    **_table(SetSetExpr, T.EX_SetSet),
    **_table(SetConstExpr, T.EX_SetConst),
    **_table(SetMapExpr, T.EX_SetMap),
    **_table(MapConstExpr, T.EX_MapConst),
    **_table(AssertExpr, T.EX_Assert),
    **_table(SkipExpr, T.EX_Skip),
    **_table(InstanceDelegateExpr, T.EX_InstanceDelegate),
    **_table(MulticastDelegateExpr, T.EX_AddMulticastDelegate, T.EX_RemoveMulticastDelegate),
    **_table(BindDelegateExpr, T.EX_BindDelegate),
    **_table(PushExecutionFlowExpr, T.EX_PushExecutionFlow),
    **_table(InstrumentationEventExpr, T.EX_InstrumentationEvent),
    **_table(SwitchValueExpr, T.EX_SwitchValue),
    **_table(ArrayGetByRefExpr, T.EX_ArrayGetByRef),
}
"""Record type expected for every supported token."""

del T
