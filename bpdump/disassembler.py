"""Offset-annotated listings of Kismet script bytecode.

The asset provider hands us instructions that were already deserialized, so
the byte offsets of the original stream are gone.  They are reconstructed by
replaying the serialized size of every opcode and operand while the tree is
walked: one byte for each tag, fixed sizes for scalars and references, string
lengths for literals and one extra byte for the terminator of every element
list.  Offsets are what jump targets and event stubs refer to, so they have
to match the engine's own accounting exactly.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from .errors import BytecodeUnavailable, MalformedStream, UnsupportedOpcode
from .flags import FunctionFlags
from .model import FunctionExport
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
    InstanceDelegateExpr,
    InstrumentationEventExpr,
    JumpExpr,
    JumpIfNotExpr,
    LetExpr,
    LetValueOnPersistentFrameExpr,
    LiteralExpr,
    MapConstExpr,
    MarkerExpr,
    MulticastDelegateExpr,
    ObjectConstExpr,
    ObjectRef,
    PrimitiveCastExpr,
    PropertyConstExpr,
    PropertyPointer,
    PushExecutionFlowExpr,
    RotationConstExpr,
    SetArrayExpr,
    SetConstExpr,
    SetMapExpr,
    SetSetExpr,
    SkipExpr,
    StructConstExpr,
    StructMemberContextExpr,
    SwitchValueExpr,
    TextConstExpr,
    TransformConstExpr,
    UnaryExpr,
    VariableExpr,
    VectorConstExpr,
    VirtualFunctionExpr,
)
from .symbols import resolve_object, resolve_property
from .tokens import (
    LIST_TERMINATORS,
    CastToken,
    ExprToken,
    InstrumentationType,
    TextLiteralType,
    coerce_token,
    enum_label,
)
from .versions import VersionFlags

BLOCK_SEPARATOR = "-" * 80
ANNOTATION_MARGIN = " " * 10
MAX_DEPTH = 256

# Serialized operand sizes.
BYTE_SIZE = 1
UINT16_SIZE = 2
INT32_SIZE = 4
FLOAT_SIZE = 4
INT64_SIZE = 8
DOUBLE_SIZE = 8
NAME_SIZE = 12
OBJECT_SIZE = 8
FIELD_SIZE = 8
TERMINATOR_SIZE = 1


def format_float(value: float) -> str:
    """Format with at least one and at most four decimals (``0.0###``)."""

    text = f"{value:.4f}"
    if "." not in text:
        return text
    text = text.rstrip("0")
    if text.endswith("."):
        text += "0"
    return text


def format_hex(value: int) -> str:
    if value < 0:
        value &= 0xFFFFFFFF
    return f"0x{value:X}"


def _text(value: Optional[str]) -> str:
    return "" if value is None else value


def _object_name(ref: Optional[ObjectRef]) -> str:
    return "" if ref is None else ref.name


@dataclass(frozen=True)
class EventLink:
    """Event stub that forwards into the ubergraph at a fixed offset."""

    name: str
    call: FinalFunctionExpr

    def __post_init__(self) -> None:
        parameters = self.call.parameters
        if len(parameters) != 1 or not isinstance(parameters[0], LiteralExpr):
            raise MalformedStream(f"event {self.name} does not forward a constant ubergraph offset")

    @property
    def offset(self) -> int:
        return int(self.call.parameters[0].value)  # type: ignore[attr-defined]


def index_event_links(links: Iterable[EventLink]) -> Dict[int, EventLink]:
    """Key event links by the ubergraph offset they jump to."""

    return {link.offset: link for link in links}


@dataclass(frozen=True)
class DisassemblyResult:
    text: str
    event_link: Optional[EventLink] = None


@dataclass
class DisassemblyContext:
    """Mutable state of a single disassembly pass."""

    flags: VersionFlags
    event_links: Mapping[int, EventLink]
    function_name: str = ""
    is_event: bool = False
    offset: int = 0
    indent: int = -1
    depth: int = 0
    lines: List[str] = field(default_factory=list)
    event_link: Optional[EventLink] = None

    # ------------------------------------------------------------------
    # cursor
    # ------------------------------------------------------------------
    def advance(self, size: int) -> None:
        self.offset += size

    def advance_coordinates(self, count: int) -> None:
        self.offset += count * self.flags.coordinate_size

    def advance_ascii(self, value: str) -> None:
        self.offset += len(value) + 1

    def advance_unicode(self, value: str) -> None:
        code_units = len(value.encode("utf-16-le")) // 2
        self.offset += (code_units + 1) * 2

    # ------------------------------------------------------------------
    # output
    # ------------------------------------------------------------------
    @contextmanager
    def indented(self) -> Iterator[None]:
        self.indent += 1
        try:
            yield
        finally:
            self.indent -= 1

    def emit(
        self,
        op_offset: int,
        token: ExprToken,
        detail: Optional[str] = None,
        *,
        name: Optional[str] = None,
    ) -> None:
        token = ExprToken(token)
        label = name or token.display_name
        line = f"{op_offset:08X}  {'  ' * self.indent}[{int(token):02X}] {label}"
        if detail is not None:
            line = f"{line}: {detail}"
        self.lines.append(line)

    def note(self, message: str) -> None:
        self.lines.append(f"{ANNOTATION_MARGIN}{'  ' * self.indent}{message}")

    def separate_block(self) -> None:
        if self.indent == 0:
            self.lines.append(BLOCK_SEPARATOR)

    def render(self) -> str:
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"


Handler = Callable[["Disassembler", DisassemblyContext, Expr, int], None]

_HANDLERS: Dict[ExprToken, Handler] = {}


def _handles(*tokens: ExprToken) -> Callable[[Handler], Handler]:
    def register(func: Handler) -> Handler:
        for token in tokens:
            _HANDLERS[token] = func
        return func

    return register


class Disassembler:
    """Render instruction trees as listings with reconstructed offsets."""

    def __init__(self, flags: Optional[VersionFlags] = None) -> None:
        self.flags = flags or VersionFlags()

    def disassemble_function(
        self,
        function: FunctionExport,
        event_links: Optional[Mapping[int, EventLink]] = None,
    ) -> DisassemblyResult:
        """Disassemble a function export.

        Raises :class:`BytecodeUnavailable` if the provider did not load the
        function's script.
        """

        if function.bytecode is None:
            raise BytecodeUnavailable(f"script bytecode of {function.name} is not loaded")
        return self.disassemble(
            function.bytecode,
            event_links=event_links,
            function_name=function.name,
            is_event=bool(function.flags & FunctionFlags.FUNC_Event),
        )

    def disassemble(
        self,
        instructions: Sequence[Expr],
        *,
        event_links: Optional[Mapping[int, EventLink]] = None,
        function_name: str = "",
        is_event: bool = False,
    ) -> DisassemblyResult:
        ctx = DisassemblyContext(
            flags=self.flags,
            event_links=event_links or {},
            function_name=function_name,
            is_event=is_event,
        )
        for instruction in instructions:
            self._process(ctx, instruction)
        return DisassemblyResult(ctx.render(), ctx.event_link)

    # ------------------------------------------------------------------
    # dispatch
    # ------------------------------------------------------------------
    def _process(self, ctx: DisassemblyContext, expr: Optional[Expr]) -> None:
        op_offset = ctx.offset
        if expr is None:
            raise MalformedStream(f"missing operand expression at 0x{op_offset:X}")
        ctx.advance(BYTE_SIZE)
        ctx.indent += 1
        ctx.depth += 1
        if ctx.depth > MAX_DEPTH:
            raise MalformedStream(f"expression nesting exceeds {MAX_DEPTH} levels at 0x{op_offset:X}")

        link = ctx.event_links.get(op_offset)
        if link is not None:
            ctx.note(f"Event: {link.name}")

        token = coerce_token(expr.token)
        if token in LIST_TERMINATORS:
            raise MalformedStream(f"unexpected {token.name} at 0x{op_offset:X}")
        handler = _HANDLERS.get(token)  # type: ignore[arg-type]
        if handler is None:
            label = getattr(expr, "label", None)
            raise UnsupportedOpcode(label or token, op_offset)
        if not isinstance(expr, RECORD_TYPES[token]):
            raise MalformedStream(
                f"{token.name} at 0x{op_offset:X} carries a {type(expr).__name__} record"
            )
        handler(self, ctx, expr, op_offset)

        ctx.depth -= 1
        ctx.indent -= 1

    def _process_list(self, ctx: DisassemblyContext, elements: Iterable[Expr]) -> None:
        for element in elements:
            self._process(ctx, element)
        ctx.advance(TERMINATOR_SIZE)

    @staticmethod
    def _path(pointer: Optional[PropertyPointer]) -> str:
        return _text(resolve_property(pointer))

    # ------------------------------------------------------------------
    # casts
    # ------------------------------------------------------------------
    @_handles(ExprToken.EX_Cast)
    def _primitive_cast(self, ctx: DisassemblyContext, expr: PrimitiveCastExpr, op_offset: int) -> None:
        ctx.advance(BYTE_SIZE)
        cast = enum_label(CastToken, expr.conversion)
        ctx.emit(op_offset, expr.token, f"Type {cast}", name="PrimitiveCast")
        ctx.note("Argument:")
        self._process(ctx, expr.target)

    @_handles(
        ExprToken.EX_ObjToInterfaceCast,
        ExprToken.EX_CrossInterfaceCast,
        ExprToken.EX_InterfaceToObjCast,
        ExprToken.EX_MetaCast,
        ExprToken.EX_DynamicCast,
    )
    def _class_cast(self, ctx: DisassemblyContext, expr: ClassCastExpr, op_offset: int) -> None:
        ctx.advance(OBJECT_SIZE)
        detail = f"Cast to {_object_name(expr.class_ref)}"
        if expr.token in (ExprToken.EX_MetaCast, ExprToken.EX_DynamicCast):
            detail += " of expr:"
        ctx.emit(op_offset, expr.token, detail)
        self._process(ctx, expr.target)

    # ------------------------------------------------------------------
    # variables and assignment
    # ------------------------------------------------------------------
    @_handles(
        ExprToken.EX_LocalVariable,
        ExprToken.EX_InstanceVariable,
        ExprToken.EX_DefaultVariable,
        ExprToken.EX_LocalOutVariable,
        ExprToken.EX_ClassSparseDataVariable,
    )
    def _variable(self, ctx: DisassemblyContext, expr: VariableExpr, op_offset: int) -> None:
        ctx.advance(FIELD_SIZE)
        ctx.emit(op_offset, expr.token, self._path(expr.variable))

    @_handles(
        ExprToken.EX_Let,
        ExprToken.EX_LetObj,
        ExprToken.EX_LetWeakObjPtr,
        ExprToken.EX_LetBool,
        ExprToken.EX_LetDelegate,
        ExprToken.EX_LetMulticastDelegate,
    )
    def _let(self, ctx: DisassemblyContext, expr: LetExpr, op_offset: int) -> None:
        ctx.emit(op_offset, expr.token, "Variable = Expression")
        if expr.token == ExprToken.EX_Let:
            ctx.advance(FIELD_SIZE)
        with ctx.indented():
            ctx.note("Variable:")
            self._process(ctx, expr.variable)
            ctx.note("Expression:")
            self._process(ctx, expr.assignment)

    @_handles(ExprToken.EX_LetValueOnPersistentFrame)
    def _let_persistent(
        self, ctx: DisassemblyContext, expr: LetValueOnPersistentFrameExpr, op_offset: int
    ) -> None:
        ctx.emit(op_offset, expr.token)
        with ctx.indented():
            ctx.advance(FIELD_SIZE)
            ctx.note(f"Destination variable: {self._path(expr.destination)}")
            ctx.note("Expression:")
            self._process(ctx, expr.assignment)

    @_handles(ExprToken.EX_StructMemberContext)
    def _struct_member_context(
        self, ctx: DisassemblyContext, expr: StructMemberContextExpr, op_offset: int
    ) -> None:
        ctx.emit(op_offset, expr.token)
        with ctx.indented():
            ctx.advance(FIELD_SIZE)
            ctx.note(f"Member name: {self._path(expr.member)}")
            ctx.note("Expression to struct:")
            self._process(ctx, expr.struct_expression)

    @_handles(ExprToken.EX_Context, ExprToken.EX_Context_FailSilent, ExprToken.EX_ClassContext)
    def _context(self, ctx: DisassemblyContext, expr: ContextExpr, op_offset: int) -> None:
        ctx.emit(op_offset, expr.token)
        with ctx.indented():
            ctx.note("ObjectExpression:")
            self._process(ctx, expr.object_expression)
            if expr.token == ExprToken.EX_Context_FailSilent:
                ctx.note("Can fail silently on access none")
            ctx.advance(INT32_SIZE)
            ctx.note(f"Skip {expr.skip_offset} bytes")
            ctx.advance(FIELD_SIZE)
            ctx.note(f"R-Value Property: {self._path(expr.rvalue)}")
            ctx.note("ContextExpression:")
            self._process(ctx, expr.context_expression)

    @_handles(ExprToken.EX_ArrayGetByRef)
    def _array_get_by_ref(self, ctx: DisassemblyContext, expr: ArrayGetByRefExpr, op_offset: int) -> None:
        ctx.emit(op_offset, expr.token)
        with ctx.indented():
            self._process(ctx, expr.array_variable)
            self._process(ctx, expr.array_index)

    # ------------------------------------------------------------------
    # calls
    # ------------------------------------------------------------------
    @_handles(ExprToken.EX_VirtualFunction, ExprToken.EX_LocalVirtualFunction)
    def _virtual_function(self, ctx: DisassemblyContext, expr: VirtualFunctionExpr, op_offset: int) -> None:
        ctx.advance(NAME_SIZE)
        ctx.emit(op_offset, expr.token, expr.function_name)
        self._process_list(ctx, expr.parameters)

    @_handles(ExprToken.EX_FinalFunction, ExprToken.EX_LocalFinalFunction, ExprToken.EX_CallMath)
    def _final_function(self, ctx: DisassemblyContext, expr: FinalFunctionExpr, op_offset: int) -> None:
        ctx.advance(OBJECT_SIZE)
        ctx.emit(op_offset, expr.token, _text(resolve_object(expr.function)))
        self._process_list(ctx, expr.parameters)

        if (
            ctx.is_event
            and expr.token == ExprToken.EX_LocalFinalFunction
            and len(expr.parameters) == 1
            and isinstance(expr.parameters[0], LiteralExpr)
            and expr.parameters[0].token == ExprToken.EX_IntConst
        ):
            # The event body lives in the ubergraph at the given offset.
            ctx.event_link = EventLink(ctx.function_name, expr)

    @_handles(ExprToken.EX_CallMulticastDelegate)
    def _call_multicast_delegate(
        self, ctx: DisassemblyContext, expr: CallMulticastDelegateExpr, op_offset: int
    ) -> None:
        ctx.advance(OBJECT_SIZE)
        ctx.emit(op_offset, expr.token, _text(resolve_object(expr.function)))
        self._process(ctx, expr.delegate)
        with ctx.indented():
            ctx.note("Params:")
            self._process_list(ctx, expr.parameters)

    # ------------------------------------------------------------------
    # flow control
    # ------------------------------------------------------------------
    @_handles(ExprToken.EX_Jump)
    def _jump(self, ctx: DisassemblyContext, expr: JumpExpr, op_offset: int) -> None:
        ctx.advance(INT32_SIZE)
        ctx.emit(op_offset, expr.token, f"Offset = {format_hex(expr.code_offset)}")
        ctx.separate_block()

    @_handles(ExprToken.EX_ComputedJump)
    def _computed_jump(self, ctx: DisassemblyContext, expr: ComputedJumpExpr, op_offset: int) -> None:
        ctx.emit(op_offset, expr.token, "Offset specified by expression:")
        with ctx.indented():
            self._process(ctx, expr.offset_expression)
        ctx.separate_block()

    @_handles(ExprToken.EX_JumpIfNot)
    def _jump_if_not(self, ctx: DisassemblyContext, expr: JumpIfNotExpr, op_offset: int) -> None:
        ctx.advance(INT32_SIZE)
        ctx.emit(op_offset, expr.token, f"Offset: {format_hex(expr.code_offset)}, Condition:")
        self._process(ctx, expr.condition)

    @_handles(ExprToken.EX_PushExecutionFlow)
    def _push_flow(self, ctx: DisassemblyContext, expr: PushExecutionFlowExpr, op_offset: int) -> None:
        ctx.advance(INT32_SIZE)
        ctx.emit(op_offset, expr.token, f"FlowStack.Push({format_hex(expr.pushing_address)})")

    @_handles(ExprToken.EX_PopExecutionFlow)
    def _pop_flow(self, ctx: DisassemblyContext, expr: MarkerExpr, op_offset: int) -> None:
        ctx.emit(op_offset, expr.token, "Jump to statement at FlowStack.Pop()")
        ctx.separate_block()

    @_handles(ExprToken.EX_Assert)
    def _assert(self, ctx: DisassemblyContext, expr: AssertExpr, op_offset: int) -> None:
        ctx.advance(UINT16_SIZE)
        ctx.advance(BYTE_SIZE)
        ctx.emit(
            op_offset,
            expr.token,
            f"Line {expr.line_number}, in debug mode = {bool(expr.debug_mode)} with expr:",
        )
        self._process(ctx, expr.expression)

    @_handles(ExprToken.EX_Skip)
    def _skip(self, ctx: DisassemblyContext, expr: SkipExpr, op_offset: int) -> None:
        ctx.advance(INT32_SIZE)
        ctx.emit(op_offset, expr.token, f"Possibly skip {expr.code_offset} bytes of expr:")
        self._process(ctx, expr.expression)

    @_handles(ExprToken.EX_SwitchValue)
    def _switch_value(self, ctx: DisassemblyContext, expr: SwitchValueExpr, op_offset: int) -> None:
        ctx.advance(UINT16_SIZE)
        ctx.advance(INT32_SIZE)
        ctx.emit(op_offset, expr.token, f"{len(expr.cases)} cases, end at {format_hex(expr.end_offset)}")
        with ctx.indented():
            ctx.note("Index:")
            self._process(ctx, expr.index_term)
            for index, case in enumerate(expr.cases):
                ctx.note(f"Case {index}:")
                self._process(ctx, case.value)
                with ctx.indented():
                    ctx.advance(INT32_SIZE)
                    ctx.note(f"Offset of next case: {format_hex(case.next_offset)}")
                    ctx.note("Case Term:")
                    self._process(ctx, case.term)
            ctx.note("Default term:")
            self._process(ctx, expr.default_term)

    _UNARY_DETAILS = {
        ExprToken.EX_PopExecutionFlowIfNot: "Jump to statement at FlowStack.Pop(). Condition:",
    }

    @_handles(
        ExprToken.EX_Return,
        ExprToken.EX_InterfaceContext,
        ExprToken.EX_SoftObjectConst,
        ExprToken.EX_FieldPathConst,
        ExprToken.EX_ClearMulticastDelegate,
        ExprToken.EX_PopExecutionFlowIfNot,
    )
    def _unary(self, ctx: DisassemblyContext, expr: UnaryExpr, op_offset: int) -> None:
        ctx.emit(op_offset, expr.token, self._UNARY_DETAILS.get(expr.token))
        self._process(ctx, expr.operand)

    @_handles(
        ExprToken.EX_Nothing,
        ExprToken.EX_EndOfScript,
        ExprToken.EX_IntZero,
        ExprToken.EX_IntOne,
        ExprToken.EX_True,
        ExprToken.EX_False,
        ExprToken.EX_NoObject,
        ExprToken.EX_NoInterface,
        ExprToken.EX_Self,
        ExprToken.EX_EndParmValue,
        ExprToken.EX_Breakpoint,
        ExprToken.EX_WireTracepoint,
        ExprToken.EX_Tracepoint,
    )
    def _marker(self, ctx: DisassemblyContext, expr: MarkerExpr, op_offset: int) -> None:
        ctx.emit(op_offset, expr.token)

    @_handles(ExprToken.EX_DeprecatedOp4A)
    def _deprecated(self, ctx: DisassemblyContext, expr: MarkerExpr, op_offset: int) -> None:
        ctx.emit(op_offset, expr.token, "This opcode has been removed and does nothing.")

    @_handles(ExprToken.EX_InstrumentationEvent)
    def _instrumentation(
        self, ctx: DisassemblyContext, expr: InstrumentationEventExpr, op_offset: int
    ) -> None:
        ctx.advance(BYTE_SIZE)
        if expr.event_type == InstrumentationType.InlineEvent:
            ctx.advance(NAME_SIZE)
        # The VM always skips one further byte after the event type.
        ctx.advance(BYTE_SIZE)
        ctx.emit(op_offset, expr.token, enum_label(InstrumentationType, expr.event_type))

    # ------------------------------------------------------------------
    # delegates
    # ------------------------------------------------------------------
    @_handles(ExprToken.EX_InstanceDelegate)
    def _instance_delegate(self, ctx: DisassemblyContext, expr: InstanceDelegateExpr, op_offset: int) -> None:
        ctx.advance(NAME_SIZE)
        ctx.emit(op_offset, expr.token, expr.function_name)

    @_handles(ExprToken.EX_AddMulticastDelegate, ExprToken.EX_RemoveMulticastDelegate)
    def _multicast_delegate(self, ctx: DisassemblyContext, expr: MulticastDelegateExpr, op_offset: int) -> None:
        ctx.emit(op_offset, expr.token)
        self._process(ctx, expr.delegate)
        self._process(ctx, expr.delegate_to_add)

    @_handles(ExprToken.EX_BindDelegate)
    def _bind_delegate(self, ctx: DisassemblyContext, expr: BindDelegateExpr, op_offset: int) -> None:
        ctx.advance(NAME_SIZE)
        ctx.emit(op_offset, expr.token, expr.function_name)
        with ctx.indented():
            ctx.note("Delegate:")
            self._process(ctx, expr.delegate)
            ctx.note("Object:")
            self._process(ctx, expr.object_term)

    # ------------------------------------------------------------------
    # constants
    # ------------------------------------------------------------------
    @_handles(
        ExprToken.EX_IntConst,
        ExprToken.EX_Int64Const,
        ExprToken.EX_UInt64Const,
        ExprToken.EX_SkipOffsetConst,
        ExprToken.EX_FloatConst,
        ExprToken.EX_DoubleConst,
        ExprToken.EX_StringConst,
        ExprToken.EX_UnicodeStringConst,
        ExprToken.EX_NameConst,
        ExprToken.EX_ByteConst,
        ExprToken.EX_IntConstByte,
    )
    def _literal(self, ctx: DisassemblyContext, expr: LiteralExpr, op_offset: int) -> None:
        token = expr.token
        value = expr.value
        if token == ExprToken.EX_IntConst:
            ctx.advance(INT32_SIZE)
            detail = str(int(value))
        elif token in (ExprToken.EX_Int64Const, ExprToken.EX_UInt64Const):
            ctx.advance(INT64_SIZE)
            detail = str(int(value))
        elif token == ExprToken.EX_SkipOffsetConst:
            ctx.advance(INT32_SIZE)
            detail = format_hex(int(value))
        elif token == ExprToken.EX_FloatConst:
            ctx.advance(FLOAT_SIZE)
            detail = format_float(float(value))
        elif token == ExprToken.EX_DoubleConst:
            ctx.advance(DOUBLE_SIZE)
            detail = format_float(float(value))
        elif token == ExprToken.EX_StringConst:
            ctx.advance_ascii(str(value))
            detail = str(value)
        elif token == ExprToken.EX_UnicodeStringConst:
            ctx.advance_unicode(str(value))
            detail = str(value)
        elif token == ExprToken.EX_NameConst:
            ctx.advance(NAME_SIZE)
            detail = str(value)
        else:
            ctx.advance(BYTE_SIZE)
            detail = format_hex(int(value))
        ctx.emit(op_offset, token, detail)

    @_handles(ExprToken.EX_PropertyConst)
    def _property_const(self, ctx: DisassemblyContext, expr: PropertyConstExpr, op_offset: int) -> None:
        ctx.advance(FIELD_SIZE)
        ctx.emit(op_offset, expr.token, self._path(expr.property))

    @_handles(ExprToken.EX_ObjectConst)
    def _object_const(self, ctx: DisassemblyContext, expr: ObjectConstExpr, op_offset: int) -> None:
        ctx.advance(OBJECT_SIZE)
        ctx.emit(op_offset, expr.token, _object_name(expr.value))

    @_handles(ExprToken.EX_RotationConst)
    def _rotation_const(self, ctx: DisassemblyContext, expr: RotationConstExpr, op_offset: int) -> None:
        ctx.advance_coordinates(3)
        ctx.emit(
            op_offset,
            expr.token,
            f"Pitch={format_float(expr.pitch)}, Yaw={format_float(expr.yaw)}, Roll={format_float(expr.roll)}",
        )

    @_handles(ExprToken.EX_VectorConst)
    def _vector_const(self, ctx: DisassemblyContext, expr: VectorConstExpr, op_offset: int) -> None:
        ctx.advance_coordinates(3)
        ctx.emit(
            op_offset,
            expr.token,
            f"X={format_float(expr.x)}, Y={format_float(expr.y)}, Z={format_float(expr.z)}",
        )

    @_handles(ExprToken.EX_TransformConst)
    def _transform_const(self, ctx: DisassemblyContext, expr: TransformConstExpr, op_offset: int) -> None:
        # rotation quaternion, translation, scale
        ctx.advance_coordinates(4 + 3 + 3)
        rx, ry, rz, rw = expr.rotation
        tx, ty, tz = expr.translation
        sx, sy, sz = expr.scale
        detail = (
            f"Rotation=(X={format_float(rx)}, Y={format_float(ry)}, Z={format_float(rz)}, W={format_float(rw)}) "
            f"Translation=(X={format_float(tx)}, Y={format_float(ty)}, Z={format_float(tz)}) "
            f"Scale3D=(X={format_float(sx)}, Y={format_float(sy)}, Z={format_float(sz)})"
        )
        ctx.emit(op_offset, expr.token, detail)

    @_handles(ExprToken.EX_TextConst)
    def _text_const(self, ctx: DisassemblyContext, expr: TextConstExpr, op_offset: int) -> None:
        text = expr.text
        ctx.advance(BYTE_SIZE)
        kind = text.literal_type
        if kind == TextLiteralType.Empty:
            ctx.emit(op_offset, expr.token, "Empty")
        elif kind == TextLiteralType.LocalizedText:
            ctx.emit(op_offset, expr.token, "Localized {")
            with ctx.indented():
                self._labelled(ctx, "namespace: ", text.namespace)
                self._labelled(ctx, "key: ", text.key)
                self._labelled(ctx, "source: ", text.source)
            ctx.note("}")
        elif kind in (TextLiteralType.InvariantText, TextLiteralType.LiteralString):
            opening = "Invariant {" if kind == TextLiteralType.InvariantText else "Literal {"
            ctx.emit(op_offset, expr.token, opening)
            with ctx.indented():
                self._process(ctx, text.source)
            ctx.note("}")
        elif kind == TextLiteralType.StringTableEntry:
            ctx.advance(OBJECT_SIZE)
            ctx.emit(op_offset, expr.token, "String table entry {")
            with ctx.indented():
                self._labelled(ctx, "tableid: ", text.table_id)
                self._labelled(ctx, "key: ", text.key)
            ctx.note("}")
        else:
            raise MalformedStream(f"unexpected text literal type {kind} at 0x{op_offset:X}")

    def _labelled(self, ctx: DisassemblyContext, label: str, expr: Optional[Expr]) -> None:
        ctx.note(label)
        with ctx.indented():
            self._process(ctx, expr)

    # ------------------------------------------------------------------
    # aggregate literals
    # ------------------------------------------------------------------
    @_handles(ExprToken.EX_StructConst)
    def _struct_const(self, ctx: DisassemblyContext, expr: StructConstExpr, op_offset: int) -> None:
        ctx.advance(OBJECT_SIZE)
        ctx.advance(INT32_SIZE)
        ctx.emit(op_offset, expr.token, f"{_object_name(expr.struct)} (serialized size: {expr.struct_size})")
        self._process_list(ctx, expr.properties)

    @_handles(ExprToken.EX_SetArray)
    def _set_array(self, ctx: DisassemblyContext, expr: SetArrayExpr, op_offset: int) -> None:
        ctx.emit(op_offset, expr.token)
        if ctx.flags.setarray_has_property:
            self._process(ctx, expr.assigning_property)
        else:
            ctx.note(_text(expr.inner_property))
        self._process_list(ctx, expr.elements)

    @_handles(ExprToken.EX_ArrayConst)
    def _array_const(self, ctx: DisassemblyContext, expr: ArrayConstExpr, op_offset: int) -> None:
        ctx.advance(FIELD_SIZE)
        ctx.advance(INT32_SIZE)
        ctx.emit(
            op_offset,
            expr.token,
            f"Type: {self._path(expr.inner_property)}, Count: {len(expr.elements)}",
        )
        self._process_list(ctx, expr.elements)

    @_handles(ExprToken.EX_SetSet)
    def _set_set(self, ctx: DisassemblyContext, expr: SetSetExpr, op_offset: int) -> None:
        ctx.emit(op_offset, expr.token)
        self._process(ctx, expr.set_property)
        ctx.advance(INT32_SIZE)
        self._process_list(ctx, expr.elements)

    @_handles(ExprToken.EX_SetConst)
    def _set_const(self, ctx: DisassemblyContext, expr: SetConstExpr, op_offset: int) -> None:
        ctx.advance(FIELD_SIZE)
        ctx.advance(INT32_SIZE)
        ctx.emit(
            op_offset,
            expr.token,
            f"Element count: {len(expr.elements)}, inner property: {self._path(expr.inner_property)}",
        )
        self._process_list(ctx, expr.elements)

    @_handles(ExprToken.EX_SetMap)
    def _set_map(self, ctx: DisassemblyContext, expr: SetMapExpr, op_offset: int) -> None:
        ctx.emit(op_offset, expr.token, f"Element count: {len(expr.elements)}")
        self._process(ctx, expr.map_property)
        ctx.advance(INT32_SIZE)
        self._process_list(ctx, expr.elements)

    @_handles(ExprToken.EX_MapConst)
    def _map_const(self, ctx: DisassemblyContext, expr: MapConstExpr, op_offset: int) -> None:
        ctx.advance(FIELD_SIZE)
        ctx.advance(FIELD_SIZE)
        ctx.advance(INT32_SIZE)
        ctx.emit(
            op_offset,
            expr.token,
            f"Element count: {len(expr.elements)}, key property: {self._path(expr.key_property)}, "
            f"value property: {self._path(expr.value_property)}",
        )
        self._process_list(ctx, expr.elements)


HANDLED_TOKENS = frozenset(_HANDLERS)
