import random

import pytest

from bpdump import Disassembler, FunctionExport, VersionFlags
from bpdump.disassembler import BLOCK_SEPARATOR, HANDLED_TOKENS, EventLink, index_event_links
from bpdump.errors import BytecodeUnavailable, MalformedStream, UnsupportedOpcode
from bpdump.flags import FunctionFlags
from bpdump.nodes import (
    ArrayConstExpr,
    FinalFunctionExpr,
    JumpExpr,
    JumpIfNotExpr,
    LetExpr,
    LiteralExpr,
    MapConstExpr,
    MarkerExpr,
    ObjectRef,
    PrimitiveCastExpr,
    PropertyPointer,
    ScriptText,
    SetArrayExpr,
    SetConstExpr,
    SetMapExpr,
    SetSetExpr,
    StructConstExpr,
    SwitchCase,
    SwitchValueExpr,
    TextConstExpr,
    UnaryExpr,
    UnknownExpr,
    VariableExpr,
    VectorConstExpr,
    VirtualFunctionExpr,
)
from bpdump.tokens import SUPPORTED_TOKENS, ExprToken as T


def _int(value: int) -> LiteralExpr:
    return LiteralExpr(T.EX_IntConst, value)


def _marker(token: T) -> MarkerExpr:
    return MarkerExpr(token)


def _local(*path: str) -> VariableExpr:
    return VariableExpr(T.EX_LocalVariable, PropertyPointer(path))


def _lines(instructions, flags=None, **kwargs):
    result = Disassembler(flags).disassemble(instructions, **kwargs)
    return result.text.splitlines()


def _offset_of(lines, label: str) -> int:
    for line in lines:
        if f"] {label}" in line:
            return int(line[:8], 16)
    raise AssertionError(f"{label} not found in listing")


def test_let_listing_layout():
    script = [
        LetExpr(T.EX_Let, _local("Counter"), _int(5)),
        UnaryExpr(T.EX_Return, _marker(T.EX_Nothing)),
        _marker(T.EX_EndOfScript),
    ]

    assert _lines(script) == [
        "00000000  [0F] Let: Variable = Expression",
        "            Variable:",
        "00000009      [00] LocalVariable: Counter",
        "            Expression:",
        "00000012      [1D] IntConst: 5",
        "00000017  [04] Return",
        "00000018    [0B] Nothing",
        "00000019  [53] EndOfScript",
    ]


def test_listing_is_deterministic():
    script = [
        LetExpr(T.EX_Let, _local("A", "B"), LiteralExpr(T.EX_FloatConst, 1.5)),
        _marker(T.EX_EndOfScript),
    ]
    first = Disassembler().disassemble(script).text
    second = Disassembler().disassemble(script).text
    assert first == second


def test_parameter_list_counts_terminator():
    params = [_int(1), _int(2), _int(3)]
    lines = _lines([VirtualFunctionExpr(T.EX_VirtualFunction, "Foo", tuple(params)), _marker(T.EX_Nothing)])

    assert lines[0] == "00000000  [1B] VirtualFunction: Foo"
    # tag + name + three int constants + terminator
    assert _offset_of(lines, "Nothing") == 1 + 12 + 3 * 5 + 1


def test_empty_parameter_list_still_has_terminator():
    lines = _lines([VirtualFunctionExpr(T.EX_VirtualFunction, "Bar"), _marker(T.EX_Nothing)])
    assert _offset_of(lines, "Nothing") == 1 + 12 + 1


def test_vector_size_depends_on_coordinate_width():
    script = [VectorConstExpr(T.EX_VectorConst, 1.0, 2.5, -3.0), _marker(T.EX_EndOfScript)]

    narrow = _lines(script, VersionFlags(large_world_coordinates=False))
    wide = _lines(script, VersionFlags(large_world_coordinates=True))

    assert narrow[0] == "00000000  [23] VectorConst: X=1.0, Y=2.5, Z=-3.0"
    assert _offset_of(narrow, "EndOfScript") == 13
    assert _offset_of(wide, "EndOfScript") == 25


def test_large_world_flag_follows_file_version():
    assert not VersionFlags.from_file_versions(522, 1003).large_world_coordinates
    assert VersionFlags.from_file_versions(522, 1004).large_world_coordinates
    assert VersionFlags.from_file_versions(None).setarray_has_property


def test_string_sizes():
    lines = _lines(
        [
            LiteralExpr(T.EX_StringConst, "abc"),
            LiteralExpr(T.EX_UnicodeStringConst, "hé"),
            _marker(T.EX_Nothing),
        ]
    )

    assert lines[0] == "00000000  [1F] StringConst: abc"
    assert _offset_of(lines, "UnicodeStringConst") == 5
    assert _offset_of(lines, "Nothing") == 5 + 1 + (2 + 1) * 2


def test_jump_ends_block():
    lines = _lines([JumpExpr(T.EX_Jump, 0x20), _marker(T.EX_Nothing)])
    assert lines == [
        "00000000  [06] Jump: Offset = 0x20",
        BLOCK_SEPARATOR,
        "00000005  [0B] Nothing",
    ]


def test_primitive_cast_uses_conversion_name():
    lines = _lines([PrimitiveCastExpr(T.EX_Cast, 0x47, _local("Target"))])
    assert lines[0] == "00000000  [38] PrimitiveCast: Type ObjectToBool"
    assert lines[1] == "          Argument:"
    assert _offset_of(lines, "LocalVariable") == 2


def test_unknown_conversion_renders_numerically():
    lines = _lines([PrimitiveCastExpr(T.EX_Cast, 3, _local("Target"))])
    assert lines[0].endswith("Type 3")


def test_switch_value_layout():
    switch = SwitchValueExpr(
        T.EX_SwitchValue,
        index_term=_local("Index"),
        end_offset=0x40,
        cases=(SwitchCase(_int(0), 0x30, LiteralExpr(T.EX_NameConst, "Zero")),),
        default_term=LiteralExpr(T.EX_NameConst, "Other"),
    )
    lines = _lines([switch])

    assert lines[0] == "00000000  [69] SwitchValue: 1 cases, end at 0x40"
    assert "              Offset of next case: 0x30" in lines
    # header (1 + 2 + 4), index (9), case value (5), next offset (4)
    assert _offset_of(lines, "NameConst: Zero") == 7 + 9 + 5 + 4
    assert _offset_of(lines, "NameConst: Other") == 7 + 9 + 5 + 4 + 13


def _event_stub(name: str, target: int) -> FunctionExport:
    call = FinalFunctionExpr(
        T.EX_LocalFinalFunction, ObjectRef("ExecuteUbergraph_BP_Door"), (_int(target),)
    )
    return FunctionExport(
        name=name,
        flags=FunctionFlags.FUNC_Event | FunctionFlags.FUNC_BlueprintEvent,
        bytecode=(call, UnaryExpr(T.EX_Return, _marker(T.EX_Nothing)), _marker(T.EX_EndOfScript)),
    )


def test_event_stub_yields_link():
    disassembler = Disassembler()
    result = disassembler.disassemble_function(_event_stub("ReceiveBeginPlay", 10))

    assert result.event_link is not None
    assert result.event_link.name == "ReceiveBeginPlay"
    assert result.event_link.offset == 10


def test_non_event_call_yields_no_link():
    function = FunctionExport(
        name="Helper",
        bytecode=(FinalFunctionExpr(T.EX_LocalFinalFunction, ObjectRef("Other"), (_int(3),)),),
    )
    assert Disassembler().disassemble_function(function).event_link is None


def test_ubergraph_listing_marks_event_entry():
    disassembler = Disassembler()
    link = disassembler.disassemble_function(_event_stub("ReceiveBeginPlay", 10)).event_link
    graph = [_marker(T.EX_Nothing) for _ in range(12)]

    lines = _lines(graph, event_links=index_event_links([link]))

    index = lines.index("0000000A  [0B] Nothing")
    assert lines[index - 1] == "          Event: ReceiveBeginPlay"
    assert sum(1 for line in lines if "Event:" in line) == 1


def test_text_literal_variants():
    localized = TextConstExpr(
        T.EX_TextConst,
        ScriptText(
            literal_type=1,
            namespace=LiteralExpr(T.EX_StringConst, ""),
            key=LiteralExpr(T.EX_StringConst, "K"),
            source=LiteralExpr(T.EX_StringConst, "Hi"),
        ),
    )
    lines = _lines([localized])
    assert lines[0] == "00000000  [29] TextConst: Localized {"
    assert lines[-1] == "          }"
    assert _offset_of(lines, "StringConst: K") == 2 + 2


def test_unknown_text_literal_type_is_malformed():
    bad = TextConstExpr(T.EX_TextConst, ScriptText(literal_type=9))
    with pytest.raises(MalformedStream):
        Disassembler().disassemble([bad])


def test_unsupported_opcode_reports_tag():
    with pytest.raises(UnsupportedOpcode) as info:
        Disassembler().disassemble([_marker(T.EX_Nothing), UnknownExpr(0xEE)])
    assert info.value.offset == 1
    assert "0xEE" in str(info.value)


def test_opcode_outside_table_is_rejected():
    with pytest.raises(UnsupportedOpcode):
        Disassembler().disassemble([UnknownExpr(T.EX_BitFieldConst, "EX_BitFieldConst")])


def test_terminator_as_node_is_malformed():
    with pytest.raises(MalformedStream):
        Disassembler().disassemble([_marker(T.EX_EndArray)])


def test_wrong_record_is_malformed():
    with pytest.raises(MalformedStream):
        Disassembler().disassemble([LiteralExpr(T.EX_Let, 3)])


def test_excessive_nesting_is_malformed():
    expr = _marker(T.EX_Nothing)
    for _ in range(300):
        expr = UnaryExpr(T.EX_Return, expr)
    with pytest.raises(MalformedStream):
        Disassembler().disassemble([expr])


def test_missing_bytecode_is_reported():
    with pytest.raises(BytecodeUnavailable):
        Disassembler().disassemble_function(FunctionExport(name="Native"))


def test_every_supported_token_has_a_handler():
    assert HANDLED_TOKENS == SUPPORTED_TOKENS


def _pair():
    return (_int(1), _int(2))


@pytest.mark.parametrize(
    "expr, size",
    [
        # tag + struct + serialized size + elements + terminator
        (StructConstExpr(T.EX_StructConst, ObjectRef("Pair"), 8, _pair()), 1 + 8 + 4 + 10 + 1),
        (ArrayConstExpr(T.EX_ArrayConst, PropertyPointer(("Inner",)), _pair()), 1 + 8 + 4 + 10 + 1),
        (SetConstExpr(T.EX_SetConst, PropertyPointer(("Inner",)), _pair()), 1 + 8 + 4 + 10 + 1),
        (
            MapConstExpr(T.EX_MapConst, PropertyPointer(("Key",)), PropertyPointer(("Value",)), _pair()),
            1 + 8 + 8 + 4 + 10 + 1,
        ),
        (SetSetExpr(T.EX_SetSet, _local("Tags"), _pair()), 1 + 9 + 4 + 10 + 1),
        (SetMapExpr(T.EX_SetMap, _local("Lookup"), _pair()), 1 + 9 + 4 + 10 + 1),
        (SetArrayExpr(T.EX_SetArray, _pair(), _local("Items")), 1 + 9 + 10 + 1),
    ],
)
def test_aggregate_literals_count_terminator(expr, size):
    lines = _lines([expr, _marker(T.EX_Nothing)])
    assert _offset_of(lines, "Nothing") == size


def test_set_array_before_assigning_property_revision():
    flags = VersionFlags(setarray_has_property=False)
    expr = SetArrayExpr(T.EX_SetArray, _pair(), inner_property="Items")

    lines = _lines([expr, _marker(T.EX_Nothing)], flags)

    assert lines[:3] == [
        "00000000  [31] SetArray",
        "          Items",
        "00000001    [1D] IntConst: 1",
    ]
    assert _offset_of(lines, "Nothing") == 1 + 10 + 1


def _random_tree(rng: random.Random, depth: int):
    """Return a random fixed-size expression and its serialized size."""

    if depth >= 5 or rng.random() < 0.3:
        choice = rng.randrange(5)
        if choice == 0:
            return _int(rng.randrange(100)), 5
        if choice == 1:
            return _marker(T.EX_Nothing), 1
        if choice == 2:
            return _local("Var"), 9
        if choice == 3:
            return LiteralExpr(T.EX_NameConst, "Name"), 13
        return LiteralExpr(T.EX_ByteConst, rng.randrange(256)), 2

    children = [_random_tree(rng, depth + 1) for _ in range(rng.randrange(4))]
    exprs = tuple(expr for expr, _ in children)
    total = sum(size for _, size in children)
    choice = rng.randrange(5)
    if choice == 0:
        operand, size = _random_tree(rng, depth + 1)
        return UnaryExpr(T.EX_Return, operand), 1 + size
    if choice == 1:
        variable, left = _random_tree(rng, depth + 1)
        value, right = _random_tree(rng, depth + 1)
        return LetExpr(T.EX_Let, variable, value), 1 + 8 + left + right
    if choice == 2:
        return VirtualFunctionExpr(T.EX_VirtualFunction, "Call", exprs), 1 + 12 + total + 1
    if choice == 3:
        return StructConstExpr(T.EX_StructConst, ObjectRef("S"), 0, exprs), 1 + 8 + 4 + total + 1
    condition, size = _random_tree(rng, depth + 1)
    return JumpIfNotExpr(T.EX_JumpIfNot, 0x10, condition), 1 + 4 + size


def test_random_trees_end_at_summed_size():
    rng = random.Random(1234)
    for _ in range(200):
        tree, size = _random_tree(rng, 0)
        lines = _lines([tree, _marker(T.EX_EndOfScript)])
        assert int(lines[-1][:8], 16) == size
        assert lines[-1].endswith("[53] EndOfScript")


def test_event_link_requires_constant_offset():
    call = FinalFunctionExpr(T.EX_LocalFinalFunction, ObjectRef("ExecuteUbergraph_BP_Door"), (_local("Target"),))
    with pytest.raises(MalformedStream):
        EventLink("ReceiveTick", call)


def test_byte_constants_render_hex():
    lines = _lines([LiteralExpr(T.EX_ByteConst, 31), LiteralExpr(T.EX_IntConstByte, 7)])

    assert lines == [
        "00000000  [24] ByteConst: 0x1F",
        "00000002  [2C] IntConstByte: 0x7",
    ]
