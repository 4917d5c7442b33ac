import logging
from pathlib import Path

from bpdump import BlueprintAsset, BlueprintDumper, ClassExport, FunctionExport
from bpdump.defaults import PropertyTag, StructValue
from bpdump.dumper import SECTION_DIVIDER, list_assets, matching_paths, sanitize_filename
from bpdump.fields import Field
from bpdump.flags import ClassFlags, FunctionFlags, PropertyFlags
from bpdump.nodes import (
    ClassCastExpr,
    FinalFunctionExpr,
    LiteralExpr,
    MarkerExpr,
    ObjectConstExpr,
    ObjectRef,
    StructConstExpr,
    UnaryExpr,
    VariableExpr,
)
from bpdump.tokens import ExprToken as T

PARM = int(PropertyFlags.CPF_Parm)
OUT_PARM = int(PropertyFlags.CPF_Parm | PropertyFlags.CPF_OutParm)


def _return() -> UnaryExpr:
    return UnaryExpr(T.EX_Return, MarkerExpr(T.EX_Nothing))


def _helper_function() -> FunctionExport:
    return FunctionExport(
        name="AddAmount",
        flags=FunctionFlags.FUNC_Public | FunctionFlags.FUNC_BlueprintCallable,
        fields=(
            Field("FIntProperty", "Amount", property_flags=PARM),
            Field("FBoolProperty", "Result", property_flags=OUT_PARM),
            Field("FFloatProperty", "Temp"),
        ),
        bytecode=(_return(), MarkerExpr(T.EX_EndOfScript)),
    )


def _door_class() -> ClassExport:
    return ClassExport(
        name="BP_Door_C",
        super_name="Actor",
        flags=ClassFlags.CLASS_CompiledFromBlueprint,
        config_name="Engine",
        fields=(
            Field("FBoolProperty", "bOpen"),
            Field("FStructProperty", "UberGraphFrame", struct="PointerToUberGraphFrame"),
        ),
        defaults=(
            PropertyTag("bOpen", True),
            PropertyTag("PrimaryActorTick", StructValue("TickFunction", (PropertyTag("bCanEverTick", False),))),
        ),
    )


def _door_asset(*extra) -> BlueprintAsset:
    ubergraph = FunctionExport(
        name="ExecuteUbergraph_BP_Door",
        flags=FunctionFlags.FUNC_UbergraphFunction | FunctionFlags.FUNC_Final,
        bytecode=tuple(MarkerExpr(T.EX_Nothing) for _ in range(8)) + (_return(),),
    )
    event = FunctionExport(
        name="ReceiveBeginPlay",
        flags=FunctionFlags.FUNC_Event | FunctionFlags.FUNC_BlueprintEvent,
        bytecode=(
            FinalFunctionExpr(
                T.EX_LocalFinalFunction,
                ObjectRef("ExecuteUbergraph_BP_Door"),
                (LiteralExpr(T.EX_IntConst, 4),),
            ),
            _return(),
        ),
    )
    return BlueprintAsset(
        name="BP_Door",
        path="Game/Blueprints/BP_Door.uasset",
        exports=[ubergraph, event, _helper_function(), _door_class(), *extra],
    )


def test_function_report_layout():
    report, link = BlueprintDumper().render_function(_door_asset(), _helper_function())

    assert link is None
    assert report.file_name == "Function_AddAmount.txt"
    assert report.text == "\n".join(
        [
            "Function: AddAmount",
            "Flags: Public, BlueprintCallable",
            "",
            SECTION_DIVIDER,
            "Inputs",
            SECTION_DIVIDER,
            "Name: Amount",
            "Type: Int",
            "Flags: Parm",
            "",
            SECTION_DIVIDER,
            "Outputs",
            SECTION_DIVIDER,
            "Name: Result",
            "Type: Bool",
            "Flags: Parm, OutParm",
            "",
            SECTION_DIVIDER,
            "Locals",
            SECTION_DIVIDER,
            "Name: Temp",
            "Type: Float",
            "",
            SECTION_DIVIDER,
            "Code",
            SECTION_DIVIDER,
            "00000000  [04] Return",
            "00000001    [0B] Nothing",
            "00000002  [53] EndOfScript",
        ]
    ) + "\n"


def test_class_report_applies_defaults():
    report = BlueprintDumper().render_class(_door_class())
    lines = report.text.splitlines()

    assert report.file_name == "Class_BP_Door.txt"
    assert lines[:4] == [
        "Class: BP_Door_C",
        "Parent: Actor",
        "Flags: CompiledFromBlueprint",
        "Config: Engine",
    ]
    assert "Default: True" in lines
    assert "UberGraphFrame" not in report.text
    overrides = lines[lines.index("Parent property overrides") + 2:]
    assert overrides == ["PrimaryActorTick = {", "  bCanEverTick = False", "}"]


def test_dump_asset_writes_reports_and_links_events(tmp_path: Path):
    summary = BlueprintDumper().dump_asset(_door_asset(), tmp_path)

    target = tmp_path / "BP_Door"
    names = sorted(path.name for path in target.iterdir())
    assert names == [
        "Class_BP_Door.txt",
        "Function_AddAmount.txt",
        "Function_ReceiveBeginPlay.txt",
        "Graph_ExecuteUbergraph.txt",
    ]
    assert summary.failed == []
    assert len(summary.written) == 4

    graph = (target / "Graph_ExecuteUbergraph.txt").read_text("utf-8").splitlines()
    index = graph.index("00000004  [0B] Nothing")
    assert graph[index - 1] == "          Event: ReceiveBeginPlay"


def test_failing_export_is_logged_and_skipped(tmp_path: Path, caplog):
    native = FunctionExport(name="NativeHelper")
    with caplog.at_level(logging.ERROR, logger="bpdump.dumper"):
        summary = BlueprintDumper().dump_asset(_door_asset(native), tmp_path)

    assert summary.failed == ["NativeHelper"]
    assert len(summary.written) == 4
    assert 'Error processing export "NativeHelper" from asset "BP_Door"' in caplog.text
    assert "[BytecodeUnavailable]" in caplog.text


def test_delegate_signature_file_name():
    delegate = FunctionExport(
        name="OnOpened__DelegateSignature",
        flags=FunctionFlags.FUNC_Delegate | FunctionFlags.FUNC_Public,
        bytecode=(),
    )
    report, _ = BlueprintDumper().render_function(_door_asset(), delegate)
    assert report.file_name == "Delegate_OnOpened.txt"


def test_sanitize_filename():
    assert sanitize_filename('Get<Value>:"x"') == "Get_Value___x_"


def test_asset_listing(tmp_path: Path):
    paths = ["Game/BP_Door.uasset", "Game/Maps/Level.uasset", "Game/bp_window.uasset"]
    assert matching_paths(paths, "BP_") == ["Game/BP_Door.uasset", "Game/bp_window.uasset"]

    selected = list_assets(paths, "door", tmp_path)

    assert selected == ["Game/BP_Door.uasset"]
    assert (tmp_path / "AssetList.txt").read_text("utf-8") == "Game/BP_Door.uasset\n"


def test_unexpected_error_in_one_export_is_isolated(tmp_path: Path, caplog):
    broken = FunctionExport(name="Bad", bytecode=(VariableExpr(T.EX_LocalVariable, "Health"),))
    with caplog.at_level(logging.ERROR, logger="bpdump.dumper"):
        summary = BlueprintDumper().dump_asset(_door_asset(broken), tmp_path)

    assert summary.failed == ["Bad"]
    assert len(summary.written) == 4
    assert "[AttributeError]" in caplog.text


def test_null_object_references_render_empty():
    function = FunctionExport(
        name="Casts",
        bytecode=(
            ClassCastExpr(T.EX_DynamicCast, None, MarkerExpr(T.EX_Self)),
            StructConstExpr(T.EX_StructConst, None, 0),
            ObjectConstExpr(T.EX_ObjectConst, None),
        ),
    )
    report, _ = BlueprintDumper().render_function(_door_asset(), function)

    assert report.text.splitlines()[-4:] == [
        "00000000  [2E] DynamicCast: Cast to  of expr:",
        "00000009    [17] Self",
        "0000000A  [2F] StructConst:  (serialized size: 0)",
        "00000018  [20] ObjectConst: ",
    ]
