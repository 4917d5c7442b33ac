from bpdump.defaults import (
    ArrayValue,
    MapValue,
    OpaqueStruct,
    PropertyTag,
    SetValue,
    StructValue,
    render_value,
)


def test_scalars():
    assert render_value(3) == "3"
    assert render_value(2.5) == "2.5"
    assert render_value(4.0) == "4"
    assert render_value(True) == "True"
    assert render_value("Door") == "Door"
    assert render_value(None) is None


def test_empty_containers_render_as_braces():
    assert render_value(ArrayValue()) == "{ }"
    assert render_value(SetValue()) == "{ }"
    assert render_value(MapValue()) == "{ }"
    assert render_value(StructValue("Vector")) == "{ }"


def test_struct_fields_are_comma_separated():
    value = StructValue("Pair", (PropertyTag("a", 1), PropertyTag("b", 2)))
    assert render_value(value) == "{\n  a = 1,\n  b = 2\n}"


def test_nested_containers_indent():
    value = ArrayValue((ArrayValue((1, 2)), ArrayValue()))
    assert render_value(value) == "{\n  {\n    1,\n    2\n  },\n  { }\n}"


def test_map_entries():
    value = MapValue((("Key", 1.5), ("Other", None)))
    assert render_value(value) == "{\n  Key = 1.5,\n  Other = \n}"


def test_opaque_struct_renders_type_name():
    value = ArrayValue((OpaqueStruct("Guid"),))
    assert render_value(value) == "{\n  { Guid }\n}"
