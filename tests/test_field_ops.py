import pytest

from household_records.core.field_errors import IndexOutOfRange
from household_records.core.field_ops import (
    add_field,
    clean_select_options,
    create_select_option,
    duplicate_field,
    format_select_options,
    get_active_fields,
    get_fields_by_type,
    get_select_option_label,
    has_valid_select_options,
    parse_select_options,
    remove_field,
    reorder_fields,
    retain_referenced_fields,
    sort_fields_by_order,
    sort_select_options,
    toggle_field_active,
    update_field,
)
from household_records.schemas.dynamic_field import SelectOption
from tests.helpers import make_field


def _abc():
    return [make_field("a", order=0), make_field("b", order=1), make_field("c", order=2)]


def test_sort_is_stable_and_idempotent():
    fields = [
        make_field("x", order=2),
        make_field("y", order=1),
        make_field("z", order=1),
        make_field("w", order=0),
    ]
    once = sort_fields_by_order(fields)
    assert [f.id for f in once] == ["w", "y", "z", "x"]
    assert sort_fields_by_order(once) == once


def test_get_active_fields_preserves_order():
    fields = [make_field("a"), make_field("b", active=False), make_field("c")]
    assert [f.id for f in get_active_fields(fields)] == ["a", "c"]


def test_get_fields_by_type():
    fields = [make_field("a", "number"), make_field("b"), make_field("c", "number")]
    assert [f.id for f in get_fields_by_type(fields, "number")] == ["a", "c"]


def test_reorder_moves_and_renumbers():
    """[A0, B1, C2] moving 0 -> 2 gives [B0, C1, A2]"""
    result = reorder_fields(_abc(), 0, 2)
    assert [(f.id, f.order) for f in result] == [("b", 0), ("c", 1), ("a", 2)]


def test_reorder_uses_sorted_positions_and_densifies():
    fields = [make_field("c", order=30), make_field("a", order=10), make_field("b", order=20)]
    result = reorder_fields(fields, 2, 0)
    assert [(f.id, f.order) for f in result] == [("c", 0), ("a", 1), ("b", 2)]


def test_reorder_does_not_mutate_input():
    fields = _abc()
    reorder_fields(fields, 0, 2)
    assert [(f.id, f.order) for f in fields] == [("a", 0), ("b", 1), ("c", 2)]


@pytest.mark.parametrize("src,dst", [(-1, 0), (0, 3), (3, 0), (0, -1)])
def test_reorder_out_of_range(src, dst):
    with pytest.raises(IndexOutOfRange):
        reorder_fields(_abc(), src, dst)


def test_toggle_twice_restores():
    fields = _abc()
    once = toggle_field_active(fields, "b")
    assert [f.active for f in once] == [True, False, True]
    assert toggle_field_active(once, "b") == fields


def test_toggle_unknown_id_is_noop():
    fields = _abc()
    assert toggle_field_active(fields, "missing") == fields


def test_update_field_keeps_id_and_ignores_unknown():
    fields = _abc()
    updated = update_field(fields, "a", label="Weight", required=True, id="hijack")
    assert updated[0].id == "a"
    assert updated[0].label == "Weight"
    assert updated[0].required is True
    assert fields[0].label == "A"

    assert update_field(fields, "missing", label="x") == fields


def test_update_field_type_change_drops_options():
    fields = [make_field("s", "select", options=[("a", "A")])]
    updated = update_field(fields, "s", type="text")
    assert updated[0].options is None


def test_add_and_remove_field():
    fields = add_field(_abc(), "checkbox")
    assert len(fields) == 4
    assert fields[-1].order == 3
    assert [f.id for f in remove_field(fields, "b")] == ["a", "c", fields[-1].id]
    assert remove_field(fields, "missing") == fields


def test_duplicate_field():
    src = make_field("s", "select", order=0, required=True, options=[("a", "A")], name="mood")
    copy = duplicate_field(src, 5)
    assert copy.id != src.id
    assert copy.order == 5
    assert copy.label == "S (Copy)"
    assert copy.name == "mood_copy"
    assert copy.required is True
    assert copy.options == src.options


def test_retain_referenced_fields():
    previous = _abc()
    incoming = [make_field("a", order=0)]
    result = retain_referenced_fields(previous, incoming, {"b", "zzz"})
    assert [(f.id, f.active, f.order) for f in result] == [("a", True, 0), ("b", False, 1)]


def test_select_option_value_normalization():
    opt = create_select_option("  Dr. Rivera  ")
    assert opt == SelectOption(value="dr_rivera", label="Dr. Rivera")


def test_parse_and_format_select_options():
    options = parse_select_options("Low, Medium ,High,")
    assert [o.value for o in options] == ["low", "medium", "high"]
    assert format_select_options(options) == "Low, Medium, High"
    assert parse_select_options("") == []


def test_clean_select_options():
    options = [
        SelectOption(value=" a ", label="A"),
        SelectOption(value="a", label="Duplicate"),
        SelectOption(value="", label="Blank"),
        SelectOption(value="b", label="  "),
        SelectOption(value="c", label="C"),
    ]
    assert clean_select_options(options) == [SelectOption(value="a", label="A"), SelectOption(value="c", label="C")]


def test_sort_select_options():
    options = [SelectOption(value="b", label="beta"), SelectOption(value="a", label="Alpha")]
    assert [o.value for o in sort_select_options(options)] == ["a", "b"]


def test_has_valid_select_options():
    assert has_valid_select_options(make_field("s", "select", options=[("a", "A")]))
    assert not has_valid_select_options(make_field("s", "select", options=[]))
    assert not has_valid_select_options(make_field("t", "text"))


def test_get_select_option_label():
    f = make_field("s", "select", options=[("a", "Apple")])
    assert get_select_option_label(f, "a") == "Apple"
    assert get_select_option_label(f, "b") is None
