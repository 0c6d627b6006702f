import pytest

from household_records.core.field_validation import (
    coerce_field_value,
    validate_field_value,
    validate_multiple_fields,
)
from household_records.schemas.dynamic_field import FieldValidation
from tests.helpers import make_field


def test_required_text():
    f = make_field("f1", "text", required=True)
    res = validate_field_value(f, "")
    assert res.is_valid is False
    assert res.error
    assert res.code == "required"

    assert validate_field_value(f, "   ").code == "required"
    assert validate_field_value(f, None).code == "required"
    assert validate_field_value(f, "hello").is_valid is True


def test_optional_empty_is_valid_for_every_type():
    for ftype in ["text", "textarea", "number", "select", "checkbox", "date"]:
        assert validate_field_value(make_field("x", ftype), None).is_valid
        assert validate_field_value(make_field("x", ftype), "").is_valid


def test_select_options():
    f = make_field("f2", "select", options=[("a", "A"), ("b", "B")])
    assert validate_field_value(f, "c").is_valid is False
    assert validate_field_value(f, "c").code == "choice"
    assert validate_field_value(f, "a").is_valid is True


def test_select_without_options_rejects_values():
    f = make_field("s", "select", options=[])
    assert validate_field_value(f, "anything").is_valid is False


def test_number_rules():
    f = make_field("n", "number", validation=FieldValidation(min=1, max=5, integer=True))
    assert validate_field_value(f, "3").is_valid
    assert validate_field_value(f, 4).is_valid
    assert validate_field_value(f, "abc").code == "type"
    assert validate_field_value(f, "0").code == "min"
    assert validate_field_value(f, 6).code == "max"
    assert validate_field_value(f, "2.5").code == "integer"
    assert validate_field_value(f, True).code == "type"
    assert validate_field_value(f, "nan").code == "type"


def test_number_error_message_formats_bounds():
    f = make_field("n", "number", label="Weight", validation=FieldValidation(min=0.5))
    assert validate_field_value(f, 0).error == "Weight must be at least 0.5"


def test_text_rules():
    f = make_field("t", "text", validation=FieldValidation(max_length=5, min_length=2, pattern=r"^[a-z]+$"))
    assert validate_field_value(f, "abc").is_valid
    assert validate_field_value(f, "abcdef").code == "max_length"
    assert validate_field_value(f, "a").code == "min_length"
    assert validate_field_value(f, "ABC").code == "pattern"


def test_textarea_legacy_camel_case_rules():
    f = make_field("t", "textarea", validation={"maxLength": 3})
    assert validate_field_value(f, "abcd").code == "max_length"


def test_invalid_pattern_is_ignored():
    f = make_field("t", "text", validation=FieldValidation(pattern="("))
    assert validate_field_value(f, "anything").is_valid


def test_checkbox_values():
    f = make_field("c", "checkbox", required=True)
    assert validate_field_value(f, True).is_valid
    assert validate_field_value(f, False).is_valid
    assert validate_field_value(f, "false").is_valid
    assert validate_field_value(f, "maybe").code == "type"
    assert validate_field_value(f, None).code == "required"


def test_date_values():
    f = make_field("d", "date")
    assert validate_field_value(f, "2024-02-29").is_valid
    assert validate_field_value(f, "2023-02-29").code == "type"
    assert validate_field_value(f, "tomorrow").code == "type"


def test_validation_is_deterministic():
    f = make_field("n", "number", required=True)
    assert validate_field_value(f, "x") == validate_field_value(f, "x")


@pytest.mark.parametrize(
    "ftype,raw,expected",
    [
        ("number", "42", 42.0),
        ("number", " 1.5 ", 1.5),
        ("number", 7, 7.0),
        ("checkbox", "true", True),
        ("checkbox", "OFF", False),
        ("checkbox", 1, True),
        ("text", 12, "12"),
        ("select", "a", "a"),
    ],
)
def test_coerce_field_value(ftype, raw, expected):
    assert coerce_field_value(make_field("x", ftype), raw) == expected


def test_coerce_rejects_garbage():
    with pytest.raises(ValueError):
        coerce_field_value(make_field("x", "number"), "abc")
    with pytest.raises(ValueError):
        coerce_field_value(make_field("x", "checkbox"), "sometimes")
    with pytest.raises(ValueError):
        coerce_field_value(make_field("x", "text"), {"a": 1})


def test_validate_multiple_fields_skips_inactive():
    fields = [
        make_field("a", "text", required=True),
        make_field("b", "number", required=True, active=False),
        make_field("c", "number"),
    ]
    res = validate_multiple_fields(fields, {"field_a": "", "field_c": "x"})
    assert res.is_valid is False
    assert set(res.errors) == {"field_a", "field_c"}
    assert set(res.results) == {"a", "c"}

    ok = validate_multiple_fields(fields, {"field_a": "hi", "field_c": "2"})
    assert ok.is_valid is True
    assert ok.errors == {}


@pytest.mark.parametrize("raw", ["1_000", "1e3", " 1e3", "inf", "0x10", "1.2.3", "+", "."])
def test_number_accepts_plain_decimals_only(raw):
    f = make_field("n", "number")
    assert validate_field_value(f, raw).code == "type"
    with pytest.raises(ValueError):
        coerce_field_value(f, raw)


def test_number_signs_and_leading_dot():
    f = make_field("n", "number")
    assert coerce_field_value(f, "-2") == -2.0
    assert coerce_field_value(f, "+.5") == 0.5
    assert coerce_field_value(f, "3.") == 3.0
