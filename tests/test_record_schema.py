from household_records.core.record_schema import create_record_schema
from household_records.schemas.dynamic_field import FieldValidation
from tests.helpers import make_field


def test_number_field_coerced():
    """A numeric string passes and comes back as a number"""
    schema = create_record_schema([make_field("f1", "number", required=True, active=True)])
    res = schema.validate({"title": "T", "field_f1": "42"})
    assert res.valid is True
    assert res.data["field_f1"] == 42
    assert isinstance(res.data["field_f1"], float)


def test_number_field_error_attributed():
    schema = create_record_schema([make_field("f1", "number", required=True)])
    res = schema.validate({"title": "T", "field_f1": "abc"})
    assert res.valid is False
    assert [e.field for e in res.errors] == ["field_f1"]
    assert res.errors[0].code == "type"


def test_collects_all_errors():
    fields = [
        make_field("a", "text", required=True, label="Room"),
        make_field("b", "select", options=[("x", "X")]),
        make_field("c", "number", validation=FieldValidation(max=10)),
    ]
    res = create_record_schema(fields).validate({"field_b": "nope", "field_c": "11", "datetime": "yesterday"})
    assert res.valid is False
    by_field = res.errors_by_field
    assert set(by_field) == {"title", "field_a", "field_b", "field_c", "datetime"}
    assert by_field["title"] == ["Title is required"]
    assert by_field["field_a"] == ["Room is required"]


def test_required_field_present_but_blank():
    schema = create_record_schema([make_field("a", "text", required=True, label="Room")])
    res = schema.validate({"title": "T", "field_a": "  "})
    assert res.errors[0].code == "required"
    assert res.errors[0].message == "Room is required"


def test_inactive_fields_never_required():
    fields = [make_field("gone", "text", required=True, active=False), make_field("live", "date", required=True)]
    schema = create_record_schema(fields)
    assert "field_gone" not in schema.required_keys
    assert schema.required_keys == {"title", "field_live"}
    assert schema.field_keys == ["field_live"]

    res = schema.validate({"title": "T", "field_live": "2024-01-01", "field_gone": ""})
    assert res.valid is True
    assert "field_gone" not in res.data


def test_fixed_attributes_and_defaults():
    schema = create_record_schema([make_field("c", "checkbox"), make_field("t", "text")])
    res = schema.validate(
        {
            "title": "  Visit  ",
            "description": "notes",
            "tags": ["a", " b "],
            "isPrivate": "true",
            "datetime": "2024-05-01T09:30",
        }
    )
    assert res.valid is True
    assert res.data["title"] == "Visit"
    assert res.data["content"] == "notes"
    assert res.data["tags"] == "a, b"
    assert res.data["isPrivate"] is True
    assert res.data["datetime"] == "2024-05-01T09:30"
    assert res.data["field_c"] is False
    assert res.data["field_t"] is None


def test_checkbox_string_coercion():
    schema = create_record_schema([make_field("c", "checkbox", required=True)])
    assert schema.validate({"title": "T", "field_c": "false"}).data["field_c"] is False
    assert schema.validate({"title": "T", "field_c": "on"}).data["field_c"] is True
    assert schema.validate({"title": "T", "field_c": "maybe"}).valid is False


def test_unknown_keys_ignored():
    schema = create_record_schema([])
    res = schema.validate({"title": "T", "field_zzz": "x", "legacy_old": 1})
    assert res.valid is True
    assert "field_zzz" not in res.data


def test_validate_single_field():
    schema = create_record_schema([make_field("s", "select", options=[("a", "A")])])
    assert schema.validate_field("s", "a").is_valid
    assert schema.validate_field("s", "b").code == "choice"
    assert schema.validate_field("missing", "b").code == "unknown_key"


def test_none_fields():
    res = create_record_schema(None).validate({"title": "T"})
    assert res.valid is True
