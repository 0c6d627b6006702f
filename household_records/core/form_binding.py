from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Sequence

from household_records.core.field_ops import get_active_fields, sort_fields_by_order
from household_records.core.field_validation import coerce_field_value, is_empty_value
from household_records.schemas.dynamic_field import DynamicField, FieldType

FORM_KEY_PREFIX = "field_"
# values stored under ids the record type no longer defines
LEGACY_KEY_PREFIX = "legacy_"


def _coerce_or_raw(field: DynamicField, value: Any) -> Any:
    try:
        return coerce_field_value(field, value)
    except ValueError:
        return value


def convert_fields_to_form_data(
    fields: Sequence[DynamicField],
    form_values: Mapping[str, Any],
) -> dict[str, Any]:
    """
    Form values -> stored content.
      {"field_ab12": "3", "legacy_old1": "x"} -> {"ab12": 3.0, "old1": "x"}
    Empty values are not stored. A legacy entry naming a defined field is
    ignored; that value only travels through its `field_<id>` key.
    """
    content: dict[str, Any] = {}
    defined = {f.id for f in fields}

    for f in fields:
        value = form_values.get(f.form_key)
        if is_empty_value(value):
            continue
        content[f.id] = _coerce_or_raw(f, value)

    for field_id, value in extract_legacy_values(form_values).items():
        if field_id not in defined and not is_empty_value(value):
            content[field_id] = value

    return content


def convert_form_data_to_fields(
    fields: Sequence[DynamicField],
    stored_content: Mapping[str, Any],
) -> dict[str, Any]:
    """
    Stored content -> form initializer.
      {"ab12": 3.0, "old1": "x"} -> {"field_ab12": 3.0, "legacy_old1": "x"}
    Older records keyed their content by form key ("field_ab12"); both are read.
    When both keys are stored the bare id wins and the prefixed value is
    surfaced as legacy ("legacy_field_ab12").
    """
    by_id = {f.id: f for f in fields}
    values: dict[str, Any] = {}

    for key, value in stored_content.items():
        field_id = key
        if key not in by_id and key.startswith(FORM_KEY_PREFIX):
            bare = key[len(FORM_KEY_PREFIX):]
            if bare in by_id and bare not in stored_content:
                field_id = bare

        field = by_id.get(field_id)
        if field is None:
            values[f"{LEGACY_KEY_PREFIX}{key}"] = value
            continue

        values[field.form_key] = value if is_empty_value(value) else _coerce_or_raw(field, value)

    return values


def extract_legacy_values(form_values: Mapping[str, Any]) -> dict[str, Any]:
    return {
        key[len(LEGACY_KEY_PREFIX):]: value
        for key, value in form_values.items()
        if key.startswith(LEGACY_KEY_PREFIX) and len(key) > len(LEGACY_KEY_PREFIX)
    }


def build_form_defaults(
    fields: Sequence[DynamicField],
    defaults: Mapping[str, Any] | None = None,
    *,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Initial values for a new-record form."""
    values: dict[str, Any] = {
        "title": "",
        "content": "",
        "tags": "",
        "isPrivate": False,
        "datetime": (now or datetime.now()).strftime("%Y-%m-%dT%H:%M"),
        **(defaults or {}),
    }

    for f in sort_fields_by_order(get_active_fields(fields)):
        if f.type == FieldType.CHECKBOX:
            fallback = bool(f.default_value)
        else:
            fallback = "" if f.default_value is None else f.default_value
        values.setdefault(f.form_key, fallback)

    return values
