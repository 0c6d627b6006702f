from __future__ import annotations

import re
import uuid

from household_records.core.field_errors import InvalidFieldType
from household_records.schemas.dynamic_field import (
    DynamicField,
    FieldType,
    FieldValidation,
)

FIELD_TYPE_CONFIGS: dict[FieldType, dict] = {
    FieldType.TEXT: {"label": "Text", "has_options": False},
    FieldType.TEXTAREA: {"label": "Long Text", "has_options": False},
    FieldType.NUMBER: {"label": "Number", "has_options": False},
    FieldType.SELECT: {"label": "Dropdown", "has_options": True},
    FieldType.CHECKBOX: {"label": "Checkbox", "has_options": False},
    FieldType.DATE: {"label": "Date", "has_options": False},
}


def parse_field_type(value) -> FieldType:
    try:
        return FieldType(value)
    except ValueError:
        raise InvalidFieldType(value) from None


def get_field_type_config(field_type) -> dict:
    return FIELD_TYPE_CONFIGS[parse_field_type(field_type)]


def create_field_id() -> str:
    return uuid.uuid4().hex


def get_default_value_for_type(field_type: FieldType):
    if field_type == FieldType.CHECKBOX:
        return False
    if field_type == FieldType.NUMBER:
        return None
    return ""


def get_default_validation_for_type(field_type: FieldType) -> FieldValidation | None:
    if field_type == FieldType.TEXT:
        return FieldValidation(max_length=255)
    if field_type == FieldType.TEXTAREA:
        return FieldValidation(max_length=1000)
    if field_type == FieldType.NUMBER:
        return FieldValidation(min=-999999, max=999999)
    return None


def create_default_field(field_type, current_field_count: int) -> DynamicField:
    """
    New field appended at the end of a collection of `current_field_count` fields.
    Raises InvalidFieldType for anything outside FieldType.
    """
    ftype = parse_field_type(field_type)
    config = FIELD_TYPE_CONFIGS[ftype]
    label = f"New {config['label']} Field"

    return DynamicField(
        id=create_field_id(),
        type=ftype,
        label=label,
        order=current_field_count,
        active=True,
        required=False,
        options=[] if ftype == FieldType.SELECT else None,
        validation=get_default_validation_for_type(ftype),
        name=f"field_{current_field_count}",
        placeholder=f"Enter {config['label'].lower()}...",
        help_text="",
        default_value=get_default_value_for_type(ftype),
    )


def generate_field_name(label: str) -> str:
    """'Blood Pressure (mmHg)' -> 'blood_pressure_mmhg'"""
    name = label.lower()
    name = re.sub(r"[^a-z0-9\s]", "", name)
    name = re.sub(r"\s+", "_", name)
    name = re.sub(r"_+", "_", name)
    return name.strip("_")


def ensure_unique_field_name(desired: str, existing_names) -> str:
    existing = set(existing_names)
    name = desired
    counter = 1
    while name in existing:
        name = f"{desired}_{counter}"
        counter += 1
    return name


def create_unique_field_name(label: str, existing_names) -> str:
    return ensure_unique_field_name(generate_field_name(label), existing_names)
