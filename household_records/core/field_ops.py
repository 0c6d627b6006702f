from __future__ import annotations

import logging
import re
from typing import Iterable, Sequence

from household_records.core.field_defaults import create_default_field, create_field_id
from household_records.core.field_errors import IndexOutOfRange
from household_records.schemas.dynamic_field import DynamicField, FieldType, SelectOption

_LOG = logging.getLogger("household_records.field_ops")


# ---- ordering / filtering ----

def sort_fields_by_order(fields: Sequence[DynamicField]) -> list[DynamicField]:
    # sorted() is stable, so equal orders keep their sequence position
    return sorted(fields, key=lambda f: f.order)


def get_active_fields(fields: Sequence[DynamicField]) -> list[DynamicField]:
    return [f for f in fields if f.active]


def get_fields_by_type(fields: Sequence[DynamicField], field_type) -> list[DynamicField]:
    return [f for f in fields if f.type == field_type]


def find_field(fields: Sequence[DynamicField], field_id: str) -> DynamicField | None:
    for f in fields:
        if f.id == field_id:
            return f
    return None


# ---- collection edits (never mutate the input) ----

def reorder_fields(fields: Sequence[DynamicField], from_index: int, to_index: int) -> list[DynamicField]:
    """
    Move the field at `from_index` (position after sorting by order) to `to_index`
    and renumber every order to 0..n-1.
    """
    result = sort_fields_by_order(fields)
    n = len(result)
    for idx in (from_index, to_index):
        if not 0 <= idx < n:
            raise IndexOutOfRange(idx, n)

    moved = result.pop(from_index)
    result.insert(to_index, moved)
    return [f.model_copy(update={"order": i}) for i, f in enumerate(result)]


def toggle_field_active(fields: Sequence[DynamicField], field_id: str) -> list[DynamicField]:
    return [
        f.model_copy(update={"active": not f.active}) if f.id == field_id else f
        for f in fields
    ]


def update_field(fields: Sequence[DynamicField], field_id: str, **updates) -> list[DynamicField]:
    """Unknown field_id is a no-op. The id itself is never rewritten."""
    updates.pop("id", None)
    out = []
    for f in fields:
        if f.id == field_id:
            # re-validate so a bad update can't produce an invalid field
            f = DynamicField.model_validate({**f.model_dump(), **updates})
        out.append(f)
    return out


def add_field(fields: Sequence[DynamicField], field_type) -> list[DynamicField]:
    return [*fields, create_default_field(field_type, len(fields))]


def remove_field(fields: Sequence[DynamicField], field_id: str) -> list[DynamicField]:
    return [f for f in fields if f.id != field_id]


def duplicate_field(field: DynamicField, current_field_count: int) -> DynamicField:
    return field.model_copy(
        update={
            "id": create_field_id(),
            "name": f"{field.name}_copy" if field.name else None,
            "label": f"{field.label} (Copy)",
            "order": current_field_count,
        }
    )


def retain_referenced_fields(
    previous: Sequence[DynamicField],
    incoming: Sequence[DynamicField],
    referenced_ids: Iterable[str],
) -> list[DynamicField]:
    """
    Fields dropped from `incoming` that stored records still reference are kept,
    deactivated, at the end of the collection.
    """
    referenced = set(referenced_ids)
    incoming_ids = {f.id for f in incoming}
    result = list(incoming)

    next_order = max((f.order for f in incoming), default=-1) + 1
    for f in sort_fields_by_order(previous):
        if f.id in incoming_ids or f.id not in referenced:
            continue
        _LOG.info("retaining referenced field %s (%s) as inactive", f.id, f.label)
        result.append(f.model_copy(update={"active": False, "order": next_order}))
        next_order += 1
    return result


# ---- select options ----

def normalize_option_value(label: str) -> str:
    value = label.lower().strip()
    value = re.sub(r"[^a-z0-9\s]", "", value)
    return re.sub(r"\s+", "_", value)


def create_select_option(label: str) -> SelectOption:
    return SelectOption(value=normalize_option_value(label), label=label.strip())


def parse_select_options(options_string: str | None) -> list[SelectOption]:
    """'Low, Medium, High' -> options with normalized values; blanks are skipped."""
    if not options_string:
        return []
    return [create_select_option(part) for part in options_string.split(",") if part.strip()]


def format_select_options(options: Sequence[SelectOption]) -> str:
    return ", ".join(opt.label for opt in options)


def clean_select_options(options: Sequence[SelectOption]) -> list[SelectOption]:
    """Trim, drop options with a blank value or label, keep the first of duplicate values."""
    seen: set[str] = set()
    out: list[SelectOption] = []
    for opt in options:
        value, label = opt.value.strip(), opt.label.strip()
        if not value or not label or value in seen:
            continue
        seen.add(value)
        out.append(SelectOption(value=value, label=label))
    return out


def sort_select_options(options: Sequence[SelectOption]) -> list[SelectOption]:
    return sorted(options, key=lambda opt: opt.label.casefold())


def has_valid_select_options(field: DynamicField) -> bool:
    return (
        field.type == FieldType.SELECT
        and bool(field.options)
        and all(opt.value and opt.label for opt in field.options)
    )


def is_valid_select_option(field: DynamicField, value) -> bool:
    if not field.options:
        return False
    return any(opt.value == value for opt in field.options)


def get_select_option_label(field: DynamicField, value) -> str | None:
    for opt in field.options or []:
        if opt.value == value:
            return opt.label
    return None
