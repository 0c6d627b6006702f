from __future__ import annotations

import logging
import math
import re
from datetime import date
from typing import Any, Mapping, Sequence

from household_records.core.field_errors import InvalidFieldType
from household_records.core.field_ops import get_active_fields, is_valid_select_option
from household_records.schemas.dynamic_field import (
    DynamicField,
    FieldType,
    FieldValidation,
    FieldValidationResult,
    MultiFieldValidationResult,
)

_LOG = logging.getLogger("household_records.field_validation")

# plain decimal notation only; float() alone also takes "1_000", "1e3", "inf"
_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")

_TRUE_STRINGS = {"true", "on", "1", "yes"}
_FALSE_STRINGS = {"false", "off", "0", "no"}

_VALID = FieldValidationResult(is_valid=True)


def is_empty_value(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


def coerce_field_value(field: DynamicField, value: Any) -> Any:
    """
    Convert a submitted value (often a form string) to the field's storage type:
      number   -> float
      checkbox -> bool
      others   -> str
    Raises ValueError when the value can't represent that type.
    """
    ftype = field.type

    if ftype == FieldType.NUMBER:
        if isinstance(value, bool):
            raise ValueError("boolean is not a number")
        if isinstance(value, (int, float)):
            x = float(value)
        elif isinstance(value, str):
            s = value.strip()
            if not _NUMBER_RE.fullmatch(s):
                raise ValueError(f"not a number: {value!r}")
            x = float(s)
        else:
            raise ValueError(f"not a number: {value!r}")
        if not math.isfinite(x):
            raise ValueError("number must be finite")
        return x

    if ftype == FieldType.CHECKBOX:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in _TRUE_STRINGS:
                return True
            if s in _FALSE_STRINGS:
                return False
        raise ValueError(f"not a boolean: {value!r}")

    if ftype in (FieldType.TEXT, FieldType.TEXTAREA, FieldType.SELECT, FieldType.DATE):
        if isinstance(value, str):
            return value
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        raise ValueError(f"not a string: {value!r}")

    raise InvalidFieldType(ftype)


def _fmt(x: float) -> str:
    return f"{x:g}"


def _invalid(code: str, message: str) -> FieldValidationResult:
    return FieldValidationResult(is_valid=False, error=message, code=code)


def _type_error_message(field: DynamicField) -> str:
    if field.type == FieldType.NUMBER:
        return f"{field.label} must be a number"
    if field.type == FieldType.CHECKBOX:
        return f"{field.label} must be true or false"
    return f"{field.label} must be text"


def _check_text(field: DynamicField, s: str, rules: FieldValidation) -> FieldValidationResult:
    if rules.min_length is not None and len(s) < rules.min_length:
        return _invalid("min_length", f"{field.label} must be at least {rules.min_length} characters")
    if rules.max_length is not None and len(s) > rules.max_length:
        return _invalid("max_length", f"{field.label} must be at most {rules.max_length} characters")
    if rules.pattern:
        try:
            matched = re.search(rules.pattern, s)
        except re.error:
            _LOG.warning("ignoring invalid pattern %r on field %s", rules.pattern, field.id)
            return _VALID
        if not matched:
            return _invalid("pattern", f"{field.label} format is invalid")
    return _VALID


def _check_number(field: DynamicField, x: float, rules: FieldValidation) -> FieldValidationResult:
    if rules.integer is True and not x.is_integer():
        return _invalid("integer", f"{field.label} must be a whole number")
    if rules.min is not None and x < rules.min:
        return _invalid("min", f"{field.label} must be at least {_fmt(rules.min)}")
    if rules.max is not None and x > rules.max:
        return _invalid("max", f"{field.label} must be at most {_fmt(rules.max)}")
    return _VALID


def validate_field_value(field: DynamicField, value: Any) -> FieldValidationResult:
    """
    Required check first, then type coercion, then the field's rules.
    Never raises for bad input; the failure is reported in the result.
    """
    if is_empty_value(value):
        if field.required:
            return _invalid("required", f"{field.label} is required")
        return _VALID

    try:
        coerced = coerce_field_value(field, value)
    except ValueError:
        return _invalid("type", _type_error_message(field))

    rules = field.validation or FieldValidation()
    ftype = field.type

    if ftype in (FieldType.TEXT, FieldType.TEXTAREA):
        return _check_text(field, coerced.strip(), rules)

    if ftype == FieldType.NUMBER:
        return _check_number(field, coerced, rules)

    if ftype == FieldType.SELECT:
        if not is_valid_select_option(field, coerced):
            return _invalid("choice", f"{field.label} must be one of the available options")
        return _VALID

    if ftype == FieldType.CHECKBOX:
        return _VALID

    if ftype == FieldType.DATE:
        try:
            date.fromisoformat(coerced.strip())
        except ValueError:
            return _invalid("type", f"{field.label} must be a valid date (YYYY-MM-DD)")
        return _VALID

    raise InvalidFieldType(ftype)


def validate_multiple_fields(
    fields: Sequence[DynamicField],
    values: Mapping[str, Any],
) -> MultiFieldValidationResult:
    """values are keyed by form key (field_<id>); inactive fields are skipped."""
    results: dict[str, FieldValidationResult] = {}
    errors: dict[str, str] = {}

    for f in get_active_fields(fields):
        res = validate_field_value(f, values.get(f.form_key))
        results[f.id] = res
        if not res.is_valid:
            errors[f.form_key] = res.error or "Invalid field"

    return MultiFieldValidationResult(is_valid=not errors, results=results, errors=errors)
