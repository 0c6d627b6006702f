from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Mapping, Sequence

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    create_model,
)
from pydantic_core import PydanticCustomError

from household_records.core.field_ops import get_active_fields, sort_fields_by_order
from household_records.core.field_validation import (
    coerce_field_value,
    is_empty_value,
    validate_field_value,
)
from household_records.schemas.dynamic_field import (
    DynamicField,
    FieldType,
    FieldValidationResult,
)
from household_records.schemas.validation import FieldError

FIXED_LABELS = {
    "title": "Title",
    "content": "Description",
    "tags": "Tags",
    "isPrivate": "Private",
    "datetime": "Date/time",
}


def _title(value: Any) -> str:
    if is_empty_value(value):
        raise PydanticCustomError("required", "Title is required")
    if not isinstance(value, str):
        raise PydanticCustomError("type", "Title must be text")
    return value.strip()


def _optional_text(value: Any) -> str | None:
    if is_empty_value(value):
        return None
    if isinstance(value, (list, tuple)):
        # tags may arrive as a list from JSON clients
        return ", ".join(str(v).strip() for v in value if str(v).strip())
    if not isinstance(value, str):
        raise PydanticCustomError("type", "Must be text")
    return value


def _iso_datetime(value: Any) -> str | None:
    if is_empty_value(value):
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    if not isinstance(value, str):
        raise PydanticCustomError("type", "Date/time must be an ISO-8601 string")
    try:
        datetime.fromisoformat(value.strip())
    except ValueError:
        raise PydanticCustomError("type", "Date/time must be an ISO-8601 string")
    return value.strip()


def _empty_value_for(field: DynamicField):
    return False if field.type == FieldType.CHECKBOX else None


def _dynamic_validator(field: DynamicField):
    def _check(value: Any):
        result = validate_field_value(field, value)
        if not result.is_valid:
            raise PydanticCustomError(result.code or "invalid", result.error or "Invalid field")
        if is_empty_value(value):
            return _empty_value_for(field)
        return coerce_field_value(field, value)

    return _check


class RecordValidationResult(BaseModel):
    valid: bool
    data: dict[str, Any] | None = None
    errors: list[FieldError] = []

    @property
    def errors_by_field(self) -> dict[str, list[str]]:
        out: dict[str, list[str]] = {}
        for e in self.errors:
            out.setdefault(e.field, []).append(e.message)
        return out


class RecordSchema:
    """
    Validator for a flat record submission:
      {"title": "...", "content": "...", "tags": "...", "isPrivate": false,
       "datetime": "2024-05-01T09:30", "field_<id>": <value>, ...}

    Only active fields get a `field_<id>` key. Every error is collected; nothing
    short-circuits on the first failure.
    """

    def __init__(self, fields: Sequence[DynamicField]):
        self.fields = sort_fields_by_order(get_active_fields(fields))
        self._by_key = {f.form_key: f for f in self.fields}
        self._labels = {**FIXED_LABELS, **{f.form_key: f.label for f in self.fields}}
        self.model = self._build_model()

    def _build_model(self) -> type[BaseModel]:
        definitions: dict[str, Any] = {
            "title": (Annotated[str, BeforeValidator(_title)], Field(alias="title")),
            "content": (
                Annotated[str | None, BeforeValidator(_optional_text)],
                Field(default=None, alias="content", validation_alias=AliasChoices("content", "description")),
            ),
            "tags": (Annotated[str | None, BeforeValidator(_optional_text)], Field(default=None, alias="tags")),
            "is_private": (
                bool,
                Field(default=False, alias="isPrivate", validation_alias=AliasChoices("isPrivate", "is_private")),
            ),
            "record_datetime": (
                Annotated[str | None, BeforeValidator(_iso_datetime)],
                Field(default=None, alias="datetime"),
            ),
        }

        for idx, f in enumerate(self.fields):
            annotation = Annotated[Any, BeforeValidator(_dynamic_validator(f))]
            if f.required:
                info = Field(alias=f.form_key)
            else:
                info = Field(default=_empty_value_for(f), alias=f.form_key)
            definitions[f"dynamic_{idx}"] = (annotation, info)

        return create_model(
            "RecordSubmission",
            __config__=ConfigDict(extra="ignore"),
            **definitions,
        )

    @property
    def field_keys(self) -> list[str]:
        return list(self._by_key)

    @property
    def required_keys(self) -> set[str]:
        return {info.alias for info in self.model.model_fields.values() if info.is_required()}

    def validate(self, data: Mapping[str, Any]) -> RecordValidationResult:
        try:
            parsed = self.model.model_validate(dict(data))
        except ValidationError as e:
            return RecordValidationResult(valid=False, errors=self._collect_errors(e))
        return RecordValidationResult(valid=True, data=parsed.model_dump(by_alias=True))

    def validate_field(self, field_id: str, value: Any) -> FieldValidationResult:
        field = self._by_key.get(f"field_{field_id}")
        if field is None:
            return FieldValidationResult(is_valid=False, error="Field not found", code="unknown_key")
        return validate_field_value(field, value)

    def _collect_errors(self, exc: ValidationError) -> list[FieldError]:
        out: list[FieldError] = []
        for err in exc.errors():
            key = str(err["loc"][0]) if err.get("loc") else "__root__"
            code = err["type"]
            message = err["msg"]
            if code == "missing":
                code = "required"
                message = f"{self._labels.get(key, key)} is required"
            out.append(FieldError(field=key, code=code, message=message))
        return out


def create_record_schema(fields: Sequence[DynamicField] | None) -> RecordSchema:
    return RecordSchema(fields or [])
