from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class FieldType(StrEnum):
    """Closed vocabulary of custom field types a record type can expose."""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    SELECT = "select"
    CHECKBOX = "checkbox"
    DATE = "date"


class SelectOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    label: str


class FieldValidation(BaseModel):
    """
    Optional per-field constraints; a missing key means "no constraint".
      number:          {"min": 0, "max": 10, "integer": true}
      text / textarea: {"min_length": 1, "max_length": 255, "pattern": "^[A-Z]"}
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    min: float | None = None
    max: float | None = None
    integer: bool | None = None
    min_length: int | None = Field(
        default=None, ge=0, validation_alias=AliasChoices("min_length", "minLength")
    )
    max_length: int | None = Field(
        default=None, ge=0, validation_alias=AliasChoices("max_length", "maxLength")
    )
    pattern: str | None = None


class DynamicField(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1)
    type: FieldType
    label: str
    order: int = 0
    active: bool = Field(default=True, validation_alias=AliasChoices("active", "isActive"))
    required: bool = False

    # select only
    options: list[SelectOption] | None = None
    validation: FieldValidation | None = None

    name: str | None = None
    placeholder: str | None = None
    help_text: str | None = Field(default=None, validation_alias=AliasChoices("help_text", "helpText"))
    default_value: Any = Field(default=None, validation_alias=AliasChoices("default_value", "defaultValue"))

    @field_validator("options")
    @classmethod
    def _options_only_for_select(cls, v, info: ValidationInfo):
        # stored payloads from older editors carry options on every type
        if info.data.get("type") != FieldType.SELECT:
            return None
        if v is None:
            return v
        values = [opt.value.strip() for opt in v]
        if any(not value for value in values):
            raise ValueError("select option values must not be blank")
        if len(values) != len(set(values)):
            raise ValueError("select option values must be unique")
        return v

    @property
    def form_key(self) -> str:
        return f"field_{self.id}"

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class FieldValidationResult(BaseModel):
    is_valid: bool
    error: str | None = None
    code: str | None = None


class MultiFieldValidationResult(BaseModel):
    is_valid: bool
    results: dict[str, FieldValidationResult]  # keyed by field id
    errors: dict[str, str]  # keyed by field_<id>
