from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from household_records.schemas.dynamic_field import DynamicField


def _unique_ids(fields: list[DynamicField]) -> list[DynamicField]:
    ids = [f.id for f in fields]
    if len(ids) != len(set(ids)):
        raise ValueError("field ids must be unique")
    return fields


class RecordTypeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=500)
    category: str = Field(default="Personal", min_length=1, max_length=100)
    icon: str | None = Field(default=None, max_length=50)
    color: str | None = Field(default=None, max_length=50)
    allow_private: bool = False
    fields: list[DynamicField] = []

    @field_validator("fields")
    @classmethod
    def _check_ids(cls, v: list[DynamicField]) -> list[DynamicField]:
        return _unique_ids(v)


class RecordTypeFieldsReplace(BaseModel):
    fields: list[DynamicField]

    @field_validator("fields")
    @classmethod
    def _check_ids(cls, v: list[DynamicField]) -> list[DynamicField]:
        return _unique_ids(v)


class FieldAdd(BaseModel):
    type: str  # text|textarea|number|select|checkbox|date
    label: str | None = Field(default=None, min_length=1, max_length=200)
    required: bool = False


class FieldReorder(BaseModel):
    from_index: int
    to_index: int


class RecordTypeOut(BaseModel):
    id: int
    name: str
    description: str | None
    category: str
    icon: str | None
    color: str | None
    allow_private: bool
    fields: list[DynamicField]
    active_field_count: int
    created_at: datetime
    updated_at: datetime
