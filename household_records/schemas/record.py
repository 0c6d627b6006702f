from datetime import datetime
from typing import Any

from pydantic import BaseModel


class RecordOut(BaseModel):
    id: int
    record_type_id: int
    title: str
    description: str | None
    fields: dict[str, Any]  # keyed by field id
    tags: str | None
    is_private: bool
    datetime: str | None
    created_at: datetime
    updated_at: datetime


class RecordFormOut(BaseModel):
    record_id: int | None
    record_type_id: int
    values: dict[str, Any]  # form initializer: title, content, ..., field_<id>, legacy_<id>
    legacy_values: dict[str, Any]  # stored values with no current field definition
