from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from household_records.core.field_serialization import deserialize_fields, serialize_fields
from household_records.core.form_binding import FORM_KEY_PREFIX
from household_records.models.record import Record
from household_records.models.record_type import RecordType
from household_records.schemas.dynamic_field import DynamicField

_LOG = logging.getLogger("household_records.record_store")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def load_record_type_or_404(db: Session, household_id: str, record_type_id: int) -> RecordType:
    rt = db.get(RecordType, record_type_id)
    if not rt or rt.household_id != household_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Record type not found")
    return rt


def load_record_or_404(db: Session, household_id: str, record_id: int) -> Record:
    rec = db.get(Record, record_id)
    if not rec or rec.household_id != household_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Record not found")
    return rec


def load_fields(rt: RecordType) -> list[DynamicField]:
    fields = deserialize_fields(rt.fields)
    if rt.fields and not fields:
        _LOG.warning("record type %s has unreadable fields; rendering without custom fields", rt.id)
    return fields


def store_fields(rt: RecordType, fields: list[DynamicField]) -> None:
    rt.fields = serialize_fields(fields)
    rt.updated_at = utcnow()


def build_record_content(description: str | None, field_values: dict[str, Any]) -> str:
    return json.dumps({"description": description, "fields": field_values}, ensure_ascii=False)


def parse_record_content(content: str | None) -> tuple[str | None, dict[str, Any]]:
    """
    Returns (description, field values keyed by field id).
    Content that isn't our JSON object is treated as a plain-text description.
    """
    if not content:
        return None, {}
    try:
        parsed = json.loads(content)
    except ValueError:
        return content, {}
    if not isinstance(parsed, dict):
        return content, {}

    values = parsed.get("fields")
    if not isinstance(values, dict):
        values = {}
    return parsed.get("description"), values


def referenced_field_ids(db: Session, rt: RecordType) -> set[str]:
    """Field ids that stored records of this type hold values for."""
    ids: set[str] = set()
    rows = db.query(Record.content).filter(Record.record_type_id == rt.id).all()
    for (content,) in rows:
        _, values = parse_record_content(content)
        for key in values:
            ids.add(key)
            if key.startswith(FORM_KEY_PREFIX):
                ids.add(key[len(FORM_KEY_PREFIX):])
    return ids
