import json

from sqlalchemy.orm import Session

from household_records.core.field_serialization import serialize_fields
from household_records.core.record_store import build_record_content
from household_records.models.record import Record
from household_records.models.record_type import RecordType
from household_records.schemas.dynamic_field import DynamicField, SelectOption

HOUSEHOLD = "hh_test"
HEADERS = {"X-Household-Id": HOUSEHOLD}


def make_field(field_id: str, field_type: str = "text", *, order: int = 0, **kwargs) -> DynamicField:
    """
    make_field("f2", "select", options=[("a", "A"), ("b", "B")])
    """
    if "options" in kwargs and kwargs["options"] is not None:
        kwargs["options"] = [
            o if isinstance(o, SelectOption) else SelectOption(value=o[0], label=o[1])
            for o in kwargs["options"]
        ]
    kwargs.setdefault("label", field_id.upper())
    return DynamicField(id=field_id, type=field_type, order=order, **kwargs)


def create_record_type(
    db: Session,
    *,
    household_id: str = HOUSEHOLD,
    name: str = "Checkup",
    category: str = "Health",
    fields: list[DynamicField] | None = None,
    raw_fields: str | None = None,
    allow_private: bool = False,
) -> RecordType:
    rt = RecordType(
        household_id=household_id,
        name=name,
        category=category,
        allow_private=allow_private,
        fields=raw_fields if raw_fields is not None else serialize_fields(fields or []),
    )
    db.add(rt)
    db.commit()
    db.refresh(rt)
    return rt


def create_record(
    db: Session,
    record_type: RecordType,
    *,
    title: str = "Entry",
    values: dict | None = None,
    description: str | None = None,
    raw_content: str | None = None,
) -> Record:
    rec = Record(
        household_id=record_type.household_id,
        record_type_id=record_type.id,
        title=title,
        content=raw_content if raw_content is not None else build_record_content(description, values or {}),
    )
    db.add(rec)
    db.commit()
    db.refresh(rec)
    return rec


def stored_values(rec: Record) -> dict:
    return json.loads(rec.content)["fields"]
