"""
Seed a demo household with a couple of record types and records.

Usage:
    alembic upgrade head
    python scripts/seed_demo.py --household hh_demo
"""
import argparse

from dotenv import load_dotenv
from sqlalchemy.orm import Session

load_dotenv()

from household_records.core.field_defaults import create_default_field
from household_records.core.field_ops import parse_select_options, update_field
from household_records.core.field_serialization import serialize_fields
from household_records.core.form_binding import convert_fields_to_form_data
from household_records.core.record_schema import create_record_schema
from household_records.core.record_store import build_record_content, load_fields
from household_records.db.session import SessionLocal
from household_records.models.record import Record
from household_records.models.record_type import RecordType
from household_records.schemas.dynamic_field import DynamicField, FieldType, FieldValidation


def build_fields(specs: list[dict]) -> list[DynamicField]:
    """specs: [{"type": "number", "label": "Weight (kg)", "required": True, ...}]"""
    fields: list[DynamicField] = []
    for spec in specs:
        f = create_default_field(spec["type"], len(fields))
        updates = {k: v for k, v in spec.items() if k != "type"}
        fields = [*fields, *update_field([f], f.id, **updates)]
    return fields


def get_or_create_record_type(db: Session, household_id: str, name: str, category: str, fields) -> RecordType:
    rt = (
        db.query(RecordType)
        .filter(RecordType.household_id == household_id, RecordType.name == name)
        .one_or_none()
    )
    if rt:
        return rt
    rt = RecordType(
        household_id=household_id,
        name=name,
        category=category,
        allow_private=True,
        fields=serialize_fields(fields),
    )
    db.add(rt)
    db.commit()
    db.refresh(rt)
    return rt


def add_record(db: Session, rt: RecordType, submission: dict) -> Record:
    fields = load_fields(rt)
    result = create_record_schema(fields).validate(submission)
    if not result.valid:
        raise SystemExit(f"demo record for {rt.name} is invalid: {result.errors_by_field}")

    data = result.data
    rec = Record(
        household_id=rt.household_id,
        record_type_id=rt.id,
        title=data["title"],
        content=build_record_content(data["content"], convert_fields_to_form_data(fields, data)),
        tags=data["tags"],
        is_private=data["isPrivate"],
        record_datetime=data["datetime"],
    )
    db.add(rec)
    db.commit()
    db.refresh(rec)
    return rec


def main():
    parser = argparse.ArgumentParser(description="Seed demo household records")
    parser.add_argument("--household", default="hh_demo", help="household id (X-Household-Id header)")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        checkup_fields = build_fields(
            [
                {"type": FieldType.NUMBER, "label": "Weight (kg)", "required": True,
                 "validation": FieldValidation(min=0, max=500)},
                {"type": FieldType.SELECT, "label": "Doctor", "options": parse_select_options("Dr. Rivera, Dr. Okafor")},
                {"type": FieldType.CHECKBOX, "label": "Follow-up needed"},
                {"type": FieldType.DATE, "label": "Next visit"},
            ]
        )
        checkup = get_or_create_record_type(db, args.household, "Checkup", "Health", checkup_fields)

        chores_fields = build_fields(
            [
                {"type": FieldType.TEXT, "label": "Room", "required": True},
                {"type": FieldType.TEXTAREA, "label": "Notes"},
            ]
        )
        chores = get_or_create_record_type(db, args.household, "Chore log", "Home", chores_fields)

        f = {fd.label: fd.form_key for fd in load_fields(checkup)}
        add_record(
            db,
            checkup,
            {
                "title": "Annual checkup",
                "content": "All good",
                "tags": "health, annual",
                "datetime": "2026-03-02T09:30",
                f["Weight (kg)"]: "71.5",
                f["Doctor"]: "dr_rivera",
                f["Follow-up needed"]: "false",
                f["Next visit"]: "2027-03-01",
            },
        )

        print("\n=== Demo Seed Complete ===")
        print(f"Household (use as X-Household-Id header): {args.household}")
        print(f"  record types: {checkup.id} ({checkup.name}), {chores.id} ({chores.name})")
        print("\nNext actions:")
        print(f"  GET  /record-types/{checkup.id}/form")
        print(f"  POST /record-types/{checkup.id}/records")
        print()

    finally:
        db.close()


if __name__ == "__main__":
    main()
