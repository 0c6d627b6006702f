from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from household_records.core.audit import log_event
from household_records.core.field_ops import get_active_fields
from household_records.core.form_binding import (
    FORM_KEY_PREFIX,
    LEGACY_KEY_PREFIX,
    build_form_defaults,
    convert_fields_to_form_data,
    convert_form_data_to_fields,
    extract_legacy_values,
)
from household_records.core.record_schema import create_record_schema
from household_records.core.record_store import (
    build_record_content,
    load_fields,
    load_record_or_404,
    load_record_type_or_404,
    parse_record_content,
    utcnow,
)
from household_records.core.security import get_current_household
from household_records.db.session import get_db
from household_records.models.record import Record
from household_records.models.record_type import RecordType
from household_records.schemas.dynamic_field import DynamicField
from household_records.schemas.record import RecordFormOut, RecordOut
from household_records.schemas.validation import FieldError, ValidationPreviewResponse

router = APIRouter(tags=["records"])


def _record_out(rec: Record) -> RecordOut:
    description, values = parse_record_content(rec.content)
    return RecordOut(
        id=rec.id,
        record_type_id=rec.record_type_id,
        title=rec.title,
        description=description,
        fields=values,
        tags=rec.tags,
        is_private=rec.is_private,
        datetime=rec.record_datetime,
        created_at=rec.created_at,
        updated_at=rec.updated_at,
    )


def _check_submission(rt: RecordType, fields: list[DynamicField], payload: dict[str, Any]) -> tuple[bool, list[FieldError], dict]:
    result = create_record_schema(fields).validate(payload)
    errors = list(result.errors)
    data = result.data or {}

    if result.valid and data.get("isPrivate") and not rt.allow_private:
        errors.append(
            FieldError(field="isPrivate", code="not_allowed", message="This record type does not allow private records")
        )

    return not errors, errors, data


def _validated_or_400(rt: RecordType, fields: list[DynamicField], payload: dict[str, Any]) -> dict:
    ok, errors, data = _check_submission(rt, fields, payload)
    if not ok:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Record validation failed", "errors": [e.model_dump() for e in errors]},
        )
    return data


def _submitted_content(fields: list[DynamicField], payload: dict[str, Any], data: dict[str, Any]) -> dict[str, Any]:
    """
    Content from a validated submission: active fields from `data`, plus
    `legacy_<id>` entries for ids the record type doesn't define.
    Submitted values for inactive fields never reach storage.
    """
    legacy = {k: v for k, v in payload.items() if k.startswith(LEGACY_KEY_PREFIX)}
    content = convert_fields_to_form_data(get_active_fields(fields), data)
    for field_id, value in convert_fields_to_form_data(fields, legacy).items():
        content.setdefault(field_id, value)
    return content


def _submission_warnings(fields: list[DynamicField], payload: dict[str, Any]) -> list[str]:
    active_keys = {f.form_key for f in get_active_fields(fields)}
    known_keys = {f.form_key for f in fields}
    defined = {f.id for f in fields}
    warnings: list[str] = []
    for key in payload:
        if key.startswith(FORM_KEY_PREFIX) and key not in active_keys:
            if key in known_keys:
                warnings.append(f"{key} is inactive; the submitted value is ignored and the stored one kept")
            else:
                warnings.append(f"{key} is not defined on this record type and will be ignored")
    for field_id in extract_legacy_values(payload):
        if field_id in defined:
            warnings.append(f"legacy value for {field_id} names a defined field and will be ignored")
        else:
            warnings.append(f"legacy value for {field_id} is carried over as stored")
    return warnings


@router.post("/record-types/{record_type_id}/validate", response_model=ValidationPreviewResponse)
def preview_record_validation(
    record_type_id: int,
    payload: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    household_id: str = Depends(get_current_household),
):
    rt = load_record_type_or_404(db, household_id, record_type_id)
    fields = load_fields(rt)
    ok, errors, _ = _check_submission(rt, fields, payload)
    return ValidationPreviewResponse(valid=ok, errors=errors, warnings=_submission_warnings(fields, payload))


@router.get("/record-types/{record_type_id}/form", response_model=RecordFormOut)
def new_record_form(
    record_type_id: int,
    db: Session = Depends(get_db),
    household_id: str = Depends(get_current_household),
):
    rt = load_record_type_or_404(db, household_id, record_type_id)
    return RecordFormOut(
        record_id=None,
        record_type_id=rt.id,
        values=build_form_defaults(load_fields(rt)),
        legacy_values={},
    )


@router.post("/record-types/{record_type_id}/records", response_model=RecordOut, status_code=status.HTTP_201_CREATED)
def create_record(
    record_type_id: int,
    payload: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    household_id: str = Depends(get_current_household),
):
    rt = load_record_type_or_404(db, household_id, record_type_id)
    fields = load_fields(rt)
    data = _validated_or_400(rt, fields, payload)

    values = _submitted_content(fields, payload, data)

    now = utcnow()
    rec = Record(
        household_id=household_id,
        record_type_id=rt.id,
        title=data["title"],
        content=build_record_content(data.get("content"), values),
        tags=data.get("tags"),
        is_private=bool(data.get("isPrivate")),
        record_datetime=data.get("datetime"),
        created_at=now,
        updated_at=now,
    )
    db.add(rec)
    db.flush()

    log_event(
        db=db,
        household_id=household_id,
        action="RECORD_CREATED",
        entity_type="record",
        entity_id=rec.id,
        metadata={"record_type_id": rt.id, "field_count": len(values)},
    )

    db.commit()
    db.refresh(rec)
    return _record_out(rec)


@router.get("/records/{record_id}", response_model=RecordOut)
def get_record(
    record_id: int,
    db: Session = Depends(get_db),
    household_id: str = Depends(get_current_household),
):
    rec = load_record_or_404(db, household_id, record_id)
    return _record_out(rec)


@router.get("/records/{record_id}/form", response_model=RecordFormOut)
def edit_record_form(
    record_id: int,
    db: Session = Depends(get_db),
    household_id: str = Depends(get_current_household),
):
    rec = load_record_or_404(db, household_id, record_id)
    rt = load_record_type_or_404(db, household_id, rec.record_type_id)
    fields = load_fields(rt)

    description, stored = parse_record_content(rec.content)
    field_values = convert_form_data_to_fields(fields, stored)
    values = {
        "title": rec.title,
        "content": description or "",
        "tags": rec.tags or "",
        "isPrivate": rec.is_private,
        "datetime": rec.record_datetime or "",
        **field_values,
    }
    legacy = {k[len(LEGACY_KEY_PREFIX):]: v for k, v in field_values.items() if k.startswith(LEGACY_KEY_PREFIX)}

    return RecordFormOut(record_id=rec.id, record_type_id=rt.id, values=values, legacy_values=legacy)


@router.put("/records/{record_id}", response_model=RecordOut)
def update_record(
    record_id: int,
    payload: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    household_id: str = Depends(get_current_household),
):
    rec = load_record_or_404(db, household_id, record_id)
    rt = load_record_type_or_404(db, household_id, rec.record_type_id)
    fields = load_fields(rt)
    data = _validated_or_400(rt, fields, payload)

    # normalize what is stored (older prefixed keys included) before merging
    _, stored = parse_record_content(rec.content)
    existing = convert_fields_to_form_data(fields, convert_form_data_to_fields(fields, stored))

    # active fields take the submitted state (absent = cleared); inactive and
    # legacy values come from what is stored, submitted ones only fill gaps
    active_ids = {f.id for f in get_active_fields(fields)}
    kept = {k: v for k, v in existing.items() if k not in active_ids}
    values = {**_submitted_content(fields, payload, data), **kept}

    rec.title = data["title"]
    rec.content = build_record_content(data.get("content"), values)
    rec.tags = data.get("tags")
    rec.is_private = bool(data.get("isPrivate"))
    rec.record_datetime = data.get("datetime")
    rec.updated_at = utcnow()
    db.flush()

    log_event(
        db=db,
        household_id=household_id,
        action="RECORD_UPDATED",
        entity_type="record",
        entity_id=rec.id,
        metadata={"field_count": len(values)},
    )

    db.commit()
    db.refresh(rec)
    return _record_out(rec)
