from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from household_records.core.audit import log_event
from household_records.core.field_errors import IndexOutOfRange, InvalidFieldType
from household_records.core.field_ops import (
    add_field,
    duplicate_field,
    find_field,
    get_active_fields,
    reorder_fields,
    retain_referenced_fields,
    sort_fields_by_order,
    toggle_field_active,
    update_field,
)
from household_records.core.field_serialization import serialize_fields
from household_records.core.record_store import (
    load_fields,
    load_record_type_or_404,
    referenced_field_ids,
    store_fields,
    utcnow,
)
from household_records.core.security import get_current_household
from household_records.db.session import get_db
from household_records.models.record_type import RecordType
from household_records.schemas.record_type import (
    FieldAdd,
    FieldReorder,
    RecordTypeCreate,
    RecordTypeFieldsReplace,
    RecordTypeOut,
)

router = APIRouter(prefix="/record-types", tags=["record-types"])


def _record_type_out(rt: RecordType) -> RecordTypeOut:
    fields = sort_fields_by_order(load_fields(rt))
    return RecordTypeOut(
        id=rt.id,
        name=rt.name,
        description=rt.description,
        category=rt.category,
        icon=rt.icon,
        color=rt.color,
        allow_private=rt.allow_private,
        fields=fields,
        active_field_count=len(get_active_fields(fields)),
        created_at=rt.created_at,
        updated_at=rt.updated_at,
    )


def _save_fields(db: Session, household_id: str, rt: RecordType, fields, action: str, metadata: dict | None = None):
    store_fields(rt, fields)
    db.flush()

    log_event(
        db=db,
        household_id=household_id,
        action=action,
        entity_type="record_type",
        entity_id=rt.id,
        metadata={"field_count": len(fields), **(metadata or {})},
    )

    db.commit()
    db.refresh(rt)
    return _record_type_out(rt)


@router.post("", response_model=RecordTypeOut, status_code=status.HTTP_201_CREATED)
def create_record_type(
    payload: RecordTypeCreate,
    db: Session = Depends(get_db),
    household_id: str = Depends(get_current_household),
):
    now = utcnow()
    rt = RecordType(
        household_id=household_id,
        name=payload.name,
        description=payload.description,
        category=payload.category,
        icon=payload.icon,
        color=payload.color,
        allow_private=payload.allow_private,
        fields=serialize_fields(payload.fields),
        created_at=now,
        updated_at=now,
    )
    db.add(rt)
    db.flush()

    log_event(
        db=db,
        household_id=household_id,
        action="RECORD_TYPE_CREATED",
        entity_type="record_type",
        entity_id=rt.id,
        metadata={"name": rt.name, "category": rt.category, "field_count": len(payload.fields)},
    )

    db.commit()
    db.refresh(rt)
    return _record_type_out(rt)


@router.get("", response_model=list[RecordTypeOut])
def list_record_types(
    category: str | None = None,
    db: Session = Depends(get_db),
    household_id: str = Depends(get_current_household),
):
    q = db.query(RecordType).filter(RecordType.household_id == household_id)
    if category:
        q = q.filter(RecordType.category == category)
    rows = q.order_by(RecordType.name.asc()).all()
    return [_record_type_out(r) for r in rows]


@router.get("/{record_type_id}", response_model=RecordTypeOut)
def get_record_type(
    record_type_id: int,
    db: Session = Depends(get_db),
    household_id: str = Depends(get_current_household),
):
    rt = load_record_type_or_404(db, household_id, record_type_id)
    return _record_type_out(rt)


@router.put("/{record_type_id}/fields", response_model=RecordTypeOut)
def replace_fields(
    record_type_id: int,
    payload: RecordTypeFieldsReplace,
    db: Session = Depends(get_db),
    household_id: str = Depends(get_current_household),
):
    """
    Replace the whole field collection. Fields that existing records hold values
    for are never dropped; they come back inactive instead.
    """
    rt = load_record_type_or_404(db, household_id, record_type_id)
    previous = load_fields(rt)
    fields = retain_referenced_fields(previous, payload.fields, referenced_field_ids(db, rt))
    retained = len(fields) - len(payload.fields)
    return _save_fields(db, household_id, rt, fields, "RECORD_TYPE_FIELDS_UPDATED", {"retained": retained})


@router.post("/{record_type_id}/fields", response_model=RecordTypeOut, status_code=status.HTTP_201_CREATED)
def add_record_type_field(
    record_type_id: int,
    payload: FieldAdd,
    db: Session = Depends(get_db),
    household_id: str = Depends(get_current_household),
):
    rt = load_record_type_or_404(db, household_id, record_type_id)
    fields = load_fields(rt)
    try:
        fields = add_field(fields, payload.type)
    except InvalidFieldType as e:
        raise HTTPException(status_code=400, detail={"message": str(e), "field_type": payload.type})

    new_field = fields[-1]
    updates = {"required": payload.required}
    if payload.label:
        updates["label"] = payload.label
    fields = update_field(fields, new_field.id, **updates)

    return _save_fields(db, household_id, rt, fields, "RECORD_TYPE_FIELD_ADDED", {"field_id": new_field.id})


@router.post("/{record_type_id}/fields/reorder", response_model=RecordTypeOut)
def reorder_record_type_fields(
    record_type_id: int,
    payload: FieldReorder,
    db: Session = Depends(get_db),
    household_id: str = Depends(get_current_household),
):
    rt = load_record_type_or_404(db, household_id, record_type_id)
    try:
        fields = reorder_fields(load_fields(rt), payload.from_index, payload.to_index)
    except IndexOutOfRange as e:
        raise HTTPException(status_code=400, detail={"message": str(e)})

    return _save_fields(
        db,
        household_id,
        rt,
        fields,
        "RECORD_TYPE_FIELDS_REORDERED",
        {"from_index": payload.from_index, "to_index": payload.to_index},
    )


@router.post("/{record_type_id}/fields/{field_id}/toggle", response_model=RecordTypeOut)
def toggle_record_type_field(
    record_type_id: int,
    field_id: str,
    db: Session = Depends(get_db),
    household_id: str = Depends(get_current_household),
):
    rt = load_record_type_or_404(db, household_id, record_type_id)
    # unknown ids are a no-op: the field may already be gone in another edit
    fields = toggle_field_active(load_fields(rt), field_id)
    return _save_fields(db, household_id, rt, fields, "RECORD_TYPE_FIELD_TOGGLED", {"field_id": field_id})


@router.post(
    "/{record_type_id}/fields/{field_id}/duplicate",
    response_model=RecordTypeOut,
    status_code=status.HTTP_201_CREATED,
)
def duplicate_record_type_field(
    record_type_id: int,
    field_id: str,
    db: Session = Depends(get_db),
    household_id: str = Depends(get_current_household),
):
    rt = load_record_type_or_404(db, household_id, record_type_id)
    fields = load_fields(rt)
    source = find_field(fields, field_id)
    if source is None:
        raise HTTPException(status_code=404, detail="Field not found")

    copy = duplicate_field(source, len(fields))
    return _save_fields(
        db,
        household_id,
        rt,
        [*fields, copy],
        "RECORD_TYPE_FIELD_DUPLICATED",
        {"field_id": field_id, "copy_id": copy.id},
    )
