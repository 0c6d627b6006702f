from fastapi import APIRouter

from household_records.schemas.dynamic_field import FieldType

router = APIRouter()


@router.get("/")
def root():
    """Service index: where to find the docs and which custom field types record types can use."""
    return {
        "name": "Household Records Backend",
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "record_types": "/record-types",
        "field_types": [t.value for t in FieldType],
    }
