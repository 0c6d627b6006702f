from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from household_records.db.session import get_db

router = APIRouter(tags=["health"])


@router.get("/health")
def health(db: Session = Depends(get_db)):
    db.execute(text("SELECT 1"))
    return {"status": "ok", "database": db.get_bind().dialect.name}
