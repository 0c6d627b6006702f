from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from household_records.db.base import Base


class Record(Base):
    __tablename__ = "records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    household_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    record_type_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("record_types.id", ondelete="RESTRICT"),
        index=True,
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(300), nullable=False)

    # JSON: {"description": "...", "fields": {"<field id>": value, ...}}
    content: Mapped[str | None] = mapped_column(Text, nullable=True)

    tags: Mapped[str | None] = mapped_column(Text, nullable=True)  # comma separated
    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    record_datetime: Mapped[str | None] = mapped_column("datetime", String(40), nullable=True)  # ISO-8601 as submitted

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    record_type = relationship("RecordType", back_populates="records")
