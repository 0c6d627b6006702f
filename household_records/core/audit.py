import logging
from typing import Any

from sqlalchemy.orm import Session

from household_records.models.audit_event import AuditEvent

_LOG = logging.getLogger("household_records.audit")


def log_event(
    *,
    db: Session,
    household_id: str,
    action: str,
    entity_type: str,
    entity_id: int,
    metadata: dict[str, Any] | None = None,
):
    event = AuditEvent(
        household_id=household_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        event_metadata=metadata,
    )
    db.add(event)
    _LOG.debug("%s %s:%s household=%s", action, entity_type, entity_id, household_id)
