from household_records.models.audit_event import AuditEvent
from household_records.models.record import Record
from household_records.models.record_type import RecordType

__all__ = [ "AuditEvent", "Record", "RecordType" ]
