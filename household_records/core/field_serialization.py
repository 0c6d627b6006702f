from __future__ import annotations

import json
import logging
from typing import Sequence

from pydantic import ValidationError

from household_records.schemas.dynamic_field import DynamicField

_LOG = logging.getLogger("household_records.field_serialization")

FIELDS_FORMAT_VERSION = "1.0"


def serialize_fields(fields: Sequence[DynamicField]) -> str:
    """
    Canonical on-disk shape of a record type's `fields` column:
      {"version": "1.0", "fields": [{...}, ...]}
    """
    payload = {
        "version": FIELDS_FORMAT_VERSION,
        "fields": [f.to_storage() for f in fields],
    }
    return json.dumps(payload, ensure_ascii=False)


def deserialize_fields(raw: str | bytes | None) -> list[DynamicField]:
    """
    Accepts the canonical wrapper and the legacy bare array.
    Anything unreadable yields an empty collection (logged, never raised) so a
    corrupt column renders as a record type without custom fields.
    """
    if not raw:
        return []

    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as e:
        _LOG.warning("stored fields are not valid JSON, ignoring them: %s", e)
        return []

    if isinstance(parsed, list):
        _LOG.info("stored fields use the legacy bare-array shape")
        items = parsed
    elif isinstance(parsed, dict) and isinstance(parsed.get("fields"), list):
        items = parsed["fields"]
    else:
        _LOG.warning("stored fields have an unexpected shape (%s), ignoring them", type(parsed).__name__)
        return []

    try:
        fields = [DynamicField.model_validate(item) for item in items]
    except ValidationError as e:
        _LOG.warning("stored fields contain an invalid definition, ignoring them: %s", e)
        return []

    ids = [f.id for f in fields]
    if len(ids) != len(set(ids)):
        _LOG.warning("stored fields contain duplicate ids, ignoring them")
        return []

    return fields
