from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from household_records.core.record_schema import RecordSchema


@dataclass(frozen=True)
class FormState:
    """
    Working state of one record form, owned by the caller.
    Every operation returns a new FormState; nothing is shared or mutated.
    """

    initial: Mapping[str, Any]
    values: Mapping[str, Any]
    touched: frozenset[str] = frozenset()
    errors: Mapping[str, list[str]] = field(default_factory=dict)

    @classmethod
    def create(cls, initial: Mapping[str, Any]) -> "FormState":
        return cls(initial=dict(initial), values=dict(initial))

    @property
    def is_dirty(self) -> bool:
        return dict(self.values) != dict(self.initial)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def set_value(self, key: str, value: Any) -> "FormState":
        return replace(self, values={**self.values, key: value})

    def set_touched(self, key: str, touched: bool = True) -> "FormState":
        keys = self.touched | {key} if touched else self.touched - {key}
        return replace(self, touched=frozenset(keys))

    def validate(self, schema: RecordSchema) -> "FormState":
        result = schema.validate(self.values)
        return replace(self, errors=result.errors_by_field)

    def visible_errors(self) -> dict[str, list[str]]:
        """Errors for fields the user has interacted with."""
        return {k: v for k, v in self.errors.items() if k in self.touched}

    def reset(self, initial: Mapping[str, Any] | None = None) -> "FormState":
        return FormState.create(self.initial if initial is None else initial)
