"""Error taxonomy shared by the wizards, the validators and the gateway.

Violations (MISSING_FIELD, OUT_OF_RANGE, SUM_MISMATCH, INVALID_KEY,
ORDERING_VIOLATION, MALFORMED) are recoverable: they block a step or a
save and are shown to the user. RecordNotFoundError and StorageError abort
the operation in flight.
"""

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID


class ViolationKind(StrEnum):
    """Kinds of user-correctable validation failures."""

    MISSING_FIELD = "MISSING_FIELD"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    SUM_MISMATCH = "SUM_MISMATCH"
    INVALID_KEY = "INVALID_KEY"
    ORDERING_VIOLATION = "ORDERING_VIOLATION"
    MALFORMED = "MALFORMED"


@dataclass(frozen=True)
class Violation:
    """A single failed rule, with enough detail for an actionable message."""

    kind: ViolationKind
    field: str
    message: str
    actual_sum: float | None = None
    keys: tuple[str, ...] = ()

    def as_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "field": self.field,
            "message": self.message,
            "actualSum": self.actual_sum,
            "keys": list(self.keys),
        }


class RecordError(Exception):
    """Base class for record and wizard failures."""


class RecordValidationError(RecordError):
    """One or more rules rejected the payload. Recoverable."""

    def __init__(self, violations: list[Violation]) -> None:
        self.violations = list(violations)
        summary = "; ".join(v.message for v in self.violations) or "validation failed"
        super().__init__(summary)

    @property
    def kinds(self) -> set[ViolationKind]:
        return {v.kind for v in self.violations}


class RecordNotFoundError(RecordError):
    """The targeted record id does not exist."""

    def __init__(self, kind: str, record_id: UUID) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} record {record_id} not found.")


class StorageError(RecordError):
    """The persistence boundary failed. Not user-correctable."""


class SubmitTimeoutError(StorageError):
    """A wizard submit did not complete within the configured timeout."""


class WizardStateError(RecordError):
    """A wizard operation was called from a step where it is not allowed."""


class WizardBusyError(WizardStateError):
    """A transition was attempted while a submit is still in flight."""
