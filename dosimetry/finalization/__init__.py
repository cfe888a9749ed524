"""Dose finalization: shared patient store and safety interlock."""

from .engine import assess, attempt_finalize, classify, parse_dose
from .exceptions import FinalizationError, NotFoundError, StoreError
from .models import (
    Committed,
    DEFAULT_POLICY,
    FinalizationState,
    FinalizeOutcome,
    PatientRecord,
    Rejected,
    RejectionReason,
    SafetyCheck,
    SafetyPolicy,
    SafetyStatus,
)
from .store import FinalizationStore

__all__ = [
    "assess",
    "attempt_finalize",
    "classify",
    "parse_dose",
    "FinalizationError",
    "NotFoundError",
    "StoreError",
    "Committed",
    "DEFAULT_POLICY",
    "FinalizationState",
    "FinalizeOutcome",
    "PatientRecord",
    "Rejected",
    "RejectionReason",
    "SafetyCheck",
    "SafetyPolicy",
    "SafetyStatus",
    "FinalizationStore",
]
