"""Safety interlock and finalization transition for entered doses."""

import logging
import math
from typing import Any

from .exceptions import NotFoundError, StoreError
from .models import (
    Committed,
    DEFAULT_POLICY,
    FinalizeOutcome,
    Rejected,
    RejectionReason,
    SafetyCheck,
    SafetyPolicy,
    SafetyStatus,
)
from .store import FinalizationStore

logger = logging.getLogger(__name__)


def parse_dose(dose_input: Any) -> float | None:
    """Parse a user-entered dose.

    A numeral too large for a float (e.g. "1e400") parses to +inf so the
    interlock sees it as above any limit. The words "inf" and "nan" and
    "1_000"-style digit separators are not doses.

    Returns:
        The dose as a float, or None if the input is absent, not a real
        number, or negative
    """
    if dose_input is None or isinstance(dose_input, bool):
        return None

    numeral = False
    if isinstance(dose_input, str):
        dose_input = dose_input.strip()
        if not dose_input or "_" in dose_input:
            return None
        numeral = any(ch.isdigit() for ch in dose_input)

    try:
        dose = float(dose_input)
    except (TypeError, ValueError):
        return None

    if math.isinf(dose) and dose > 0 and numeral:
        return dose
    if not math.isfinite(dose) or dose < 0:
        return None
    return dose


def assess(dose_input: Any, policy: SafetyPolicy = DEFAULT_POLICY) -> SafetyCheck:
    """Check an entered dose against the safety interlock.

    A dose exactly at the limit is SAFE; anything strictly above it is a
    HAZARD.

    Args:
        dose_input: Raw dose from the entry form (text or number)
        policy: Target and tolerance to check against

    Returns:
        SafetyCheck carrying the status, parsed dose and a status line
    """
    limit = policy.limit
    dose = parse_dose(dose_input)

    if dose is None:
        return SafetyCheck(
            status=SafetyStatus.INVALID,
            dose=None,
            limit=limit,
            message="Status: Invalid - enter a non-negative number",
        )

    if dose > limit:
        return SafetyCheck(
            status=SafetyStatus.HAZARD,
            dose=dose,
            limit=limit,
            message=f"Status: HAZARD - DOSE EXCEEDS {policy.limit_percent}%",
        )

    return SafetyCheck(
        status=SafetyStatus.SAFE,
        dose=dose,
        limit=limit,
        message="Status: Safe",
    )


def classify(dose_input: Any, policy: SafetyPolicy = DEFAULT_POLICY) -> SafetyStatus:
    """Classify an entered dose as SAFE, HAZARD or INVALID."""
    return assess(dose_input, policy).status


def attempt_finalize(
    store: FinalizationStore,
    patient_id: str,
    dose_input: Any,
    policy: SafetyPolicy = DEFAULT_POLICY,
) -> FinalizeOutcome:
    """Finalize a patient's dose if, and only if, it passes the interlock.

    The dose written to the store is the exact value that was checked.
    HAZARD and INVALID inputs never reach the store.

    Args:
        store: Shared store to write to
        patient_id: Patient id
        dose_input: Raw dose from the entry form
        policy: Target and tolerance to check against

    Returns:
        Committed when the record was persisted as finalized, otherwise Rejected

    Raises:
        StoreError: If the store fails, or the persisted row does not
                    reflect the finalize that was just written
    """
    check = assess(dose_input, policy)

    if check.status == SafetyStatus.INVALID:
        logger.warning(f"Rejected finalize for {patient_id}: unparseable dose {dose_input!r}")
        return Rejected(patient_id, RejectionReason.UNPARSEABLE_INPUT, check.status)

    if check.status == SafetyStatus.HAZARD:
        logger.warning(
            f"Rejected finalize for {patient_id}: dose {check.dose} exceeds limit {check.limit}"
        )
        return Rejected(patient_id, RejectionReason.EXCEEDS_SAFETY_LIMIT, check.status)

    try:
        record = store.finalize(patient_id, check.dose)
    except NotFoundError:
        logger.warning(f"Rejected finalize: patient {patient_id} not found")
        return Rejected(patient_id, RejectionReason.PATIENT_NOT_FOUND, check.status)

    if not record.is_finalized or record.dose_value != check.dose:
        raise StoreError(
            f"Finalize for {patient_id} was not persisted "
            f"(is_finalized={record.is_finalized}, dose={record.dose_value})",
            db_path=store.db_path,
        )

    logger.info(f"Committed finalize for {patient_id} at dose {check.dose}")
    return Committed(patient_id, check.dose, record)
