"""Data models for dose finalization."""

from dataclasses import dataclass
from enum import Enum
import math
import os


class SafetyStatus(str, Enum):
    """Result of the safety interlock check on an entered dose."""
    SAFE = "safe"
    HAZARD = "hazard"
    INVALID = "invalid"


class RejectionReason(str, Enum):
    """Why a finalize attempt did not commit."""
    EXCEEDS_SAFETY_LIMIT = "exceeds safety limit"
    UNPARSEABLE_INPUT = "unparseable input"
    PATIENT_NOT_FOUND = "patient not found"


class FinalizationState(str, Enum):
    """Finalization status of a single patient record."""
    UNFINALIZED = "unfinalized"
    FINALIZED = "finalized"

    @classmethod
    def display_name(cls, value):
        """Get the billing label shown by the review portal."""
        return {
            cls.UNFINALIZED: "Pending",
            cls.FINALIZED: "Ready to Bill",
        }.get(value, value)


@dataclass(frozen=True)
class SafetyPolicy:
    """Target dose and allowed tolerance above it."""
    target: float = 50.0
    tolerance_fraction: float = 0.10

    def __post_init__(self):
        # NaN compares False against every dose, which would make everything SAFE
        if not math.isfinite(self.target):
            raise ValueError(f"target must be finite, got {self.target}")
        if not math.isfinite(self.tolerance_fraction):
            raise ValueError(
                f"tolerance_fraction must be finite, got {self.tolerance_fraction}"
            )
        if self.target < 0:
            raise ValueError(f"target must be non-negative, got {self.target}")
        if self.tolerance_fraction < 0:
            raise ValueError(
                f"tolerance_fraction must be non-negative, got {self.tolerance_fraction}"
            )
        if not math.isfinite(self.limit):
            raise ValueError(f"safety limit overflows: {self.target} * (1 + {self.tolerance_fraction})")

    @property
    def limit(self) -> float:
        """Highest dose that is still SAFE."""
        return self.target * (1 + self.tolerance_fraction)

    @property
    def limit_percent(self) -> int:
        """Limit as a whole percentage of the target (110 for the default policy)."""
        return round((1 + self.tolerance_fraction) * 100)

    @classmethod
    def from_env(cls) -> "SafetyPolicy":
        """Build a policy from DOSIMETRY_TARGET_DOSE / DOSIMETRY_TOLERANCE_FRACTION."""
        return cls(
            target=float(os.environ.get("DOSIMETRY_TARGET_DOSE", cls.target)),
            tolerance_fraction=float(
                os.environ.get("DOSIMETRY_TOLERANCE_FRACTION", cls.tolerance_fraction)
            ),
        )


DEFAULT_POLICY = SafetyPolicy()


@dataclass(frozen=True)
class SafetyCheck:
    """Outcome of checking one dose input against a policy."""
    status: SafetyStatus
    dose: float | None
    limit: float
    message: str

    @property
    def is_safe(self) -> bool:
        return self.status == SafetyStatus.SAFE


@dataclass
class PatientRecord:
    """Persisted patient dose record in the shared store."""
    id: str
    dose_value: float
    is_finalized: bool
    is_high_risk: bool

    @classmethod
    def from_row(cls, row) -> "PatientRecord":
        """Create from database row."""
        return cls(
            id=row["Id"],
            dose_value=float(row["DoseValue"] or 0.0),
            is_finalized=row["IsFinalized"] == 1,
            is_high_risk=row["IsHighRisk"] == 1,
        )

    @property
    def state(self) -> FinalizationState:
        if self.is_finalized:
            return FinalizationState.FINALIZED
        return FinalizationState.UNFINALIZED

    @property
    def billing_status(self) -> str:
        return FinalizationState.display_name(self.state)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "dose_value": self.dose_value,
            "is_finalized": self.is_finalized,
            "is_high_risk": self.is_high_risk,
            "state": self.state.value,
            "billing_status": self.billing_status,
        }


# Baseline rows installed by a reset: (Id, DoseValue, IsFinalized, IsHighRisk)
SEED_ROWS = (
    ("Patient_Normal", 0.0, 0, 0),
    ("Patient_Hazard", 0.0, 0, 1),
)


@dataclass(frozen=True)
class Committed:
    """A finalize attempt that passed the interlock and was persisted."""
    patient_id: str
    dose: float
    record: PatientRecord

    committed = True

    def to_dict(self) -> dict:
        return {
            "committed": True,
            "patient_id": self.patient_id,
            "dose": self.dose,
            "record": self.record.to_dict(),
        }


@dataclass(frozen=True)
class Rejected:
    """A finalize attempt that left the store untouched."""
    patient_id: str
    reason: RejectionReason
    status: SafetyStatus | None = None

    committed = False

    def to_dict(self) -> dict:
        return {
            "committed": False,
            "patient_id": self.patient_id,
            "reason": self.reason.value,
            "status": self.status.value if self.status else None,
        }


FinalizeOutcome = Committed | Rejected
