"""Exception hierarchy for the dose finalization core."""


class FinalizationError(Exception):
    """Base exception for all finalization-related errors."""
    pass


class StoreError(FinalizationError):
    """Raised when the shared store cannot be read or written.

    Covers an unreachable or locked database file and a corrupt schema.
    The core never retries these; the in-flight operation is abandoned.

    Attributes:
        db_path: Path of the store that failed
    """

    def __init__(self, message: str, db_path: str | None = None):
        super().__init__(message)
        self.db_path = db_path


class NotFoundError(FinalizationError):
    """Raised when a lookup or finalize references an unknown patient id.

    Attributes:
        patient_id: The id that has no row in the store
    """

    def __init__(self, patient_id: str):
        super().__init__(f"Patient not found: {patient_id}")
        self.patient_id = patient_id
