"""SQLite-backed shared store for patient dose records."""

import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator

from .exceptions import NotFoundError, StoreError
from .models import PatientRecord, SEED_ROWS

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = "~/.dosimetry/medical_shared.db"

PATIENTS_SCHEMA = """
CREATE TABLE IF NOT EXISTS Patients (
    Id TEXT PRIMARY KEY,
    DoseValue REAL,
    IsFinalized INTEGER,     -- 0/1, set to 1 only by a committed finalize
    IsHighRisk INTEGER       -- 0/1, assigned at seed time
);
"""


class FinalizationStore:
    """Shared store of patient dose records.

    Every process that opens the same path sees the same rows. Each
    operation runs in its own transaction on its own connection, and
    writes start with BEGIN IMMEDIATE so they are serialized across
    processes.
    """

    def __init__(self, db_path: str | None = None, timeout: float = 5.0):
        """Initialize the store and make sure the schema exists.

        Args:
            db_path: Path to SQLite database. Defaults to DOSIMETRY_DB_PATH env var
                     or ~/.dosimetry/medical_shared.db
            timeout: Seconds to wait on a locked database before failing
        """
        if db_path:
            self.db_path = os.path.expanduser(db_path)
        else:
            self.db_path = os.path.expanduser(
                os.environ.get("DOSIMETRY_DB_PATH", DEFAULT_DB_PATH)
            )
        self.timeout = timeout

        self.initialize()

    def _connect(self) -> sqlite3.Connection:
        """Get database connection with row factory."""
        # Autocommit mode; transactions are opened explicitly in _transaction.
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self, write: bool = False) -> Iterator[sqlite3.Connection]:
        """Run one store operation as a single transaction.

        The connection is committed on success, rolled back on any error
        and closed on every exit path. sqlite3 errors are raised as StoreError.
        """
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            logger.error(f"Cannot open store at {self.db_path}: {e}")
            raise StoreError(f"Cannot open store: {e}", db_path=self.db_path) from e

        try:
            conn.execute("BEGIN IMMEDIATE" if write else "BEGIN")
            yield conn
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            logger.error(f"Store operation failed on {self.db_path}: {e}")
            raise StoreError(str(e), db_path=self.db_path) from e
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    # --- Lifecycle ---

    def initialize(self) -> None:
        """Create the Patients table if it does not exist.

        Safe to call any number of times; existing rows are never touched.

        Raises:
            StoreError: If the database cannot be created or opened
        """
        logger.info(f"Connecting to database at: {self.db_path}")

        db_dir = os.path.dirname(self.db_path)
        try:
            if db_dir:
                os.makedirs(db_dir, exist_ok=True)
            conn = sqlite3.connect(self.db_path, timeout=self.timeout)
            try:
                conn.executescript(PATIENTS_SCHEMA)
            finally:
                conn.close()
        except (OSError, sqlite3.Error) as e:
            logger.error(f"Failed to initialize store at {self.db_path}: {e}")
            raise StoreError(f"Failed to initialize store: {e}", db_path=self.db_path) from e

    def reset_and_seed(self) -> None:
        """Erase all rows and install the fixed two-patient seed.

        Destructive: any prior finalization state is lost. Intended for
        bootstrap and tests.
        """
        self.initialize()
        with self._transaction(write=True) as conn:
            self._seed(conn)

        logger.info(f"Reset store and seeded {len(SEED_ROWS)} patients")

    def seed_if_empty(self) -> bool:
        """Seed the store only if it has no rows.

        Returns:
            True if the seed was installed
        """
        with self._transaction(write=True) as conn:
            count = conn.execute("SELECT COUNT(*) FROM Patients").fetchone()[0]
            if count:
                return False
            self._seed(conn)

        logger.info(f"Store was empty, seeded {len(SEED_ROWS)} patients")
        return True

    def _seed(self, conn: sqlite3.Connection) -> None:
        conn.execute("DELETE FROM Patients")
        conn.executemany(
            "INSERT INTO Patients (Id, DoseValue, IsFinalized, IsHighRisk) VALUES (?, ?, ?, ?)",
            SEED_ROWS,
        )

    # --- Queries ---

    def count(self) -> int:
        """Number of patient rows in the store."""
        with self._transaction() as conn:
            return conn.execute("SELECT COUNT(*) FROM Patients").fetchone()[0]

    def fetch_all(self) -> list[PatientRecord]:
        """List all patient records.

        Row order is not guaranteed.
        """
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT Id, DoseValue, IsFinalized, IsHighRisk FROM Patients"
            ).fetchall()

        return [PatientRecord.from_row(row) for row in rows]

    def fetch_one(self, patient_id: str) -> PatientRecord:
        """Get a patient record by id.

        Args:
            patient_id: Patient id

        Returns:
            The matching PatientRecord

        Raises:
            NotFoundError: If no row has this id
        """
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT Id, DoseValue, IsFinalized, IsHighRisk FROM Patients WHERE Id = ?",
                (patient_id,),
            ).fetchone()

        if not row:
            raise NotFoundError(patient_id)

        return PatientRecord.from_row(row)

    # --- Status transitions ---

    def finalize(self, patient_id: str, dose: float) -> PatientRecord:
        """Write the dose and mark the record finalized.

        Performs no safety check: callers must only pass a dose the
        interlock has classified as SAFE. Use engine.attempt_finalize.

        Args:
            patient_id: Patient id
            dose: Safety-cleared dose to persist

        Returns:
            The record as read back inside the same transaction

        Raises:
            NotFoundError: If no row has this id (nothing is written)
        """
        with self._transaction(write=True) as conn:
            cursor = conn.execute(
                "UPDATE Patients SET DoseValue = ?, IsFinalized = 1 WHERE Id = ?",
                (dose, patient_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError(patient_id)

            row = conn.execute(
                "SELECT Id, DoseValue, IsFinalized, IsHighRisk FROM Patients WHERE Id = ?",
                (patient_id,),
            ).fetchone()

        logger.info(f"Finalized {patient_id} at dose {dose}")
        return PatientRecord.from_row(row)
