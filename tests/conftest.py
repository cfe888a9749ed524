import pytest

from dosimetry.finalization import FinalizationStore


@pytest.fixture
def db_path(tmp_path) -> str:
    """Path to a fresh shared database file."""
    return str(tmp_path / "shared" / "medical_shared.db")


@pytest.fixture
def store(db_path) -> FinalizationStore:
    """Store initialized but not seeded."""
    return FinalizationStore(db_path=db_path)


@pytest.fixture
def seeded_store(store) -> FinalizationStore:
    """Store holding the two seed patients."""
    store.reset_and_seed()
    return store
