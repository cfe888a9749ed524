"""Tests for the dose entry command-line tool."""

from dosimetry.finalization import FinalizationStore
from entry_tool.runner import EXIT_ERROR, EXIT_OK, EXIT_REJECTED, main


def test_check_safe_dose(capsys):
    assert main(["check", "50"]) == EXIT_OK
    assert "Status: Safe" in capsys.readouterr().out


def test_check_hazard_dose(capsys):
    assert main(["check", "56.0"]) == EXIT_REJECTED
    assert "HAZARD" in capsys.readouterr().out


def test_check_invalid_dose(capsys):
    assert main(["check", "abc"]) == EXIT_REJECTED
    assert "Invalid" in capsys.readouterr().out


def test_check_uses_target_override(capsys):
    assert main(["--target", "100", "check", "105"]) == EXIT_OK


def test_finalize_success_message_only_on_commit(db_path, capsys):
    FinalizationStore(db_path=db_path).reset_and_seed()

    assert main(["--db", db_path, "finalize", "Patient_Normal", "50.0"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "Plan Finalized Successfully!" in out
    assert "Ready to Bill" in out

    record = FinalizationStore(db_path=db_path).fetch_one("Patient_Normal")
    assert record.is_finalized
    assert record.dose_value == 50.0


def test_finalize_hazard_is_rejected(db_path, capsys):
    FinalizationStore(db_path=db_path).reset_and_seed()

    assert main(["--db", db_path, "finalize", "Patient_Normal", "56.0"]) == EXIT_REJECTED
    out = capsys.readouterr().out
    assert "Successfully" not in out
    assert "exceeds safety limit" in out
    assert not FinalizationStore(db_path=db_path).fetch_one("Patient_Normal").is_finalized


def test_finalize_unknown_patient(db_path, capsys):
    FinalizationStore(db_path=db_path).reset_and_seed()

    assert main(["--db", db_path, "finalize", "Nobody", "10"]) == EXIT_REJECTED
    assert "patient not found" in capsys.readouterr().out


def test_reset_and_list(db_path, capsys):
    assert main(["--db", db_path, "reset"]) == EXIT_OK
    assert main(["--db", db_path, "list"]) == EXIT_OK

    out = capsys.readouterr().out
    assert "Patient_Normal" in out
    assert "Patient_Hazard" in out
    assert "Pending" in out


def test_list_empty_store(db_path, capsys):
    assert main(["--db", db_path, "list"]) == EXIT_OK
    assert "No patients" in capsys.readouterr().out


def test_store_error_exits_with_error(tmp_path):
    corrupt = tmp_path / "corrupt.db"
    corrupt.write_bytes(b"not a database" * 200)

    assert main(["--db", str(corrupt), "list"]) == EXIT_ERROR


def test_invalid_policy_exits_with_error():
    assert main(["--tolerance", "-1", "check", "10"]) == EXIT_ERROR


def test_non_finite_cli_policy_exits_with_error(db_path, capsys):
    FinalizationStore(db_path=db_path).reset_and_seed()

    for override in (["--target", "nan"], ["--target", "inf"], ["--tolerance", "nan"], ["--tolerance", "inf"]):
        assert main(["--db", db_path, *override, "finalize", "Patient_Normal", "9999"]) == EXIT_ERROR

    assert "Successfully" not in capsys.readouterr().out
    assert not FinalizationStore(db_path=db_path).fetch_one("Patient_Normal").is_finalized


def test_non_finite_env_policy_exits_with_error(db_path, monkeypatch, capsys):
    FinalizationStore(db_path=db_path).reset_and_seed()
    monkeypatch.setenv("DOSIMETRY_TOLERANCE_FRACTION", "inf")

    assert main(["--db", db_path, "finalize", "Patient_Normal", "9999"]) == EXIT_ERROR

    assert "Successfully" not in capsys.readouterr().out
    record = FinalizationStore(db_path=db_path).fetch_one("Patient_Normal")
    assert not record.is_finalized
    assert record.dose_value == 0.0
