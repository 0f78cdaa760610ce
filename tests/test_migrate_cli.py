# tests/test_migrate_cli.py
from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from planboard.repositories.db import Database
from planboard.services.planning_service import PlanningService
from planboard.repositories import db as db_module
from planboard.tools.migrate import main
from planboard.utils import logging_setup


@pytest.fixture(autouse=True)
def _logging_already_configured(monkeypatch):
    # keeps the CLI from attaching handlers to the test process
    monkeypatch.setattr(logging_setup, "_configured", True)
    monkeypatch.setattr(logging_setup, "_state_dir", lambda app=logging_setup.APP_NAME: Path("."))


def test_status_of_missing_file(tmp_path: Path, capsys):
    target = tmp_path / "none.db"
    assert main(["status", "--db", str(target)]) == 0
    assert "missing" in capsys.readouterr().out
    assert not target.exists()


def test_up_creates_then_is_a_no_op(tmp_path: Path, capsys):
    target = tmp_path / "new.db"
    assert main(["up", "--db", str(target)]) == 0
    assert "from version 0 to 2" in capsys.readouterr().out
    assert main(["up", "--db", str(target)]) == 0
    assert "No changes" in capsys.readouterr().out


def test_status_lists_row_counts(db_path: Path, capsys):
    store = Database(db_path)
    PlanningService(store).create_project({"name": "P", "startDate": "2026-03-02", "lengthDays": 2})
    store.close()

    assert main(["status", "--db", str(db_path)]) == 0
    out = capsys.readouterr().out
    assert "Schema version: 2 (current: 2)" in out
    assert "projects: 1" in out
    assert "subprojects: 1" in out


def test_verify_passes_on_clean_file(db_path: Path, capsys):
    Database(db_path).close()
    assert main(["verify", "--db", str(db_path)]) == 0
    assert "Verification passed" in capsys.readouterr().out


def test_verify_fails_on_missing_file(tmp_path: Path):
    assert main(["verify", "--db", str(tmp_path / "gone.db")]) == 1


def test_verify_fails_on_unmigrated_file(tmp_path: Path, capsys):
    target = tmp_path / "old.db"
    con = sqlite3.connect(target)
    con.execute("CREATE TABLE projects (id INTEGER PRIMARY KEY)")
    con.commit()
    con.close()
    assert main(["verify", "--db", str(target)]) == 2
    assert "Missing tables" in capsys.readouterr().out


def test_verify_reports_invariant_violations(db_path: Path, capsys):
    store = Database(db_path)
    project = PlanningService(store).create_project({"name": "P", "startDate": "2026-03-02", "lengthDays": 2})
    store.run("UPDATE projects SET lengthDays = 5 WHERE id = ?", (project.id,)).result()
    store.close()

    assert main(["verify", "--db", str(db_path)]) == 5
    assert "invariant violation" in capsys.readouterr().out


def test_command_is_required():
    with pytest.raises(SystemExit):
        main([])


def test_status_and_verify_leave_the_file_untouched(db_path: Path, monkeypatch, capsys):
    Database(db_path).close()
    writes = []
    monkeypatch.setattr(db_module, "write_image", lambda path, data: writes.append(path))

    assert main(["status", "--db", str(db_path)]) == 0
    assert main(["verify", "--db", str(db_path)]) == 0
    assert writes == []
