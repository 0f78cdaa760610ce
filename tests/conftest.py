# Rev 0.2.0

"""Pytest fixtures for planboard (Rev 0.2.0)"""
from __future__ import annotations
import pytest
from pathlib import Path

from planboard.repositories.db import Database
from planboard.services.planning_service import PlanningService


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "planboard.db"


@pytest.fixture()
def db(db_path: Path):
    store = Database(db_path)
    try:
        yield store
    finally:
        store.close()


@pytest.fixture()
def service(db: Database) -> PlanningService:
    return PlanningService(db)


@pytest.fixture()
def project(service: PlanningService):
    # Monday 2026-03-02 .. Sunday 2026-03-08
    return service.create_project({"name": "Launch", "startDate": "2026-03-02", "endDate": "2026-03-08"})


@pytest.fixture()
def main_sub(service: PlanningService, project):
    return service.list_subprojects(project.id)[0]


@pytest.fixture()
def activity(service: PlanningService, project):
    return service.create_activity(project.id, {"name": "Design", "color": "#3366CC"})
