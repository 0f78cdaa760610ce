# planboard application context
# Rev 0.2.0

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .utils.config import resolve_db_path
from .utils.logging_setup import get_logger
from .repositories.db import Database
from .services.planning_service import PlanningService


@dataclass
class AppContext:
    """Central container for shared app resources."""
    db_path: Path
    db: Database
    planning: PlanningService

    @classmethod
    def create(cls, db_path: Optional[Path | str] = None) -> "AppContext":
        """Open (and migrate) the store, then wire the service on top."""
        log = get_logger("AppContext")
        path = resolve_db_path(db_path)
        db = Database(path)
        planning = PlanningService(db)
        log.info("AppContext initialized with DB=%s", path)
        return cls(db_path=path, db=db, planning=planning)

    def close(self) -> None:
        self.db.close()
