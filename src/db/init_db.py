from __future__ import annotations

import logging
from pathlib import Path

from src.db.models import Base
from src.db.session import get_engine
from src.db.sqlite_migrations import ensure_sqlite_schema


log = logging.getLogger(__name__)


def _ensure_sqlite_dir(url: str) -> None:
    prefix = "sqlite:///"
    if not url.startswith(prefix) or url.endswith(":memory:"):
        return
    Path(url[len(prefix):]).parent.mkdir(parents=True, exist_ok=True)


def init_db() -> None:
    engine = get_engine()
    _ensure_sqlite_dir(str(engine.url))
    Base.metadata.create_all(bind=engine)
    ensure_sqlite_schema(engine)
    log.debug("Database ready at %s", engine.url.render_as_string(hide_password=True))
