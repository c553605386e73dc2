# storage/db.py
from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from core.settings import DB_PATH

# Ensure SQLModel metadata is populated
import models.outbox_row  # noqa: F401
from storage import migrations


_engine = None


def create_queue_engine(path: Optional[Path | str] = None):
    """Return an engine for ``path``; ``":memory:"`` gives a shared in-memory DB."""

    if str(path) == ":memory:":
        return create_engine(
            "sqlite://",
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    db_file = Path(path or DB_PATH)
    db_file.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(
        f"sqlite:///{db_file.as_posix()}",
        echo=False,
        connect_args={"check_same_thread": False},
    )


def init_db(engine=None):
    actual = engine or get_engine()
    SQLModel.metadata.create_all(actual)
    migrations.run_all(actual)
    return actual


def get_engine():
    global _engine
    if _engine is None:
        _engine = create_queue_engine(DB_PATH)
    return _engine


def session_factory(engine=None) -> Callable[[], Session]:
    actual = engine or get_engine()

    def factory() -> Session:
        return Session(actual)

    return factory


def get_session() -> Session:
    return Session(get_engine())


__all__ = ["create_queue_engine", "get_engine", "get_session", "init_db", "session_factory"]
