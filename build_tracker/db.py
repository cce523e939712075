"""SQL storage for the default query collaborator.

Builds are kept in a relational database (SQLite unless ``BT_DB_URL`` says
otherwise). The engine is shared by the API request threads, so SQLite
connections are opened with ``check_same_thread`` disabled.
"""

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from build_tracker.config import get_settings


class Base(DeclarativeBase):
    """Declarative base of the build store tables."""


def _ensure_sqlite_directory(db_url: str) -> None:
    url = make_url(db_url)
    if url.get_backend_name() != "sqlite":
        return
    database = url.database
    if database and database != ":memory:" and not database.startswith("file:"):
        Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)


def get_engine(db_url: str | None = None) -> Engine:
    """Create the engine for the build store.

    The parent directory of a SQLite database file is created if needed.

    Args:
        db_url: Database URL. Defaults to ``Settings.db_url``.

    Returns:
        SQLAlchemy Engine.
    """
    if db_url is None:
        db_url = get_settings().db_url

    connect_args: dict[str, object] = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        _ensure_sqlite_directory(db_url)
    return create_engine(db_url, connect_args=connect_args)


def get_session_factory(engine: Engine | None = None) -> sessionmaker[Session]:
    """Session factory bound to ``engine`` (or a new engine from settings).

    Loaded objects are not expired on commit, so builds read inside a
    session stay usable after it closes.
    """
    return sessionmaker(
        bind=engine if engine is not None else get_engine(),
        autoflush=False,
        expire_on_commit=False,
    )


@contextmanager
def get_session(
    session_factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """Open a session that commits on success and rolls back on error."""
    factory = session_factory if session_factory is not None else get_session_factory()
    with factory() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


def create_all_tables(engine: Engine | None = None) -> None:
    """Create the build store tables if they do not exist yet."""
    # Registers the models on Base.metadata
    from build_tracker.builds import models  # noqa: F401

    Base.metadata.create_all(bind=engine if engine is not None else get_engine())


__all__ = [
    "Base",
    "create_all_tables",
    "get_engine",
    "get_session",
    "get_session_factory",
]
