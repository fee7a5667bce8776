"""Engine and session helpers for typed store models."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker


def _enable_foreign_keys(dbapi_conn: object, connection_record: object) -> None:
    """Enable foreign key constraints for SQLite connections."""
    cursor = dbapi_conn.cursor()  # type: ignore[attr-defined]
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_store_engine(url: str = "sqlite:///:memory:", echo: bool = False) -> Engine:
    """Create an engine; SQLite connections get foreign keys enabled."""
    engine = create_engine(url, echo=echo)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_foreign_keys)
    return engine


@contextmanager
def session_scope(
    engine: Engine, expire_on_commit: bool = False
) -> Generator[Session, None, None]:
    """Yield a session that commits on success and rolls back on error."""
    factory = sessionmaker(bind=engine, expire_on_commit=expire_on_commit)
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
