"""Database engine and session management."""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from sentinel.core.config import Settings, settings


def _connect_args(database_url: str, connect_timeout: int, statement_timeout: int) -> dict[str, Any]:
    """Driver-level timeouts so a stalled database surfaces as an error."""
    if database_url.startswith("sqlite"):
        return {"timeout": connect_timeout, "check_same_thread": False}
    return {
        "connect_timeout": connect_timeout,
        "options": f"-c statement_timeout={statement_timeout * 1000}",
    }


def build_engine(cfg: Settings) -> Engine:
    """Create an engine for the configured DATABASE_URL."""
    return create_engine(
        cfg.DATABASE_URL,
        pool_pre_ping=True,
        echo=cfg.DEBUG,
        connect_args=_connect_args(
            cfg.DATABASE_URL,
            cfg.DB_CONNECT_TIMEOUT_SEC,
            cfg.DB_STATEMENT_TIMEOUT_SEC,
        ),
    )


engine = build_engine(settings)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False
