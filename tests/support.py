"""Shared fixtures for tests: in-memory SQLite sessions, keys and settings."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sentinel.core.config import Settings
from sentinel.core.tokens import TokenIssuer
from sentinel.models import Base

ACCESS_SECRET = "test-access-signing-key-0123456789abcdef"
REFRESH_SECRET = "test-refresh-signing-key-fedcba9876543210"
TEST_BCRYPT_ROUNDS = 10


def make_session_factory() -> sessionmaker:
    """Fresh in-memory database with all tables; one shared connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def make_issuer(**kwargs: object) -> TokenIssuer:
    return TokenIssuer(ACCESS_SECRET, REFRESH_SECRET, **kwargs)


def make_settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "APP_ENV": "dev",
        "DATABASE_URL": "sqlite://",
        "JWT_ACCESS_SECRET": ACCESS_SECRET,
        "JWT_REFRESH_SECRET": REFRESH_SECRET,
        "BCRYPT_ROUNDS": TEST_BCRYPT_ROUNDS,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)
