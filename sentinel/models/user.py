"""ORM model for user accounts."""

import uuid

from sqlalchemy import Column, DateTime, String, func

from sentinel.models.base import Base

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_ADMIN, ROLE_USER)


def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """
    User account for login and role-based access control.

    email is stored normalized (trimmed, lowercase) under a unique index.
    role: 'admin' or 'user'
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_user_id)
    fullname = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=ROLE_USER)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
