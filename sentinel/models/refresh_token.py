"""ORM model for the single outstanding refresh token of each user."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func

from sentinel.models.base import Base


class RefreshToken(Base):
    """
    Persisted refresh token.

    The unique index on user_id allows at most one live row per user; a new
    login replaces the previous row. token has its own index for logout.
    """

    __tablename__ = "refresh_tokens"
    # Never reuse ids of deleted rows.
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    token = Column(String(1024), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    user_agent = Column(String(512), nullable=True)
    ip_address = Column(String(64), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
