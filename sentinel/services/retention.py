"""Data retention: delete refresh tokens past their expiry."""

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from sentinel.services.token_store import TokenStore

if TYPE_CHECKING:
    from sentinel.core.config import Settings

logger = logging.getLogger(__name__)


def purge_expired_refresh_tokens(
    session: Session, settings: "Settings", now: datetime | None = None
) -> int:
    """
    Delete refresh-token rows whose expires_at has passed.

    Returns the number of rows deleted. Idempotent: safe to run repeatedly.
    """
    if not settings.RETENTION_ENABLED:
        logger.info("Retention is disabled (RETENTION_ENABLED=false); skipping.")
        return 0

    cutoff = now or datetime.now(UTC)
    deleted_count = TokenStore(session).purge_expired(cutoff)

    if deleted_count > 0:
        logger.info(
            "Retention run: cutoff=%s, refresh_tokens_deleted=%s",
            cutoff.isoformat(),
            deleted_count,
        )
    return deleted_count
