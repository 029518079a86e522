"""Persistence of the single live refresh token per user."""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from sentinel.core.errors import StorageUnavailableError
from sentinel.models import RefreshToken

logger = logging.getLogger(__name__)

STORAGE_UNAVAILABLE_MESSAGE = "Storage is temporarily unavailable."


class TokenStore:
    """
    Refresh-token rows, at most one per user.

    Each public method is one unit of work: it commits on success and rolls
    back on failure. Storage errors surface as StorageUnavailableError.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _fail(self, action: str) -> StorageUnavailableError:
        self.session.rollback()
        logger.exception("Refresh token %s failed", action)
        return StorageUnavailableError(STORAGE_UNAVAILABLE_MESSAGE)

    def _delete_for_user(self, user_id: str) -> int:
        """Delete the user's row inside the current transaction (no commit)."""
        return (
            self.session.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id)
            .delete(synchronize_session=False)
        )

    def replace(
        self,
        user_id: str,
        refresh_token: str,
        expires_at: datetime,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> None:
        """
        Make refresh_token the user's only live token.

        Delete-then-insert; if a concurrent login inserted first, the unique
        index on user_id rejects ours and we overwrite that row instead.
        """
        try:
            self._delete_for_user(user_id)
            self.session.add(
                RefreshToken(
                    user_id=user_id,
                    token=refresh_token,
                    expires_at=expires_at,
                    user_agent=user_agent,
                    ip_address=ip_address,
                )
            )
            self.session.commit()
            return
        except IntegrityError:
            self.session.rollback()
            logger.info(
                "Concurrent refresh token insert; retrying as update",
                extra={"user_id": user_id},
            )
        except SQLAlchemyError as e:
            raise self._fail("replace") from e

        try:
            updated = (
                self.session.query(RefreshToken)
                .filter(RefreshToken.user_id == user_id)
                .update(
                    {
                        RefreshToken.token: refresh_token,
                        RefreshToken.expires_at: expires_at,
                        RefreshToken.user_agent: user_agent,
                        RefreshToken.ip_address: ip_address,
                    },
                    synchronize_session=False,
                )
            )
            if updated == 0:
                # The competing row vanished between our attempts (e.g. logout).
                self.session.add(
                    RefreshToken(
                        user_id=user_id,
                        token=refresh_token,
                        expires_at=expires_at,
                        user_agent=user_agent,
                        ip_address=ip_address,
                    )
                )
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail("replace") from e

    def invalidate_by_token(self, refresh_token: str) -> bool:
        """Delete the row holding refresh_token; return whether one existed."""
        try:
            deleted = (
                self.session.query(RefreshToken)
                .filter(RefreshToken.token == refresh_token)
                .delete(synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail("invalidate") from e
        return deleted > 0

    def invalidate_by_user(self, user_id: str) -> int:
        """Drop the user's session, e.g. when an operator revokes access."""
        try:
            deleted = self._delete_for_user(user_id)
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail("invalidate") from e
        return deleted

    def find_by_user(self, user_id: str) -> RefreshToken | None:
        try:
            return (
                self.session.query(RefreshToken)
                .filter(RefreshToken.user_id == user_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise self._fail("lookup") from e

    def count_for_user(self, user_id: str) -> int:
        try:
            return (
                self.session.query(RefreshToken)
                .filter(RefreshToken.user_id == user_id)
                .count()
            )
        except SQLAlchemyError as e:
            raise self._fail("count") from e

    def purge_expired(self, now: datetime) -> int:
        """Delete rows whose expires_at is before now; return the count."""
        try:
            deleted = (
                self.session.query(RefreshToken)
                .filter(RefreshToken.expires_at < now)
                .delete(synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail("purge") from e
        return deleted
