"""User records keyed by normalized email."""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from sentinel.core.errors import DuplicateEmailError, StorageUnavailableError
from sentinel.models import User

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "This email already exists. Try logging in with this email."


def normalize_email(email: str) -> str:
    """Trim and lowercase; the result is the uniqueness key."""
    return email.strip().lower()


class UserDirectory:
    """
    Lookup and creation of users.

    Uniqueness of email is enforced by the unique index on users.email; the
    read in find_by_email is only a fast path for the common case.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_email(self, email: str) -> User | None:
        try:
            return (
                self.session.query(User)
                .filter(User.email == normalize_email(email))
                .first()
            )
        except SQLAlchemyError as e:
            logger.exception("User lookup failed")
            raise StorageUnavailableError("Storage is temporarily unavailable.") from e

    def find_by_id(self, user_id: str) -> User | None:
        try:
            return self.session.get(User, user_id)
        except SQLAlchemyError as e:
            logger.exception("User lookup by id failed")
            raise StorageUnavailableError("Storage is temporarily unavailable.") from e

    def create(self, fullname: str, email: str, password_hash: str, role: str) -> User:
        """Insert a user; raises DuplicateEmailError if the email is taken."""
        user = User(
            fullname=fullname,
            email=normalize_email(email),
            password_hash=password_hash,
            role=role,
        )
        try:
            self.session.add(user)
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateEmailError(DUPLICATE_EMAIL_MESSAGE) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("User insert failed")
            raise StorageUnavailableError("Storage is temporarily unavailable.") from e
        self.session.refresh(user)
        return user

    def list_users(self) -> list[User]:
        try:
            return self.session.query(User).order_by(User.created_at, User.email).all()
        except SQLAlchemyError as e:
            logger.exception("User listing failed")
            raise StorageUnavailableError("Storage is temporarily unavailable.") from e
