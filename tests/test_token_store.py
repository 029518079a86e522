"""Tests for sentinel.services.token_store: one live refresh token per user."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

from sqlalchemy.exc import IntegrityError, OperationalError

from sentinel.core.errors import StorageUnavailableError
from sentinel.models import RefreshToken
from sentinel.services.token_store import TokenStore
from sentinel.services.user_directory import UserDirectory

from support import make_session_factory


def _expiry(days: int = 7) -> datetime:
    return datetime.now(UTC) + timedelta(days=days)


class TestTokenStore(unittest.TestCase):
    """Replace, invalidate and purge against in-memory SQLite."""

    def setUp(self) -> None:
        self.session = make_session_factory()()
        self.store = TokenStore(self.session)
        self.user = UserDirectory(self.session).create("Ana Li", "ana@x.com", "hash", "user")

    def tearDown(self) -> None:
        self.session.close()

    def test_replace_inserts_with_metadata(self) -> None:
        self.store.replace(self.user.id, "token-1", _expiry(), "pytest-agent", "10.0.0.1")
        row = self.store.find_by_user(self.user.id)
        self.assertEqual(row.token, "token-1")
        self.assertEqual(row.user_agent, "pytest-agent")
        self.assertEqual(row.ip_address, "10.0.0.1")

    def test_replace_keeps_a_single_row(self) -> None:
        self.store.replace(self.user.id, "token-1", _expiry())
        self.store.replace(self.user.id, "token-2", _expiry())
        self.assertEqual(self.store.count_for_user(self.user.id), 1)
        self.assertEqual(self.store.find_by_user(self.user.id).token, "token-2")

    def test_invalidate_by_token_reports_presence(self) -> None:
        self.store.replace(self.user.id, "token-1", _expiry())
        self.assertTrue(self.store.invalidate_by_token("token-1"))
        self.assertFalse(self.store.invalidate_by_token("token-1"))
        self.assertFalse(self.store.invalidate_by_token("never-issued"))
        self.assertIsNone(self.store.find_by_user(self.user.id))

    def test_superseded_token_does_not_touch_current_session(self) -> None:
        self.store.replace(self.user.id, "token-1", _expiry())
        self.store.replace(self.user.id, "token-2", _expiry())
        self.assertFalse(self.store.invalidate_by_token("token-1"))
        self.assertEqual(self.store.find_by_user(self.user.id).token, "token-2")

    def test_invalidate_by_user(self) -> None:
        self.store.replace(self.user.id, "token-1", _expiry())
        self.assertEqual(self.store.invalidate_by_user(self.user.id), 1)
        self.assertEqual(self.store.invalidate_by_user(self.user.id), 0)

    def test_invalidate_by_user_keeps_other_sessions(self) -> None:
        other = UserDirectory(self.session).create("Bob Ray", "bob@x.com", "hash", "user")
        self.store.replace(self.user.id, "token-1", _expiry())
        self.store.replace(other.id, "token-2", _expiry())
        self.store.invalidate_by_user(self.user.id)
        self.assertIsNone(self.store.find_by_user(self.user.id))
        self.assertEqual(self.store.find_by_user(other.id).token, "token-2")

    def test_purge_expired(self) -> None:
        other = UserDirectory(self.session).create("Bob Ray", "bob@x.com", "hash", "user")
        self.store.replace(self.user.id, "stale", datetime.now(UTC) - timedelta(hours=1))
        self.store.replace(other.id, "fresh", _expiry())
        self.assertEqual(self.store.purge_expired(datetime.now(UTC)), 1)
        self.assertIsNone(self.store.find_by_user(self.user.id))
        self.assertEqual(self.store.find_by_user(other.id).token, "fresh")


class TestReplaceRace(unittest.TestCase):
    """A unique-constraint violation on insert is retried as an update."""

    def test_conflict_retried_as_update(self) -> None:
        session = MagicMock()
        session.commit.side_effect = [IntegrityError("INSERT", {}, Exception("dup")), None]
        session.query.return_value.filter.return_value.update.return_value = 1
        TokenStore(session).replace("user-1", "token-2", _expiry())
        session.rollback.assert_called_once()
        session.query.return_value.filter.return_value.update.assert_called_once()
        self.assertEqual(session.commit.call_count, 2)
        self.assertEqual(session.add.call_count, 1)

    def test_conflict_with_vanished_row_inserts_again(self) -> None:
        session = MagicMock()
        session.commit.side_effect = [IntegrityError("INSERT", {}, Exception("dup")), None]
        session.query.return_value.filter.return_value.update.return_value = 0
        TokenStore(session).replace("user-1", "token-2", _expiry())
        self.assertEqual(session.add.call_count, 2)
        added = session.add.call_args[0][0]
        self.assertIsInstance(added, RefreshToken)
        self.assertEqual(added.token, "token-2")

    def test_storage_failure(self) -> None:
        session = MagicMock()
        session.commit.side_effect = OperationalError("INSERT", {}, Exception("timeout"))
        with self.assertRaises(StorageUnavailableError):
            TokenStore(session).replace("user-1", "token-1", _expiry())
        session.rollback.assert_called_once()

    def test_replace_and_invalidate_share_one_delete(self) -> None:
        session = MagicMock()
        store = TokenStore(session)
        with patch.object(store, "_delete_for_user", return_value=1) as delete:
            store.replace("user-1", "token-1", _expiry())
            self.assertEqual(store.invalidate_by_user("user-1"), 1)
        self.assertEqual(delete.call_count, 2)
        delete.assert_called_with("user-1")
        # One commit per unit of work; the delete itself never commits.
        self.assertEqual(session.commit.call_count, 2)

    def test_invalidate_storage_failure(self) -> None:
        session = MagicMock()
        session.query.side_effect = OperationalError("DELETE", {}, Exception("timeout"))
        with self.assertRaises(StorageUnavailableError):
            TokenStore(session).invalidate_by_token("token-1")


if __name__ == "__main__":
    unittest.main()
