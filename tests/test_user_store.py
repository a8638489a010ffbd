"""Tests for userapi.services.user_store: projections, uniqueness and concurrent registration."""

import os
import tempfile
import threading
import unittest
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from userapi.core.errors import ConflictError
from userapi.models import Base
from userapi.schemas.user import UserPublic
from userapi.services.auth import AuthService
from userapi.services.user_store import DuplicateUserError, UserStore


def _memory_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False)()


class TestUserStore(unittest.TestCase):
    """CRUD contract of UserStore against in-memory SQLite."""

    def setUp(self) -> None:
        self.session = _memory_session()
        self.store = UserStore(self.session)

    def tearDown(self) -> None:
        self.session.close()

    def _create(self, name: str, role: str = "user") -> UserPublic:
        return self.store.create(
            username=name, email=f"{name}@x.com", password_hash=f"hash-{name}", role=role
        )

    def test_create_assigns_increasing_ids_and_defaults_role(self) -> None:
        first = self.store.create(username="a1", email="a1@x.com", password_hash="h")
        second = self.store.create(username="a2", email="a2@x.com", password_hash="h")
        self.assertGreater(second.id, first.id)
        self.assertEqual(first.role, "user")
        self.assertIsNotNone(first.created_at)
        self.assertIsNone(first.updated_at)

    def test_public_methods_never_expose_hash(self) -> None:
        user = self._create("alice")
        views = [user, self.store.find_by_id(user.id), *self.store.find_all()]
        for view in views:
            self.assertIsInstance(view, UserPublic)
            self.assertNotIn("password_hash", view.model_dump())
            self.assertNotIn("hash-alice", view.model_dump_json())

    def test_internal_lookups_return_record_with_hash(self) -> None:
        self._create("alice")
        self.assertEqual(self.store.find_by_email("alice@x.com").password_hash, "hash-alice")
        self.assertEqual(self.store.find_by_username("alice").password_hash, "hash-alice")
        self.assertIsNone(self.store.find_by_email("bob@x.com"))

    def test_duplicate_email_rejected_by_store(self) -> None:
        self._create("alice")
        with self.assertRaises(DuplicateUserError) as ctx:
            self.store.create(username="other", email="alice@x.com", password_hash="h")
        self.assertEqual(ctx.exception.field, "email")
        self.assertEqual(self.store.count(), 1)

    def test_duplicate_username_rejected_by_store(self) -> None:
        self._create("alice")
        with self.assertRaises(DuplicateUserError) as ctx:
            self.store.create(username="alice", email="other@x.com", password_hash="h")
        self.assertEqual(ctx.exception.field, "username")

    def test_update_by_id(self) -> None:
        user = self._create("alice")
        updated = self.store.update_by_id(user.id, {"email": "new@x.com"})
        self.assertEqual(updated.email, "new@x.com")
        self.assertEqual(updated.username, "alice")
        self.assertIsNotNone(updated.updated_at)

    def test_empty_update_writes_nothing(self) -> None:
        user = self._create("alice")
        unchanged = self.store.update_by_id(user.id, {})
        self.assertEqual(unchanged, user)
        self.assertIsNone(self.store.find_by_id(user.id).updated_at)

    def test_empty_update_of_missing_user_returns_none(self) -> None:
        self.assertIsNone(self.store.update_by_id(999, {}))

    def test_timestamps_read_back_as_utc(self) -> None:
        user = self._create("alice")
        updated = self.store.update_by_id(user.id, {"email": "new@x.com"})
        self.assertEqual(self.store.find_by_id(user.id).created_at.utcoffset(), timedelta(0))
        self.assertEqual(updated.updated_at.utcoffset(), timedelta(0))

    def test_update_into_taken_value_rejected(self) -> None:
        alice = self._create("alice")
        self._create("bob")
        with self.assertRaises(DuplicateUserError) as ctx:
            self.store.update_by_id(alice.id, {"username": "bob"})
        self.assertEqual(ctx.exception.field, "username")
        self.assertEqual(self.store.find_by_id(alice.id).username, "alice")

    def test_update_missing_returns_none(self) -> None:
        self.assertIsNone(self.store.update_by_id(999, {"username": "ghost"}))

    def test_update_unknown_field_rejected(self) -> None:
        user = self._create("alice")
        with self.assertRaises(ValueError):
            self.store.update_by_id(user.id, {"id": 42})

    def test_delete_by_id(self) -> None:
        user = self._create("alice")
        self.assertTrue(self.store.delete_by_id(user.id))
        self.assertFalse(self.store.delete_by_id(user.id))
        self.assertIsNone(self.store.find_by_id(user.id))

    def test_find_page_and_stats(self) -> None:
        self._create("admin", role="admin")
        for name in ("u1", "u2", "u3"):
            self._create(name)
        self.assertEqual([u.username for u in self.store.find_page(1, 2)], ["u1", "u2"])
        self.assertEqual(self.store.find_page(10, 2), [])
        stats = self.store.get_stats()
        self.assertEqual((stats.total_users, stats.admin_users, stats.regular_users), (4, 1, 3))


class TestConcurrentRegistration(unittest.TestCase):
    """Simultaneous registrations with one email: exactly one record, the rest conflict."""

    WORKERS = 6

    def setUp(self) -> None:
        fd, self.db_path = tempfile.mkstemp(suffix=".db")
        os.close(fd)
        self.engine = create_engine(
            f"sqlite:///{self.db_path}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, autoflush=False)

    def tearDown(self) -> None:
        self.engine.dispose()
        os.remove(self.db_path)

    def test_same_email_only_one_succeeds(self) -> None:
        barrier = threading.Barrier(self.WORKERS, timeout=30)

        def attempt(i: int) -> str:
            session = self.Session()
            try:
                service = AuthService(UserStore(session), secret="s", bcrypt_rounds=4)
                barrier.wait()
                try:
                    service.register(f"racer{i}", "race@x.com", "Secret123")
                    return "ok"
                except ConflictError:
                    return "conflict"
            finally:
                session.close()

        with ThreadPoolExecutor(max_workers=self.WORKERS) as pool:
            outcomes = list(pool.map(attempt, range(self.WORKERS)))

        self.assertEqual(outcomes.count("ok"), 1)
        self.assertEqual(outcomes.count("conflict"), self.WORKERS - 1)
        session = self.Session()
        try:
            store = UserStore(session)
            self.assertEqual(store.count(), 1)
            self.assertIsNotNone(store.find_by_email("race@x.com"))
        finally:
            session.close()


if __name__ == "__main__":
    unittest.main()
