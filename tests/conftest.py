"""
Shared test fixtures and configuration.

This module provides:
- A default signing secret so Settings() can be built in tests
- In-memory repository fakes for domain-level tests
"""

import os
import threading
import uuid
from collections.abc import Generator
from datetime import datetime

import psycopg
import pytest
from psycopg_pool import ConnectionPool

os.environ.setdefault("JWT_SECRET", "test-signing-secret")

from src.adapters.repository.postgres import create_pool, run_migrations  # noqa: E402
from src.config.settings import get_settings  # noqa: E402
from src.domain.models import Account, Activity, EnrollmentEntry  # noqa: E402
from src.domain.ports import EnrollResult, Role  # noqa: E402


class InMemoryAccountRepository:
    """AccountRepository fake honouring the unique-email rule."""

    def __init__(self) -> None:
        self._by_email: dict[str, Account] = {}
        self._lock = threading.Lock()

    def create(
        self, name: str, surname: str, email: str, password_hash: str, role: Role
    ) -> Account | None:
        with self._lock:
            if email in self._by_email:
                return None
            account = Account(
                id=uuid.uuid4(),
                name=name,
                surname=surname,
                email=email,
                role=role,
                password_hash=password_hash,
            )
            self._by_email[email] = account
            return account

    def get_by_email(self, email: str) -> Account | None:
        return self._by_email.get(email)

    def exists(self, account_id: uuid.UUID) -> bool:
        return any(a.id == account_id for a in self._by_email.values())

    def add(self, name: str = "Ana", email: str | None = None) -> Account:
        account = self.create(
            name, "Lopez", email or f"{uuid.uuid4().hex}@example.com", "$2b$04$hash", Role.USER
        )
        assert account is not None
        return account


def has_enrolled(activity: Activity, account_id: uuid.UUID) -> bool:
    return any(entry.account_id == account_id for entry in activity.enrollments)


class InMemoryActivityRepository:
    """ActivityRepository fake; the lock stands in for the store's row lock."""

    def __init__(self) -> None:
        self._activities: dict[uuid.UUID, Activity] = {}
        self._lock = threading.Lock()

    def create(
        self, name: str, description: str, capacity: int, scheduled_at: datetime
    ) -> Activity:
        activity = Activity(
            id=uuid.uuid4(),
            name=name,
            description=description,
            capacity=capacity,
            scheduled_at=scheduled_at,
        )
        with self._lock:
            self._activities[activity.id] = activity
        return activity

    def enroll(
        self, activity_id: uuid.UUID, account_id: uuid.UUID, signed_up_at: str
    ) -> EnrollResult:
        with self._lock:
            activity = self._activities.get(activity_id)
            if activity is None:
                return EnrollResult.NOT_FOUND
            if has_enrolled(activity, account_id):
                return EnrollResult.ALREADY_ENROLLED
            if len(activity.enrollments) >= activity.capacity:
                return EnrollResult.FULL
            entry = EnrollmentEntry(account_id=account_id, signed_up_at=signed_up_at)
            self._activities[activity_id] = Activity(
                id=activity.id,
                name=activity.name,
                description=activity.description,
                capacity=activity.capacity,
                scheduled_at=activity.scheduled_at,
                enrollments=activity.enrollments + (entry,),
            )
            return EnrollResult.SUCCESS

    def list_all(self) -> list[Activity]:
        return list(self._activities.values())

    def list_for_account(self, account_id: uuid.UUID) -> list[Activity]:
        return [a for a in self._activities.values() if has_enrolled(a, account_id)]

    def get(self, activity_id: uuid.UUID) -> Activity:
        return self._activities[activity_id]


@pytest.fixture
def account_repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def activity_repository() -> InMemoryActivityRepository:
    return InMemoryActivityRepository()


@pytest.fixture(scope="session")
def pool() -> Generator[ConnectionPool, None, None]:
    """
    Connection pool against DATABASE_URL with migrations applied.

    Tests that request it are skipped when PostgreSQL is not reachable.
    """
    settings = get_settings()
    pool = create_pool(
        settings.database_url,
        min_size=1,
        max_size=10,
        timeout=3.0,
        statement_timeout_ms=settings.statement_timeout_ms,
    )
    try:
        pool.wait(timeout=3.0)
    except psycopg.OperationalError:
        pool.close()
        pytest.skip("PostgreSQL is not reachable")
    run_migrations(pool)
    yield pool
    pool.close()
