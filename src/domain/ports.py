"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

if TYPE_CHECKING:
    from .models import Account, Activity


class Role(str, Enum):
    """Account roles. New accounts are always USER."""

    USER = "user"
    ADMIN = "admin"


class EnrollResult(Enum):
    """
    Result of an enrollment attempt.

    Used by ActivityRepository.enroll() to indicate success or the
    specific reason the conditional append did not apply.
    """

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    ALREADY_ENROLLED = "already_enrolled"
    FULL = "full"


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    def create(
        self, name: str, surname: str, email: str, password_hash: str, role: Role
    ) -> Account | None:
        """
        Atomically insert an account.

        The store's unique index on email decides conflicts; there is
        no separate existence check.

        Returns:
            The created Account, or None if the email is already taken
        """
        ...

    def get_by_email(self, email: str) -> Account | None:
        """Fetch an account by exact email, including its password hash."""
        ...

    def exists(self, account_id: UUID) -> bool:
        """Return True if an account with this id exists."""
        ...


class ActivityRepository(Protocol):
    """Port interface for activity persistence."""

    def create(
        self, name: str, description: str, capacity: int, scheduled_at: datetime
    ) -> Activity:
        """Insert an activity with no enrollments."""
        ...

    def enroll(
        self, activity_id: UUID, account_id: UUID, signed_up_at: str
    ) -> EnrollResult:
        """
        Append an enrollment entry in a single conditional write.

        The append applies only if the activity exists, the account is
        not already enrolled and the entry count is below capacity.
        Concurrent calls for the same activity are serialized by the store.

        Returns:
            EnrollResult.SUCCESS if the entry was appended, otherwise
            the reason it was rejected
        """
        ...

    def list_all(self) -> list[Activity]:
        """Return every activity in insertion order."""
        ...

    def list_for_account(self, account_id: UUID) -> list[Activity]:
        """Return activities that contain an entry for account_id, insertion order."""
        ...


class TokenIssuer(Protocol):
    """Port interface for session token signing."""

    def issue(self, account_id: UUID, role: Role) -> str:
        """
        Sign a bearer token for the account.

        Args:
            account_id: Authenticated account id
            role: Account role carried as a claim

        Returns:
            Encoded token string
        """
        ...
