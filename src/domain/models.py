"""
Domain records - Accounts, activities and enrollment entries.

Plain frozen dataclasses; adapters build them from storage rows
and the API layer serializes them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from .ports import Role


@dataclass(frozen=True)
class Account:
    """A registered user. The password hash never leaves the domain and adapters."""

    id: UUID
    name: str
    surname: str
    email: str
    role: Role = Role.USER
    password_hash: str = field(default="", repr=False)


@dataclass(frozen=True)
class EnrollmentEntry:
    account_id: UUID
    signed_up_at: str


@dataclass(frozen=True)
class Activity:
    """An event with a fixed number of places."""

    id: UUID
    name: str
    description: str
    capacity: int
    scheduled_at: datetime
    enrollments: tuple[EnrollmentEntry, ...] = ()


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful login."""

    token: str
    account: Account
