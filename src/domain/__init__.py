"""
Domain layer - Pure business logic with zero framework imports.

This package contains the credential and enrollment logic for the
activity signup service. It defines its own port interfaces for
infrastructure abstraction, ensuring true hexagonal architecture
decoupling.
"""

from .credentials import CredentialService
from .enrollment import EnrollmentLedger
from .exceptions import (
    CapacityExceededError,
    ConflictError,
    DomainError,
    InternalError,
    NotFoundError,
    ServiceUnavailableError,
    UnauthorizedError,
    ValidationError,
)
from .models import Account, Activity, AuthResult, EnrollmentEntry
from .ports import AccountRepository, ActivityRepository, EnrollResult, Role, TokenIssuer

__all__ = [
    "Account",
    "AccountRepository",
    "Activity",
    "ActivityRepository",
    "AuthResult",
    "CapacityExceededError",
    "ConflictError",
    "CredentialService",
    "DomainError",
    "EnrollResult",
    "EnrollmentEntry",
    "EnrollmentLedger",
    "InternalError",
    "NotFoundError",
    "Role",
    "ServiceUnavailableError",
    "TokenIssuer",
    "UnauthorizedError",
    "ValidationError",
]
