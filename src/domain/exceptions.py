"""
Domain exceptions - Semantic error types for credentials and enrollment.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
"""


class DomainError(Exception):
    """Base class for domain errors."""

    pass


class ValidationError(DomainError):
    """
    Input failed one or more field rules.

    Carries a per-field mapping of messages so callers can report
    every offending field, not just the first one.
    """

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__("Error de validación")
        self.errors = errors


class ConflictError(DomainError):
    """Uniqueness or duplicate-membership violation."""

    pass


class NotFoundError(DomainError):
    """Referenced account or activity does not exist."""

    pass


class UnauthorizedError(DomainError):
    """Credentials did not verify."""

    pass


class CapacityExceededError(DomainError):
    """Activity has no places left."""

    pass


class ServiceUnavailableError(DomainError):
    """Persistence store or token issuer timed out or is unreachable."""

    pass


class InternalError(DomainError):
    """Unexpected failure."""

    pass
