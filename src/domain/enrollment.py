"""
Enrollment domain service - Activities and their signup ledger.

Activity lifecycle
==================

An activity is created with a fixed capacity and an empty enrollment
sequence. The only mutation afterwards is appending an entry:

    Created --enroll (count < capacity, account not enrolled)--> Created

Once the entry count equals capacity every further enroll is rejected
with CapacityExceededError. Activities are never cancelled or deleted.

The duplicate check, the capacity check and the append are a single
conditional write in the repository, so concurrent enrollments for the
same activity cannot overshoot capacity or double-enroll an account.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID

from .exceptions import CapacityExceededError, ConflictError, NotFoundError, ValidationError
from .models import Activity, EnrollmentEntry
from .ports import AccountRepository, ActivityRepository, EnrollResult

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class EnrollmentLedger:
    """Domain service for creating, joining and listing activities."""

    activities: ActivityRepository
    accounts: AccountRepository
    clock: Callable[[], datetime] = field(default=_utc_now)

    def create_activity(
        self, name: str, description: str, capacity: int, scheduled_at: datetime
    ) -> Activity:
        """
        Create an activity with no enrollments.

        Naive datetimes are taken as UTC.

        Raises:
            ValidationError: If name/description are blank, capacity is not
                a positive integer, or scheduled_at is not a datetime
        """
        errors: dict[str, list[str]] = {}
        if not name or not name.strip():
            errors.setdefault("name", []).append("El nombre es obligatorio")
        if not description or not description.strip():
            errors.setdefault("description", []).append("La descripción es obligatoria")
        # bool is an int subclass
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            errors.setdefault("capacity", []).append(
                "Las plazas deben ser un número entero positivo"
            )
        if not isinstance(scheduled_at, datetime):
            errors.setdefault("scheduled_at", []).append("Fecha y hora inválidas")
        if errors:
            raise ValidationError(errors)

        if scheduled_at.tzinfo is None:
            scheduled_at = scheduled_at.replace(tzinfo=timezone.utc)

        activity = self.activities.create(
            name=name, description=description, capacity=capacity, scheduled_at=scheduled_at
        )
        logger.info("Created activity %s with %d places", activity.id, capacity)
        return activity

    def enroll(self, activity_id: UUID, account_id: UUID) -> EnrollmentEntry:
        """
        Sign an account up for an activity.

        The signup time is assigned here, in UTC, at write time.

        Returns:
            The appended EnrollmentEntry

        Raises:
            NotFoundError: If the account or the activity does not exist
            ConflictError: If the account is already enrolled
            CapacityExceededError: If the activity is full
        """
        if not self.accounts.exists(account_id):
            raise NotFoundError("Usuario no encontrado")

        signed_up_at = self.clock().astimezone(timezone.utc).isoformat(timespec="seconds")
        result = self.activities.enroll(activity_id, account_id, signed_up_at)

        if result == EnrollResult.NOT_FOUND:
            raise NotFoundError("Actividad no encontrada")
        if result == EnrollResult.ALREADY_ENROLLED:
            logger.info("Account %s already enrolled in %s", account_id, activity_id)
            raise ConflictError("Ya estás inscrito en esta actividad")
        if result == EnrollResult.FULL:
            logger.info("Activity %s is full, rejected account %s", activity_id, account_id)
            raise CapacityExceededError("No quedan plazas disponibles")

        logger.info("Enrolled account %s in activity %s", account_id, activity_id)
        return EnrollmentEntry(account_id=account_id, signed_up_at=signed_up_at)

    def list_activities(self) -> list[Activity]:
        """Return every activity in insertion order."""
        return self.activities.list_all()

    def list_activities_for_account(self, account_id: UUID) -> list[Activity]:
        """Return the activities the account is enrolled in."""
        return self.activities.list_for_account(account_id)
