"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Attribute names are English; the JSON contract uses the Spanish field names
of the public API through aliases. Activities are identified by ``_id``.

Request models only enforce types. Capacity is strict so a JSON boolean is
not coerced to 1. Field rules (lengths, email syntax, positive capacity,
matching passwords) belong to the domain services, which report every
failing field at once.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.domain.models import Account, Activity, EnrollmentEntry


class ApiModel(BaseModel):
    """Base model: aliases on the wire, attribute names in code."""

    model_config = ConfigDict(populate_by_name=True)


class RegisterRequest(ApiModel):
    """Request model for account registration."""

    name: str = Field(..., alias="nombre")
    surname: str = Field(..., alias="apellidos")
    email: str
    secret: str = Field(..., alias="clave", description="Password (min 6 characters)")
    secret_confirmation: str = Field(..., alias="clave2")


class LoginRequest(ApiModel):
    """Request model for login."""

    email: str
    secret: str = Field(..., alias="clave")


class CreateActivityRequest(ApiModel):
    """Request model for activity creation."""

    name: str = Field(..., alias="nombre")
    description: str = Field(..., alias="descripcion")
    capacity: int = Field(..., alias="plazas", strict=True, description="Number of places (> 0)")
    scheduled_at: datetime = Field(..., alias="fechaHora")


class EnrollRequest(ApiModel):
    """
    Request model for joining an activity.

    A client-supplied ``hora`` is accepted and ignored: the signup time is
    assigned by the server.
    """

    activity_id: UUID = Field(..., alias="actividadId")
    account_id: UUID = Field(..., alias="usuarioId")


class MessageResponse(ApiModel):
    """Response model carrying only a human-readable message."""

    message: str


class AccountSummary(ApiModel):
    """Redacted account view returned on login."""

    id: UUID
    name: str = Field(..., alias="nombre")
    role: str

    @classmethod
    def from_domain(cls, account: Account) -> "AccountSummary":
        return cls(id=account.id, name=account.name, role=account.role.value)


class LoginResponse(ApiModel):
    """Response model for successful login."""

    token: str
    account: AccountSummary = Field(..., alias="usuario")


class EnrollmentResponse(ApiModel):
    account_id: UUID = Field(..., alias="usuarioId")
    signed_up_at: str = Field(..., alias="hora")

    @classmethod
    def from_domain(cls, entry: EnrollmentEntry) -> "EnrollmentResponse":
        return cls(account_id=entry.account_id, signed_up_at=entry.signed_up_at)


class ActivityResponse(ApiModel):
    """Public view of an activity and its enrollment entries."""

    id: UUID = Field(..., alias="_id")
    name: str = Field(..., alias="nombre")
    description: str = Field(..., alias="descripcion")
    capacity: int = Field(..., alias="plazas")
    scheduled_at: datetime = Field(..., alias="fechaHora")
    enrollments: list[EnrollmentResponse] = Field(default_factory=list, alias="personasApuntadas")

    @classmethod
    def from_domain(cls, activity: Activity) -> "ActivityResponse":
        return cls(
            id=activity.id,
            name=activity.name,
            description=activity.description,
            capacity=activity.capacity,
            scheduled_at=activity.scheduled_at,
            enrollments=[EnrollmentResponse.from_domain(e) for e in activity.enrollments],
        )


class CreateActivityResponse(ApiModel):
    """Response model for activity creation."""

    message: str
    activity: ActivityResponse = Field(..., alias="actividad")


class ErrorResponse(ApiModel):
    """Standard error response model."""

    message: str
    details: dict[str, list[str]] | None = Field(default=None, alias="detalles")
