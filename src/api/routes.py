"""
API routes - Account and activity endpoints.

Defines the REST endpoints of the activity signup API:
- POST /api/registro - Register an account
- POST /api/login - Verify credentials and issue a session token
- POST /api/actividades/crear - Create an activity
- POST /api/actividades/inscribir - Join an activity
- GET /api/actividades - List all activities
- GET /api/mis-actividades/{usuarioId} - List activities an account joined

Handlers are plain functions so FastAPI runs them in its worker thread
pool; bcrypt hashing and database calls never block the event loop.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, status

from src.api.dependencies import get_credential_service, get_enrollment_ledger
from src.api.errors import ApiError, validation_error
from src.api.models import (
    AccountSummary,
    ActivityResponse,
    CreateActivityRequest,
    CreateActivityResponse,
    EnrollRequest,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
)
from src.domain.credentials import CredentialService
from src.domain.enrollment import EnrollmentLedger
from src.domain.exceptions import ConflictError, ValidationError

accounts_router = APIRouter(tags=["accounts"])
activities_router = APIRouter(tags=["activities"])


@accounts_router.post(
    "/registro",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Validation error or email already registered"},
    },
    summary="Register a new account",
)
def register(
    request_data: RegisterRequest,
    service: CredentialService = Depends(get_credential_service),
) -> MessageResponse:
    """
    Register a new account.

    - **nombre**, **apellidos**: at least 2 characters
    - **email**: valid email address, not already registered
    - **clave**: at least 6 characters; **clave2** must match
    """
    try:
        service.register(
            request_data.name,
            request_data.surname,
            request_data.email,
            request_data.secret,
            request_data.secret_confirmation,
        )
    except ValidationError as e:
        raise validation_error(e, RegisterRequest) from None
    except ConflictError as e:
        raise ApiError(status.HTTP_400_BAD_REQUEST, str(e)) from None
    return MessageResponse(message="Usuario creado con éxito")


@accounts_router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Validation error"},
        401: {"model": ErrorResponse, "description": "Wrong password"},
        404: {"model": ErrorResponse, "description": "Unknown email"},
    },
    summary="Log in and receive a session token",
)
def login(
    request_data: LoginRequest,
    service: CredentialService = Depends(get_credential_service),
) -> LoginResponse:
    """
    Verify credentials and issue a bearer token valid for two hours.

    NotFoundError and UnauthorizedError are answered by the shared
    handlers with 404 and 401.
    """
    try:
        result = service.authenticate(request_data.email, request_data.secret)
    except ValidationError as e:
        raise validation_error(e, LoginRequest) from None
    return LoginResponse(token=result.token, account=AccountSummary.from_domain(result.account))


@activities_router.post(
    "/actividades/crear",
    response_model=CreateActivityResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Validation error"}},
    summary="Create an activity",
)
def create_activity(
    request_data: CreateActivityRequest,
    ledger: EnrollmentLedger = Depends(get_enrollment_ledger),
) -> CreateActivityResponse:
    try:
        activity = ledger.create_activity(
            request_data.name,
            request_data.description,
            request_data.capacity,
            request_data.scheduled_at,
        )
    except ValidationError as e:
        raise validation_error(e, CreateActivityRequest) from None
    return CreateActivityResponse(
        message="Actividad creada", activity=ActivityResponse.from_domain(activity)
    )


@activities_router.post(
    "/actividades/inscribir",
    response_model=MessageResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Unknown activity or account"},
        409: {"model": ErrorResponse, "description": "Already enrolled or activity full"},
    },
    summary="Join an activity",
)
def enroll(
    request_data: EnrollRequest,
    ledger: EnrollmentLedger = Depends(get_enrollment_ledger),
) -> MessageResponse:
    """
    Join an activity. The signup time is assigned by the server.

    NotFoundError maps to 404; ConflictError and CapacityExceededError
    map to 409 through the shared handlers.
    """
    ledger.enroll(request_data.activity_id, request_data.account_id)
    return MessageResponse(message="Te has inscrito correctamente")


@activities_router.get(
    "/actividades",
    response_model=list[ActivityResponse],
    summary="List all activities",
)
def list_activities(
    ledger: EnrollmentLedger = Depends(get_enrollment_ledger),
) -> list[ActivityResponse]:
    return [ActivityResponse.from_domain(a) for a in ledger.list_activities()]


@activities_router.get(
    "/mis-actividades/{usuarioId}",
    response_model=list[ActivityResponse],
    summary="List the activities an account has joined",
)
def list_my_activities(
    account_id: UUID = Path(..., alias="usuarioId"),
    ledger: EnrollmentLedger = Depends(get_enrollment_ledger),
) -> list[ActivityResponse]:
    return [
        ActivityResponse.from_domain(a) for a in ledger.list_activities_for_account(account_id)
    ]
