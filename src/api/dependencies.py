"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
Process-wide resources (pool, token issuer, settings) are created
during app lifespan startup and read from app.state.
"""

from fastapi import Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import (
    PostgresAccountRepository,
    PostgresActivityRepository,
)
from src.adapters.tokens.jwt_issuer import JwtTokenIssuer
from src.config.settings import Settings
from src.domain.credentials import CredentialService
from src.domain.enrollment import EnrollmentLedger


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_issuer(request: Request) -> JwtTokenIssuer | None:
    """Token issuer built at startup; None when authentication is disabled."""
    return getattr(request.app.state, "token_issuer", None)


def get_account_repository(request: Request) -> PostgresAccountRepository:
    return PostgresAccountRepository(get_pool(request))


def get_activity_repository(request: Request) -> PostgresActivityRepository:
    return PostgresActivityRepository(get_pool(request))


def get_credential_service(request: Request) -> CredentialService:
    """
    Create credential service with injected dependencies.

    Wires together the account repository, token issuer and bcrypt cost.
    """
    return CredentialService(
        accounts=get_account_repository(request),
        token_issuer=get_token_issuer(request),
        bcrypt_cost=get_app_settings(request).bcrypt_cost,
    )


def get_enrollment_ledger(request: Request) -> EnrollmentLedger:
    """
    Create enrollment ledger with injected dependencies.

    Wires together the activity and account repositories.
    """
    return EnrollmentLedger(
        activities=get_activity_repository(request),
        accounts=get_account_repository(request),
    )
