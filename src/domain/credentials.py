"""
Credential domain service - Registration and authentication.

This module contains the business logic for creating accounts and
verifying logins:

- Registration validates every field, hashes the secret with bcrypt and
  inserts the account in one conditional write. The store's unique
  index on email decides conflicts, so two concurrent registrations for
  the same address cannot both succeed.
- Authentication looks the account up by email, verifies the secret
  with bcrypt.checkpw() (constant-time) and asks the token issuer for a
  stateless session token.

The plaintext secret is never stored, logged or returned.
"""

import logging
from dataclasses import dataclass

import bcrypt
from email_validator import EmailNotValidError, validate_email

from .exceptions import (
    ConflictError,
    NotFoundError,
    ServiceUnavailableError,
    UnauthorizedError,
    ValidationError,
)
from .models import Account, AuthResult
from .ports import AccountRepository, Role, TokenIssuer

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2
MIN_SECRET_LENGTH = 6
# bcrypt only looks at the first 72 bytes and recent releases reject longer input
MAX_SECRET_BYTES = 72


@dataclass
class CredentialService:
    """
    Domain service for account credentials.

    Orchestrates registration (validation, hashing, persistence) and
    login (lookup, verification, token issuance).
    """

    accounts: AccountRepository
    token_issuer: TokenIssuer | None = None
    bcrypt_cost: int = 10

    def register(
        self,
        name: str,
        surname: str,
        email: str,
        secret: str,
        secret_confirmation: str,
    ) -> Account:
        """
        Register a new account.

        Args:
            name: Display name (at least 2 characters)
            surname: Surname (at least 2 characters)
            email: Email address, stored exactly as given
            secret: Password (at least 6 characters, hashed before storage)
            secret_confirmation: Must equal secret

        Returns:
            The created Account

        Raises:
            ValidationError: If any field is invalid (all failures reported)
            ConflictError: If the email is already registered
        """
        errors: dict[str, list[str]] = {}
        if len(name.strip()) < MIN_NAME_LENGTH:
            errors.setdefault("name", []).append("Nombre demasiado corto")
        if len(surname.strip()) < MIN_NAME_LENGTH:
            errors.setdefault("surname", []).append("Apellidos obligatorios")
        if not self._is_valid_email(email):
            errors.setdefault("email", []).append("Email inválido")
        if len(secret) < MIN_SECRET_LENGTH:
            errors.setdefault("secret", []).append(
                "La clave debe tener al menos 6 caracteres"
            )
        elif len(secret.encode()) > MAX_SECRET_BYTES:
            errors.setdefault("secret", []).append(
                "La clave no puede superar los 72 bytes"
            )
        if secret != secret_confirmation:
            errors.setdefault("secret_confirmation", []).append(
                "Las contraseñas no coinciden"
            )
        if errors:
            raise ValidationError(errors)

        password_hash = self._hash_password(secret)
        account = self.accounts.create(
            name=name, surname=surname, email=email, password_hash=password_hash, role=Role.USER
        )
        if account is None:
            raise ConflictError("El correo ya está registrado")

        logger.info("Registered account %s", account.id)
        return account

    def authenticate(self, email: str, secret: str) -> AuthResult:
        """
        Verify credentials and issue a session token.

        Args:
            email: Account email (exact match)
            secret: Plaintext password

        Returns:
            AuthResult with the signed token and the Account

        Raises:
            ValidationError: If email is malformed or secret is empty
            NotFoundError: If no account has this email
            UnauthorizedError: If the secret does not verify
            ServiceUnavailableError: If no token issuer is configured
        """
        errors: dict[str, list[str]] = {}
        if not self._is_valid_email(email):
            errors.setdefault("email", []).append("Email inválido")
        if not secret:
            errors.setdefault("secret", []).append("La clave es obligatoria")
        if errors:
            raise ValidationError(errors)

        if self.token_issuer is None:
            raise ServiceUnavailableError("El inicio de sesión no está disponible")

        account = self.accounts.get_by_email(email)
        if account is None:
            raise NotFoundError("Usuario no encontrado")

        if not self._verify_password(secret, account.password_hash):
            logger.info("Failed login for account %s", account.id)
            raise UnauthorizedError("Contraseña incorrecta")

        token = self.token_issuer.issue(account.id, account.role)
        logger.info("Issued session token for account %s", account.id)
        return AuthResult(token=token, account=account)

    def _is_valid_email(self, email: str) -> bool:
        """Syntax check only; deliverability (DNS) is not consulted."""
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            return False
        return True

    def _hash_password(self, password: str) -> str:
        """Hash password using bcrypt with the configured cost factor."""
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.bcrypt_cost)).decode()

    def _verify_password(self, password: str, password_hash: str) -> bool:
        """
        Check password against a stored bcrypt hash.

        Secrets longer than bcrypt accepts can never have been registered,
        so they are rejected without hashing.
        """
        if len(password.encode()) > MAX_SECRET_BYTES:
            return False
        return bcrypt.checkpw(password.encode(), password_hash.encode())
