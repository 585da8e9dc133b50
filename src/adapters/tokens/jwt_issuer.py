"""
JWT token issuer adapter - Implements TokenIssuer protocol.

Issues stateless HS256 bearer tokens with PyJWT. Nothing is stored
server-side; logout is the client discarding the token, and every
token expires two hours after issuance.

Claims:
- id: account id (string UUID)
- role: account role
- iat / exp: issuance and expiry as Unix timestamps
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from src.domain.exceptions import UnauthorizedError
from src.domain.ports import Role

JWT_ALGORITHM = "HS256"
SESSION_TTL = timedelta(hours=2)


@dataclass(frozen=True)
class TokenClaims:
    """Verified contents of a session token."""

    account_id: UUID
    role: Role
    issued_at: datetime
    expires_at: datetime


class JwtTokenIssuer:
    """
    Implements TokenIssuer protocol via PyJWT.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        secret: str,
        ttl: timedelta = SESSION_TTL,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Args:
            secret: HMAC signing key
            ttl: Token lifetime
            clock: Returns the current aware datetime (defaults to UTC now)
        """
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self._ttl = ttl
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def issue(self, account_id: UUID, role: Role) -> str:
        now = self._clock()
        payload = {
            "id": str(account_id),
            "role": role.value,
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def decode(self, token: str) -> TokenClaims:
        """
        Verify signature and expiry and return the claims.

        Raises:
            UnauthorizedError: If the token is expired, tampered with or
                missing claims
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["id", "role", "iat", "exp"]},
            )
            return TokenClaims(
                account_id=UUID(payload["id"]),
                role=Role(payload["role"]),
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (jwt.PyJWTError, ValueError) as e:
            raise UnauthorizedError("Token inválido") from e
