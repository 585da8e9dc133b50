"""Token adapters - Session token signing."""

from .jwt_issuer import SESSION_TTL, JwtTokenIssuer, TokenClaims

__all__ = ["SESSION_TTL", "JwtTokenIssuer", "TokenClaims"]
