"""JWT issuing and verification.

Access and refresh tokens are signed with two different secrets so that a
token of one kind can never be accepted in place of the other.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache

import jwt

from app.auth.exceptions import InvalidTokenError
from app.core.exceptions import ConfigurationError
from app.user.models import User

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh token issued together."""

    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class TokenClaims:
    """Decoded and verified token claims."""

    sub: uuid.UUID
    email: str
    exp: datetime


class TokenService:
    """Stateless JWT issuer."""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
    ):
        if not access_secret or not refresh_secret:
            raise ConfigurationError("JWT secrets are not configured")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self._access_ttl = access_ttl
        self._refresh_ttl = refresh_ttl

    def _sign(self, user: User, secret: str, ttl: timedelta) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, secret, algorithm=ALGORITHM)

    def generate_tokens(self, user: User) -> TokenPair:
        """Issue an access/refresh pair for the user."""
        return TokenPair(
            access_token=self._sign(user, self._access_secret, self._access_ttl),
            refresh_token=self._sign(user, self._refresh_secret, self._refresh_ttl),
        )

    def verify_token(self, token: str, *, is_refresh: bool = False) -> TokenClaims:
        """Verify signature and expiry, returning the claims.

        Raises:
            InvalidTokenError: For any malformed, expired or foreign token
        """
        secret = self._refresh_secret if is_refresh else self._access_secret
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "exp"]},
            )
            return TokenClaims(
                sub=uuid.UUID(payload["sub"]),
                email=payload.get("email", ""),
                exp=datetime.fromtimestamp(payload["exp"], tz=UTC),
            )
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            logger.debug("Token rejected: %s", e)
            raise InvalidTokenError() from e


@lru_cache
def get_token_service() -> TokenService:
    """Get cached TokenService instance built from settings."""
    from app.core.settings import get_settings

    settings = get_settings()
    return TokenService(
        access_secret=settings.jwt_secret,
        refresh_secret=settings.jwt_refresh_secret,
        access_ttl=settings.access_token_ttl,
        refresh_ttl=settings.refresh_token_ttl,
    )
