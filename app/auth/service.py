"""Authentication service.

Orchestrates registration, login, token refresh and the password reset
flow over the user repository, the password hasher and the token issuer.
HTTP concerns stay in the router.
"""

import hashlib
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Protocol
from uuid import UUID

import anyio.to_thread
from fastapi import BackgroundTasks
from sqlalchemy.exc import IntegrityError

from app.auth.exceptions import InvalidCredentialsError
from app.auth.tokens import TokenPair, TokenService
from app.core.deps import PasswordHasherDep, SettingsDep, TokenServiceDep
from app.core.email import send_password_reset_email
from app.core.exceptions import BadRequestError
from app.core.mixins import as_utc, utc_now
from app.core.security import PasswordHasher
from app.user.exceptions import EmailExistsError
from app.user.models import User, UserRole
from app.user.repository import UserRepository, UserRepositoryDep

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = (
    "If an account with that email exists, a password reset link has been sent."
)
RESET_PASSWORD_MESSAGE = "Password has been successfully reset"

# Hashed when the email is unknown so both login paths cost one bcrypt round.
_DUMMY_PASSWORD = "dummy-password-for-timing"

ResetNotifier = Callable[[str, str], None]


@dataclass(frozen=True)
class AuthResult:
    """A user together with a freshly issued token pair."""

    user: User
    tokens: TokenPair


def hash_reset_token(token: str) -> str:
    """Digest stored in place of the raw reset token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AuthServiceProtocol(Protocol):
    """Operations exposed to the auth router."""

    async def register(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        birthdate: date,
    ) -> AuthResult: ...

    async def login(self, email: str, password: str) -> AuthResult: ...

    def refresh_tokens(self, user: User) -> AuthResult: ...

    async def forgot_password(self, email: str) -> str: ...

    async def reset_password(self, token: str, new_password: str) -> str: ...


class AuthService:
    """Default implementation of the authentication flow."""

    def __init__(
        self,
        users: UserRepository,
        tokens: TokenService,
        hasher: PasswordHasher,
        *,
        reset_expiry: timedelta = timedelta(hours=3),
        reset_notifier: ResetNotifier | None = None,
        background_tasks: BackgroundTasks | None = None,
    ):
        self.users = users
        self.tokens = tokens
        self.hasher = hasher
        self.reset_expiry = reset_expiry
        self.reset_notifier = reset_notifier
        self.background_tasks = background_tasks

    async def register(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        birthdate: date,
    ) -> AuthResult:
        """Create a regular user and sign them in.

        The role is always ``user``; callers cannot self-assign admin.

        Raises:
            EmailExistsError: If the email is already registered
        """
        if self.users.find_by_email(email) is not None:
            raise EmailExistsError()

        password_hash = await self.hasher.hash(password)
        user = User(
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            birthdate=birthdate,
            role=UserRole.user,
        )
        try:
            user = self.users.create(user)
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same email
            raise EmailExistsError() from e

        logger.info("User registered: %s", user.id)
        return AuthResult(user=user, tokens=self.tokens.generate_tokens(user))

    async def login(self, email: str, password: str) -> AuthResult:
        """Check credentials and issue tokens.

        Raises:
            InvalidCredentialsError: For an unknown email or a wrong password
        """
        user = self.users.find_by_email(email)
        if user is None:
            await self.hasher.hash(_DUMMY_PASSWORD)
            logger.info("Failed login attempt")
            raise InvalidCredentialsError()

        if not await self.hasher.verify(password, user.password_hash):
            logger.info("Failed login attempt for user %s", user.id)
            raise InvalidCredentialsError()

        return AuthResult(user=user, tokens=self.tokens.generate_tokens(user))

    def refresh_tokens(self, user: User) -> AuthResult:
        """Issue a new pair for a user already established by a refresh token."""
        return AuthResult(user=user, tokens=self.tokens.generate_tokens(user))

    async def forgot_password(self, email: str) -> str:
        """Issue a reset token if the email is known.

        Always returns the same message so callers cannot tell whether the
        account exists. With ``background_tasks`` set the notification is
        queued to run after the response, so a known email answers as fast as
        an unknown one; without it delivery runs inline.
        """
        user = self.users.find_by_email(email)
        if user is None:
            return FORGOT_PASSWORD_MESSAGE

        token = secrets.token_urlsafe(32)
        expires = utc_now() + self.reset_expiry
        self.users.set_password_reset_token(user, hash_reset_token(token), expires)
        logger.info("Password reset token issued for user %s", user.id)

        if self.reset_notifier is None:
            return FORGOT_PASSWORD_MESSAGE
        if self.background_tasks is not None:
            self.background_tasks.add_task(
                self._send_reset_notification, user.id, user.email, token
            )
        else:
            await anyio.to_thread.run_sync(
                self._send_reset_notification, user.id, user.email, token
            )
        return FORGOT_PASSWORD_MESSAGE

    def _send_reset_notification(self, user_id: UUID, email: str, token: str) -> None:
        # Delivery failures are logged, never surfaced to the caller
        try:
            self.reset_notifier(email, token)
        except Exception as e:
            logger.warning(
                "Password reset notification failed for user %s: %s", user_id, e
            )

    async def reset_password(self, token: str, new_password: str) -> str:
        """Consume a reset token and set a new password.

        Raises:
            BadRequestError: If the token is unknown, already used or expired
        """
        user = self.users.find_by_reset_token(hash_reset_token(token))
        if user is None:
            raise BadRequestError("Invalid or expired reset token")

        expires = user.password_reset_expires
        if expires is None or as_utc(expires) <= utc_now():
            self.users.set_password_reset_token(user, None, None)
            logger.info("Expired password reset token used for user %s", user.id)
            raise BadRequestError("Reset token has expired")

        password_hash = await self.hasher.hash(new_password)
        self.users.update(
            user,
            {
                "password_hash": password_hash,
                "password_reset_token": None,
                "password_reset_expires": None,
            },
        )
        logger.info("Password reset for user %s", user.id)
        return RESET_PASSWORD_MESSAGE


def get_auth_service(
    users: UserRepositoryDep,
    tokens: TokenServiceDep,
    hasher: PasswordHasherDep,
    settings: SettingsDep,
    background_tasks: BackgroundTasks,
) -> AuthService:
    """Build the AuthService for a request.

    Reset emails are queued on the request's background tasks.
    """
    return AuthService(
        users,
        tokens,
        hasher,
        reset_expiry=settings.password_reset_ttl,
        reset_notifier=send_password_reset_email,
        background_tasks=background_tasks,
    )
