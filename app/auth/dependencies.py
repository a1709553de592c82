"""Bearer-token authentication for routes.

``CurrentUserDep`` injects the user behind the access token;
``require_auth`` and ``require_admin`` guard routes that do not need the
user object itself. FastAPI resolves ``get_current_user`` once per request
however many of these a route combines.
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth.exceptions import (
    AdminRequiredError,
    InvalidTokenError,
    NotAuthenticatedError,
)
from app.auth.service import AuthService, get_auth_service
from app.core.deps import TokenServiceDep
from app.user.models import User
from app.user.repository import UserRepositoryDep

# auto_error=False so a missing header maps to our 401 body, not FastAPI's 403
security = HTTPBearer(auto_error=False)

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
BearerCredentials = Annotated[HTTPAuthorizationCredentials | None, Depends(security)]


def get_current_user(
    users: UserRepositoryDep,
    tokens: TokenServiceDep,
    credentials: BearerCredentials = None,
) -> User:
    """Resolve the access token to a stored user.

    Raises:
        NotAuthenticatedError: No bearer token was sent
        InvalidTokenError: Bad token, or its user has been deleted since
    """
    if credentials is None:
        raise NotAuthenticatedError()

    claims = tokens.verify_token(credentials.credentials)
    user = users.get(claims.sub)
    if user is None:
        raise InvalidTokenError()
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


def require_auth(_user: CurrentUserDep) -> None:
    """Router-level guard: ``APIRouter(dependencies=[Depends(require_auth)])``."""


def get_admin_user(user: CurrentUserDep) -> User:
    if not user.is_admin:
        raise AdminRequiredError()
    return user


AdminUserDep = Annotated[User, Depends(get_admin_user)]


def require_admin(_user: AdminUserDep) -> None:
    """Route-level guard for admin-only operations."""
