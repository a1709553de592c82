"""Auth domain router.

Authentication routes for registration, login, token refresh and password
reset. Handlers stay thin and delegate to AuthService.
"""

from fastapi import APIRouter, Request, status

from app.auth.dependencies import AuthServiceDep, CurrentUserDep
from app.auth.exceptions import InvalidTokenError
from app.auth.schemas import (
    AuthMessage,
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from app.auth.service import AuthResult
from app.core.constants import CommonResponses, Routes
from app.core.deps import TokenServiceDep
from app.core.rate_limit import limiter
from app.core.settings import get_settings
from app.user.repository import UserRepositoryDep
from app.user.schemas import UserRead

router = APIRouter(
    prefix=Routes.AUTH.prefix,
    tags=[Routes.AUTH.tag],
    responses={**CommonResponses.BAD_REQUEST},
)


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        user=UserRead.model_validate(result.user),
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.CONFLICT},
)
@limiter.limit(lambda: get_settings().rate_limit_register)
async def register(
    request: Request, payload: RegisterRequest, auth: AuthServiceDep
):
    """Register a new user and return a token pair.

    The account always gets the ``user`` role.
    """
    result = await auth.register(
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        birthdate=payload.birthdate,
    )
    return _auth_response(result)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={**CommonResponses.UNAUTHORIZED},
)
@limiter.limit(lambda: get_settings().rate_limit_login)
async def login(request: Request, payload: LoginRequest, auth: AuthServiceDep):
    """Login with email/password."""
    result = await auth.login(payload.email, payload.password)
    return _auth_response(result)


@router.post(
    "/refresh",
    response_model=AuthResponse,
    responses={**CommonResponses.UNAUTHORIZED},
)
@limiter.limit(lambda: get_settings().rate_limit_refresh)
async def refresh(
    request: Request,
    payload: RefreshRequest,
    tokens: TokenServiceDep,
    users: UserRepositoryDep,
    auth: AuthServiceDep,
):
    """Exchange a valid refresh token for a new token pair."""
    claims = tokens.verify_token(payload.refresh_token, is_refresh=True)
    user = users.get(claims.sub)
    if user is None:
        raise InvalidTokenError()
    return _auth_response(auth.refresh_tokens(user))


@router.post("/forgot-password", response_model=AuthMessage)
@limiter.limit(lambda: get_settings().rate_limit_forgot_password)
async def forgot_password(
    request: Request, payload: ForgotPasswordRequest, auth: AuthServiceDep
):
    """Request a password reset email.

    Always returns the same message to prevent email enumeration. The email
    goes out after the response is sent.
    """
    return AuthMessage(message=await auth.forgot_password(payload.email))


@router.post("/reset-password", response_model=AuthMessage)
@limiter.limit(lambda: get_settings().rate_limit_reset_password)
async def reset_password(
    request: Request, payload: ResetPasswordRequest, auth: AuthServiceDep
):
    """Set a new password using the token from the reset email."""
    message = await auth.reset_password(payload.token, payload.new_password)
    return AuthMessage(message=message)


@router.get(
    "/me",
    response_model=UserRead,
    responses={**CommonResponses.UNAUTHORIZED},
)
async def get_me(user: CurrentUserDep):
    """Get current authenticated user."""
    return user
