"""Auth domain schemas.

Request and response schemas for authentication operations.
"""

from pydantic import BaseModel, EmailStr, Field

from app.core.validators import Birthdate, Password, PersonName
from app.user.schemas import UserRead


class RegisterRequest(BaseModel):
    """Request schema for user registration.

    Unknown fields such as ``role`` are ignored.
    """

    email: EmailStr
    password: Password
    first_name: PersonName
    last_name: PersonName
    birthdate: Birthdate


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1, max_length=256)
    new_password: Password


class TokenResponse(BaseModel):
    """Access and refresh token pair."""

    access_token: str
    refresh_token: str


class AuthResponse(TokenResponse):
    """Response schema for register and login."""

    user: UserRead


class AuthMessage(BaseModel):
    """Generic auth message response."""

    message: str
