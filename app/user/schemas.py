"""User domain schemas.

Request and response schemas for user operations.

Security notes:
- password_hash and the reset token columns are internal-only, never exposed
- UserUpdateMe is restricted to prevent privilege escalation
- role can only be changed through UserRoleUpdate on an admin route
"""

import uuid
from datetime import date, datetime

from pydantic import EmailStr, Field, field_serializer
from sqlmodel import SQLModel

from app.core.constants import MAX_BULK_DELETE
from app.core.mixins import as_utc
from app.core.validators import Birthdate, Password, PersonName
from app.user.models import UserRole


class UserBase(SQLModel):
    """Base user properties safe for all API responses."""

    email: EmailStr
    first_name: str
    last_name: str
    birthdate: date


class UserRead(UserBase):
    """Response schema for a user."""

    id: uuid.UUID
    role: UserRole
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def serialize_datetime(self, value: datetime) -> str:
        """ISO 8601 in UTC with a Z suffix, e.g. 2026-01-19T12:34:56Z."""
        return as_utc(value).replace(microsecond=0).isoformat().replace("+00:00", "Z")


class UserCreate(SQLModel):
    """Schema for an admin creating a user."""

    email: EmailStr
    password: Password
    first_name: PersonName
    last_name: PersonName
    birthdate: Birthdate
    role: UserRole = UserRole.user


class UserUpdateMe(SQLModel):
    """Schema for users updating their own profile.

    Users cannot modify: email, role, password.
    """

    first_name: PersonName | None = None
    last_name: PersonName | None = None
    birthdate: Birthdate | None = None


class UserUpdate(SQLModel):
    """Schema for admin updating a user.

    role is intentionally excluded, see UserRoleUpdate.
    """

    email: EmailStr | None = None
    first_name: PersonName | None = None
    last_name: PersonName | None = None
    birthdate: Birthdate | None = None


class UserRoleUpdate(SQLModel):
    """Schema for changing a user's role."""

    role: UserRole


class UserPageMeta(SQLModel):
    next_cursor: uuid.UUID | None
    has_more: bool
    count: int
    limit: int


class UserPage(SQLModel):
    """One page of users from the cursor-paginated list."""

    data: list[UserRead]
    meta: UserPageMeta


class BulkDeleteRequest(SQLModel):
    ids: list[uuid.UUID] = Field(max_length=MAX_BULK_DELETE)


class BulkDeleteResponse(SQLModel):
    deleted: int
    failed: list[uuid.UUID]
    message: str


class UserMessage(SQLModel):
    message: str
