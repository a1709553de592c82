"""User domain models.

SQLModel table definition for User.
"""

import uuid
from datetime import date, datetime
from enum import Enum

from pydantic import EmailStr
from sqlmodel import Field, SQLModel

from app.core.mixins import TimestampMixin


class UserRole(str, Enum):
    """Role granted to a user.

    - user: default for every self-registered account
    - admin: can manage other users
    """

    user = "user"
    admin = "admin"


class User(TimestampMixin, SQLModel, table=True):
    """User database model.

    Note: password_hash and the password reset columns are internal-only
    and must never be exposed in API responses.
    """

    __tablename__: str = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    email: EmailStr = Field(index=True, unique=True, max_length=255)
    password_hash: str = Field(max_length=255)
    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    birthdate: date
    role: UserRole = Field(default=UserRole.user, max_length=20)
    password_reset_token: str | None = Field(default=None, index=True, max_length=64)
    password_reset_expires: datetime | None = Field(default=None)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin
