#!/usr/bin/env python3
"""Create or promote the first admin user.

Reads ADMIN_EMAIL, ADMIN_PASSWORD, ADMIN_FIRST_NAME, ADMIN_LAST_NAME and
ADMIN_BIRTHDATE from the environment (or .env). Does nothing when an admin
already exists; promotes the user when ADMIN_EMAIL is already registered.

    python scripts/seed_admin.py
"""

import logging
import sys
from datetime import date

from pydantic import EmailStr, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlmodel import Session, select

from app.core.logging import configure_logging
from app.core.security import get_password_hasher
from app.core.validators import Password
from app.db.engine import engine, init_db
from app.user.models import User, UserRole

logger = logging.getLogger("app.seed_admin")


class AdminSeedSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    email: EmailStr = Field(alias="ADMIN_EMAIL")
    password: Password = Field(alias="ADMIN_PASSWORD")
    first_name: str = Field(default="Admin", alias="ADMIN_FIRST_NAME")
    last_name: str = Field(default="User", alias="ADMIN_LAST_NAME")
    birthdate: date = Field(default=date(1990, 1, 1), alias="ADMIN_BIRTHDATE")


def seed_admin(session: Session, seed: AdminSeedSettings) -> User:
    """Return the admin, creating or promoting one if needed."""
    existing_admin = session.exec(
        select(User).where(User.role == UserRole.admin)
    ).first()
    if existing_admin is not None:
        logger.info("Admin already exists: %s", existing_admin.email)
        return existing_admin

    user = session.exec(select(User).where(User.email == seed.email)).first()
    if user is not None:
        user.role = UserRole.admin
        logger.info("Promoted existing user %s to admin", user.email)
    else:
        user = User(
            email=seed.email,
            password_hash=get_password_hasher().hash_sync(seed.password),
            first_name=seed.first_name,
            last_name=seed.last_name,
            birthdate=seed.birthdate,
            role=UserRole.admin,
        )
        logger.info("Created admin user %s", user.email)

    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def main() -> int:
    configure_logging()
    seed = AdminSeedSettings()
    init_db()
    with Session(engine) as session:
        seed_admin(session, seed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
