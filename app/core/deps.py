"""Annotated dependency aliases shared by the routers and services.

    from app.core.deps import SessionDep, SettingsDep, PasswordHasherDep

Auth-specific aliases (current user, auth service) live in
``app.auth.dependencies``.
"""

from typing import Annotated

from fastapi import Depends
from sqlmodel import Session

from app.auth.tokens import TokenService, get_token_service
from app.core.security import PasswordHasher, get_password_hasher
from app.core.settings import Settings, get_settings
from app.db.engine import get_session

SessionDep = Annotated[Session, Depends(get_session)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
PasswordHasherDep = Annotated[PasswordHasher, Depends(get_password_hasher)]
TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]
