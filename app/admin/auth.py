import logging
import uuid

from sqladmin.authentication import AuthenticationBackend
from sqlmodel import Session, select
from starlette.requests import Request

from app.core.security import get_password_hasher
from app.core.settings import get_settings
from app.db.engine import engine
from app.user.models import User, UserRole

logger = logging.getLogger(__name__)

# Hashed for unknown emails so every rejected login costs one bcrypt round
_DUMMY_PASSWORD = "dummy-password-for-timing"


class AdminAuth(AuthenticationBackend):
    """SQLAdmin auth against stored users with the admin role."""

    def __init__(self, session_factory=None) -> None:
        # SQLAdmin uses this secret to sign its session cookie.
        settings = get_settings()
        super().__init__(secret_key=settings.session_secret_key)
        self._session_factory = session_factory or (lambda: Session(engine))

    async def login(self, request: Request) -> bool:
        form = await request.form()
        email = str(form.get("username", form.get("email", ""))).strip()
        password = str(form.get("password", ""))
        if not email or not password:
            return False

        with self._session_factory() as session:
            user = session.exec(
                select(User).where(User.email == email, User.role == UserRole.admin)
            ).first()
            password_hash = user.password_hash if user else None
            user_id = str(user.id) if user else None

        hasher = get_password_hasher()
        if password_hash is None:
            await hasher.hash(_DUMMY_PASSWORD)
            logger.info("Admin panel login rejected for %s", email)
            return False
        if not await hasher.verify(password, password_hash):
            logger.info("Admin panel login rejected for user %s", user_id)
            return False

        request.session["admin_user"] = user_id
        return True

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        """Accept the session only while its user exists and is still an admin."""
        session_user = request.session.get("admin_user")
        if not session_user:
            return False

        try:
            user_id = uuid.UUID(str(session_user))
        except ValueError:
            request.session.clear()
            return False

        with self._session_factory() as session:
            user = session.get(User, user_id)
            is_admin = user is not None and user.is_admin

        if not is_admin:
            logger.info("Admin panel session revoked for user %s", user_id)
            request.session.clear()
        return is_admin
