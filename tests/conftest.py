import copy
import inspect
import os
from datetime import date

# Settings are read at import time by app.db.engine; provide test values first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret")
os.environ.setdefault("JWT_SECRET", "test-access-secret-0123456789abcdef")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-0123456789abcdef")
os.environ.setdefault("LOG_REQUESTS", "false")
# Throttling tests switch the limiter on themselves
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import anyio  # noqa: E402
import pytest  # noqa: E402
from fastapi import BackgroundTasks  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session  # noqa: E402

from app.auth.service import AuthService, get_auth_service  # noqa: E402
from app.auth.tokens import TokenService, get_token_service  # noqa: E402
from app.core.security import PasswordHasher, get_password_hasher  # noqa: E402
from app.db.engine import get_session  # noqa: E402
from app.main import app  # noqa: E402
from app.user.models import User, UserRole  # noqa: E402
from app.user.repository import UserRepository  # noqa: E402
from tests.factories import TEST_PASSWORD, build_user, make_engine  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    # Tests use @pytest.mark.asyncio, but we intentionally rely on anyio.
    config.addinivalue_line(
        "markers",
        "asyncio: run async tests using anyio (project-local hook)",
    )


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Run @pytest.mark.asyncio tests with anyio.

    This avoids adding an external pytest-asyncio dependency.
    """
    if pyfuncitem.get_closest_marker("asyncio") is None:
        return None

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    funcargs = {
        name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
    }

    async def _run_async_test() -> None:
        await test_func(**funcargs)

    anyio.run(_run_async_test)
    return True


@pytest.fixture(name="session")
def session_fixture():
    """Create an in-memory SQLite database for testing."""
    with Session(make_engine()) as session:
        yield session


@pytest.fixture(name="hasher", scope="session")
def hasher_fixture() -> PasswordHasher:
    """Low work factor keeps the suite fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture(name="password_hash", scope="session")
def password_hash_fixture(hasher: PasswordHasher) -> str:
    return hasher.hash_sync(TEST_PASSWORD)


@pytest.fixture(name="tokens")
def tokens_fixture() -> TokenService:
    return TokenService(
        access_secret="a" * 32,
        refresh_secret="r" * 32,
    )


@pytest.fixture(name="users")
def users_fixture(session: Session) -> UserRepository:
    return UserRepository(session)


@pytest.fixture(name="sent_resets")
def sent_resets_fixture() -> list[tuple[str, str]]:
    """Collects (email, raw token) pairs handed to the reset notifier."""
    return []


@pytest.fixture(name="auth_service")
def auth_service_fixture(
    users: UserRepository,
    tokens: TokenService,
    hasher: PasswordHasher,
    sent_resets: list[tuple[str, str]],
) -> AuthService:
    return AuthService(
        users,
        tokens,
        hasher,
        reset_notifier=lambda email, token: sent_resets.append((email, token)),
    )


def _make_user(session: Session, password_hash: str, **values) -> User:
    user = build_user(
        password_hash=password_hash, birthdate=date(1990, 5, 17), **values
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture(name="test_user")
def test_user_fixture(session: Session, password_hash: str) -> User:
    """Create a regular test user in the database."""
    return _make_user(
        session,
        password_hash,
        email="test@example.com",
        first_name="Test",
        last_name="User",
    )


@pytest.fixture(name="admin_user")
def admin_user_fixture(session: Session, password_hash: str) -> User:
    """Create an admin user in the database."""
    return _make_user(
        session,
        password_hash,
        email="admin@example.com",
        first_name="Admin",
        last_name="User",
        role=UserRole.admin,
    )


@pytest.fixture(name="unauthenticated_client")
def unauthenticated_client_fixture(
    session: Session,
    tokens: TokenService,
    hasher: PasswordHasher,
    auth_service: AuthService,
):
    """Test client with the database and services overridden, no credentials.

    TestClient runs background tasks before returning, so reset emails
    queued by a request are in ``sent_resets`` once the call completes.
    """

    def _auth_service_for_request(background_tasks: BackgroundTasks) -> AuthService:
        service = copy.copy(auth_service)
        service.background_tasks = background_tasks
        return service

    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_token_service] = lambda: tokens
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    app.dependency_overrides[get_auth_service] = _auth_service_for_request

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()


def _bearer(tokens: TokenService, user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {tokens.generate_tokens(user).access_token}"}


@pytest.fixture(name="client")
def client_fixture(
    unauthenticated_client: TestClient, tokens: TokenService, test_user: User
):
    """Test client authenticated as a regular user."""
    unauthenticated_client.headers.update(_bearer(tokens, test_user))
    return unauthenticated_client


@pytest.fixture(name="admin_client")
def admin_client_fixture(
    unauthenticated_client: TestClient, tokens: TokenService, admin_user: User
):
    """Test client authenticated as an admin."""
    unauthenticated_client.headers.update(_bearer(tokens, admin_user))
    return unauthenticated_client
