"""ASGI entrypoint: ``uvicorn app.main:app``."""

from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI
from sqladmin import Admin

from app.admin.auth import AdminAuth
from app.admin.views import UserAdmin
from app.auth.router import router as auth_router
from app.auth.tokens import get_token_service
from app.core.constants import Routes
from app.core.cors import add_cors_middleware
from app.core.email import init_resend
from app.core.exception_handlers import register_exception_handlers
from app.core.logging import configure_logging
from app.core.rate_limit import add_rate_limiting, enforce_application_limits
from app.core.request_logging import add_request_logging_middleware
from app.db.engine import engine, init_db
from app.health.router import router as health_router
from app.user.router import router as user_router

configure_logging()

OPENAPI_TAGS = [
    {"name": Routes.AUTH.tag, "description": "Registration, login and password reset"},
    {"name": Routes.USER.tag, "description": "Self-service profile and user admin"},
    {"name": Routes.HEALTH.tag, "description": "Liveness and readiness probes"},
]


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Refuse to start without JWT secrets
    get_token_service()
    init_db()
    init_resend()
    yield


def create_app() -> FastAPI:
    application = FastAPI(
        title="User Admin Panel",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
    )

    api_router = APIRouter(dependencies=[Depends(enforce_application_limits)])
    for router in (health_router, auth_router, user_router):
        api_router.include_router(router)
    application.include_router(api_router)

    add_request_logging_middleware(application)
    add_cors_middleware(application)
    add_rate_limiting(application)
    register_exception_handlers(application)

    # Back-office at /admin; signs its session cookie with SESSION_SECRET_KEY
    admin = Admin(
        app=application,
        engine=engine,
        title="User Admin Panel",
        authentication_backend=AdminAuth(),
    )
    admin.add_view(UserAdmin)

    return application


app = create_app()
