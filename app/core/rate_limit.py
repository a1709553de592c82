"""Request throttling with slowapi.

Every API route counts against the application-wide short, medium and long
windows for the client address. The auth routes add their own tighter
per-minute limits through ``@limiter.limit``.
"""

from fastapi import FastAPI, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.settings import get_settings

settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    application_limits=[settings.global_rate_limits],
    storage_uri=settings.rate_limit_storage_uri,
    enabled=settings.rate_limit_enabled,
)


def enforce_application_limits(request: Request) -> None:
    """Count the request against the application-wide limits.

    Attached as a router dependency. ``SlowAPIMiddleware`` looks endpoints up
    in ``app.routes`` and does not see routes mounted through included
    routers, so it would never apply these limits.

    Raises:
        RateLimitExceeded: One of the windows is exhausted for this client
    """
    limiter._check_request_limit(request, None, in_middleware=True)


def add_rate_limiting(app: FastAPI) -> None:
    app.state.limiter = limiter
