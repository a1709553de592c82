"""Route prefixes, OpenAPI error responses, paging bounds and template paths."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.models.error import ErrorResponse


@dataclass(frozen=True)
class RouteConfig:
    prefix: str
    tag: str


class Routes:
    AUTH = RouteConfig(prefix="/auth", tag="auth")
    USER = RouteConfig(prefix="/users", tag="users")
    HEALTH = RouteConfig(prefix="/health", tag="health")


def error_responses(status_code: int, description: str) -> dict[int, dict[str, Any]]:
    """OpenAPI ``responses`` entry documenting an ``ErrorResponse`` body."""
    return {status_code: {"model": ErrorResponse, "description": description}}


class CommonResponses:
    """Error responses shared by several routes; merge with ``**``."""

    BAD_REQUEST = error_responses(400, "Invalid or expired reset token")
    UNAUTHORIZED = error_responses(401, "Missing, invalid or expired credentials")
    FORBIDDEN = error_responses(403, "Admin privileges required")
    NOT_FOUND = error_responses(404, "User not found")
    CONFLICT = error_responses(409, "Email already registered")


# GET /users page size
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

# Upper bound on ids accepted by one bulk delete
MAX_BULK_DELETE = 1000

EmailTemplatesDir = Path(__file__).parent.parent / "templates" / "emails"
CompiledEmailTemplatesDir = EmailTemplatesDir / "compiled"

# Renders the CSS-inlined output of scripts/compile_emails.py
JinjaCompiledEmailTemplatesEnv = Environment(
    loader=FileSystemLoader(str(CompiledEmailTemplatesDir)),
    autoescape=select_autoescape(["html", "xml"]),
)
