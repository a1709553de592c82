"""Application error hierarchy.

Each error class carries the HTTP status, a stable machine-readable
``error_type`` and a default message. The handlers in
``app.core.exception_handlers`` turn them into ``{"type", "message"}``
responses, so routes and services only ever raise.
"""


class AppException(Exception):
    """Root of every error the API reports deliberately."""

    status_code: int = 500
    error_type: str = "internal_error"
    default_message: str = "An unexpected error occurred"
    # Extra response headers, e.g. WWW-Authenticate on 401
    headers: dict[str, str] | None = None

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(AppException):
    """The request was well-formed but cannot be acted on (400)."""

    status_code = 400
    error_type = "bad_request"
    default_message = "Bad request"


class NotFoundError(AppException):
    status_code = 404
    error_type = "not_found"
    default_message = "Resource not found"


class ConflictError(AppException):
    """A uniqueness rule would be broken (409)."""

    status_code = 409
    error_type = "conflict"
    default_message = "Resource conflict"


class ConfigurationError(AppException):
    """Required configuration is missing or invalid.

    Raised while the application starts so a misconfigured deployment
    never serves traffic.
    """

    error_type = "configuration_error"
    default_message = "Application is misconfigured"
