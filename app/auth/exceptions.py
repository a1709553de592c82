"""Auth domain exceptions.

401s tell the client to (re)authenticate with a bearer token, 403s that the
token is fine but the role is not.
"""

from app.core.exceptions import AppException


class AuthenticationError(AppException):
    status_code = 401
    error_type = "authentication_error"
    default_message = "Authentication failed"
    headers = {"WWW-Authenticate": "Bearer"}


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password; the two are never distinguished."""

    error_type = "invalid_credentials"
    default_message = "Invalid credentials"


class InvalidTokenError(AuthenticationError):
    """Malformed, expired or foreign JWT, or a token for a deleted user."""

    error_type = "invalid_token"
    default_message = "Invalid or expired token"


class NotAuthenticatedError(AuthenticationError):
    error_type = "not_authenticated"
    default_message = "Not authenticated"


class AuthorizationError(AppException):
    status_code = 403
    error_type = "authorization_error"
    default_message = "Access denied"


class AdminRequiredError(AuthorizationError):
    error_type = "admin_required"
    default_message = "Admin privileges required"
