"""User domain exceptions."""

from app.core.exceptions import ConflictError, NotFoundError


class UserNotFoundError(NotFoundError):
    error_type = "user_not_found"
    default_message = "User not found"


class EmailExistsError(ConflictError):
    """Registration or creation with an email that is already stored."""

    error_type = "email_exists"
    default_message = "User with this email already exists"


class EmailInUseError(EmailExistsError):
    """An update would move a user onto another user's email."""

    default_message = "Email already in use"
