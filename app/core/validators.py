"""Reusable constrained types for request schemas."""

import re
from datetime import date
from typing import Annotated

from pydantic import AfterValidator, Field, StringConstraints

PASSWORD_SPECIAL_CHARS = "@$!%*?&"

_PASSWORD_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"[a-z]"), "one lowercase letter"),
    (re.compile(r"[A-Z]"), "one uppercase letter"),
    (re.compile(r"\d"), "one number"),
    (re.compile(f"[{re.escape(PASSWORD_SPECIAL_CHARS)}]"), "one special character"),
)


def check_password_strength(value: str) -> str:
    missing = [label for pattern, label in _PASSWORD_RULES if not pattern.search(value)]
    if missing:
        raise ValueError(f"Password must contain at least {', '.join(missing)}")
    return value


def check_not_in_future(value: date) -> date:
    if value > date.today():
        raise ValueError("Birthdate cannot be in the future")
    return value


Password = Annotated[
    str,
    Field(min_length=8, max_length=128),
    AfterValidator(check_password_strength),
]

PersonName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=2, max_length=50),
]

Birthdate = Annotated[date, AfterValidator(check_not_in_future)]
