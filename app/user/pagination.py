"""Keyset (cursor) pagination over users.

Pages are ordered by a caller-chosen column with the primary key as a
tie-break, so rows sharing a sort value are never skipped or repeated
between pages. The cursor is the id of the last row of the previous page.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sqlalchemy import and_, or_
from sqlmodel import Session, col, select

from app.user.models import User


class SortField(str, Enum):
    """Columns users can be ordered by."""

    created_at = "created_at"
    updated_at = "updated_at"
    first_name = "first_name"
    last_name = "last_name"
    email = "email"
    birthdate = "birthdate"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class UserFilters:
    """Optional case-insensitive substring filters.

    When ``search`` is set it is matched against email, first_name and
    last_name (any may match) and the individual fields are ignored.
    Otherwise every non-empty field must match.
    """

    search: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None


@dataclass
class CursorPage:
    """One page of users plus the information needed to fetch the next."""

    data: list[User] = field(default_factory=list)
    next_cursor: uuid.UUID | None = None
    has_more: bool = False
    count: int = 0
    limit: int = 10


def _filter_clause(filters: UserFilters | None) -> Any | None:
    if filters is None:
        return None

    if filters.search:
        return or_(
            col(User.email).icontains(filters.search, autoescape=True),
            col(User.first_name).icontains(filters.search, autoescape=True),
            col(User.last_name).icontains(filters.search, autoescape=True),
        )

    clauses = [
        col(getattr(User, name)).icontains(value, autoescape=True)
        for name, value in (
            ("first_name", filters.first_name),
            ("last_name", filters.last_name),
            ("email", filters.email),
        )
        if value
    ]
    if not clauses:
        return None
    return and_(*clauses)


def _cursor_clause(
    session: Session, cursor: uuid.UUID, sort_by: SortField, sort_order: SortOrder
) -> Any | None:
    """Build the "strictly after the cursor row" predicate.

    Returns None when the cursor row no longer exists, which restarts
    pagination from the beginning.
    """
    cursor_user = session.get(User, cursor)
    if cursor_user is None:
        return None

    sort_column = col(getattr(User, sort_by.value))
    id_column = col(User.id)
    cursor_value = getattr(cursor_user, sort_by.value)

    if sort_order == SortOrder.DESC:
        return or_(
            sort_column < cursor_value,
            and_(sort_column == cursor_value, id_column < cursor_user.id),
        )
    return or_(
        sort_column > cursor_value,
        and_(sort_column == cursor_value, id_column > cursor_user.id),
    )


def find_page(
    session: Session,
    *,
    cursor: uuid.UUID | None = None,
    limit: int = 10,
    sort_by: SortField = SortField.created_at,
    sort_order: SortOrder = SortOrder.DESC,
    filters: UserFilters | None = None,
) -> CursorPage:
    """Fetch one page of users.

    One extra row is requested to learn whether another page exists.
    """
    sort_column = col(getattr(User, sort_by.value))
    id_column = col(User.id)

    statement = select(User)

    filter_clause = _filter_clause(filters)
    if filter_clause is not None:
        statement = statement.where(filter_clause)

    if cursor is not None:
        cursor_clause = _cursor_clause(session, cursor, sort_by, sort_order)
        if cursor_clause is not None:
            statement = statement.where(cursor_clause)

    if sort_order == SortOrder.DESC:
        statement = statement.order_by(sort_column.desc(), id_column.desc())
    else:
        statement = statement.order_by(sort_column.asc(), id_column.asc())

    rows = list(session.exec(statement.limit(limit + 1)).all())

    has_more = len(rows) > limit
    data = rows[:limit]
    next_cursor = data[-1].id if has_more and data else None

    return CursorPage(
        data=data,
        next_cursor=next_cursor,
        has_more=has_more,
        count=len(data),
        limit=limit,
    )
