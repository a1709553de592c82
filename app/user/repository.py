"""User persistence.

Thin wrapper around a SQLModel session so the auth flow and the routers
share one set of queries.
"""

import uuid
from collections.abc import Sequence
from datetime import datetime
from typing import Annotated, Any

from fastapi import Depends
from sqlalchemy import delete
from sqlmodel import Session, col, select

from app.core.deps import SessionDep
from app.user.models import User
from app.user.pagination import CursorPage, SortField, SortOrder, UserFilters, find_page


class UserRepository:
    """Credential store backed by the ``users`` table."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: uuid.UUID) -> User | None:
        return self.session.get(User, user_id)

    def find_by_email(self, email: str) -> User | None:
        return self.session.exec(select(User).where(User.email == email)).first()

    def find_by_reset_token(self, token_digest: str) -> User | None:
        return self.session.exec(
            select(User).where(User.password_reset_token == token_digest)
        ).first()

    def email_taken(self, email: str, *, exclude_id: uuid.UUID | None = None) -> bool:
        statement = select(User.id).where(User.email == email)
        if exclude_id is not None:
            statement = statement.where(User.id != exclude_id)
        return self.session.exec(statement).first() is not None

    def create(self, user: User) -> User:
        """Insert a user.

        Raises:
            sqlalchemy.exc.IntegrityError: If the email is already stored
        """
        self.session.add(user)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(user)
        return user

    def update(self, user: User, values: dict[str, Any]) -> User:
        """Apply values to a user and commit them in one statement."""
        for key, value in values.items():
            setattr(user, key, value)
        self.session.add(user)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(user)
        return user

    def set_password_reset_token(
        self, user: User, token_digest: str | None, expires: datetime | None
    ) -> User:
        """Set or clear the reset token and its expiry together."""
        return self.update(
            user,
            {"password_reset_token": token_digest, "password_reset_expires": expires},
        )

    def delete(self, user: User) -> None:
        self.session.delete(user)
        self.session.commit()

    def bulk_delete(self, ids: Sequence[uuid.UUID]) -> tuple[int, list[uuid.UUID]]:
        """Delete users by id in one statement.

        Returns:
            (number of rows deleted, ids that are still present afterwards)
        """
        if not ids:
            return 0, []

        unique_ids = list(dict.fromkeys(ids))
        result = self.session.connection().execute(
            delete(User).where(col(User.id).in_(unique_ids))
        )
        self.session.commit()
        deleted = result.rowcount or 0

        failed: list[uuid.UUID] = []
        if deleted < len(unique_ids):
            failed = list(
                self.session.exec(
                    select(User.id).where(col(User.id).in_(unique_ids))
                ).all()
            )
        return deleted, failed

    def find_page(
        self,
        *,
        cursor: uuid.UUID | None = None,
        limit: int = 10,
        sort_by: SortField = SortField.created_at,
        sort_order: SortOrder = SortOrder.DESC,
        filters: UserFilters | None = None,
    ) -> CursorPage:
        return find_page(
            self.session,
            cursor=cursor,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
            filters=filters,
        )


def get_user_repository(session: SessionDep) -> UserRepository:
    return UserRepository(session)


UserRepositoryDep = Annotated[UserRepository, Depends(get_user_repository)]
