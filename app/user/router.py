"""User domain router.

User management routes for CRUD operations. Every route requires a valid
access token; everything except the /me routes also requires the admin role.
"""

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError

from app.auth.dependencies import CurrentUserDep, require_admin, require_auth
from app.core.constants import (
    DEFAULT_PAGE_LIMIT,
    MAX_PAGE_LIMIT,
    CommonResponses,
    Routes,
)
from app.core.deps import PasswordHasherDep
from app.user.exceptions import (
    EmailExistsError,
    EmailInUseError,
    UserNotFoundError,
)
from app.user.models import User
from app.user.pagination import SortField, SortOrder, UserFilters
from app.user.repository import UserRepository, UserRepositoryDep
from app.user.schemas import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    UserCreate,
    UserMessage,
    UserPage,
    UserPageMeta,
    UserRead,
    UserRoleUpdate,
    UserUpdate,
    UserUpdateMe,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix=Routes.USER.prefix,
    tags=[Routes.USER.tag],
    dependencies=[Depends(require_auth)],
    responses={
        **CommonResponses.UNAUTHORIZED,
        **CommonResponses.FORBIDDEN,
    },
)


def _get_or_404(users: UserRepository, user_id: uuid.UUID) -> User:
    user = users.get(user_id)
    if user is None:
        raise UserNotFoundError()
    return user


# --- Self-service routes (declared before /{user_id}) ---


@router.get("/me", response_model=UserRead)
async def read_me(user: CurrentUserDep):
    """Get current authenticated user."""
    return user


@router.patch("/me", response_model=UserRead)
async def update_me(
    user: CurrentUserDep, user_update: UserUpdateMe, users: UserRepositoryDep
):
    """Update current authenticated user's profile.

    Users can only update their own first_name, last_name and birthdate.
    """
    update_data = user_update.model_dump(exclude_unset=True, exclude_none=True)
    return users.update(user, update_data)


@router.delete("/me", response_model=UserMessage)
async def delete_me(user: CurrentUserDep, users: UserRepositoryDep):
    """Delete current authenticated user."""
    users.delete(user)
    logger.info("User deleted own account: %s", user.id)
    return UserMessage(message="Your account has been deleted successfully")


# --- Admin routes ---


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
    responses={**CommonResponses.CONFLICT},
)
async def create_user(
    user_create: UserCreate, users: UserRepositoryDep, hasher: PasswordHasherDep
):
    """Create a user. Admin only."""
    if users.find_by_email(user_create.email) is not None:
        raise EmailExistsError()

    data = user_create.model_dump(exclude={"password"})
    user = User(**data, password_hash=await hasher.hash(user_create.password))
    try:
        return users.create(user)
    except IntegrityError as e:
        raise EmailExistsError() from e


@router.get("", response_model=UserPage, dependencies=[Depends(require_admin)])
async def list_users(
    users: UserRepositoryDep,
    cursor: uuid.UUID | None = None,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_LIMIT)] = DEFAULT_PAGE_LIMIT,
    sort_by: SortField = SortField.created_at,
    sort_order: SortOrder = SortOrder.DESC,
    search: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
    email: str | None = None,
):
    """List users with cursor pagination. Admin only.

    Pass ``meta.next_cursor`` from one response as ``cursor`` to get the next
    page. ``search`` matches email or names and overrides the per-field
    filters.
    """
    page = users.find_page(
        cursor=cursor,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        filters=UserFilters(
            search=search,
            first_name=first_name,
            last_name=last_name,
            email=email,
        ),
    )
    return UserPage(
        data=[UserRead.model_validate(user) for user in page.data],
        meta=UserPageMeta(
            next_cursor=page.next_cursor,
            has_more=page.has_more,
            count=page.count,
            limit=page.limit,
        ),
    )


@router.delete(
    "",
    response_model=BulkDeleteResponse,
    dependencies=[Depends(require_admin)],
)
async def bulk_delete_users(payload: BulkDeleteRequest, users: UserRepositoryDep):
    """Delete many users at once. Admin only.

    Ids that do not exist are ignored; ``failed`` lists ids that are still
    present after the delete.
    """
    deleted, failed = users.bulk_delete(payload.ids)
    logger.info("Bulk deleted %d user(s), %d failed", deleted, len(failed))
    return BulkDeleteResponse(
        deleted=deleted,
        failed=failed,
        message=f"Successfully deleted {deleted} user(s)",
    )


@router.get(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
    responses={**CommonResponses.NOT_FOUND},
)
async def get_user(user_id: uuid.UUID, users: UserRepositoryDep):
    """Get a user by ID. Admin only."""
    return _get_or_404(users, user_id)


@router.patch(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def update_user(
    user_id: uuid.UUID, user_update: UserUpdate, users: UserRepositoryDep
):
    """Update a user by ID. Admin only.

    Admins can update email, names and birthdate. Use PATCH
    /users/{user_id}/role to change the role.
    """
    user = _get_or_404(users, user_id)
    update_data = user_update.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in update_data and update_data["email"] != user.email:
        if users.email_taken(update_data["email"], exclude_id=user_id):
            raise EmailInUseError()

    try:
        return users.update(user, update_data)
    except IntegrityError as e:
        raise EmailInUseError() from e


@router.patch(
    "/{user_id}/role",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
    responses={**CommonResponses.NOT_FOUND},
)
async def update_user_role(
    user_id: uuid.UUID, role_update: UserRoleUpdate, users: UserRepositoryDep
):
    """Change a user's role. Admin only."""
    user = _get_or_404(users, user_id)
    updated = users.update(user, {"role": role_update.role})
    logger.info("Role of user %s set to %s", user_id, role_update.role.value)
    return updated


@router.delete(
    "/{user_id}",
    response_model=UserMessage,
    dependencies=[Depends(require_admin)],
    responses={**CommonResponses.NOT_FOUND},
)
async def delete_user(user_id: uuid.UUID, users: UserRepositoryDep):
    """Delete a user by ID. Admin only."""
    user = _get_or_404(users, user_id)
    users.delete(user)
    logger.info("User deleted: %s", user_id)
    return UserMessage(message="User deleted successfully")
