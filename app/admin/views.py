from sqladmin import ModelView

from app.user.models import User


class UserAdmin(ModelView, model=User):
    name = "User"
    name_plural = "Users"

    column_list = [
        User.email,
        User.first_name,
        User.last_name,
        User.birthdate,
        User.role,
        User.id,
        User.created_at,
        User.updated_at,
    ]

    column_searchable_list = [
        User.email,
        User.first_name,
        User.last_name,
    ]

    column_sortable_list = [
        User.email,
        User.first_name,
        User.last_name,
        User.birthdate,
        User.role,
        User.created_at,
        User.updated_at,
    ]

    # Credentials and reset tokens never leave the database
    column_details_exclude_list = [
        User.password_hash,
        User.password_reset_token,
        User.password_reset_expires,
    ]
    form_excluded_columns = [
        User.password_hash,
        User.password_reset_token,
        User.password_reset_expires,
        User.created_at,
        User.updated_at,
    ]
    can_create = False
