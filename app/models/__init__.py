"""
Model package.

`SQLModel.metadata` only knows about table models that have been imported;
`app.db.engine.init_db` imports this package before creating tables, so every
`table=True` model must be imported here.
"""

from app.user.models import User  # noqa: F401
