"""Password hashing.

bcrypt is CPU bound on purpose, so hashing and verification run in a worker
thread to keep the event loop responsive.
"""

from functools import lru_cache

import anyio.to_thread
import bcrypt

# bcrypt only looks at the first 72 bytes of the password.
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class PasswordHasher:
    """bcrypt hasher with a fixed work factor."""

    def __init__(self, rounds: int = 12):
        self._rounds = rounds

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash_sync(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

    def verify_sync(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash
            return False

    async def hash(self, password: str) -> str:
        """Hash a password with a fresh salt."""
        return await anyio.to_thread.run_sync(self.hash_sync, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison of a password against a stored hash."""
        return await anyio.to_thread.run_sync(
            self.verify_sync, password, password_hash
        )


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Get cached hasher configured from settings."""
    from app.core.settings import get_settings

    return PasswordHasher(rounds=get_settings().bcrypt_rounds)
