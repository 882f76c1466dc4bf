from passlib.context import CryptContext

from app.utils.config import Settings
from app.utils.errors import InternalError


class PasswordHasher:
    """Salted bcrypt hashing for stored credentials."""

    def __init__(self, config: Settings) -> None:
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=config.bcrypt_rounds)

    def hash(self, plain: str) -> str:
        """Hash a plaintext password using bcrypt."""
        try:
            return self._context.hash(plain)
        except (TypeError, ValueError) as exc:
            raise InternalError("Unable to hash password") from exc

    def verify(self, plain: str, hashed: str) -> bool:
        """Verify plaintext password against a bcrypt hash."""
        try:
            return self._context.verify(plain, hashed)
        except (TypeError, ValueError) as exc:
            raise InternalError("Stored password hash is unreadable") from exc
