"""Password hashing strategies."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from account_service.domain.users.repositories import PasswordHasher
from account_service.shared.logging import logger


class WerkzeugPasswordHasher(PasswordHasher):
    """Salted hashing via werkzeug; the salt travels inside the hash string."""

    def __init__(self, method: str = "scrypt", salt_length: int = 16) -> None:
        self._method = method
        self._salt_length = salt_length

    def hash(self, password: str) -> str:
        return str(generate_password_hash(password, method=self._method, salt_length=self._salt_length))

    def verify(self, password: str, hashed: str) -> bool:
        if not hashed:
            return False
        try:
            return bool(check_password_hash(hashed, password))
        except (ValueError, TypeError):
            logger.warning("password_hasher: stored hash is malformed")
            return False
