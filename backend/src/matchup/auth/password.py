"""Password hashing service using bcrypt."""

from passlib.context import CryptContext


class PasswordService:
    """Hashes and verifies passwords with bcrypt via passlib.

    Plain-text passwords are never stored; the hash string carries its own
    salt and work factor.
    """

    def __init__(self, rounds: int = 12):
        """Initialize the password service.

        Args:
            rounds: bcrypt work factor (default 12)
        """
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hash: str) -> bool:
        """Check a plain-text password against a stored hash.

        A malformed hash counts as a mismatch.
        """
        try:
            return self._context.verify(password, hash)
        except ValueError:
            return False
