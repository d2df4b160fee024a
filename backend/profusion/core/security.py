"""Password hashing and password policy."""

import re
from typing import Optional

from passlib.context import CryptContext

from profusion.core.config import settings
from profusion.core.errors import WeakPassword

PASSWORD_MIN_LENGTH = 6
PASSWORD_SYMBOLS = "!@#$%^&*()-_=+[]{};:'\",.<>/?\\|`~"

_LETTER = re.compile(r"[A-Za-z]")
_DIGIT = re.compile(r"\d")


def check_password_policy(password: str) -> None:
    """Raise WeakPassword unless the password is at least 6 characters long
    and contains a letter, a digit and a symbol from PASSWORD_SYMBOLS.
    """
    if len(password) < PASSWORD_MIN_LENGTH:
        raise WeakPassword(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if not _LETTER.search(password):
        raise WeakPassword("Password must contain at least one letter")
    if not _DIGIT.search(password):
        raise WeakPassword("Password must contain at least one digit")
    if not any(ch in PASSWORD_SYMBOLS for ch in password):
        raise WeakPassword("Password must contain at least one symbol")


class PasswordHasher:
    """Salted adaptive hashing (bcrypt) with a tunable cost factor."""

    def __init__(self, rounds: Optional[int] = None):
        self.rounds = rounds or settings.BCRYPT_ROUNDS
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=self.rounds,
        )

    def hash(self, password: str) -> str:
        # bcrypt generates a fresh random salt for every call
        return self._context.hash(password)

    def verify(self, password: str, hashed_password: str) -> bool:
        try:
            return self._context.verify(password, hashed_password)
        except (ValueError, TypeError):
            return False

    def dummy_verify(self) -> None:
        """Spend the time of a verification against no stored hash."""
        self._context.dummy_verify()


password_hasher = PasswordHasher()
