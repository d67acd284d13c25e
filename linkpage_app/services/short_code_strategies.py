"""
Shortlink code generation strategies.
Uses Strategy Pattern to allow different generation algorithms.
"""

import random
import string
from abc import ABC, abstractmethod

from sqlalchemy.orm import Session

from linkpage_app.exceptions import Conflict
from linkpage_app.models.analytics import Shortlink


class ShortCodeStrategy(ABC):
    """Abstract base class for short code generation strategies"""

    @abstractmethod
    def generate(self, shortlink_id: int, db_session: Session) -> str:
        """
        Generate a short code.

        Args:
            shortlink_id: The database ID of the shortlink record
            db_session: Database session for strategies that need to check uniqueness

        Returns:
            A unique short code string
        """
        pass


class RandomShortCodeStrategy(ShortCodeStrategy):
    """
    Random alphanumeric codes with a uniqueness check per attempt.

    Unpredictable; costs one query per attempt.
    """

    def __init__(self, length: int = 6, max_retries: int = 5):
        self.length = length
        self.max_retries = max_retries
        self.characters = string.ascii_letters + string.digits

    def generate(self, shortlink_id: int, db_session: Session) -> str:
        for _ in range(self.max_retries):
            code = self._generate_random_string()
            if not db_session.query(Shortlink).filter(Shortlink.code == code).first():
                return code

        raise Conflict(
            f"Could not generate unique short code after {self.max_retries} attempts"
        )

    def _generate_random_string(self) -> str:
        return ''.join(random.choice(self.characters) for _ in range(self.length))


class Base62ShortCodeStrategy(ShortCodeStrategy):
    """
    Base62 encoding of the record id plus a salt.

    No collisions between generated codes and no extra queries. A custom
    code chosen earlier can still clash; the service checks for that.
    """

    BASE62_CHARS = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"

    def __init__(self, salt: int = 1000, max_length: int = 6):
        self.salt = salt
        self.max_length = max_length

    def generate(self, shortlink_id: int, db_session: Session) -> str:
        """
        Raises:
            ValueError: the encoded id no longer fits in max_length
        """
        encoded = self._base62_encode(shortlink_id + self.salt)

        if len(encoded) > self.max_length:
            raise ValueError(
                f"Generated code '{encoded}' exceeds max length {self.max_length}. "
                f"Consider increasing short_code_length."
            )

        return encoded

    def _base62_encode(self, number: int) -> str:
        if number == 0:
            return self.BASE62_CHARS[0]

        result = ""
        while number > 0:
            result = self.BASE62_CHARS[number % 62] + result
            number //= 62

        return result
