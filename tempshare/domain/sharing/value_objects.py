"""
Sharing Value Objects

Immutable value objects for type safety and validation.
"""

from dataclasses import dataclass
import secrets


class InvalidObjectIdError(ValueError):
    """Raised when a share identifier is malformed."""
    pass


@dataclass(frozen=True)
class ObjectId:
    """
    Value object representing an opaque, unguessable share identifier.

    Identifiers appear in public share URLs, so they must not be sequential
    or enumerable. They are URL-safe and at least 32 characters long.
    """
    value: str

    MIN_LENGTH = 32
    MAX_LENGTH = 128

    def __post_init__(self):
        if not self.is_valid(self.value):
            raise InvalidObjectIdError(
                f"Invalid object id: must be {self.MIN_LENGTH}-{self.MAX_LENGTH} "
                f"URL-safe characters"
            )

    @classmethod
    def is_valid(cls, value) -> bool:
        """
        Check whether a raw string could be a share identifier.

        Requirements:
        - Must be a string
        - Must be between MIN_LENGTH and MAX_LENGTH characters
        - Must be URL-safe (alphanumeric, hyphens, underscores)
        """
        if not value or not isinstance(value, str):
            return False

        if not cls.MIN_LENGTH <= len(value) <= cls.MAX_LENGTH:
            return False

        return all((c.isascii() and c.isalnum()) or c in '-_' for c in value)

    @classmethod
    def generate(cls) -> 'ObjectId':
        """
        Generate a new cryptographically secure identifier.

        Uses secrets.token_urlsafe(32): 32 bytes of randomness,
        43 characters once base64 encoded.
        """
        return cls(secrets.token_urlsafe(32))

    def __str__(self) -> str:
        return self.value
