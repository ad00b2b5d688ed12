"""
Password Verifiers

One-way verifiers for share passwords, backed by werkzeug.security.
Cleartext passwords are never stored.
"""

from werkzeug.security import check_password_hash, generate_password_hash


class PasswordHasher:
    """Derives and checks share password verifiers."""

    def __init__(self, method: str = "scrypt"):
        """
        Args:
            method: werkzeug hashing method (e.g. 'scrypt', 'pbkdf2:sha256')
        """
        self.method = method

    def hash(self, password: str) -> str:
        if not password:
            raise ValueError("password cannot be empty")
        return generate_password_hash(password, method=self.method)

    def verify(self, verifier: str, password: str) -> bool:
        """
        Check a supplied password against a stored verifier.

        The digest comparison inside check_password_hash is constant-time.
        """
        if not verifier or not password:
            return False
        return check_password_hash(verifier, password)
