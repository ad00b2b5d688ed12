"""
Caller Authentication

Resolves the authenticated principal from a bearer token issued by the
external auth service. Tokens carry ``user_id`` and ``is_admin`` claims.
"""

from dataclasses import dataclass
from functools import wraps
from typing import Optional

import jwt
from flask import current_app, g, request

from tempshare.domain.errors import ErrorCategory, create_error_response


class AuthenticationError(Exception):
    """Raised when a bearer token is missing, expired or invalid."""
    pass


@dataclass(frozen=True)
class Caller:
    """The authenticated principal behind a request."""
    caller_id: str
    is_admin: bool = False


def decode_caller(token: str, secret: str, algorithm: str = "HS256") -> Caller:
    """
    Decode a bearer token into a Caller.

    Args:
        token: Encoded JWT
        secret: Shared signing secret
        algorithm: Expected signing algorithm

    Returns:
        Caller built from the token claims

    Raises:
        AuthenticationError: If the token is expired, invalid or lacks a user id
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Token expired") from e
    except jwt.InvalidTokenError as e:
        raise AuthenticationError(f"Invalid token: {e}") from e

    user_id = payload.get("user_id")
    if user_id is None or str(user_id) == "":
        raise AuthenticationError("Token has no user_id claim")

    return Caller(caller_id=str(user_id), is_admin=bool(payload.get("is_admin", False)))


def _bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def current_caller() -> Caller:
    """
    Authenticate the current request.

    Raises:
        AuthenticationError: If no valid bearer token is present
    """
    token = _bearer_token()
    if token is None:
        raise AuthenticationError("Missing bearer token")

    return decode_caller(
        token,
        current_app.config["JWT_SECRET"],
        current_app.config.get("JWT_ALGORITHM", "HS256"),
    )


def require_caller(func):
    """Reject the request with 401 unless a valid bearer token is present."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            g.caller = current_caller()
        except AuthenticationError as e:
            current_app.logger.info(f"Rejected unauthenticated request: {e}")
            return create_error_response(
                ErrorCategory.AUTHENTICATION_REQUIRED, str(e), status_code=401
            )
        return func(*args, **kwargs)

    return wrapper


def require_admin(func):
    """Reject the request with 401 without a token and 403 for non-admins."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            caller = current_caller()
        except AuthenticationError as e:
            return create_error_response(
                ErrorCategory.AUTHENTICATION_REQUIRED, str(e), status_code=401
            )
        if not caller.is_admin:
            current_app.logger.warning(
                f"Non-admin caller {caller.caller_id} denied admin access"
            )
            return create_error_response(
                ErrorCategory.FORBIDDEN, "Admin access required", status_code=403
            )
        g.caller = caller
        return func(*args, **kwargs)

    return wrapper
