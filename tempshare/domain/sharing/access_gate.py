"""
Access Gate

Decides whether a shared object may be served and records the access.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Callable, Optional

from tempshare.domain.errors import (
    BlobNotFoundError,
    InvalidPasswordError,
    ObjectConflictError,
    ObjectGoneError,
    ObjectNotFoundError,
    PasswordRequiredError,
)

from .entities import AccessEvent, ShareObject, utcnow
from .password import PasswordHasher
from .repositories import ObjectRegistry
from .storage_repository import IObjectStore
from .value_objects import ObjectId

logger = logging.getLogger(__name__)


@dataclass
class ServedObject:
    """
    Result of a successful serve.

    The caller owns ``stream`` and must close it. ``access_count`` is None
    when the counter could not be updated.
    """
    object_id: str
    stream: BinaryIO
    display_name: str
    content_type: str
    byte_size: int
    access_count: Optional[int]


class AccessGate:
    """
    Domain service enforcing the serve path for shared objects.

    Checks run in a fixed order: lookup, expiry, password. Expiry is checked
    before the password so an expired protected object never reveals that it
    was protected, and no verifier work is spent on dead records.
    """

    def __init__(self, registry: ObjectRegistry, store: IObjectStore,
                 password_hasher: PasswordHasher,
                 clock: Callable[[], datetime] = utcnow):
        """
        Args:
            registry: Metadata registry
            store: Object store holding the bytes
            password_hasher: Verifier used for protected objects
            clock: Source of the current time
        """
        self.registry = registry
        self.store = store
        self.password_hasher = password_hasher
        self.clock = clock

    def preview(self, object_id: str, password: Optional[str] = None) -> ShareObject:
        """
        Metadata-only check: lookup, expiry and password, no bytes, no counting.

        Args:
            object_id: Share identifier
            password: Password supplied by the caller, if any

        Returns:
            The authorized record

        Raises:
            ObjectNotFoundError: No such object
            ObjectGoneError: Object has expired
            PasswordRequiredError: Object is protected and no password was given
            InvalidPasswordError: Password does not match
        """
        return self._authorize(object_id, password)

    def serve(self, object_id: str, password: Optional[str] = None,
              client_origin: str = "", client_agent: str = "") -> ServedObject:
        """
        Full serve: authorize, open the bytes, then record the access.

        Counting is best-effort. A failure to increment the counter or append
        the access event is logged and never fails the serve.

        Raises:
            ObjectNotFoundError, ObjectGoneError, PasswordRequiredError,
            InvalidPasswordError: As for preview()
            ObjectConflictError: The record exists but its bytes are missing
        """
        record = self._authorize(object_id, password)

        try:
            stream = self.store.get(record.storage_locator)
        except BlobNotFoundError as e:
            logger.error(
                f"Registry/store divergence: object {object_id[:8]} references "
                f"missing locator {record.storage_locator}. This is a correctness bug."
            )
            raise ObjectConflictError(
                f"Bytes missing for object {object_id[:8]}", original_error=e
            ) from e

        access_count = self._record_access(record, client_origin, client_agent)

        return ServedObject(
            object_id=record.object_id,
            stream=stream,
            display_name=record.display_name,
            content_type=record.content_type,
            byte_size=record.byte_size,
            access_count=access_count,
        )

    def _authorize(self, object_id: str, password: Optional[str]) -> ShareObject:
        if not ObjectId.is_valid(object_id):
            raise ObjectNotFoundError(f"Object not found: {object_id!r}")

        record = self.registry.get(object_id)

        if record.is_expired(self.clock()):
            raise ObjectGoneError(f"Object has expired: {object_id[:8]}")

        if record.has_password:
            if not password:
                raise PasswordRequiredError(f"Password required for {object_id[:8]}")
            if not self.password_hasher.verify(record.password_verifier, password):
                raise InvalidPasswordError(f"Invalid password for {object_id[:8]}")

        return record

    def _record_access(self, record: ShareObject, client_origin: str,
                       client_agent: str) -> Optional[int]:
        access_count = None
        try:
            access_count = self.registry.increment_access_count(record.object_id)
        except Exception as e:
            logger.warning(
                f"Failed to increment access count for {record.object_id[:8]}: {e}",
                exc_info=True,
            )

        try:
            event = AccessEvent.record(
                record.object_id, client_origin, client_agent, now=self.clock()
            )
            self.registry.append_access_event(event)
        except Exception as e:
            logger.warning(
                f"Failed to log access event for {record.object_id[:8]}: {e}",
                exc_info=True,
            )

        return access_count
