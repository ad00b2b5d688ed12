"""
Sharing Repositories

Repository interface for shared object metadata persistence.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterator, List

from .entities import AccessEvent, ShareObject


class ObjectRegistry(ABC):
    """
    Abstract repository interface for shared object metadata.

    The registry is the source of truth for records, their access counters
    and their access events. Implementations must make the counter increment
    a single atomic operation at the storage layer.
    """

    @abstractmethod
    def create(self, record: ShareObject) -> str:
        """
        Persist a new record.

        Args:
            record: ShareObject to persist

        Returns:
            The record identifier

        Raises:
            IdCollisionError: If a record with the same identifier exists
        """
        pass  # pragma: no cover

    @abstractmethod
    def get(self, object_id: str) -> ShareObject:
        """
        Retrieve a record with its current access count.

        Raises:
            ObjectNotFoundError: If no record exists
        """
        pass  # pragma: no cover

    @abstractmethod
    def increment_access_count(self, object_id: str) -> int:
        """
        Atomically add one to the access counter.

        Returns:
            The counter value after the increment

        Raises:
            ObjectNotFoundError: If the record vanished concurrently
        """
        pass  # pragma: no cover

    @abstractmethod
    def append_access_event(self, event: AccessEvent) -> None:
        """
        Append an access event to the record's log.

        Raises:
            ObjectNotFoundError: If the parent record no longer exists
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, object_id: str) -> bool:
        """
        Delete a record, its events and its index entries.

        Idempotent: deleting a missing record is not an error.

        Returns:
            True if a record was removed by this call, False if none existed
        """
        pass  # pragma: no cover

    @abstractmethod
    def list_expired(self, now: datetime) -> Iterator[str]:
        """
        Lazily yield identifiers of records whose expiry is strictly before ``now``.

        The sequence is finite and restartable; callers may delete records
        while iterating.
        """
        pass  # pragma: no cover

    @abstractmethod
    def list_by_owner(self, owner_id: str) -> List[ShareObject]:
        """Records owned by ``owner_id``, newest first."""
        pass  # pragma: no cover

    @abstractmethod
    def iter_all(self) -> Iterator[ShareObject]:
        """Every record, newest first. Read-only enumeration for reporting."""
        pass  # pragma: no cover

    @abstractmethod
    def count_access_events(self, object_id: str) -> int:
        """Number of access events logged for a record (0 if missing)."""
        pass  # pragma: no cover

    @abstractmethod
    def count_access_events_since(self, object_id: str, since: datetime) -> int:
        """Number of access events at or after ``since`` (0 if missing)."""
        pass  # pragma: no cover

    @abstractmethod
    def locator_exists(self, storage_locator: str) -> bool:
        """Whether any live record references ``storage_locator``."""
        pass  # pragma: no cover
