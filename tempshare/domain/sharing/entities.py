"""
Sharing Entities

Domain entities for shared objects and their access log.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from .value_objects import ObjectId

# Fixed retention window applied to every upload
RETENTION_WINDOW = timedelta(hours=24)


def utcnow() -> datetime:
    """Timezone-aware current UTC time, the default clock for the domain."""
    return datetime.now(timezone.utc)


def _parse_datetime(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class ShareObject:
    """
    Entity representing one uploaded file and its sharing metadata.

    The record is a snapshot: the registry owns the live access counter.
    ``expires_at`` is fixed at creation and never changes afterwards.
    A record with a password verifier is protected; without one it is public.
    """
    object_id: str
    owner_id: str
    display_name: str
    storage_locator: str
    byte_size: int
    content_type: str
    created_at: datetime
    expires_at: datetime
    password_verifier: Optional[str] = None
    access_count: int = 0

    @classmethod
    def create(cls, owner_id: str, display_name: str, storage_locator: str,
               byte_size: int, content_type: str,
               password_verifier: Optional[str] = None,
               retention: timedelta = RETENTION_WINDOW,
               now: Optional[datetime] = None) -> 'ShareObject':
        """
        Factory method to create a new shared object.

        Args:
            owner_id: Identifier of the uploading principal
            display_name: Original filename
            storage_locator: Locator returned by the object store
            byte_size: Size of the stored bytes
            content_type: MIME type declared at upload
            password_verifier: Optional one-way password verifier
            retention: How long the object stays reachable
            now: Creation time (defaults to the current UTC time)

        Returns:
            New ShareObject with a freshly generated identifier
        """
        if not owner_id:
            raise ValueError("owner_id is required")

        created_at = now or utcnow()
        return cls(
            object_id=ObjectId.generate().value,
            owner_id=str(owner_id),
            display_name=display_name,
            storage_locator=storage_locator,
            byte_size=byte_size,
            content_type=content_type or "application/octet-stream",
            created_at=created_at,
            expires_at=created_at + retention,
            password_verifier=password_verifier or None,
        )

    def with_new_id(self) -> 'ShareObject':
        """Copy of this record under a freshly generated identifier."""
        return replace(self, object_id=ObjectId.generate().value)

    @property
    def has_password(self) -> bool:
        return self.password_verifier is not None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """
        Check if the retention window has passed.

        Args:
            now: Reference time (defaults to the current UTC time)

        Returns:
            True once ``now`` is strictly after ``expires_at``
        """
        return (now or utcnow()) > self.expires_at

    def share_url(self, base_url: str) -> str:
        """Public share link for this object."""
        return f"{base_url.rstrip('/')}/{self.object_id}"

    def to_dict(self) -> Dict[str, str]:
        """
        Convert to a flat mapping of strings for persistence.

        An absent verifier is stored as an empty string.
        """
        return {
            "object_id": self.object_id,
            "owner_id": self.owner_id,
            "display_name": self.display_name,
            "storage_locator": self.storage_locator,
            "byte_size": str(self.byte_size),
            "content_type": self.content_type,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "password_verifier": self.password_verifier or "",
            "access_count": str(self.access_count),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'ShareObject':
        """Create ShareObject from a persisted mapping."""
        return cls(
            object_id=data["object_id"],
            owner_id=data["owner_id"],
            display_name=data["display_name"],
            storage_locator=data["storage_locator"],
            byte_size=int(data["byte_size"]),
            content_type=data["content_type"],
            created_at=_parse_datetime(data["created_at"]),
            expires_at=_parse_datetime(data["expires_at"]),
            password_verifier=data.get("password_verifier") or None,
            access_count=int(data.get("access_count") or 0),
        )


@dataclass(frozen=True)
class AccessEvent:
    """
    Append-only record of one successful serve.

    Events are never updated; they disappear only together with their object.
    """
    object_id: str
    client_origin: str
    client_agent: str
    occurred_at: datetime

    @classmethod
    def record(cls, object_id: str, client_origin: str = "",
               client_agent: str = "", now: Optional[datetime] = None) -> 'AccessEvent':
        return cls(
            object_id=object_id,
            client_origin=client_origin or "",
            client_agent=client_agent or "",
            occurred_at=now or utcnow(),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "object_id": self.object_id,
            "client_origin": self.client_origin,
            "client_agent": self.client_agent,
            "occurred_at": self.occurred_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'AccessEvent':
        return cls(
            object_id=data["object_id"],
            client_origin=data.get("client_origin", ""),
            client_agent=data.get("client_agent", ""),
            occurred_at=_parse_datetime(data["occurred_at"]),
        )
