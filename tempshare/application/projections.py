"""
Response Projections

Named, read-only views of shared objects returned across the application
boundary. The API layer serializes these; it never builds ad hoc maps.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from tempshare.domain.sharing.entities import ShareObject


@dataclass(frozen=True)
class UploadResult:
    """One successfully stored file of an upload batch."""
    object_id: str
    display_name: str
    byte_size: int
    expires_at: datetime
    has_password: bool
    share_url: str
    access_count: int = 0

    @classmethod
    def from_record(cls, record: ShareObject, share_url: str) -> 'UploadResult':
        return cls(
            object_id=record.object_id,
            display_name=record.display_name,
            byte_size=record.byte_size,
            expires_at=record.expires_at,
            has_password=record.has_password,
            share_url=share_url,
            access_count=record.access_count,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.object_id,
            "display_name": self.display_name,
            "byte_size": self.byte_size,
            "expires_at": self.expires_at.isoformat(),
            "has_password": self.has_password,
            "share_url": self.share_url,
            "access_count": self.access_count,
        }


@dataclass(frozen=True)
class UploadFailure:
    """One file of an upload batch that could not be stored."""
    display_name: str
    error: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "display_name": self.display_name,
            "error": self.error,
            "message": self.message,
        }


@dataclass
class UploadBatch:
    """Per-file outcome of a multi-file upload. Partial success is allowed."""
    results: List[UploadResult] = field(default_factory=list)
    failures: List[UploadFailure] = field(default_factory=list)

    @property
    def all_failed(self) -> bool:
        return not self.results and bool(self.failures)

    @property
    def is_partial(self) -> bool:
        return bool(self.results) and bool(self.failures)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": [r.to_dict() for r in self.results],
            "errors": [f.to_dict() for f in self.failures],
        }


@dataclass(frozen=True)
class ObjectPreview:
    """Metadata shown before a download is committed."""
    display_name: str
    byte_size: int
    content_type: str
    has_password: bool
    access_count: int
    expires_at: datetime
    is_expired: bool

    @classmethod
    def from_record(cls, record: ShareObject, now: datetime) -> 'ObjectPreview':
        return cls(
            display_name=record.display_name,
            byte_size=record.byte_size,
            content_type=record.content_type,
            has_password=record.has_password,
            access_count=record.access_count,
            expires_at=record.expires_at,
            is_expired=record.is_expired(now),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "display_name": self.display_name,
            "byte_size": self.byte_size,
            "content_type": self.content_type,
            "has_password": self.has_password,
            "access_count": self.access_count,
            "expires_at": self.expires_at.isoformat(),
            "is_expired": self.is_expired,
        }


@dataclass(frozen=True)
class FileSummary:
    """
    Listing row for owner and admin views.

    ``owner_id`` is only populated for admin listings.
    """
    object_id: str
    display_name: str
    byte_size: int
    content_type: str
    has_password: bool
    access_count: int
    created_at: datetime
    expires_at: datetime
    is_expired: bool
    owner_id: Optional[str] = None

    @classmethod
    def from_record(cls, record: ShareObject, now: datetime,
                    include_owner: bool = False) -> 'FileSummary':
        return cls(
            object_id=record.object_id,
            display_name=record.display_name,
            byte_size=record.byte_size,
            content_type=record.content_type,
            has_password=record.has_password,
            access_count=record.access_count,
            created_at=record.created_at,
            expires_at=record.expires_at,
            is_expired=record.is_expired(now),
            owner_id=record.owner_id if include_owner else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.object_id,
            "display_name": self.display_name,
            "byte_size": self.byte_size,
            "content_type": self.content_type,
            "has_password": self.has_password,
            "access_count": self.access_count,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "is_expired": self.is_expired,
        }
        if self.owner_id is not None:
            data["owner_id"] = self.owner_id
        return data


@dataclass(frozen=True)
class UsageStats:
    """Aggregate usage figures for administrators."""
    total_objects: int
    active_objects: int
    total_access_events: int
    today_access_events: int
    total_bytes_stored: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_objects": self.total_objects,
            "active_objects": self.active_objects,
            "total_access_events": self.total_access_events,
            "today_access_events": self.today_access_events,
            "total_bytes_stored": self.total_bytes_stored,
        }
