"""
Share Application Service

Coordinates the share use cases: upload, preview, serve, listing and delete.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import PurePosixPath
from typing import BinaryIO, Callable, Iterable, List, Optional

from tempshare.domain.errors import (
    BlobNotFoundError,
    ErrorCategory,
    ERROR_MESSAGES,
    IdCollisionError,
    ObjectNotFoundError,
    ShareError,
)
from tempshare.domain.sharing import (
    RETENTION_WINDOW,
    AccessGate,
    IObjectStore,
    ObjectId,
    ObjectRegistry,
    OwnershipGuard,
    PasswordHasher,
    ServedObject,
    ShareObject,
    utcnow,
)

from .projections import (
    FileSummary,
    ObjectPreview,
    UploadBatch,
    UploadFailure,
    UploadResult,
)

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "upload.bin"
MAX_SUFFIX_LENGTH = 16


@dataclass(frozen=True)
class IncomingFile:
    """One file of an upload request, independent of the web framework."""
    filename: str
    content_type: str
    stream: BinaryIO


def clean_display_name(filename: Optional[str]) -> str:
    """Strip any client-side directory components from an uploaded filename."""
    name = PurePosixPath((filename or "").replace("\\", "/")).name.strip()
    if name in ("", ".", ".."):
        return DEFAULT_FILENAME
    return name


def storage_suffix(display_name: str) -> str:
    """Short alphanumeric extension hint for the object store ('' if unusable)."""
    suffix = PurePosixPath(display_name).suffix.lower()
    if len(suffix) > MAX_SUFFIX_LENGTH or not suffix[1:].isalnum():
        return ""
    return suffix


class ShareService:
    """
    Application service for shared object operations.

    Creation is atomic per file across the object store and the registry:
    bytes are written first, and removed again if the record cannot be
    persisted. Files in one upload are independent of each other.
    """

    def __init__(self, registry: ObjectRegistry, store: IObjectStore,
                 password_hasher: PasswordHasher, access_gate: AccessGate,
                 ownership_guard: OwnershipGuard,
                 retention: timedelta = RETENTION_WINDOW,
                 share_base_url: str = "/api/v1/share",
                 clock: Callable[[], datetime] = utcnow):
        """
        Initialize ShareService.

        Args:
            registry: Metadata registry
            store: Object store
            password_hasher: Derives password verifiers at upload time
            access_gate: Serve-path enforcement
            ownership_guard: Delete authorization
            retention: Retention window applied to new objects
            share_base_url: Prefix for share links in upload responses
            clock: Source of the current time
        """
        self.registry = registry
        self.store = store
        self.password_hasher = password_hasher
        self.access_gate = access_gate
        self.ownership_guard = ownership_guard
        self.retention = retention
        self.share_base_url = share_base_url
        self.clock = clock

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def upload_files(self, owner_id: str, files: Iterable[IncomingFile],
                     password: Optional[str] = None) -> UploadBatch:
        """
        Store each file and create its record.

        One password (if any) protects every file of the batch. A failure on
        one file is reported for that file and does not undo its siblings.

        Args:
            owner_id: Authenticated uploader
            files: Files to store
            password: Optional share password

        Returns:
            UploadBatch with one result or failure per file
        """
        verifier = self.password_hasher.hash(password) if password else None
        batch = UploadBatch()

        for incoming in files:
            display_name = clean_display_name(incoming.filename)
            try:
                record = self._create_object(owner_id, display_name, incoming, verifier)
                batch.results.append(
                    UploadResult.from_record(record, record.share_url(self.share_base_url))
                )
                logger.info(
                    f"Stored object {record.object_id[:8]} ({record.byte_size} bytes) "
                    f"for owner {owner_id}"
                )
            except ShareError as e:
                logger.error(f"Failed to store {display_name!r}: {e}")
                batch.failures.append(self._failure(display_name, e.category))
            except Exception as e:
                logger.exception(f"Unexpected error storing {display_name!r}: {e}")
                batch.failures.append(self._failure(display_name, ErrorCategory.UPLOAD_FAILED))

        return batch

    def _create_object(self, owner_id: str, display_name: str,
                       incoming: IncomingFile, verifier: Optional[str]) -> ShareObject:
        locator = self.store.put(incoming.stream, suffix=storage_suffix(display_name))

        try:
            byte_size = self.store.get_size(locator)
            if byte_size is None:
                raise BlobNotFoundError(f"Stored bytes vanished at {locator}")

            record = ShareObject.create(
                owner_id=owner_id,
                display_name=display_name,
                storage_locator=locator,
                byte_size=byte_size,
                content_type=incoming.content_type,
                password_verifier=verifier,
                retention=self.retention,
                now=self.clock(),
            )

            try:
                self.registry.create(record)
            except IdCollisionError:
                logger.warning(
                    f"Identifier collision on {record.object_id[:8]}, retrying once"
                )
                record = record.with_new_id()
                self.registry.create(record)

            return record
        except Exception:
            self._rollback_bytes(locator)
            raise

    def _rollback_bytes(self, locator: str) -> None:
        try:
            self.store.delete(locator)
            logger.warning(f"Rolled back stored bytes at {locator} after failed create")
        except Exception as e:
            logger.error(
                f"Rollback of {locator} failed, leaving it to the orphan scan: {e}"
            )

    @staticmethod
    def _failure(display_name: str, category: ErrorCategory) -> UploadFailure:
        return UploadFailure(
            display_name=display_name,
            error=category.value,
            message=ERROR_MESSAGES[category]["message"],
        )

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def preview(self, object_id: str, password: Optional[str] = None) -> ObjectPreview:
        """
        Metadata for a share link, without transferring bytes or counting.

        Raises:
            ObjectNotFoundError, ObjectGoneError, PasswordRequiredError,
            InvalidPasswordError
        """
        record = self.access_gate.preview(object_id, password)
        return ObjectPreview.from_record(record, self.clock())

    def serve(self, object_id: str, password: Optional[str] = None,
              client_origin: str = "", client_agent: str = "") -> ServedObject:
        """
        Open a shared object for download and record the access.

        Raises:
            ObjectNotFoundError, ObjectGoneError, PasswordRequiredError,
            InvalidPasswordError, ObjectConflictError
        """
        return self.access_gate.serve(object_id, password, client_origin, client_agent)

    def list_owned(self, owner_id: str) -> List[FileSummary]:
        """Objects uploaded by ``owner_id``, newest first."""
        now = self.clock()
        return [
            FileSummary.from_record(record, now)
            for record in self.registry.list_by_owner(str(owner_id))
        ]

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete_object(self, object_id: str, caller_id: Optional[str],
                      caller_is_admin: bool = False) -> bool:
        """
        Delete an object as its owner or as an administrator.

        Bytes are removed before the record. A store failure is logged and the
        record is still removed, leaving the bytes to the orphan scan.

        Args:
            object_id: Share identifier
            caller_id: Authenticated caller
            caller_is_admin: Whether the caller is an administrator

        Returns:
            True if this call removed the record, False if a concurrent
            delete got there first

        Raises:
            ObjectNotFoundError: No such object
            ForbiddenError: Caller is neither owner nor admin
        """
        if not ObjectId.is_valid(object_id):
            raise ObjectNotFoundError(f"Object not found: {object_id!r}")

        record = self.registry.get(object_id)
        self.ownership_guard.ensure_can_delete(record, caller_id, caller_is_admin)

        try:
            self.store.delete(record.storage_locator)
        except Exception as e:
            logger.warning(
                f"Failed to delete bytes for {object_id[:8]}: {e}. "
                f"Leaving them to the orphan scan."
            )

        removed = self.registry.delete(object_id)
        logger.info(
            f"Object {object_id[:8]} deleted by {'admin ' if caller_is_admin else ''}"
            f"{caller_id} (removed={removed})"
        )
        return removed
