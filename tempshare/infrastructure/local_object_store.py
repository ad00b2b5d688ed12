"""
Local Object Store Implementation

Concrete implementation of IObjectStore for the local filesystem.
Locators are relative paths under the store root made of random hex, so
they are collision-free and reveal nothing about the object they hold.
"""

import logging
import secrets
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from tempshare.domain.errors import BlobNotFoundError
from tempshare.domain.sharing.storage_repository import IObjectStore

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class LocalObjectStore(IObjectStore):
    """
    Local filesystem implementation of IObjectStore.

    Bytes live at ``{base_path}/{xx}/{32 hex chars}{suffix}``; the two-character
    fan-out directory keeps any single directory small.

    Thread Safety:
        New files are opened in exclusive-create mode, so two concurrent puts
        can never write to the same locator.

    Attributes:
        base_path: Root directory for stored bytes
    """

    def __init__(self, base_path: str = "/tmp/tempshare/objects"):
        """
        Initialize the local object store.

        Args:
            base_path: Root directory for stored bytes

        Raises:
            OSError: If the root directory cannot be created
        """
        self.base_path = Path(base_path).resolve()
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OSError(f"Failed to create storage directory: {self.base_path}") from e

    def put(self, content: BinaryIO, suffix: str = "") -> str:
        """
        Stream content into a new file under a fresh locator.

        Raises:
            IOError: If the bytes could not be written

        A failure while reading ``content`` propagates unchanged. In every
        failure case the partial file is removed first.
        """
        locator, handle = self._open_new(suffix)
        full_path = self.base_path / locator

        try:
            with handle:
                while True:
                    chunk = content.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    handle.write(chunk)
        except OSError as e:
            full_path.unlink(missing_ok=True)
            raise IOError(f"Failed to write object {locator}: {e}") from e
        except BaseException:
            full_path.unlink(missing_ok=True)
            raise

        return locator

    def _open_new(self, suffix: str, attempts: int = 5):
        for _ in range(attempts):
            locator = f"{secrets.token_hex(1)}/{secrets.token_hex(16)}{suffix}"
            full_path = self.base_path / locator
            full_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                return locator, open(full_path, "xb")
            except FileExistsError:
                logger.warning(f"Locator collision on {locator}, regenerating")
        raise IOError("Could not allocate a unique storage locator")

    def get(self, locator: str) -> BinaryIO:
        full_path = self._resolve(locator)
        if full_path is None:
            raise BlobNotFoundError(f"No bytes stored at {locator!r}")
        try:
            return open(full_path, "rb")
        except (FileNotFoundError, IsADirectoryError) as e:
            raise BlobNotFoundError(f"No bytes stored at {locator!r}", e) from e

    def delete(self, locator: str) -> bool:
        """
        Delete the file behind a locator. Missing files count as deleted.

        Raises:
            IOError: If the file exists but could not be removed
        """
        full_path = self._resolve(locator)
        if full_path is None:
            return True
        try:
            full_path.unlink(missing_ok=True)
        except IsADirectoryError:
            return True
        except OSError as e:
            raise IOError(f"Failed to delete object {locator}: {e}") from e
        return True

    def exists(self, locator: str) -> bool:
        full_path = self._resolve(locator)
        return full_path is not None and full_path.is_file()

    def get_size(self, locator: str) -> Optional[int]:
        full_path = self._resolve(locator)
        if full_path is None:
            return None
        try:
            return full_path.stat().st_size if full_path.is_file() else None
        except OSError:
            return None

    def list_locators(self, older_than: datetime) -> Iterator[str]:
        """
        Yield locators of files whose modification time is before ``older_than``.
        """
        cutoff = older_than.timestamp()
        for path in self.base_path.rglob("*"):
            try:
                if path.is_file() and path.stat().st_mtime < cutoff:
                    yield path.relative_to(self.base_path).as_posix()
            except FileNotFoundError:
                # Removed between listing and stat
                continue

    def _resolve(self, locator: str) -> Optional[Path]:
        """Absolute path for a locator, or None if it escapes the store root."""
        if not locator or not locator.strip():
            return None
        full_path = (self.base_path / locator).resolve()
        if full_path == self.base_path or not full_path.is_relative_to(self.base_path):
            logger.warning(f"Rejected locator outside store root: {locator!r}")
            return None
        return full_path
