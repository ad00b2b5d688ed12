"""
Reclamation Sweeper

Periodically removes expired objects from both the object store and the
metadata registry, and reclaims bytes no record references.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Tuple, Type

from tempshare.domain.errors import ObjectNotFoundError

from .entities import utcnow
from .repositories import ObjectRegistry
from .storage_repository import IObjectStore

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    """Outcome of one sweep tick."""
    started_at: datetime
    removed: int = 0
    failed: int = 0
    orphans_removed: int = 0
    duration_seconds: float = 0.0
    skipped: bool = False
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "removed": self.removed,
            "failed": self.failed,
            "orphans_removed": self.orphans_removed,
            "duration_seconds": round(self.duration_seconds, 3),
            "skipped": self.skipped,
            "errors": list(self.errors),
        }


class ReclamationSweeper:
    """
    Domain service for expired object reclamation.

    Each expired object is removed independently: bytes first, then the
    record. If the bytes cannot be removed the record is still deleted; a
    dangling blob is picked up later by the orphan scan, while a record
    pointing at deleted bytes would surface as a conflict to live requests.

    A sweep never overlaps with itself within a process: a tick that finds
    the previous sweep still running is skipped.
    """

    def __init__(self, registry: ObjectRegistry, store: IObjectStore,
                 clock: Callable[[], datetime] = utcnow,
                 orphan_grace: timedelta = timedelta(hours=1)):
        """
        Args:
            registry: Metadata registry
            store: Object store
            clock: Source of the current time
            orphan_grace: Minimum age before unreferenced bytes are reclaimed
        """
        self.registry = registry
        self.store = store
        self.clock = clock
        self.orphan_grace = orphan_grace
        self._running = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._running.locked()

    def run(self, abort_on: Tuple[Type[BaseException], ...] = ()) -> SweepReport:
        """
        Execute one sweep tick.

        Args:
            abort_on: Exception types that stop the whole sweep instead of
                being recorded as a single failed object (e.g. a task time limit)

        Returns:
            SweepReport with counts; ``skipped`` is True if a sweep was
            already in progress

        Raises:
            Any ``abort_on`` exception, after logging progress so far
        """
        if not self._running.acquire(blocking=False):
            logger.info("Sweep already in progress, skipping tick")
            return SweepReport(started_at=self.clock(), skipped=True)

        try:
            return self._sweep(abort_on)
        finally:
            self._running.release()

    def reclaim(self, object_id: str,
                abort_on: Tuple[Type[BaseException], ...] = ()) -> bool:
        """
        Remove one object from the store and the registry.

        Returns:
            True if this call removed the record, False if it was already gone

        Raises:
            Exception: If the registry delete fails
        """
        try:
            record = self.registry.get(object_id)
        except ObjectNotFoundError:
            # Already removed (owner delete or a concurrent sweep); drop any
            # index leftovers
            self.registry.delete(object_id)
            return False

        try:
            self.store.delete(record.storage_locator)
        except abort_on:
            raise
        except Exception as e:
            logger.warning(
                f"Failed to delete bytes for {object_id[:8]} at "
                f"{record.storage_locator}: {e}. Leaving them to the orphan scan.",
                exc_info=True,
            )

        return self.registry.delete(object_id)

    def reclaim_orphans(self, now: datetime,
                        abort_on: Tuple[Type[BaseException], ...] = ()) -> int:
        """
        Delete stored bytes older than the grace period that no record references.

        Returns:
            Number of locators removed
        """
        cutoff = now - self.orphan_grace
        count = 0

        for locator in self.store.list_locators(older_than=cutoff):
            if self.registry.locator_exists(locator):
                continue
            try:
                self.store.delete(locator)
                count += 1
                logger.info(f"Removed orphaned bytes: {locator}")
            except abort_on:
                raise
            except Exception as e:
                logger.warning(f"Failed to remove orphaned bytes {locator}: {e}")

        return count

    def _sweep(self, abort_on: Tuple[Type[BaseException], ...]) -> SweepReport:
        now = self.clock()
        started = time.monotonic()
        report = SweepReport(started_at=now)

        logger.info("Starting sweep of expired objects")

        for object_id in self.registry.list_expired(now):
            try:
                if self.reclaim(object_id, abort_on):
                    report.removed += 1
            except abort_on:
                logger.warning(
                    f"Sweep interrupted after {report.removed} removals "
                    f"({report.failed} failed); the next tick resumes"
                )
                raise
            except Exception as e:
                report.failed += 1
                report.errors.append(f"{object_id[:8]}: {e}")
                logger.warning(
                    f"Failed to reclaim expired object {object_id[:8]}: {e}",
                    exc_info=True,
                )

        try:
            report.orphans_removed = self.reclaim_orphans(now, abort_on)
        except abort_on:
            logger.warning("Sweep interrupted during the orphan scan")
            raise
        except Exception as e:
            report.errors.append(f"orphan scan: {e}")
            logger.error(f"Orphan scan failed: {e}", exc_info=True)

        report.duration_seconds = time.monotonic() - started

        logger.info(
            f"Sweep completed - Removed: {report.removed}, "
            f"Failed: {report.failed}, "
            f"Orphans: {report.orphans_removed}, "
            f"Duration: {report.duration_seconds:.3f}s"
        )

        return report
