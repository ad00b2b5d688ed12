"""
Admin Report Service

Read-only reporting over the metadata registry for administrators.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List

from tempshare.domain.sharing import ObjectRegistry, utcnow

from .projections import FileSummary, UsageStats

logger = logging.getLogger(__name__)


class AdminReportService:
    """Aggregates usage figures from registry enumeration."""

    def __init__(self, registry: ObjectRegistry,
                 clock: Callable[[], datetime] = utcnow):
        self.registry = registry
        self.clock = clock

    def usage_stats(self) -> UsageStats:
        """
        Compute aggregate counts across every stored object.

        Expired objects that the sweeper has not reclaimed yet still count
        towards totals but not towards ``active_objects``. Today's downloads
        are counted from midnight UTC.
        """
        now = self.clock()
        day_start = now.astimezone(timezone.utc).replace(
            hour=0, minute=0, second=0, microsecond=0
        )
        total = active = events = today = size = 0

        for record in self.registry.iter_all():
            total += 1
            size += record.byte_size
            events += self.registry.count_access_events(record.object_id)
            today += self.registry.count_access_events_since(record.object_id, day_start)
            if not record.is_expired(now):
                active += 1

        return UsageStats(
            total_objects=total,
            active_objects=active,
            total_access_events=events,
            today_access_events=today,
            total_bytes_stored=size,
        )

    def list_all(self) -> List[FileSummary]:
        """Every object with its owner, newest first."""
        now = self.clock()
        return [
            FileSummary.from_record(record, now, include_owner=True)
            for record in self.registry.iter_all()
        ]
