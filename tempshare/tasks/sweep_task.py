"""
Sweep Task

Celery beat task that reclaims expired shared objects.
"""

import logging

from celery.exceptions import SoftTimeLimitExceeded

from tempshare.celery_app import celery_app, flask_app
from tempshare.config.celery_config import SWEEP_TASK_NAME, CeleryConfig
from tempshare.domain.sharing import ReclamationSweeper, SweepReport, utcnow
from tempshare.infrastructure.redis_repository import RedisRepository

logger = logging.getLogger(__name__)

SWEEP_LOCK_NAME = "sweeper"


@celery_app.task(bind=True, name=SWEEP_TASK_NAME)
def sweep_expired_objects(self):
    """
    Periodic task that removes expired objects and orphaned bytes.

    Only one sweep runs at a time across all workers: a tick that cannot
    take the Redis lock returns a skipped report without touching storage.
    The lock lives as long as the hard time limit, so it cannot lapse while
    a sweep is still running. Hitting the soft time limit stops the sweep and
    releases the lock; the next tick picks up the remaining objects.

    Returns:
        dict: SweepReport fields (removed, failed, orphans_removed, ...)
    """
    try:
        container = flask_app.container
        sweeper = container.resolve(ReclamationSweeper)
        redis_repo = container.resolve(RedisRepository)

        with redis_repo.distributed_lock(
            SWEEP_LOCK_NAME, timeout=CeleryConfig.task_time_limit
        ) as acquired:
            if not acquired:
                logger.info("Another worker holds the sweep lock, skipping tick")
                return SweepReport(started_at=utcnow(), skipped=True).to_dict()

            report = sweeper.run(abort_on=(SoftTimeLimitExceeded,))

        if report.errors:
            logger.warning(f"Sweep errors: {report.errors}")

        return report.to_dict()

    except SoftTimeLimitExceeded:
        error_msg = "Sweep stopped at the soft time limit"
        logger.warning(error_msg)
        report = SweepReport(started_at=utcnow())
        report.errors.append(error_msg)
        return report.to_dict()

    except Exception as e:
        error_msg = f"Sweep task failed: {e}"
        logger.error(error_msg, exc_info=True)
        report = SweepReport(started_at=utcnow())
        report.errors.append(error_msg)
        return report.to_dict()
