"""Scheduler service - background jobs that keep check data honest.

Two jobs run on the APScheduler event loop:
- the push watchdog, which records a down result for push monitors whose
  heartbeat is overdue (older than interval + timeout)
- the retention cleanup, which deletes old check results hourly

Active probing is not done here; an external probe engine reports through
the probe API.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import session_scope
from ..models import CheckResult, Monitor
from ..utils.clock import utcnow
from ..utils.db_utils import retry_on_lock
from .ingest import record_result

logger = logging.getLogger(__name__)

MISSED_HEARTBEAT_MESSAGE = "No heartbeat received"


def heartbeat_overdue(
    interval: int,
    timeout: int,
    last_seen: datetime,
    now: Optional[datetime] = None,
) -> bool:
    """Whether a push monitor last heard from at ``last_seen`` is past its grace."""
    grace = timedelta(seconds=(interval or 0) + (timeout or 0))
    return (now or utcnow()) - last_seen > grace


async def find_overdue_push_monitors(db: AsyncSession, now: Optional[datetime] = None) -> List[int]:
    """Ids of enabled push monitors without a result inside their grace window.

    A monitor that never reported is measured from its creation time.
    """
    now = now or utcnow()
    result = await db.execute(
        select(
            Monitor.id,
            Monitor.interval,
            Monitor.timeout,
            Monitor.created_at,
            func.max(CheckResult.created_at).label("last_result"),
        )
        .outerjoin(CheckResult, CheckResult.monitor_id == Monitor.id)
        .where(
            Monitor.type == "push",
            Monitor.enabled == True,  # noqa: E712
        )
        .group_by(Monitor.id, Monitor.interval, Monitor.timeout, Monitor.created_at)
    )

    overdue = []
    for monitor_id, interval, timeout, created_at, last_result in result.fetchall():
        last_seen = last_result or created_at
        if last_seen is not None and heartbeat_overdue(interval, timeout, last_seen, now):
            overdue.append(monitor_id)
    return overdue


async def purge_old_results(db: AsyncSession, retention_days: int, now: Optional[datetime] = None) -> int:
    """Delete check results older than ``retention_days``. Returns the count."""
    cutoff = (now or utcnow()) - timedelta(days=retention_days)
    result = await db.execute(delete(CheckResult).where(CheckResult.created_at < cutoff))
    await retry_on_lock(db.commit)
    return result.rowcount


class SchedulerService:
    """Service running the push watchdog and retention jobs."""

    def __init__(self):
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        """Start the scheduler."""
        if self._running:
            return

        self.scheduler = AsyncIOScheduler()

        self.scheduler.add_job(
            self._check_push_monitors,
            trigger=IntervalTrigger(seconds=settings.push_check_seconds),
            id="check_push_monitors",
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=settings.push_check_seconds,
        )

        self.scheduler.add_job(
            self._cleanup_old_records,
            trigger=IntervalTrigger(hours=1),
            id="cleanup_old_records",
            replace_existing=True,
            max_instances=1,
        )

        self.scheduler.start()
        self._running = True
        logger.info(
            f"Scheduler started (push_check={settings.push_check_seconds}s, "
            f"retention={settings.result_retention_days}d)"
        )

    def stop(self):
        """Stop the scheduler."""
        if self.scheduler and self._running:
            self.scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    async def _check_push_monitors(self):
        """Record a down result for every push monitor whose heartbeat is late."""
        try:
            async with session_scope() as session:
                overdue = await find_overdue_push_monitors(session)
                for monitor_id in overdue:
                    try:
                        await record_result(session, monitor_id, "down", message=MISSED_HEARTBEAT_MESSAGE)
                    except Exception as e:
                        await session.rollback()
                        logger.error(f"Error recording missed heartbeat for monitor {monitor_id}: {e}")
            if overdue:
                logger.info(f"Recorded missed heartbeats for {len(overdue)} push monitors")
        except Exception as e:
            logger.error(f"Error checking push monitors: {e}")

    async def _cleanup_old_records(self):
        """Delete check results past the retention period."""
        try:
            async with session_scope() as session:
                removed = await purge_old_results(session, settings.result_retention_days)
                logger.info(f"Cleaned up {removed} old check results")
        except Exception as e:
            logger.error(f"Error cleaning up records: {e}")


# Global instance
scheduler_service = SchedulerService()
