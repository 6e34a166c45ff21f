"""Check result ingestion.

Everything that produces a CheckResult (the probe engine, push heartbeats,
the push watchdog) goes through ``record_result``. It appends the result,
refreshes the monitor's cached state and, when ``last_status`` flips, hands
the transition to the notifier.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFoundError, ValidationError
from ..models import CheckResult, Monitor
from ..utils.clock import to_naive_utc, utcnow
from ..utils.db_utils import retry_on_lock
from ..utils.locks import entity_locks
from .monitor_service import monitor_service
from .notifier import notifier

logger = logging.getLogger(__name__)

RESULT_STATUSES = ("up", "down")


async def _tolerated_failures_exhausted(db: AsyncSession, monitor: Monitor) -> bool:
    """True when the last ``max_retries + 1`` results are all down."""
    needed = (monitor.max_retries or 0) + 1
    if needed == 1:
        return True
    result = await db.execute(
        select(CheckResult.status)
        .where(CheckResult.monitor_id == monitor.id)
        .order_by(CheckResult.created_at.desc(), CheckResult.id.desc())
        .limit(needed)
    )
    statuses = list(result.scalars().all())
    return len(statuses) == needed and all(status == "down" for status in statuses)


async def record_result(
    db: AsyncSession,
    monitor_id: int,
    status: str,
    response_time: int = 0,
    message: Optional[str] = None,
    created_at: Optional[datetime] = None,
    certificate_expiry: Optional[datetime] = None,
) -> CheckResult:
    """Append a check result for ``monitor_id``.

    Only a result at least as new as ``last_checked_at`` moves the cached
    state. ``last_status`` then becomes ``up`` on any up result but only
    becomes ``down`` once ``max_retries`` failures have been tolerated, so a
    single blip on a monitor with retries does not read as an outage.

    Raises:
        NotFoundError: unknown monitor
        ValidationError: bad status or negative response time
    """
    if status not in RESULT_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(RESULT_STATUSES)}")
    if isinstance(response_time, bool) or not isinstance(response_time, int) or response_time < 0:
        raise ValidationError("response_time must be a non-negative integer")

    async with entity_locks.hold("monitor", monitor_id):
        monitor = await monitor_service.get(db, monitor_id)
        checked_at = to_naive_utc(created_at) if created_at else utcnow()

        check = CheckResult(
            monitor_id=monitor.id,
            status=status,
            response_time=response_time,
            message=message,
            created_at=checked_at,
        )
        db.add(check)
        await db.flush()

        previous = monitor.last_status
        # Backfilled results are stored but never rewind the cached state
        if monitor.last_checked_at is None or checked_at >= monitor.last_checked_at:
            if status == "up" or await _tolerated_failures_exhausted(db, monitor):
                monitor.last_status = status
            monitor.last_checked_at = checked_at
        if certificate_expiry is not None:
            monitor.certificate_expiry = to_naive_utc(certificate_expiry)

        await retry_on_lock(db.commit)
        await db.refresh(check)
        current = monitor.last_status

    if current != previous:
        logger.info(f"Monitor {monitor.name} changed {previous or 'unknown'} -> {current}")
        try:
            await notifier.dispatch(db, monitor, current, previous, message)
        except Exception as e:
            logger.error(f"Notification dispatch failed for monitor {monitor.id}: {e}")
    else:
        logger.debug(f"Monitor {monitor.name}: {status}")
    return check


async def heartbeat(
    db: AsyncSession,
    token: str,
    status: Optional[str] = None,
    msg: Optional[str] = None,
    ping: Optional[int] = None,
) -> CheckResult:
    """Record a push heartbeat. Status defaults to ``up``."""
    monitor = await monitor_service.get_by_push_token(db, token)
    if monitor is None:
        raise NotFoundError("Unknown push token")
    return await record_result(
        db,
        monitor.id,
        status or "up",
        response_time=ping or 0,
        message=msg,
    )
