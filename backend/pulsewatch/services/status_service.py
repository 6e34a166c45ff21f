"""Status read-models - bounded queries fed through the aggregation engine."""
import logging
from datetime import timedelta
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..errors import ValidationError
from ..models import CheckResult, Monitor, MonitorGroup
from ..utils.clock import utcnow
from .aggregation import (
    History,
    group_for_display,
    overall_status,
    uptime_percentage,
)
from .incident_service import incident_service
from .monitor_service import monitor_service

logger = logging.getLogger(__name__)


class StatusService:
    """Service assembling dashboard and public status data."""

    async def uptime(self, db: AsyncSession, monitor_id: int, hours: Optional[int] = None) -> Optional[float]:
        """Uptime percentage over the trailing ``hours`` (default 24), or None
        when there are no results in the window."""
        await monitor_service.get(db, monitor_id)
        return await self._uptime(db, monitor_id, hours)

    async def _uptime(self, db: AsyncSession, monitor_id: int, hours: Optional[int] = None) -> Optional[float]:
        hours = settings.uptime_window_hours if hours is None else hours
        if isinstance(hours, bool) or not isinstance(hours, int) or hours < 1:
            raise ValidationError("hours must be a positive integer")
        window = timedelta(hours=hours)
        now = utcnow()

        # The newest uptime_max_samples rows inside the window, never more
        result = await db.execute(
            select(CheckResult)
            .where(
                CheckResult.monitor_id == monitor_id,
                CheckResult.created_at >= now - window,
            )
            .order_by(CheckResult.created_at.desc())
            .limit(settings.uptime_max_samples)
        )
        return uptime_percentage(result.scalars().all(), window, now=now)

    async def history(self, db: AsyncSession, monitor_id: int, limit: Optional[int] = None) -> History:
        """The most recent ``limit`` results of a monitor, newest first.

        Limits above ``history_max_limit`` are clamped.
        """
        limit = settings.history_default_limit if limit is None else limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationError("limit must be a positive integer")
        limit = min(limit, settings.history_max_limit)

        await monitor_service.get(db, monitor_id)
        result = await db.execute(
            select(CheckResult)
            .where(CheckResult.monitor_id == monitor_id)
            .order_by(CheckResult.created_at.desc(), CheckResult.id.desc())
            .limit(limit)
        )
        return History(result.scalars().all(), limit)

    async def _groups(self, db: AsyncSession) -> List[MonitorGroup]:
        result = await db.execute(select(MonitorGroup))
        return list(result.scalars().all())

    async def summarize(
        self,
        db: AsyncSession,
        monitors: Sequence[Monitor],
        include_empty_groups: bool = False,
    ) -> dict:
        """Aggregate a monitor subset into status, entries and display groups.

        Groups are looked up at read time: a monitor whose group is gone is
        listed under "Other Services".
        """
        groups = await self._groups(db)
        names = {group.id: group.name for group in groups}

        entries = []
        for monitor in monitors:
            entries.append({
                "id": monitor.id,
                "name": monitor.name,
                "type": monitor.type,
                "last_status": monitor.last_status or "unknown",
                "last_checked_at": monitor.last_checked_at,
                "uptime_24h": await self._uptime(db, monitor.id),
                "certificate_expiry": monitor.certificate_expiry,
                "group_name": names.get(monitor.group_id),
            })

        sections = [
            {"name": section.name, "monitor_ids": [m.id for m in section.monitors]}
            for section in group_for_display(monitors, groups)
            if include_empty_groups or section.monitors
        ]

        return {
            "system_status": overall_status(monitors),
            "monitors": entries,
            "groups": sections,
        }

    async def overview(self, db: AsyncSession) -> dict:
        """Dashboard overview over every monitor, enabled or not."""
        monitors = await monitor_service.list(db)
        summary = await self.summarize(db, monitors, include_empty_groups=True)

        counts = {"up": 0, "down": 0, "unknown": 0}
        for entry in summary["monitors"]:
            counts[entry["last_status"] if entry["last_status"] in counts else "unknown"] += 1

        return {
            **summary,
            "total_monitors": len(monitors),
            "monitors_up": counts["up"],
            "monitors_down": counts["down"],
            "monitors_unknown": counts["unknown"],
            "active_incidents": await incident_service.list_active(db),
        }


# Global instance
status_service = StatusService()
