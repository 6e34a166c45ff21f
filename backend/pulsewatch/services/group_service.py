"""Monitor group service."""
import logging
from typing import List, Tuple

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFoundError, ValidationError
from ..models import Monitor, MonitorGroup
from ..utils.db_utils import retry_on_lock
from ..utils.locks import entity_locks

logger = logging.getLogger(__name__)


def _clean_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name must not be empty")
    return name.strip()


class GroupService:
    """Service for monitor groups. Groups reference monitors, never own them."""

    async def get(self, db: AsyncSession, group_id: int) -> MonitorGroup:
        result = await db.execute(select(MonitorGroup).where(MonitorGroup.id == group_id))
        group = result.scalar_one_or_none()
        if not group:
            raise NotFoundError(f"Group {group_id} not found")
        return group

    async def list(self, db: AsyncSession) -> List[MonitorGroup]:
        result = await db.execute(select(MonitorGroup).order_by(MonitorGroup.order, MonitorGroup.name))
        return list(result.scalars().all())

    async def list_with_counts(self, db: AsyncSession) -> List[Tuple[MonitorGroup, int]]:
        result = await db.execute(
            select(MonitorGroup, func.count(Monitor.id))
            .outerjoin(Monitor, Monitor.group_id == MonitorGroup.id)
            .group_by(MonitorGroup.id)
            .order_by(MonitorGroup.order, MonitorGroup.name)
        )
        return [(group, count) for group, count in result.all()]

    async def create(self, db: AsyncSession, name: str, order: int = 0) -> MonitorGroup:
        group = MonitorGroup(name=_clean_name(name), order=order or 0)
        db.add(group)
        await retry_on_lock(db.commit)
        await db.refresh(group)
        logger.info(f"Created group {group.id} ({group.name})")
        return group

    async def update(self, db: AsyncSession, group_id: int, changes: dict) -> MonitorGroup:
        async with entity_locks.hold("group", group_id):
            group = await self.get(db, group_id)
            if "name" in changes:
                group.name = _clean_name(changes["name"])
            if changes.get("order") is not None:
                group.order = changes["order"]
            await retry_on_lock(db.commit)
            await db.refresh(group)
            return group

    async def delete(self, db: AsyncSession, group_id: int) -> int:
        """Delete a group, ungrouping (never deleting) its monitors.

        Returns the number of monitors that were ungrouped.
        """
        async with entity_locks.hold("group", group_id):
            await self.get(db, group_id)
            result = await db.execute(
                update(Monitor).where(Monitor.group_id == group_id).values(group_id=None)
            )
            await db.execute(delete(MonitorGroup).where(MonitorGroup.id == group_id))
            await retry_on_lock(db.commit)
            logger.info(f"Deleted group {group_id}, ungrouped {result.rowcount} monitors")
            return result.rowcount


# Global instance
group_service = GroupService()
