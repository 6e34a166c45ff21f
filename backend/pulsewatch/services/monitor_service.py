"""Monitor service - create, merge-update and delete monitors."""
import logging
import secrets
from typing import List, Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import CheckResult, Monitor, MonitorGroup, status_page_monitors, subscriptions
from ..utils.db_utils import retry_on_lock
from ..utils.locks import entity_locks
from .monitor_config import EDITABLE_FIELDS, validate_monitor

logger = logging.getLogger(__name__)

# Attempts at drawing a token that is not already taken
PUSH_TOKEN_ATTEMPTS = 5

CREATE_DEFAULTS = {
    "interval": 60,
    "timeout": 10,
    "max_retries": 0,
    "enabled": True,
}


class MonitorService:
    """Service for authoring monitors."""

    async def get(self, db: AsyncSession, monitor_id: int) -> Monitor:
        result = await db.execute(select(Monitor).where(Monitor.id == monitor_id))
        monitor = result.scalar_one_or_none()
        if not monitor:
            raise NotFoundError(f"Monitor {monitor_id} not found")
        return monitor

    async def list(self, db: AsyncSession) -> List[Monitor]:
        result = await db.execute(select(Monitor).order_by(Monitor.name, Monitor.id))
        return list(result.scalars().all())

    async def get_by_push_token(self, db: AsyncSession, token: str) -> Optional[Monitor]:
        """Resolve a heartbeat token. Tokens of monitors that are no longer
        push monitors are inert and resolve to nothing."""
        result = await db.execute(
            select(Monitor).where(Monitor.push_token == token, Monitor.type == "push")
        )
        return result.scalar_one_or_none()

    async def _check_group(self, db: AsyncSession, group_id: Optional[int]):
        if group_id is None:
            return
        result = await db.execute(select(MonitorGroup.id).where(MonitorGroup.id == group_id))
        if result.scalar_one_or_none() is None:
            raise ValidationError(f"Group {group_id} does not exist")

    async def _issue_push_token(self, db: AsyncSession) -> str:
        """Draw a cryptographically random token unused by any monitor."""
        for _ in range(PUSH_TOKEN_ATTEMPTS):
            token = secrets.token_urlsafe(settings.push_token_bytes)
            result = await db.execute(select(Monitor.id).where(Monitor.push_token == token))
            if result.scalar_one_or_none() is None:
                return token
            logger.warning("Push token collision, drawing again")
        raise ConflictError("Could not issue a unique push token")

    async def _commit(self, db: AsyncSession, what: str):
        try:
            await retry_on_lock(db.commit)
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Rejected {what}: {e.orig}")
            raise ConflictError(f"Could not save {what}: uniqueness violated")

    async def create(self, db: AsyncSession, data: dict) -> Monitor:
        """Validate a draft and persist it. Push monitors get a fresh token."""
        draft = {**CREATE_DEFAULTS, **{k: v for k, v in data.items() if k in EDITABLE_FIELDS}}
        validated = validate_monitor(draft)
        await self._check_group(db, validated.get("group_id"))

        monitor = Monitor(**validated)
        if monitor.type == "push":
            monitor.push_token = await self._issue_push_token(db)

        db.add(monitor)
        await self._commit(db, "monitor")
        await db.refresh(monitor)
        logger.info(f"Created {monitor.type} monitor {monitor.id} ({monitor.name})")
        return monitor

    async def update(self, db: AsyncSession, monitor_id: int, changes: dict) -> Monitor:
        """Merge ``changes`` onto the stored monitor and validate the result.

        Only keys present in ``changes`` are touched. Switching type keeps the
        previous type's fields (they become inert). A push token, once issued,
        is never replaced; one is issued if the monitor becomes a push monitor
        without ever having had a token.
        """
        async with entity_locks.hold("monitor", monitor_id):
            monitor = await self.get(db, monitor_id)

            current = {name: getattr(monitor, name) for name in EDITABLE_FIELDS}
            provided = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
            # An explicit null leaves the flag as stored
            if provided.get("enabled", False) is None:
                del provided["enabled"]
            validated = validate_monitor({**current, **provided})

            if "group_id" in provided:
                await self._check_group(db, validated.get("group_id"))

            for name, value in validated.items():
                setattr(monitor, name, value)

            if monitor.type == "push" and not monitor.push_token:
                monitor.push_token = await self._issue_push_token(db)

            await self._commit(db, "monitor")
            await db.refresh(monitor)
            logger.info(f"Updated monitor {monitor.id} ({', '.join(sorted(provided)) or 'no changes'})")
            return monitor

    async def delete(self, db: AsyncSession, monitor_id: int):
        """Delete a monitor with its results, subscriptions and page
        selections. Pages and incidents referencing it survive."""
        async with entity_locks.hold("monitor", monitor_id):
            await self.get(db, monitor_id)

            await db.execute(delete(status_page_monitors).where(status_page_monitors.c.monitor_id == monitor_id))
            await db.execute(delete(subscriptions).where(subscriptions.c.monitor_id == monitor_id))
            await db.execute(delete(CheckResult).where(CheckResult.monitor_id == monitor_id))
            await db.execute(delete(Monitor).where(Monitor.id == monitor_id))

            await retry_on_lock(db.commit)
            logger.info(f"Deleted monitor {monitor_id}")


# Global instance
monitor_service = MonitorService()
