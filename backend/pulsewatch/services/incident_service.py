"""Incident lifecycle service.

ongoing -> resolved, one way. Resolution is the only mutation an incident
ever sees and there is no delete: incidents are an audit trail.
"""
import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import InvalidStateError, NotFoundError, ValidationError
from ..models import Incident, Monitor
from ..utils.clock import utcnow
from ..utils.db_utils import retry_on_lock
from ..utils.locks import entity_locks
from .aggregation import active_incidents

logger = logging.getLogger(__name__)

ONGOING = "ongoing"
RESOLVED = "resolved"

INCIDENT_STATUSES = (ONGOING, RESOLVED)
IMPACTS = ("critical", "major", "minor", "maintenance")


class IncidentService:
    """Service for opening and resolving incidents."""

    async def get(self, db: AsyncSession, incident_id: int) -> Incident:
        result = await db.execute(select(Incident).where(Incident.id == incident_id))
        incident = result.scalar_one_or_none()
        if not incident:
            raise NotFoundError(f"Incident {incident_id} not found")
        return incident

    async def list(self, db: AsyncSession, status: Optional[str] = None) -> List[Incident]:
        query = select(Incident).order_by(Incident.start_time.desc(), Incident.id.desc())
        if status is not None:
            if status not in INCIDENT_STATUSES:
                raise ValidationError(f"status must be one of {', '.join(INCIDENT_STATUSES)}")
            query = query.where(Incident.status == status)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def list_active(self, db: AsyncSession) -> List[Incident]:
        return active_incidents(await self.list(db, status=ONGOING))

    async def create(
        self,
        db: AsyncSession,
        title: str,
        impact: str,
        monitor_id: Optional[int] = None,
    ) -> Incident:
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("title must not be empty")
        if impact not in IMPACTS:
            raise ValidationError(f"impact must be one of {', '.join(IMPACTS)}")
        if monitor_id is not None:
            result = await db.execute(select(Monitor.id).where(Monitor.id == monitor_id))
            if result.scalar_one_or_none() is None:
                raise NotFoundError(f"Monitor {monitor_id} not found")

        incident = Incident(
            title=title.strip(),
            impact=impact,
            monitor_id=monitor_id,
            status=ONGOING,
            start_time=utcnow(),
            end_time=None,
        )
        db.add(incident)
        await retry_on_lock(db.commit)
        await db.refresh(incident)
        logger.info(f"Opened {impact} incident {incident.id}: {incident.title}")
        return incident

    async def resolve(self, db: AsyncSession, incident_id: int) -> Incident:
        """Resolve an ongoing incident.

        Resolving twice is an error, not a no-op. The conditional update lets
        the database refuse a second resolution even across processes; the
        per-incident lock serializes callers within this one.

        Raises:
            NotFoundError: no such incident
            InvalidStateError: already resolved (end_time is left untouched)
        """
        async with entity_locks.hold("incident", incident_id):
            result = await db.execute(
                update(Incident)
                .where(Incident.id == incident_id, Incident.status == ONGOING)
                .values(status=RESOLVED, end_time=utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                await db.rollback()
                incident = await self.get(db, incident_id)
                raise InvalidStateError(f"Incident {incident_id} is already {incident.status}")

            await retry_on_lock(db.commit)
            incident = await self.get(db, incident_id)
            await db.refresh(incident)
            logger.info(f"Resolved incident {incident_id}")
            return incident


# Global instance
incident_service = IncidentService()
