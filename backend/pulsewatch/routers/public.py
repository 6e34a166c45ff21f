"""Public status API - read-only, no credentials.

Only public pages resolve here. A private page answers 404 exactly like a
missing one.
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..errors import NotFoundError
from ..schemas.incident import PublicIncident
from ..schemas.monitor import HistoryPoint
from ..schemas.status import PublicStatusResponse
from ..services.incident_service import incident_service
from ..services.monitor_service import monitor_service
from ..services.status_page_service import status_page_service
from ..services.status_service import status_service

router = APIRouter(prefix="/api/public", tags=["public"])


@router.get("/status", response_model=PublicStatusResponse)
async def get_default_status(db: AsyncSession = Depends(get_db)):
    """Default page: every enabled monitor, no branding."""
    return await status_page_service.render(db)


@router.get("/status/{slug}", response_model=PublicStatusResponse)
async def get_page_status(slug: str, db: AsyncSession = Depends(get_db)):
    return await status_page_service.render(db, slug)


@router.get("/monitors/{monitor_id}/history", response_model=List[HistoryPoint])
async def get_public_history(monitor_id: int, db: AsyncSession = Depends(get_db)):
    """Last checks of an enabled monitor, newest first."""
    monitor = await monitor_service.get(db, monitor_id)
    if not monitor.enabled:
        raise NotFoundError(f"Monitor {monitor_id} not found")
    return list(await status_service.history(db, monitor_id, settings.history_default_limit))


@router.get("/incidents", response_model=List[PublicIncident])
async def get_public_incidents(db: AsyncSession = Depends(get_db)):
    """Every ongoing incident, however old."""
    return await incident_service.list_active(db)
