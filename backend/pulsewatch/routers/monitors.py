"""Monitor CRUD API endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..schemas.monitor import (
    MonitorCreate,
    MonitorUpdate,
    MonitorResponse,
    HistoryPoint,
    UptimeResponse,
)
from ..services.monitor_service import monitor_service
from ..services.status_service import status_service

router = APIRouter(prefix="/api/monitors", tags=["monitors"])


@router.get("", response_model=List[MonitorResponse])
async def list_monitors(db: AsyncSession = Depends(get_db)):
    """List all monitors."""
    return await monitor_service.list(db)


@router.post("", response_model=MonitorResponse, status_code=201)
async def create_monitor(monitor: MonitorCreate, db: AsyncSession = Depends(get_db)):
    """Create a new monitor. Push monitors come back with their token."""
    return await monitor_service.create(db, monitor.model_dump())


@router.get("/{monitor_id}", response_model=MonitorResponse)
async def get_monitor(monitor_id: int, db: AsyncSession = Depends(get_db)):
    """Get a single monitor."""
    return await monitor_service.get(db, monitor_id)


@router.put("/{monitor_id}", response_model=MonitorResponse)
async def update_monitor(
    monitor_id: int,
    update: MonitorUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update a monitor. Fields absent from the body are left as they are."""
    return await monitor_service.update(db, monitor_id, update.model_dump(exclude_unset=True))


@router.delete("/{monitor_id}", status_code=204)
async def delete_monitor(monitor_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a monitor and its check history."""
    await monitor_service.delete(db, monitor_id)


@router.get("/{monitor_id}/history", response_model=List[HistoryPoint])
async def get_monitor_history(
    monitor_id: int,
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """Most recent check results, newest first."""
    return list(await status_service.history(db, monitor_id, limit))


@router.get("/{monitor_id}/uptime", response_model=UptimeResponse)
async def get_monitor_uptime(
    monitor_id: int,
    hours: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """Uptime percentage over a trailing window (null when there is no data)."""
    hours = hours or settings.uptime_window_hours
    uptime = await status_service.uptime(db, monitor_id, hours)
    return UptimeResponse(monitor_id=monitor_id, window_hours=hours, uptime=uptime)
