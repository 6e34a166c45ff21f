"""Incident API endpoints. Incidents cannot be deleted."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.incident import IncidentCreate, IncidentResponse
from ..services.incident_service import incident_service

router = APIRouter(prefix="/api/incidents", tags=["incidents"])


@router.get("", response_model=List[IncidentResponse])
async def list_incidents(
    status: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List incidents, newest first, optionally filtered by status."""
    return await incident_service.list(db, status=status)


@router.post("", response_model=IncidentResponse, status_code=201)
async def create_incident(incident: IncidentCreate, db: AsyncSession = Depends(get_db)):
    """Open a new incident."""
    return await incident_service.create(db, incident.title, incident.impact, incident.monitor_id)


@router.get("/{incident_id}", response_model=IncidentResponse)
async def get_incident(incident_id: int, db: AsyncSession = Depends(get_db)):
    return await incident_service.get(db, incident_id)


@router.post("/{incident_id}/resolve", response_model=IncidentResponse)
async def resolve_incident(incident_id: int, db: AsyncSession = Depends(get_db)):
    """Resolve an ongoing incident. Resolving twice returns 409."""
    return await incident_service.resolve(db, incident_id)
