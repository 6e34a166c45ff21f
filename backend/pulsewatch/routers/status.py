"""Status overview API for dashboard."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.status import StatusOverview
from ..services.status_service import status_service

router = APIRouter(prefix="/api/status", tags=["status"])


@router.get("/overview", response_model=StatusOverview)
async def get_status_overview(db: AsyncSession = Depends(get_db)):
    """Get dashboard overview data.

    Covers every monitor, disabled ones included, and lists empty groups so
    the dashboard can show them.
    """
    return await status_service.overview(db)
