"""Push heartbeat endpoint for externally reporting services."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..services.ingest import heartbeat

router = APIRouter(prefix="/api/push", tags=["push"])


@router.api_route("/{token}", methods=["GET", "POST"])
async def push_heartbeat(
    token: str,
    status: Optional[str] = Query(None, pattern="^(up|down)$"),
    msg: Optional[str] = Query(None),
    ping: Optional[int] = Query(None, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Record a heartbeat. ``status`` defaults to up, ``ping`` is in ms.

    Unknown tokens, and tokens of monitors that are no longer push monitors,
    get a 404.
    """
    result = await heartbeat(db, token, status, msg, ping)
    return {"ok": True, "status": result.status}
