"""Probe engine API - work list out, check results in.

When ``probe_secret`` is configured every call must carry it in the
``X-Probe-Secret`` header.
"""
import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..errors import NotFoundError
from ..models import Monitor
from ..schemas.probe import ProbeReport
from ..services.ingest import record_result
from ..services.monitor_config import is_actively_probed, probe_config

logger = logging.getLogger(__name__)


async def verify_probe_secret(x_probe_secret: Optional[str] = Header(None)):
    """Reject callers without the shared secret, if one is configured."""
    if not settings.probe_secret:
        return
    if not x_probe_secret or not hmac.compare_digest(x_probe_secret, settings.probe_secret):
        logger.warning("Probe request rejected - invalid secret")
        raise HTTPException(status_code=403, detail="Invalid probe secret")


router = APIRouter(
    prefix="/api/probe",
    tags=["probe"],
    dependencies=[Depends(verify_probe_secret)],
)


@router.get("/monitors")
async def get_probe_monitors(db: AsyncSession = Depends(get_db)):
    """Enabled, actively probed monitors with only their active-type fields."""
    result = await db.execute(
        select(Monitor).where(Monitor.enabled == True).order_by(Monitor.id)  # noqa: E712
    )
    return [probe_config(monitor) for monitor in result.scalars().all() if is_actively_probed(monitor.type)]


@router.post("/results")
async def report_results(report: ProbeReport, db: AsyncSession = Depends(get_db)):
    """Ingest a batch of check results. Results for unknown monitors are
    skipped and counted, the rest are recorded in order."""
    accepted = 0
    rejected = []
    for item in report.results:
        try:
            await record_result(
                db,
                item.monitor_id,
                item.status,
                response_time=item.response_time,
                message=item.message,
                created_at=item.created_at,
                certificate_expiry=item.certificate_expiry,
            )
            accepted += 1
        except NotFoundError:
            rejected.append(item.monitor_id)

    if rejected:
        logger.warning(f"Probe report referenced unknown monitors: {rejected}")
    return {"accepted": accepted, "rejected": rejected}
