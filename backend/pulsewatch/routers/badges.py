"""Status badge endpoint (shields-style SVG)."""
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models import Monitor

router = APIRouter(prefix="/badge", tags=["badges"])

BADGE_COLORS = {
    "up": "#4c1",
    "down": "#e05d44",
    "unknown": "#9f9f9f",
}

# Rough glyph width at 11px Verdana
CHAR_WIDTH = 7
PADDING = 10

BADGE_TEMPLATE = """<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="20">
  <linearGradient id="b" x2="0" y2="100%">
    <stop offset="0" stop-color="#bbb" stop-opacity=".1"/>
    <stop offset="1" stop-opacity=".1"/>
  </linearGradient>
  <mask id="a">
    <rect width="{width}" height="20" rx="3" fill="#fff"/>
  </mask>
  <g mask="url(#a)">
    <path fill="#555" d="M0 0h{label_width}v20H0z"/>
    <path fill="{color}" d="M{label_width} 0h{status_width}v20H{label_width}z"/>
    <path fill="url(#b)" d="M0 0h{width}v20H0z"/>
  </g>
  <g fill="#fff" text-anchor="middle" font-family="DejaVu Sans,Verdana,Geneva,sans-serif" font-size="11">
    <text x="{label_x}" y="15" fill="#010101" fill-opacity=".3">{label}</text>
    <text x="{label_x}" y="14">{label}</text>
    <text x="{status_x}" y="15" fill="#010101" fill-opacity=".3">{status}</text>
    <text x="{status_x}" y="14">{status}</text>
  </g>
</svg>"""


def render_badge(status: str | None, label: str = "status") -> str:
    """Render a badge for a cached monitor status. Anything but up/down
    renders as a grey ``unknown``."""
    if status not in ("up", "down"):
        status = "unknown"
    label_width = len(label) * CHAR_WIDTH + PADDING
    status_width = len(status) * CHAR_WIDTH + PADDING
    return BADGE_TEMPLATE.format(
        width=label_width + status_width,
        label_width=label_width,
        status_width=status_width,
        label_x=label_width / 2,
        status_x=label_width + status_width / 2,
        color=BADGE_COLORS[status],
        label=label,
        status=status,
    )


@router.get("/{monitor_id}/status.svg")
async def get_status_badge(monitor_id: int, db: AsyncSession = Depends(get_db)):
    """Badge for a monitor's last status. Unknown and disabled monitors get
    the grey badge rather than a 404 so embedded images never break."""
    result = await db.execute(
        select(Monitor.last_status).where(Monitor.id == monitor_id, Monitor.enabled == True)  # noqa: E712
    )
    status = result.scalar_one_or_none()
    return Response(
        content=render_badge(status),
        media_type="image/svg+xml",
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
