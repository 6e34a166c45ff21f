"""Status pages - CRUD and the public projection.

A page holds a non-owning selection of monitor ids. Updating the selection
replaces the whole set: two editors saving concurrently do not merge, the
last save wins.
"""
import logging
import re
from typing import Iterable, List, Optional

from sqlalchemy import select, delete, insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Monitor, StatusPage, status_page_monitors
from ..utils.db_utils import retry_on_lock
from ..utils.locks import entity_locks
from .status_service import status_service

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
THEMES = ("light", "dark")
EDITABLE_FIELDS = ("title", "slug", "description", "theme", "custom_css", "public")

DEFAULT_PAGE_TITLE = "System Status"


def validate_page(draft: dict) -> dict:
    """Validate page attributes (not the monitor selection)."""
    page = dict(draft)

    title = page.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("title must not be empty")
    page["title"] = title.strip()

    slug = page.get("slug")
    if not isinstance(slug, str) or not SLUG_PATTERN.match(slug):
        raise ValidationError("slug must contain only lowercase letters, digits and dashes")

    if page.get("theme") is None:
        page["theme"] = "light"
    elif page["theme"] not in THEMES:
        raise ValidationError(f"theme must be one of {', '.join(THEMES)}")

    if page.get("public") is None:
        page["public"] = True
    return page


class StatusPageService:
    """Service for status pages."""

    async def get(self, db: AsyncSession, page_id: int) -> StatusPage:
        result = await db.execute(select(StatusPage).where(StatusPage.id == page_id))
        page = result.scalar_one_or_none()
        if not page:
            raise NotFoundError(f"Status page {page_id} not found")
        return page

    async def get_by_slug(self, db: AsyncSession, slug: str) -> Optional[StatusPage]:
        result = await db.execute(select(StatusPage).where(StatusPage.slug == slug))
        return result.scalar_one_or_none()

    async def list(self, db: AsyncSession) -> List[StatusPage]:
        result = await db.execute(select(StatusPage).order_by(StatusPage.title, StatusPage.id))
        return list(result.scalars().all())

    async def monitor_ids(self, db: AsyncSession, page_id: int) -> List[int]:
        result = await db.execute(
            select(status_page_monitors.c.monitor_id)
            .where(status_page_monitors.c.status_page_id == page_id)
            .order_by(status_page_monitors.c.monitor_id)
        )
        return list(result.scalars().all())

    async def serialize(self, db: AsyncSession, page: StatusPage) -> dict:
        return {
            "id": page.id,
            "title": page.title,
            "slug": page.slug,
            "description": page.description,
            "theme": page.theme,
            "custom_css": page.custom_css,
            "public": page.public,
            "monitor_ids": await self.monitor_ids(db, page.id),
            "created_at": page.created_at,
        }

    async def _check_monitor_ids(self, db: AsyncSession, monitor_ids: Iterable[int]) -> List[int]:
        wanted = sorted(set(monitor_ids))
        if not wanted:
            return []
        result = await db.execute(select(Monitor.id).where(Monitor.id.in_(wanted)))
        missing = set(wanted) - set(result.scalars().all())
        if missing:
            raise ValidationError(f"Unknown monitor ids: {', '.join(str(i) for i in sorted(missing))}")
        return wanted

    async def _check_slug_free(self, db: AsyncSession, slug: str, page_id: Optional[int] = None):
        existing = await self.get_by_slug(db, slug)
        if existing and existing.id != page_id:
            raise ConflictError(f"Slug '{slug}' is already in use")

    async def _replace_selection(self, db: AsyncSession, page_id: int, monitor_ids: List[int]):
        await db.execute(
            delete(status_page_monitors).where(status_page_monitors.c.status_page_id == page_id)
        )
        if monitor_ids:
            await db.execute(
                insert(status_page_monitors),
                [{"status_page_id": page_id, "monitor_id": monitor_id} for monitor_id in monitor_ids],
            )

    async def _save(self, db: AsyncSession, slug: str, commit: bool = True):
        """Flush (and commit) pending page writes. A unique-slug violation
        from another process surfaces as ConflictError."""
        try:
            await db.flush()
            if commit:
                await retry_on_lock(db.commit)
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Rejected status page '{slug}': {e.orig}")
            raise ConflictError(f"Slug '{slug}' is already in use")

    async def create(self, db: AsyncSession, data: dict) -> StatusPage:
        validated = validate_page({k: v for k, v in data.items() if k in EDITABLE_FIELDS})
        monitor_ids = await self._check_monitor_ids(db, data.get("monitor_ids") or [])

        async with entity_locks.hold("status_page_slug", validated["slug"]):
            await self._check_slug_free(db, validated["slug"])
            page = StatusPage(**validated)
            db.add(page)
            await self._save(db, validated["slug"], commit=False)
            await self._replace_selection(db, page.id, monitor_ids)
            await self._save(db, validated["slug"])
            await db.refresh(page)
        logger.info(f"Created status page '{page.slug}' with {len(monitor_ids)} monitors")
        return page

    async def update(self, db: AsyncSession, page_id: int, changes: dict) -> StatusPage:
        """Merge attribute changes; ``monitor_ids``, when given, replaces the
        selection wholesale."""
        async with entity_locks.hold("status_page", page_id):
            page = await self.get(db, page_id)
            current = {name: getattr(page, name) for name in EDITABLE_FIELDS}
            provided = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
            validated = validate_page({**current, **provided})

            monitor_ids = None
            if changes.get("monitor_ids") is not None:
                monitor_ids = await self._check_monitor_ids(db, changes["monitor_ids"])
            async with entity_locks.hold("status_page_slug", validated["slug"]):
                if validated["slug"] != page.slug:
                    await self._check_slug_free(db, validated["slug"], page_id)

                for name, value in validated.items():
                    setattr(page, name, value)
                if monitor_ids is not None:
                    await self._replace_selection(db, page_id, monitor_ids)

                await self._save(db, validated["slug"])
                await db.refresh(page)
            logger.info(f"Updated status page '{page.slug}'")
            return page

    async def delete(self, db: AsyncSession, page_id: int):
        async with entity_locks.hold("status_page", page_id):
            page = await self.get(db, page_id)
            slug = page.slug
            await db.execute(
                delete(status_page_monitors).where(status_page_monitors.c.status_page_id == page_id)
            )
            await db.execute(delete(StatusPage).where(StatusPage.id == page_id))
            await retry_on_lock(db.commit)
            logger.info(f"Deleted status page '{slug}'")

    async def _page_monitors(self, db: AsyncSession, page_id: int) -> List[Monitor]:
        result = await db.execute(
            select(Monitor)
            .join(status_page_monitors, status_page_monitors.c.monitor_id == Monitor.id)
            .where(
                status_page_monitors.c.status_page_id == page_id,
                Monitor.enabled == True,  # noqa: E712
            )
            .order_by(Monitor.name, Monitor.id)
        )
        return list(result.scalars().all())

    async def _enabled_monitors(self, db: AsyncSession) -> List[Monitor]:
        result = await db.execute(
            select(Monitor).where(Monitor.enabled == True).order_by(Monitor.name, Monitor.id)  # noqa: E712
        )
        return list(result.scalars().all())

    async def render(self, db: AsyncSession, slug: Optional[str] = None, public_only: bool = True) -> dict:
        """Project a status page.

        Without a slug this is the implicit default page: every enabled
        monitor, no branding, ``config`` null. A slug that is unknown, or
        names a non-public page while ``public_only`` is set, is a
        NotFoundError either way.
        """
        if slug is None:
            summary = await status_service.summarize(db, await self._enabled_monitors(db))
            return {
                "title": DEFAULT_PAGE_TITLE,
                "description": None,
                "theme": "light",
                "custom_css": None,
                **summary,
                "config": None,
            }

        page = await self.get_by_slug(db, slug)
        if page is None or (public_only and not page.public):
            raise NotFoundError(f"Status page '{slug}' not found")

        summary = await status_service.summarize(db, await self._page_monitors(db, page.id))
        return {
            "title": page.title,
            "description": page.description,
            "theme": page.theme,
            "custom_css": page.custom_css,
            **summary,
            "config": {
                "id": page.id,
                "title": page.title,
                "description": page.description,
                "theme": page.theme,
                "custom_css": page.custom_css,
                "slug": page.slug,
            },
        }


# Global instance
status_page_service = StatusPageService()
