"""Status page admin API endpoints."""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.status_page import StatusPageCreate, StatusPageUpdate, StatusPageResponse
from ..services.status_page_service import status_page_service

router = APIRouter(prefix="/api/status-pages", tags=["status-pages"])


@router.get("", response_model=List[StatusPageResponse])
async def list_status_pages(db: AsyncSession = Depends(get_db)):
    """List all status pages, public or not."""
    return [await status_page_service.serialize(db, page) for page in await status_page_service.list(db)]


@router.post("", response_model=StatusPageResponse, status_code=201)
async def create_status_page(page: StatusPageCreate, db: AsyncSession = Depends(get_db)):
    """Create a status page exposing the given monitors."""
    created = await status_page_service.create(db, page.model_dump())
    return await status_page_service.serialize(db, created)


@router.get("/{page_id}", response_model=StatusPageResponse)
async def get_status_page(page_id: int, db: AsyncSession = Depends(get_db)):
    page = await status_page_service.get(db, page_id)
    return await status_page_service.serialize(db, page)


@router.put("/{page_id}", response_model=StatusPageResponse)
async def update_status_page(page_id: int, update: StatusPageUpdate, db: AsyncSession = Depends(get_db)):
    """Update a status page.

    ``monitor_ids`` replaces the page's selection as a whole. Concurrent
    editors are not merged: the last save wins.
    """
    page = await status_page_service.update(db, page_id, update.model_dump(exclude_unset=True))
    return await status_page_service.serialize(db, page)


@router.delete("/{page_id}", status_code=204)
async def delete_status_page(page_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a status page. Its monitors are untouched."""
    await status_page_service.delete(db, page_id)
