"""Monitor group API endpoints."""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.group import GroupCreate, GroupUpdate, GroupResponse, GroupWithMonitorCount
from ..services.group_service import group_service

router = APIRouter(prefix="/api/groups", tags=["groups"])


@router.get("", response_model=List[GroupWithMonitorCount])
async def list_groups(db: AsyncSession = Depends(get_db)):
    """List all groups with monitor counts, in display order."""
    return [
        GroupWithMonitorCount(
            id=group.id,
            name=group.name,
            order=group.order,
            created_at=group.created_at,
            monitor_count=count,
        )
        for group, count in await group_service.list_with_counts(db)
    ]


@router.post("", response_model=GroupResponse, status_code=201)
async def create_group(group: GroupCreate, db: AsyncSession = Depends(get_db)):
    """Create a new group."""
    return await group_service.create(db, group.name, group.order)


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(group_id: int, db: AsyncSession = Depends(get_db)):
    """Get a single group."""
    return await group_service.get(db, group_id)


@router.put("/{group_id}", response_model=GroupResponse)
async def update_group(group_id: int, update: GroupUpdate, db: AsyncSession = Depends(get_db)):
    """Rename or reorder a group."""
    return await group_service.update(db, group_id, update.model_dump(exclude_unset=True))


@router.delete("/{group_id}")
async def delete_group(group_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a group. Its monitors are kept and become ungrouped."""
    ungrouped = await group_service.delete(db, group_id)
    return {"message": "Group deleted", "ungrouped_monitors": ungrouped}
