"""Notification channel and subscription API endpoints."""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.channel import ChannelCreate, ChannelUpdate, ChannelResponse, SubscriptionRequest
from ..services.channel_service import channel_service

router = APIRouter(prefix="/api/channels", tags=["channels"])
subscriptions_router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])


@router.get("", response_model=List[ChannelResponse])
async def list_channels(db: AsyncSession = Depends(get_db)):
    """List all notification channels."""
    return await channel_service.list(db)


@router.post("", response_model=ChannelResponse, status_code=201)
async def create_channel(channel: ChannelCreate, db: AsyncSession = Depends(get_db)):
    """Create a channel. ``config`` must be a JSON object."""
    return await channel_service.create(db, channel.model_dump())


@router.get("/{channel_id}", response_model=ChannelResponse)
async def get_channel(channel_id: int, db: AsyncSession = Depends(get_db)):
    return await channel_service.get(db, channel_id)


@router.put("/{channel_id}", response_model=ChannelResponse)
async def update_channel(channel_id: int, update: ChannelUpdate, db: AsyncSession = Depends(get_db)):
    return await channel_service.update(db, channel_id, update.model_dump(exclude_unset=True))


@router.delete("/{channel_id}", status_code=204)
async def delete_channel(channel_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a channel along with its subscriptions."""
    await channel_service.delete(db, channel_id)


@subscriptions_router.post("", status_code=201)
async def subscribe(request: SubscriptionRequest, db: AsyncSession = Depends(get_db)):
    """Subscribe a channel to a monitor's status changes."""
    await channel_service.subscribe(db, request.monitor_id, request.channel_id)
    return {"monitor_id": request.monitor_id, "channel_id": request.channel_id}


@subscriptions_router.delete("", status_code=204)
async def unsubscribe(request: SubscriptionRequest, db: AsyncSession = Depends(get_db)):
    await channel_service.unsubscribe(db, request.monitor_id, request.channel_id)


@subscriptions_router.get("/monitor/{monitor_id}", response_model=List[ChannelResponse])
async def list_monitor_channels(monitor_id: int, db: AsyncSession = Depends(get_db)):
    """Channels subscribed to a monitor."""
    return await channel_service.channels_for_monitor(db, monitor_id)
