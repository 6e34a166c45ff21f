"""Notification channel model - validation, CRUD and monitor subscriptions.

This is the one place a channel's ``config`` is checked before it is stored:
it must parse as a JSON object. Which keys a given channel type needs is the
delivery side's business (see ``REQUIRED_CONFIG_KEYS`` and services.notifier),
so a syntactically valid config with missing keys is still accepted here.
"""
import json
import logging
from typing import List

from sqlalchemy import select, delete, insert
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFoundError, ValidationError
from ..models import Monitor, NotificationChannel, subscriptions
from ..utils.db_utils import retry_on_lock
from ..utils.locks import entity_locks

logger = logging.getLogger(__name__)

CHANNEL_TYPES = ("webhook", "email", "discord", "telegram")

# Keys each delivery backend reads from the config document
REQUIRED_CONFIG_KEYS = {
    "webhook": ("url",),
    "email": ("to",),
    "discord": ("webhook_url",),
    "telegram": ("bot_token", "chat_id"),
}

EDITABLE_FIELDS = ("name", "type", "config", "enabled")


def parse_config(config) -> dict:
    """Parse a channel config string into a dict, or raise ValidationError."""
    if not isinstance(config, str) or not config.strip():
        raise ValidationError("config is required")
    try:
        parsed = json.loads(config)
    except ValueError as e:
        raise ValidationError(f"config is not valid JSON: {e}")
    if not isinstance(parsed, dict):
        raise ValidationError("config must be a JSON object")
    return parsed


def missing_config_keys(channel_type: str, config: dict) -> List[str]:
    """Conventional keys of ``channel_type`` absent (or empty) in ``config``."""
    return [key for key in REQUIRED_CONFIG_KEYS.get(channel_type, ()) if not config.get(key)]


def validate_channel(draft: dict) -> dict:
    """Validate a complete channel draft and return its normalized form.

    Raises:
        ValidationError: empty name, unknown type, or unparsable config
    """
    channel = dict(draft)

    name = channel.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name must not be empty")
    channel["name"] = name.strip()

    if channel.get("type") not in CHANNEL_TYPES:
        raise ValidationError(f"type must be one of {', '.join(CHANNEL_TYPES)}")

    parse_config(channel.get("config"))

    if channel.get("enabled") is None:
        channel["enabled"] = True
    return channel


class ChannelService:
    """Service for notification channels and subscriptions."""

    async def get(self, db: AsyncSession, channel_id: int) -> NotificationChannel:
        result = await db.execute(select(NotificationChannel).where(NotificationChannel.id == channel_id))
        channel = result.scalar_one_or_none()
        if not channel:
            raise NotFoundError(f"Channel {channel_id} not found")
        return channel

    async def list(self, db: AsyncSession) -> List[NotificationChannel]:
        result = await db.execute(select(NotificationChannel).order_by(NotificationChannel.name))
        return list(result.scalars().all())

    async def create(self, db: AsyncSession, data: dict) -> NotificationChannel:
        validated = validate_channel({k: v for k, v in data.items() if k in EDITABLE_FIELDS})
        channel = NotificationChannel(**validated)
        db.add(channel)
        await retry_on_lock(db.commit)
        await db.refresh(channel)
        logger.info(f"Created {channel.type} channel {channel.id} ({channel.name})")
        return channel

    async def update(self, db: AsyncSession, channel_id: int, changes: dict) -> NotificationChannel:
        async with entity_locks.hold("channel", channel_id):
            channel = await self.get(db, channel_id)
            current = {name: getattr(channel, name) for name in EDITABLE_FIELDS}
            provided = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
            validated = validate_channel({**current, **provided})
            for name, value in validated.items():
                setattr(channel, name, value)
            await retry_on_lock(db.commit)
            await db.refresh(channel)
            return channel

    async def delete(self, db: AsyncSession, channel_id: int):
        async with entity_locks.hold("channel", channel_id):
            await self.get(db, channel_id)
            await db.execute(delete(subscriptions).where(subscriptions.c.channel_id == channel_id))
            await db.execute(delete(NotificationChannel).where(NotificationChannel.id == channel_id))
            await retry_on_lock(db.commit)
            logger.info(f"Deleted channel {channel_id}")

    async def _require_monitor(self, db: AsyncSession, monitor_id: int):
        result = await db.execute(select(Monitor.id).where(Monitor.id == monitor_id))
        if result.scalar_one_or_none() is None:
            raise NotFoundError(f"Monitor {monitor_id} not found")

    async def _is_subscribed(self, db: AsyncSession, monitor_id: int, channel_id: int) -> bool:
        result = await db.execute(
            select(subscriptions.c.monitor_id).where(
                subscriptions.c.monitor_id == monitor_id,
                subscriptions.c.channel_id == channel_id,
            )
        )
        return result.first() is not None

    async def subscribe(self, db: AsyncSession, monitor_id: int, channel_id: int):
        """Link a channel to a monitor. Linking twice is a no-op."""
        await self._require_monitor(db, monitor_id)
        await self.get(db, channel_id)
        if await self._is_subscribed(db, monitor_id, channel_id):
            return
        await db.execute(insert(subscriptions).values(monitor_id=monitor_id, channel_id=channel_id))
        await retry_on_lock(db.commit)
        logger.info(f"Subscribed channel {channel_id} to monitor {monitor_id}")

    async def unsubscribe(self, db: AsyncSession, monitor_id: int, channel_id: int):
        if not await self._is_subscribed(db, monitor_id, channel_id):
            raise NotFoundError(f"Channel {channel_id} is not subscribed to monitor {monitor_id}")
        await db.execute(
            delete(subscriptions).where(
                subscriptions.c.monitor_id == monitor_id,
                subscriptions.c.channel_id == channel_id,
            )
        )
        await retry_on_lock(db.commit)

    async def channels_for_monitor(self, db: AsyncSession, monitor_id: int) -> List[NotificationChannel]:
        await self._require_monitor(db, monitor_id)
        result = await db.execute(
            select(NotificationChannel)
            .join(subscriptions, subscriptions.c.channel_id == NotificationChannel.id)
            .where(subscriptions.c.monitor_id == monitor_id)
            .order_by(NotificationChannel.name)
        )
        return list(result.scalars().all())


# Global instance
channel_service = ChannelService()
