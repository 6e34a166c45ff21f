"""Notification dispatch - fans status transitions out to subscribed channels.

Actual delivery lives outside this service. Delivery backends register an
async sender per channel type; a channel whose type has no sender is skipped.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ValidationError
from ..models import Monitor, NotificationChannel, subscriptions
from ..utils.clock import utcnow
from .channel_service import CHANNEL_TYPES, missing_config_keys, parse_config

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    """A status transition as seen by a delivery backend."""
    monitor_id: int
    monitor_name: str
    monitor_type: str
    target: Optional[str]
    status: str
    previous_status: Optional[str]
    message: Optional[str]
    timestamp: datetime

    def to_payload(self) -> dict:
        return {
            "monitor_id": self.monitor_id,
            "monitor": self.monitor_name,
            "type": self.monitor_type,
            "target": self.target,
            "event": self.status,
            "previous": self.previous_status,
            "message": self.message,
            "timestamp": self.timestamp.isoformat() + "Z",
        }


Sender = Callable[[Notification, dict], Awaitable[None]]


class NotificationDispatcher:
    """Registry of per-type senders and the fan-out over subscriptions."""

    def __init__(self):
        self._senders: Dict[str, Sender] = {}

    def register(self, channel_type: str, sender: Sender):
        if channel_type not in CHANNEL_TYPES:
            raise ValidationError(f"Unknown channel type: {channel_type}")
        self._senders[channel_type] = sender
        logger.info(f"Registered {channel_type} sender")

    def unregister(self, channel_type: str):
        self._senders.pop(channel_type, None)

    async def _subscribed_channels(self, db: AsyncSession, monitor_id: int) -> List[NotificationChannel]:
        result = await db.execute(
            select(NotificationChannel)
            .join(subscriptions, subscriptions.c.channel_id == NotificationChannel.id)
            .where(
                subscriptions.c.monitor_id == monitor_id,
                NotificationChannel.enabled == True,  # noqa: E712
            )
        )
        return list(result.scalars().all())

    async def dispatch(
        self,
        db: AsyncSession,
        monitor: Monitor,
        status: str,
        previous_status: Optional[str] = None,
        message: Optional[str] = None,
    ) -> int:
        """Send a transition to every enabled channel subscribed to ``monitor``.

        Returns the number of channels that accepted the notification. A
        failing channel never stops the others.
        """
        channels = await self._subscribed_channels(db, monitor.id)
        if not channels:
            return 0

        notification = Notification(
            monitor_id=monitor.id,
            monitor_name=monitor.name,
            monitor_type=monitor.type,
            target=monitor.target,
            status=status,
            previous_status=previous_status,
            message=message,
            timestamp=utcnow(),
        )

        delivered = 0
        for channel in channels:
            sender = self._senders.get(channel.type)
            if sender is None:
                logger.debug(f"No sender registered for {channel.type}, skipping channel {channel.id}")
                continue
            try:
                config = parse_config(channel.config)
            except ValidationError as e:
                logger.warning(f"Channel {channel.id} has unusable config: {e.message}")
                continue
            missing = missing_config_keys(channel.type, config)
            if missing:
                logger.warning(f"Channel {channel.id} ({channel.type}) is missing {', '.join(missing)}")
                continue
            try:
                await sender(notification, config)
                delivered += 1
            except Exception as e:
                logger.error(f"Failed to notify channel {channel.id} ({channel.type}): {e}")

        logger.info(f"Notified {delivered}/{len(channels)} channels: {monitor.name} is {status}")
        return delivered


# Global instance
notifier = NotificationDispatcher()
