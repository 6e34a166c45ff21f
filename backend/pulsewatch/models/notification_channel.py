"""NotificationChannel model and monitor subscriptions."""
from sqlalchemy import Boolean, Column, Integer, String, Text, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.clock import utcnow


# Junction table: which channels are notified for which monitors
subscriptions = Table(
    "subscriptions",
    Base.metadata,
    Column("monitor_id", Integer, ForeignKey("monitors.id", ondelete="CASCADE"), primary_key=True),
    Column("channel_id", Integer, ForeignKey("notification_channels.id", ondelete="CASCADE"), primary_key=True),
)


class NotificationChannel(Base):
    """A configured destination for outage notifications."""

    __tablename__ = "notification_channels"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False)  # webhook, email, discord, telegram
    config = Column(Text, nullable=False)  # JSON document, always parseable
    enabled = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    monitors = relationship("Monitor", secondary=subscriptions)
