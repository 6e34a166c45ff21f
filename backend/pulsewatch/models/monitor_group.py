"""MonitorGroup model - display grouping for monitors."""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.clock import utcnow


class MonitorGroup(Base):
    """A named group of monitors. Groups never own their monitors."""

    __tablename__ = "monitor_groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    order = Column(Integer, default=0, nullable=False)  # Display sort key
    created_at = Column(DateTime, default=utcnow)

    monitors = relationship("Monitor", back_populates="group")
