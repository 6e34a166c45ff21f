"""Incident model - outage and maintenance records."""
from sqlalchemy import Column, Integer, String, DateTime

from ..database import Base
from ..utils.clock import utcnow


class Incident(Base):
    """An outage or maintenance window.

    ``monitor_id`` is a weak reference: no foreign key, so the audit trail
    survives deletion of the monitor it was raised against.
    """

    __tablename__ = "incidents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, default="ongoing", index=True)  # ongoing, resolved
    impact = Column(String(20), nullable=False)  # critical, major, minor, maintenance
    monitor_id = Column(Integer, nullable=True, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
