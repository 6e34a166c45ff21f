"""CheckResult model - append-only probe outcomes per monitor."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.clock import utcnow


class CheckResult(Base):
    """One up/down outcome of probing a monitor (or a push heartbeat)."""

    __tablename__ = "check_results"
    __table_args__ = (
        Index("ix_check_results_monitor_created", "monitor_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    monitor_id = Column(Integer, ForeignKey("monitors.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(10), nullable=False)  # up, down
    response_time = Column(Integer, default=0)  # ms
    message = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    monitor = relationship("Monitor", back_populates="results")
