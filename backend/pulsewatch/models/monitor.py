"""Monitor model - configured targets whose health is checked."""
from sqlalchemy import Boolean, Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.clock import utcnow
from .status_page import status_page_monitors


class Monitor(Base):
    """A monitored target. One flat row per monitor; ``type`` decides which
    of the type-specific columns are live (see services.monitor_config)."""

    __tablename__ = "monitors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False)  # http, http_keyword, http_json, tcp, ws, steam, docker, ping, dns, push
    target = Column(String, nullable=True)  # NULL only for push monitors
    interval = Column(Integer, default=60)  # seconds
    timeout = Column(Integer, default=10)  # seconds
    max_retries = Column(Integer, default=0)
    enabled = Column(Boolean, default=True)

    # http-family
    expected_status = Column(String(100), nullable=True)  # "200", "2xx", "200,301"; empty = any 2xx
    method = Column(String(10), nullable=True)
    headers = Column(Text, nullable=True)  # JSON object string
    body = Column(Text, nullable=True)
    # http_keyword
    keyword = Column(String, nullable=True)
    # http_json
    json_path = Column(String, nullable=True)
    json_value = Column(String, nullable=True)
    # push
    push_token = Column(String(64), unique=True, nullable=True, index=True)

    group_id = Column(Integer, ForeignKey("monitor_groups.id", ondelete="SET NULL"), nullable=True, index=True)

    # Cached from the most recent check results
    last_status = Column(String(10), nullable=True)  # up, down; NULL = unknown
    last_checked_at = Column(DateTime, nullable=True)
    certificate_expiry = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    group = relationship("MonitorGroup", back_populates="monitors")
    results = relationship("CheckResult", back_populates="monitor", cascade="all, delete-orphan", passive_deletes=True)
    status_pages = relationship("StatusPage", secondary=status_page_monitors, back_populates="monitors")
