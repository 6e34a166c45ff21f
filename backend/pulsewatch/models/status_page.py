"""StatusPage model for public projections over a subset of monitors."""
from sqlalchemy import Boolean, Column, Integer, String, Text, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.clock import utcnow


# Junction table for the page's (non-owning) monitor selection
status_page_monitors = Table(
    "status_page_monitors",
    Base.metadata,
    Column("status_page_id", Integer, ForeignKey("status_pages.id", ondelete="CASCADE"), primary_key=True),
    Column("monitor_id", Integer, ForeignKey("monitors.id", ondelete="CASCADE"), primary_key=True),
)


class StatusPage(Base):
    """A named, sluggable public view."""

    __tablename__ = "status_pages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slug = Column(String(100), nullable=False, unique=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    theme = Column(String(10), default="light")  # light, dark
    custom_css = Column(Text, nullable=True)  # Trusted operator content, served verbatim
    public = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    monitors = relationship("Monitor", secondary=status_page_monitors, back_populates="status_pages")
