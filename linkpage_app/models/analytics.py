from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String, Text
from sqlalchemy.sql import func

from linkpage_app.database.connection import Base


class AnalyticsEvent(Base):
    """
    Append-only tracking event.

    page_id / block_id / shortlink_id are weak references (no foreign keys):
    events outlive the page, block or shortlink they were recorded against.
    """
    __tablename__ = "analytics_events"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    page_id = Column(Integer, nullable=True, index=True)
    block_id = Column(Integer, nullable=True)
    shortlink_id = Column(Integer, nullable=True)
    event_type = Column(String(20), nullable=False, index=True)
    user_agent = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)
    referrer = Column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    event_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)


class Shortlink(Base):
    __tablename__ = "shortlinks"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    owner_id = Column(String(64), nullable=False, index=True)
    # Nullable=True allows two-step creation: first get ID, then generate code
    code = Column(String(20), unique=True, nullable=True, index=True)
    target_url = Column(Text, nullable=False)
    page_id = Column(Integer, nullable=True, index=True)
    block_id = Column(Integer, nullable=True)
    clicks = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
