from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from linkpage_app.database.connection import Base


class Page(Base):
    """
    A user's link page.

    The page exclusively owns its blocks: deleting a page deletes them.
    Analytics events only reference the page by id and are left in place.
    """
    __tablename__ = "pages"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    owner_id = Column(String(64), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    # unique=True creates the index used by the public /p/{slug} lookup
    slug = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    meta_title = Column(String(200), nullable=True)
    meta_description = Column(Text, nullable=True)
    is_published = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    blocks = relationship(
        "Block",
        back_populates="page",
        cascade="all, delete-orphan",
    )


class Block(Base):
    """A positioned, typed unit of content on a page."""
    __tablename__ = "blocks"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    page_id = Column(
        Integer,
        ForeignKey("pages.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type = Column(String(50), nullable=False)
    position = Column(Integer, nullable=False)
    config = Column(JSON, nullable=False, default=dict)
    is_visible = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    page = relationship("Page", back_populates="blocks")
