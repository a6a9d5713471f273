"""
SQLAlchemy models for the clinic site.
All database models inherit from Base (declarative base).
"""
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from clinicsite.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentEntry(Base):
    """
    Editable page copy.
    One row per key; writes replace the stored value.
    """
    __tablename__ = "content"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=True)


class GalleryImage(Base):
    """
    Gallery image model.
    `filename` holds the reference returned by image storage (local path or CDN URL).
    """
    __tablename__ = "gallery_images"

    id = Column(Integer, primary_key=True, index=True)
    filename = Column(String, nullable=False)
    caption = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)


class SectionImage(Base):
    """Image attached to a named page section (hero, about, ...)."""
    __tablename__ = "section_images"

    id = Column(Integer, primary_key=True, index=True)
    section = Column(String, nullable=False, index=True)
    filename = Column(String, nullable=False)
    caption = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)


class BlogPost(Base):
    """
    Blog post model.
    Only posts with status "published" are visible on the public site.
    """
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    content = Column(Text, nullable=False)
    excerpt = Column(Text, nullable=True)
    author = Column(String, nullable=False, default="Admin", server_default="Admin")
    status = Column(String, nullable=False, default="published", server_default="published")
    featured_image = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)


class SiteVisit(Base):
    __tablename__ = "site_visits"

    id = Column(Integer, primary_key=True, index=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    page_visited = Column(String, nullable=True)
    referrer = Column(String, nullable=True)
    visit_date = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True)


class ContactSubmission(Base):
    __tablename__ = "contact_submissions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    message = Column(Text, nullable=True)
    submission_date = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
