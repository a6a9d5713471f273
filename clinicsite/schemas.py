"""
Pydantic schemas for form input and dashboard data.
Form schemas accept whatever the browser posts; required-field checks live in
the services so that failures become redirects instead of 422 responses.
"""
from pydantic import BaseModel, ConfigDict, field_validator
from datetime import datetime
from typing import Optional, List


class BlogPostForm(BaseModel):
    """
    Fields posted by the admin blog editor.
    Used by POST /admin/blog/create and POST /admin/blog/update/{id}.
    """
    title: str = ""
    slug: str = ""
    author: str = ""
    excerpt: str = ""
    content: str = ""
    featured_image: str = ""
    status: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def strip_value(cls, v):
        if v is None:
            return ""
        return str(v).strip()


class ContactForm(BaseModel):
    """Fields posted by the public contact form."""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class GalleryImageResponse(BaseModel):
    id: int
    filename: str
    caption: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ContactSubmissionResponse(BaseModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    submission_date: datetime

    model_config = ConfigDict(from_attributes=True)


class DashboardStats(BaseModel):
    """
    Counts and recent activity shown on the admin dashboard.
    Every field has an empty default so a storage fault degrades to zeros.
    """
    posts: int = 0
    images: int = 0
    visits: int = 0
    today_visits: int = 0
    contacts: int = 0
    recent_images: List[GalleryImageResponse] = []
    recent_contacts: List[ContactSubmissionResponse] = []
