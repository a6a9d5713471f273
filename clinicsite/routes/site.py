"""
Public site routes: home, gallery, blog and the contact form.
Every page reads fresh content from the database; nothing is cached.
"""
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from clinicsite.database import get_db
from clinicsite.exceptions import NotFoundError, StorageFault
from clinicsite.schemas import ContactForm
from clinicsite.services.analytics_service import record_contact_submission
from clinicsite.services.catalog_service import (
    get_published_blog_post,
    get_section_images,
    list_gallery_images,
    list_published_blog_posts,
)
from clinicsite.services.content_service import get_all_content
from clinicsite.templating import render, redirect_to
from clinicsite.utils.rate_limit import limiter, RATE_LIMITS

logger = logging.getLogger(__name__)

router = APIRouter()

HOME_GALLERY_PREVIEW = 6
HOME_BLOG_PREVIEW = 3


@router.get("/", response_class=HTMLResponse)
async def home(request: Request, db: AsyncSession = Depends(get_db)):
    """Home page with gallery and blog previews."""
    return render(request, "index", {
        "content": await get_all_content(db),
        "gallery_images": await list_gallery_images(db, limit=HOME_GALLERY_PREVIEW),
        "blog_posts": await list_published_blog_posts(db, limit=HOME_BLOG_PREVIEW),
        "images_by_section": await get_section_images(db),
        "active": "home",
    })


@router.get("/gallery", response_class=HTMLResponse)
async def gallery(request: Request, db: AsyncSession = Depends(get_db)):
    return render(request, "gallery", {
        "content": await get_all_content(db),
        "images": await list_gallery_images(db),
        "active": "gallery",
    })


@router.get("/blog", response_class=HTMLResponse)
async def blog(request: Request, db: AsyncSession = Depends(get_db)):
    return render(request, "blog", {
        "content": await get_all_content(db),
        "posts": await list_published_blog_posts(db),
        "images_by_section": await get_section_images(db),
        "active": "blog",
    })


@router.get("/blog/{slug}", response_class=HTMLResponse)
async def blog_post(slug: str, request: Request, db: AsyncSession = Depends(get_db)):
    """
    Single published post.

    Raises:
        NotFoundError: no published post with this slug (rendered as the 404 page)
    """
    post = await get_published_blog_post(db, slug)
    if post is None:
        raise NotFoundError("Blog post not found")

    return render(request, "blog_post", {
        "content": await get_all_content(db),
        "post": post,
        "active": "blog",
    })


@router.post("/contact")
@limiter.limit(RATE_LIMITS["contact"])
async def submit_contact(
    request: Request,
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    message: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
):
    """Record a contact submission and send the visitor back to the contact section."""
    form = ContactForm(name=name, email=email, phone=phone, message=message)
    try:
        await record_contact_submission(db, form)
    except StorageFault:
        return redirect_to("/", fragment="contact", error=1)

    return redirect_to("/", fragment="contact", success=1)
