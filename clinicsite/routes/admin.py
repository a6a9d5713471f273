"""
Admin routes: login, dashboard, content, section images, gallery and blog.

Everything except login/logout sits on `router`, whose require_admin
dependency redirects anonymous requests to the login page before the
handler runs. Failed writes redirect back with an `error` query flag that
the admin layout renders as a banner.
"""
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession
from cloudinary.exceptions import Error as CloudinaryError
from typing import Optional
import logging

from clinicsite.database import get_db
from clinicsite.exceptions import NotFoundError, SlugConflictError, StorageFault, ValidationError
from clinicsite.schemas import BlogPostForm
from clinicsite.services.analytics_service import get_dashboard_stats
from clinicsite.services.catalog_service import (
    create_blog_post,
    create_gallery_image,
    create_section_image,
    delete_blog_post,
    delete_gallery_image,
    get_blog_post,
    get_section_images,
    list_blog_posts,
    list_gallery_images,
    update_blog_post,
)
from clinicsite.services.content_service import get_all_content, save_content
from clinicsite.services.image_storage import discard_image, save_upload
from clinicsite.templating import ADMIN_LAYOUT, BARE_LAYOUT, render, redirect_to
from clinicsite.utils.auth import verify_admin_password
from clinicsite.utils.rate_limit import limiter, RATE_LIMITS
from clinicsite.utils.session import (
    clear_session_cookie,
    is_authenticated,
    require_admin,
    set_session_cookie,
)

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/admin")
router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])

# Sections offered in the upload form; sections already in use are added to these
DEFAULT_SECTIONS = ("hero", "about", "why", "blog", "contact")


def _admin_page(request: Request, view: str, title: str, active: str, **data):
    data.update(title=title, active=active)
    return render(request, view, data, layout=ADMIN_LAYOUT)


# ==================== AUTH ====================

@auth_router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request):
    if is_authenticated(request):
        return redirect_to("/admin/dashboard")
    return render(request, "admin/login", {"error": None}, layout=BARE_LAYOUT)


@auth_router.post("/login", response_class=HTMLResponse)
@limiter.limit(RATE_LIMITS["login"])
async def login(request: Request, password: str = Form("")):
    """Check the shared password and start an admin session."""
    try:
        valid = verify_admin_password(password)
    except ValueError as e:
        logger.error(f"Login error: {str(e)}")
        return render(request, "admin/login", {"error": "Server error"}, layout=BARE_LAYOUT, status_code=500)

    if not valid:
        logger.warning("Failed admin login attempt")
        return render(request, "admin/login", {"error": "Invalid password"}, layout=BARE_LAYOUT, status_code=401)

    logger.info("Admin logged in")
    response = redirect_to("/admin/dashboard")
    set_session_cookie(response)
    return response


@auth_router.post("/logout")
async def logout():
    response = redirect_to("/admin/login")
    clear_session_cookie(response)
    return response


# ==================== DASHBOARD & CONTENT ====================

@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(request: Request, db: AsyncSession = Depends(get_db)):
    return _admin_page(
        request, "admin/dashboard", "Dashboard", "dashboard",
        counts=await get_dashboard_stats(db),
    )


@router.get("/content", response_class=HTMLResponse)
async def content_page(request: Request, db: AsyncSession = Depends(get_db)):
    return _admin_page(
        request, "admin/content", "Edit Content", "content",
        content=await get_all_content(db),
    )


@router.post("/content")
async def save_content_form(request: Request, db: AsyncSession = Depends(get_db)):
    """Every posted field is a content key; its value replaces the stored copy."""
    form = await request.form()
    entries = {key: value for key, value in form.items() if isinstance(value, str)}
    try:
        await save_content(db, entries)
    except StorageFault:
        return redirect_to("/admin/content", error=1)
    return redirect_to("/admin/content", success=1)


# ==================== SECTION IMAGES ====================

@router.get("/section-images", response_class=HTMLResponse)
async def section_images_page(request: Request, db: AsyncSession = Depends(get_db)):
    images_by_section = await get_section_images(db)
    sections = list(DEFAULT_SECTIONS) + sorted(s for s in images_by_section if s not in DEFAULT_SECTIONS)
    return _admin_page(
        request, "admin/section_images", "Section Images Management", "section-images",
        images_by_section=images_by_section,
        sections=sections,
    )


@router.post("/section-images/upload")
async def upload_section_image(
    section: str = Form(""),
    caption: str = Form(""),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
):
    reference = None
    try:
        if not section.strip():
            raise ValidationError("Section is required")
        reference = await save_upload(image)
        await create_section_image(db, section, reference, caption.strip())
    except ValidationError as e:
        return redirect_to("/admin/section-images", error=e.message)
    except StorageFault:
        if reference:
            await discard_image(reference)
        return redirect_to("/admin/section-images", error=1)
    except (OSError, CloudinaryError) as e:
        logger.error(f"Upload section image error: {str(e)}", exc_info=True)
        return redirect_to("/admin/section-images", error="Upload failed")

    return redirect_to("/admin/section-images", success=1)


# ==================== GALLERY ====================

@router.get("/gallery", response_class=HTMLResponse)
async def gallery_page(request: Request, db: AsyncSession = Depends(get_db)):
    return _admin_page(
        request, "admin/gallery", "Gallery Management", "gallery",
        images=await list_gallery_images(db),
    )


@router.post("/gallery/upload")
async def upload_gallery_image(
    caption: str = Form(""),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
):
    reference = None
    try:
        reference = await save_upload(image)
        await create_gallery_image(db, reference, caption.strip() or None)
    except ValidationError as e:
        return redirect_to("/admin/gallery", error=e.message)
    except StorageFault:
        if reference:
            await discard_image(reference)
        return redirect_to("/admin/gallery", error="Upload failed")
    except (OSError, CloudinaryError) as e:
        logger.error(f"Upload error: {str(e)}", exc_info=True)
        return redirect_to("/admin/gallery", error="Upload failed")

    return redirect_to("/admin/gallery", success=1)


@router.post("/gallery/delete/{image_id}")
async def delete_gallery_image_form(image_id: int, db: AsyncSession = Depends(get_db)):
    try:
        await delete_gallery_image(db, image_id)
    except StorageFault:
        return redirect_to("/admin/gallery", error="Delete failed")
    return redirect_to("/admin/gallery", success=1)


# ==================== BLOG ====================

def _blog_form(
    title: str = Form(""),
    slug: str = Form(""),
    author: str = Form(""),
    excerpt: str = Form(""),
    content: str = Form(""),
    featured_image: str = Form(""),
    status: str = Form(""),
) -> BlogPostForm:
    return BlogPostForm(
        title=title,
        slug=slug,
        author=author,
        excerpt=excerpt,
        content=content,
        featured_image=featured_image,
        status=status,
    )


@router.get("/blog", response_class=HTMLResponse)
async def blog_page(request: Request, db: AsyncSession = Depends(get_db)):
    return _admin_page(
        request, "admin/blog", "Blog Management", "blog",
        posts=await list_blog_posts(db),
    )


@router.get("/blog/new", response_class=HTMLResponse)
async def new_blog_post_page(request: Request):
    return _admin_page(
        request, "admin/blog_form", "New Blog Post", "blog",
        post=None,
        action="/admin/blog/create",
    )


@router.post("/blog/create")
async def create_blog_post_form(
    form: BlogPostForm = Depends(_blog_form),
    db: AsyncSession = Depends(get_db),
):
    try:
        await create_blog_post(db, form)
    except (ValidationError, SlugConflictError) as e:
        return redirect_to("/admin/blog/new", error=e.message)
    except StorageFault:
        return redirect_to("/admin/blog/new", error="Error creating post")

    return redirect_to("/admin/blog", success="Post created successfully!")


@router.get("/blog/edit/{post_id}", response_class=HTMLResponse)
async def edit_blog_post_page(post_id: int, request: Request, db: AsyncSession = Depends(get_db)):
    post = await get_blog_post(db, post_id)
    if post is None:
        return redirect_to("/admin/blog", error="Post not found")

    return _admin_page(
        request, "admin/blog_form", "Edit Blog Post", "blog",
        post=post,
        action=f"/admin/blog/update/{post.id}",
    )


@router.post("/blog/update/{post_id}")
async def update_blog_post_form(
    post_id: int,
    form: BlogPostForm = Depends(_blog_form),
    db: AsyncSession = Depends(get_db),
):
    try:
        await update_blog_post(db, post_id, form)
    except NotFoundError as e:
        return redirect_to("/admin/blog", error=e.message)
    except (ValidationError, SlugConflictError) as e:
        return redirect_to(f"/admin/blog/edit/{post_id}", error=e.message)
    except StorageFault:
        return redirect_to(f"/admin/blog/edit/{post_id}", error="Error updating post")

    return redirect_to("/admin/blog", success="Post updated successfully!")


@router.post("/blog/delete/{post_id}")
async def delete_blog_post_form(post_id: int, db: AsyncSession = Depends(get_db)):
    try:
        await delete_blog_post(db, post_id)
    except StorageFault:
        return redirect_to("/admin/blog", error="Error deleting post")
    return redirect_to("/admin/blog", success="Post deleted successfully!")
