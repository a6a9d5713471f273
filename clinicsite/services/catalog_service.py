"""
Catalog access: gallery images, section images and blog posts.

Reads never raise on storage errors; they log and return an empty result.
Writes roll back and raise StorageFault so the admin routes can redirect
with an error flag.
"""
from collections import OrderedDict
from typing import Dict, List, Optional
import logging

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinicsite.exceptions import NotFoundError, SlugConflictError, StorageFault, ValidationError
from clinicsite.models import BlogPost, GalleryImage, SectionImage, utcnow
from clinicsite.schemas import BlogPostForm
from clinicsite.utils.slug import slugify

logger = logging.getLogger(__name__)

PUBLISHED = "published"


async def _commit(db: AsyncSession, action: str) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error {action}: {str(e)}", exc_info=True)
        raise StorageFault(f"Error {action}") from e


# ==================== GALLERY ====================

async def list_gallery_images(db: AsyncSession, limit: Optional[int] = None) -> List[GalleryImage]:
    """Gallery images, newest first. `limit` bounds the result (home page preview)."""
    query = select(GalleryImage).order_by(GalleryImage.created_at.desc(), GalleryImage.id.desc())
    if limit is not None:
        query = query.limit(limit)
    try:
        result = await db.execute(query)
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Error listing gallery images: {str(e)}", exc_info=True)
        return []


async def create_gallery_image(db: AsyncSession, filename: str, caption: Optional[str] = None) -> GalleryImage:
    image = GalleryImage(filename=filename, caption=caption or None)
    db.add(image)
    await _commit(db, "creating gallery image")
    await db.refresh(image)
    logger.info(f"Created gallery image: ID {image.id}")
    return image


async def delete_gallery_image(db: AsyncSession, image_id: int) -> bool:
    """
    Delete a gallery image by id. Deleting an id that does not exist is not
    an error.

    Returns:
        bool: whether a row was removed
    """
    try:
        result = await db.execute(delete(GalleryImage).where(GalleryImage.id == image_id))
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error deleting gallery image {image_id}: {str(e)}", exc_info=True)
        raise StorageFault("Error deleting gallery image") from e
    await _commit(db, "deleting gallery image")
    logger.info(f"Deleted gallery image: ID {image_id} (rows affected: {result.rowcount})")
    return result.rowcount > 0


# ==================== SECTION IMAGES ====================

async def get_section_images(db: AsyncSession) -> Dict[str, List[SectionImage]]:
    """
    Section images grouped by section name.

    Rows are read ordered by section then newest first, so each list is
    already newest first and sections appear in alphabetical order.
    """
    query = select(SectionImage).order_by(
        SectionImage.section.asc(),
        SectionImage.created_at.desc(),
        SectionImage.id.desc(),
    )
    try:
        result = await db.execute(query)
        rows = result.scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"Error getting section images: {str(e)}", exc_info=True)
        return {}

    images_by_section: Dict[str, List[SectionImage]] = OrderedDict()
    for image in rows:
        images_by_section.setdefault(image.section, []).append(image)
    return images_by_section


async def create_section_image(
    db: AsyncSession,
    section: str,
    filename: str,
    caption: Optional[str] = None,
) -> SectionImage:
    if not section or not section.strip():
        raise ValidationError("Section is required")

    image = SectionImage(section=section.strip(), filename=filename, caption=caption or "")
    db.add(image)
    await _commit(db, "creating section image")
    await db.refresh(image)
    logger.info(f"Created section image: ID {image.id} in section '{image.section}'")
    return image


# ==================== BLOG ====================

async def list_published_blog_posts(db: AsyncSession, limit: Optional[int] = None) -> List[BlogPost]:
    """
    Published posts, newest first. Posts created in the same instant keep
    their insertion order (id ascending).
    """
    query = (
        select(BlogPost)
        .where(BlogPost.status == PUBLISHED)
        .order_by(BlogPost.created_at.desc(), BlogPost.id.asc())
    )
    if limit is not None:
        query = query.limit(limit)
    try:
        result = await db.execute(query)
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Error listing published blog posts: {str(e)}", exc_info=True)
        return []


async def list_blog_posts(db: AsyncSession) -> List[BlogPost]:
    """All posts regardless of status, for the admin listing."""
    try:
        result = await db.execute(
            select(BlogPost).order_by(BlogPost.created_at.desc(), BlogPost.id.asc())
        )
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Error listing blog posts: {str(e)}", exc_info=True)
        return []


async def get_published_blog_post(db: AsyncSession, slug: str) -> Optional[BlogPost]:
    """Public lookup: matches the slug AND requires status "published"."""
    try:
        result = await db.execute(
            select(BlogPost).where(BlogPost.slug == slug, BlogPost.status == PUBLISHED)
        )
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Error getting blog post '{slug}': {str(e)}", exc_info=True)
        return None


async def get_blog_post(db: AsyncSession, post_id: int) -> Optional[BlogPost]:
    """Admin lookup by id, any status."""
    try:
        return await db.get(BlogPost, post_id)
    except SQLAlchemyError as e:
        logger.error(f"Error getting blog post {post_id}: {str(e)}", exc_info=True)
        return None


def _validated_slug(form: BlogPostForm) -> str:
    """Check required fields and return the explicit or derived slug."""
    missing = [name for name in ("title", "content") if not getattr(form, name)]
    if missing:
        raise ValidationError("Title and Content are required")

    slug = form.slug or slugify(form.title)
    if not slug:
        raise ValidationError("Could not derive a slug from the title. Please enter one.")
    return slug


async def _ensure_slug_available(db: AsyncSession, slug: str, exclude_id: Optional[int] = None) -> None:
    query = select(BlogPost.id).where(BlogPost.slug == slug)
    if exclude_id is not None:
        query = query.where(BlogPost.id != exclude_id)
    try:
        existing = (await db.execute(query)).first()
    except SQLAlchemyError as e:
        logger.error(f"Error checking slug '{slug}': {str(e)}", exc_info=True)
        raise StorageFault("Error checking slug") from e
    if existing is not None:
        raise SlugConflictError(slug)


def _apply_form(post: BlogPost, form: BlogPostForm, slug: str) -> None:
    post.title = form.title
    post.slug = slug
    post.excerpt = form.excerpt or None
    post.content = form.content
    post.author = form.author or "Admin"
    post.status = form.status or PUBLISHED
    post.featured_image = form.featured_image or None


async def create_blog_post(db: AsyncSession, form: BlogPostForm) -> BlogPost:
    """
    Create a blog post.

    The check-then-insert on the slug is not atomic: two concurrent creates
    with the same slug can both pass the check, and the UNIQUE constraint
    then rejects the second one as a StorageFault.

    Raises:
        ValidationError: title or content missing, or no usable slug
        SlugConflictError: another post already uses the slug
        StorageFault: the insert failed
    """
    slug = _validated_slug(form)
    await _ensure_slug_available(db, slug)

    post = BlogPost()
    _apply_form(post, form, slug)
    db.add(post)
    await _commit(db, "creating blog post")
    await db.refresh(post)

    logger.info(f"Created blog post: ID {post.id}, slug '{post.slug}'")
    return post


async def update_blog_post(db: AsyncSession, post_id: int, form: BlogPostForm) -> BlogPost:
    """
    Update a blog post and refresh its updated_at timestamp.

    Raises:
        NotFoundError: no post with this id
        ValidationError, SlugConflictError, StorageFault: as for create
    """
    post = await get_blog_post(db, post_id)
    if post is None:
        raise NotFoundError("Post not found")

    slug = _validated_slug(form)
    await _ensure_slug_available(db, slug, exclude_id=post_id)

    _apply_form(post, form, slug)
    post.updated_at = utcnow()
    await _commit(db, "updating blog post")
    await db.refresh(post)

    logger.info(f"Updated blog post: ID {post.id}, slug '{post.slug}'")
    return post


async def delete_blog_post(db: AsyncSession, post_id: int) -> bool:
    """Delete a blog post by id; idempotent."""
    try:
        result = await db.execute(delete(BlogPost).where(BlogPost.id == post_id))
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error deleting blog post {post_id}: {str(e)}", exc_info=True)
        raise StorageFault("Error deleting blog post") from e
    await _commit(db, "deleting blog post")
    logger.info(f"Deleted blog post: ID {post_id} (rows affected: {result.rowcount})")
    return result.rowcount > 0
