"""
Analytics recorder: site visits, contact submissions and dashboard counts.
Both tables are append-only; the application never updates or deletes rows.
"""
from datetime import datetime, timezone
from typing import Optional
import logging

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinicsite.exceptions import StorageFault
from clinicsite.models import BlogPost, ContactSubmission, GalleryImage, SiteVisit
from clinicsite.schemas import (
    ContactForm,
    ContactSubmissionResponse,
    DashboardStats,
    GalleryImageResponse,
)

logger = logging.getLogger(__name__)

RECENT_ITEMS = 5


async def record_visit(
    db: AsyncSession,
    ip_address: Optional[str],
    user_agent: Optional[str],
    page_visited: str,
    referrer: Optional[str],
) -> None:
    """
    Append a site visit. Best effort: failures are logged and never raised,
    so visit logging cannot break page delivery.
    """
    try:
        db.add(SiteVisit(
            ip_address=ip_address,
            user_agent=user_agent or "",
            page_visited=page_visited,
            referrer=referrer or "",
        ))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.warning(f"Failed to record visit to {page_visited}: {str(e)}")


async def record_contact_submission(db: AsyncSession, form: ContactForm) -> ContactSubmission:
    """
    Append a contact form submission.

    Raises:
        StorageFault: if the insert fails
    """
    submission = ContactSubmission(
        name=form.name,
        email=form.email,
        phone=form.phone,
        message=form.message,
    )
    db.add(submission)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Contact form error: {str(e)}", exc_info=True)
        raise StorageFault("Failed to record contact submission") from e

    logger.info(f"Recorded contact submission: ID {submission.id}")
    return submission


async def get_dashboard_stats(db: AsyncSession) -> DashboardStats:
    """
    Collect dashboard counts and recent activity.
    Returns zeroed stats if the database cannot be read.
    """
    start_of_day = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)

    async def count(column, *criteria) -> int:
        query = select(func.count(column))
        if criteria:
            query = query.where(*criteria)
        return (await db.execute(query)).scalar() or 0

    try:
        recent_images = await db.execute(
            select(GalleryImage)
            .order_by(GalleryImage.created_at.desc(), GalleryImage.id.desc())
            .limit(RECENT_ITEMS)
        )
        recent_contacts = await db.execute(
            select(ContactSubmission)
            .order_by(ContactSubmission.submission_date.desc(), ContactSubmission.id.desc())
            .limit(RECENT_ITEMS)
        )
        return DashboardStats(
            posts=await count(BlogPost.id),
            images=await count(GalleryImage.id),
            visits=await count(SiteVisit.id),
            today_visits=await count(SiteVisit.id, SiteVisit.visit_date >= start_of_day),
            contacts=await count(ContactSubmission.id),
            recent_images=[GalleryImageResponse.model_validate(img) for img in recent_images.scalars()],
            recent_contacts=[ContactSubmissionResponse.model_validate(c) for c in recent_contacts.scalars()],
        )
    except SQLAlchemyError as e:
        logger.error(f"Dashboard error: {str(e)}", exc_info=True)
        return DashboardStats()
