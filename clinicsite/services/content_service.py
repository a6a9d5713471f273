"""
Content store access: editable page copy and startup seeding.
"""
from typing import Dict
import logging

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinicsite.exceptions import StorageFault
from clinicsite.models import ContentEntry, BlogPost

logger = logging.getLogger(__name__)

DEFAULT_CONTENT = {
    "hero_kicker": "Level 3 • Kapsoya, Ainabkoi · Uasin Gishu",
    "hero_title": "Healthcare that feels personal, delivered with precision.",
    "hero_intro": (
        "JediCare Medical centre is a trusted Level 3 clinic serving families and professionals "
        "in Kapsoya. We combine experienced clinicians with modern diagnostics and patient-first "
        "service. Our optician desk helps you see better, with frames you will love."
    ),
    "hero_badge1": "Open and fully operational",
    "hero_badge2": "Modern diagnostics & imaging",
    "hero_badge3": "Optician services & prescription glasses",
    "hero_badge4": "Powered by EasyClinic operations",
    "why_title": "Why patients choose Jedi",
    "why_card1_title": "Experienced Team",
    "why_card1_body": "Clinicians with broad hands-on experience, focused on practical, effective care.",
    "why_card2_title": "Modern Equipment",
    "why_card2_body": "From labs to imaging, we invest in tools that improve accuracy and outcomes.",
    "why_card3_title": "Clean & Safe",
    "why_card3_body": "Strict hygiene protocols for a calm, safe environment at every visit.",
    "about_title": "About Jedi Medical",
    "about_body1": (
        "JediCare Medical centre is a Level 3 clinic recognized for precise, patient-centered care. "
        "We serve the Kapsoya ward in Ainabkoi constituency, Uasin Gishu, with an experienced team "
        "and a calm, well-kept facility. Our approach blends practical medicine with modern "
        "diagnostics so you feel informed and supported at every step."
    ),
    "about_body2": (
        "With EasyClinic helping streamline operations, we stay focused on what matters most: "
        "your care, your comfort, and dependable outcomes."
    ),
    "contact_title": "Book an Appointment",
    "contact_intro": (
        "Looking for a reliable private clinic near you in Uasin Gishu? JediCare Medical centre is "
        "open and ready to help. Reach out and our team will guide you to the right service, "
        "including our in-house optician desk for prescriptions and glasses."
    ),
    "contact_note": "Prefer a call? Add your phone number and we will get back promptly.",
}

# Starter posts for fresh deployments
DEFAULT_BLOG_POSTS = [
    {
        "title": "Preventive healthcare",
        "slug": "preventive-healthcare",
        "excerpt": "5 Essential Preventive Health Checks",
        "content": (
            "Discover key health screenings for early detection and better health. Regular "
            "preventive care is the foundation of long-term wellness and can catch potential "
            "health issues before they become serious problems."
        ),
    },
    {
        "title": "Eye care",
        "slug": "eye-care",
        "excerpt": "Protecting Your Vision",
        "content": (
            "Learn strategies to reduce digital eye strain and maintain healthy vision. In today's "
            "digital world, protecting your eyes is more important than ever. Our comprehensive "
            "eye care services help you maintain optimal vision health."
        ),
    },
    {
        "title": "Child health",
        "slug": "child-health",
        "excerpt": "Children's Health Foundation",
        "content": (
            "Essential healthcare tips for children's development and wellbeing. From vaccinations "
            "to growth monitoring, we provide comprehensive pediatric care to ensure your children "
            "grow up healthy and strong."
        ),
    },
]


async def get_all_content(db: AsyncSession) -> Dict[str, str]:
    """
    Read every content entry as a key -> value mapping.

    Returns an empty mapping if the content table cannot be read, so a
    storage fault never prevents a page from rendering.
    """
    try:
        result = await db.execute(select(ContentEntry.key, ContentEntry.value))
        return {key: value for key, value in result.all()}
    except SQLAlchemyError as e:
        logger.error(f"Error getting content: {str(e)}", exc_info=True)
        return {}


async def save_content(db: AsyncSession, entries: Dict[str, str]) -> None:
    """
    Insert or replace each key/value pair.

    Raises:
        StorageFault: if the write fails (the session is rolled back)
    """
    try:
        for key, value in entries.items():
            await db.merge(ContentEntry(key=key, value=value))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error saving content: {str(e)}", exc_info=True)
        raise StorageFault("Failed to save content") from e

    logger.info(f"Saved {len(entries)} content entries")


async def seed_defaults(db: AsyncSession) -> None:
    """
    Insert default content keys that are missing and, if there are no blog
    posts at all, the starter posts. Safe to run on every startup.
    """
    result = await db.execute(select(ContentEntry.key))
    existing_keys = set(result.scalars().all())

    missing = {k: v for k, v in DEFAULT_CONTENT.items() if k not in existing_keys}
    for key, value in missing.items():
        db.add(ContentEntry(key=key, value=value))

    post_count = (await db.execute(select(func.count(BlogPost.id)))).scalar() or 0
    if post_count == 0:
        for post in DEFAULT_BLOG_POSTS:
            db.add(BlogPost(author="Admin", status="published", **post))
            # Flush one at a time so ids follow list order
            await db.flush()

    await db.commit()

    logger.info(
        f"Seeded {len(missing)} content entries"
        + (f" and {len(DEFAULT_BLOG_POSTS)} starter blog posts" if post_count == 0 else "")
    )
