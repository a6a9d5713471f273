"""Catalog access layer tests: gallery, section images and blog posts"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from clinicsite.exceptions import NotFoundError, SlugConflictError, ValidationError
from clinicsite.models import BlogPost, GalleryImage
from clinicsite.schemas import BlogPostForm
from clinicsite.services.catalog_service import (
    create_blog_post,
    create_gallery_image,
    create_section_image,
    delete_blog_post,
    delete_gallery_image,
    get_blog_post,
    get_published_blog_post,
    get_section_images,
    list_blog_posts,
    list_gallery_images,
    list_published_blog_posts,
    update_blog_post,
)

pytestmark = pytest.mark.anyio


def _form(**fields):
    fields.setdefault("title", "Eye Care!! 2024")
    fields.setdefault("content", "Look after your eyes.")
    return BlogPostForm(**fields)


async def _post_count(session):
    return (await session.execute(select(func.count(BlogPost.id)))).scalar()


class TestCreateBlogPost:

    async def test_derives_slug_from_title(self, db_session):
        post = await create_blog_post(db_session, _form())

        assert post.slug == "eye-care-2024"
        assert post.author == "Admin"
        assert post.status == "published"
        assert post.created_at is not None

    async def test_explicit_slug_is_kept(self, db_session):
        post = await create_blog_post(db_session, _form(slug="my-slug", author="Dr. Jedi", status="draft"))

        assert post.slug == "my-slug"
        assert post.author == "Dr. Jedi"
        assert post.status == "draft"

    async def test_slug_conflict_does_not_insert(self, db_session):
        await create_blog_post(db_session, _form())

        with pytest.raises(SlugConflictError) as exc_info:
            await create_blog_post(db_session, _form(content="Another body"))

        assert exc_info.value.slug == "eye-care-2024"
        assert await _post_count(db_session) == 1

    async def test_explicit_slug_conflict(self, db_session):
        await create_blog_post(db_session, _form(slug="shared"))

        with pytest.raises(SlugConflictError):
            await create_blog_post(db_session, _form(title="Different title", slug="shared"))

    @pytest.mark.parametrize("missing", ["title", "content"])
    async def test_required_fields(self, db_session, missing):
        with pytest.raises(ValidationError):
            await create_blog_post(db_session, _form(**{missing: "   "}))

        assert await _post_count(db_session) == 0

    async def test_title_without_slug_characters(self, db_session):
        with pytest.raises(ValidationError):
            await create_blog_post(db_session, _form(title="!!!"))


class TestBlogQueries:

    async def test_public_lookup_ignores_drafts(self, db_session):
        draft = await create_blog_post(db_session, _form(slug="secret", status="draft"))

        assert await get_published_blog_post(db_session, "secret") is None
        assert (await get_blog_post(db_session, draft.id)).slug == "secret"

    async def test_public_lookup_finds_published(self, db_session):
        await create_blog_post(db_session, _form())

        post = await get_published_blog_post(db_session, "eye-care-2024")

        assert post is not None
        assert post.title == "Eye Care!! 2024"

    async def test_published_posts_newest_first_with_limit(self, db_session):
        for n in range(4):
            await create_blog_post(db_session, _form(title=f"Post {n}"))
        await create_blog_post(db_session, _form(title="Hidden", status="draft"))

        posts = await list_published_blog_posts(db_session, limit=3)

        assert [p.slug for p in posts] == ["post-3", "post-2", "post-1"]

    async def test_published_posts_tiebreak_by_id(self, db_session):
        same_time = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for n in range(3):
            db_session.add(BlogPost(title=f"T{n}", slug=f"t{n}", content="c", created_at=same_time))
        db_session.add(BlogPost(title="Newer", slug="newer", content="c", created_at=same_time + timedelta(days=1)))
        await db_session.commit()

        posts = await list_published_blog_posts(db_session)

        assert [p.slug for p in posts] == ["newer", "t0", "t1", "t2"]

    async def test_admin_listing_includes_drafts(self, db_session):
        await create_blog_post(db_session, _form(title="Live"))
        await create_blog_post(db_session, _form(title="Draft", status="draft"))

        assert {p.slug for p in await list_blog_posts(db_session)} == {"live", "draft"}

    async def test_reads_degrade_to_empty(self):
        session = MagicMock()
        session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("boom")))

        assert await list_published_blog_posts(session) == []
        assert await list_gallery_images(session) == []
        assert await get_section_images(session) == {}
        assert await get_published_blog_post(session, "eye-care") is None


class TestUpdateBlogPost:

    async def test_update_refreshes_updated_at(self, db_session):
        post = await create_blog_post(db_session, _form())
        past = datetime(2020, 1, 1, tzinfo=timezone.utc)
        post.updated_at = past
        await db_session.commit()

        updated = await update_blog_post(db_session, post.id, _form(title="New title", content="New body"))

        assert updated.title == "New title"
        assert updated.slug == "new-title"
        assert updated.updated_at.replace(tzinfo=None) > past.replace(tzinfo=None)

    async def test_keeping_own_slug_is_allowed(self, db_session):
        post = await create_blog_post(db_session, _form(slug="keep-me"))

        updated = await update_blog_post(db_session, post.id, _form(slug="keep-me", content="Changed"))

        assert updated.slug == "keep-me"
        assert updated.content == "Changed"

    async def test_slug_of_another_post_is_rejected(self, db_session):
        await create_blog_post(db_session, _form(slug="taken"))
        post = await create_blog_post(db_session, _form(slug="mine"))

        with pytest.raises(SlugConflictError):
            await update_blog_post(db_session, post.id, _form(slug="taken"))

        assert (await get_blog_post(db_session, post.id)).slug == "mine"

    async def test_missing_post(self, db_session):
        with pytest.raises(NotFoundError):
            await update_blog_post(db_session, 999, _form())


class TestDeletes:

    async def test_delete_gallery_image_twice(self, db_session):
        image = await create_gallery_image(db_session, "/uploads/a.webp", "Reception")

        assert await delete_gallery_image(db_session, image.id) is True
        assert await delete_gallery_image(db_session, image.id) is False
        assert (await db_session.execute(select(func.count(GalleryImage.id)))).scalar() == 0

    async def test_delete_blog_post_is_idempotent(self, db_session):
        post = await create_blog_post(db_session, _form())

        assert await delete_blog_post(db_session, post.id) is True
        assert await delete_blog_post(db_session, post.id) is False
        assert await get_blog_post(db_session, post.id) is None


class TestImages:

    async def test_gallery_newest_first_with_limit(self, db_session):
        for n in range(8):
            await create_gallery_image(db_session, f"/uploads/{n}.webp")

        images = await list_gallery_images(db_session, limit=6)

        assert len(images) == 6
        assert images[0].filename == "/uploads/7.webp"
        assert images[-1].filename == "/uploads/2.webp"

    async def test_blank_caption_stored_as_none(self, db_session):
        image = await create_gallery_image(db_session, "/uploads/a.webp", "")

        assert image.caption is None

    async def test_section_images_grouped(self, db_session):
        await create_section_image(db_session, "hero", "/uploads/h1.webp", "First")
        await create_section_image(db_session, "about", "/uploads/a1.webp")
        await create_section_image(db_session, "hero", "/uploads/h2.webp", "Second")

        grouped = await get_section_images(db_session)

        assert list(grouped) == ["about", "hero"]
        assert [img.filename for img in grouped["hero"]] == ["/uploads/h2.webp", "/uploads/h1.webp"]
        assert grouped["about"][0].caption == ""

    async def test_section_required(self, db_session):
        with pytest.raises(ValidationError):
            await create_section_image(db_session, "  ", "/uploads/x.webp")
