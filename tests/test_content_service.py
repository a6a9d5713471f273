"""Content store and seeding tests"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from clinicsite.exceptions import StorageFault
from clinicsite.models import BlogPost, ContentEntry
from clinicsite.schemas import BlogPostForm
from clinicsite.services.catalog_service import create_blog_post
from clinicsite.services.content_service import (
    DEFAULT_BLOG_POSTS,
    DEFAULT_CONTENT,
    get_all_content,
    save_content,
    seed_defaults,
)

pytestmark = pytest.mark.anyio


def _broken_session():
    session = MagicMock()
    error = OperationalError("SELECT", {}, Exception("database is locked"))
    session.execute = AsyncMock(side_effect=error)
    session.merge = AsyncMock(side_effect=error)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


async def _count(session, column):
    return (await session.execute(select(func.count(column)))).scalar()


class TestSeedDefaults:
    """seed_defaults is safe to run on every startup"""

    async def test_seeds_content_and_starter_posts(self, db_session):
        await seed_defaults(db_session)

        content = await get_all_content(db_session)
        assert content == DEFAULT_CONTENT

        result = await db_session.execute(select(BlogPost.slug).order_by(BlogPost.id))
        assert result.scalars().all() == [post["slug"] for post in DEFAULT_BLOG_POSTS]

    async def test_seeding_twice_does_not_duplicate(self, db_session):
        await seed_defaults(db_session)
        await seed_defaults(db_session)

        assert await _count(db_session, ContentEntry.key) == len(DEFAULT_CONTENT)
        assert await _count(db_session, BlogPost.id) == 3

    async def test_seeding_keeps_edited_values(self, db_session):
        await seed_defaults(db_session)
        await save_content(db_session, {"hero_title": "Edited"})

        await seed_defaults(db_session)

        content = await get_all_content(db_session)
        assert content["hero_title"] == "Edited"

    async def test_starter_posts_skipped_when_posts_exist(self, db_session):
        await create_blog_post(db_session, BlogPostForm(title="Our own post", content="Body"))

        await seed_defaults(db_session)

        assert await _count(db_session, BlogPost.id) == 1


class TestSaveContent:
    """save_content upserts each key"""

    async def test_insert_new_key(self, db_session):
        await save_content(db_session, {"hero_title": "X"})

        assert (await get_all_content(db_session)) == {"hero_title": "X"}

    async def test_replace_existing_key(self, db_session):
        await seed_defaults(db_session)

        await save_content(db_session, {"hero_title": "X", "custom_key": "Y"})

        content = await get_all_content(db_session)
        assert content["hero_title"] == "X"
        assert content["custom_key"] == "Y"
        assert await _count(db_session, ContentEntry.key) == len(DEFAULT_CONTENT) + 1

    async def test_storage_fault_is_raised(self):
        session = _broken_session()

        with pytest.raises(StorageFault):
            await save_content(session, {"hero_title": "X"})

        session.rollback.assert_awaited()


async def test_get_all_content_degrades_to_empty_mapping():
    assert await get_all_content(_broken_session()) == {}
