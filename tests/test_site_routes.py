"""Public route tests"""

from fastapi.testclient import TestClient
from sqlalchemy import select

from clinicsite.main import app
from clinicsite.models import BlogPost, ContactSubmission, SiteVisit
from clinicsite.routes import site
from clinicsite.services.content_service import DEFAULT_CONTENT


def _all(model):
    async def query(session):
        return (await session.execute(select(model).order_by(model.id))).scalars().all()
    return query


def test_home_page_renders_seeded_content(client):
    response = client.get("/")

    assert response.status_code == 200
    assert DEFAULT_CONTENT["about_title"] in response.text
    assert 'href="/blog/child-health"' in response.text


def test_public_pages_record_visits(client, db_call):
    client.get("/", headers={"referer": "https://example.com", "user-agent": "pytest-agent"})
    client.get("/gallery")
    client.get("/admin/login")

    visits = db_call(_all(SiteVisit))

    assert [v.page_visited for v in visits] == ["/", "/gallery"]
    assert visits[0].referrer == "https://example.com"
    assert visits[0].user_agent == "pytest-agent"


def test_forwarded_ip_is_recorded(client, db_call):
    client.get("/blog", headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})

    visit = db_call(_all(SiteVisit))[0]
    assert visit.ip_address == "203.0.113.7"


def test_gallery_page(client):
    response = client.get("/gallery")

    assert response.status_code == 200
    assert "No images yet." in response.text


def test_blog_list_shows_published_posts_only(client, db_call):
    async def add_draft(session):
        session.add(BlogPost(title="Unreleased", slug="unreleased", content="Draft", status="draft"))
        await session.commit()
    db_call(add_draft)

    response = client.get("/blog")

    assert response.status_code == 200
    assert "Eye care" in response.text
    assert "Unreleased" not in response.text


def test_blog_post_page(client):
    response = client.get("/blog/eye-care")

    assert response.status_code == 200
    assert "Eye care" in response.text
    assert "digital eye strain" in response.text


def test_draft_post_is_not_found(client, db_call):
    async def add_draft(session):
        session.add(BlogPost(title="Unreleased", slug="unreleased", content="Draft", status="draft"))
        await session.commit()
    db_call(add_draft)

    response = client.get("/blog/unreleased")

    assert response.status_code == 404
    assert "Blog post not found" in response.text


def test_unknown_route_renders_404_page(client):
    response = client.get("/no-such-page")

    assert response.status_code == 404
    assert "Page not found" in response.text


def test_contact_submission(client, db_call):
    response = client.post(
        "/contact",
        data={"name": "Jane", "email": "jane@example.com", "phone": "0712", "message": "Hello"},
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"] == "/?success=1#contact"
    submissions = db_call(_all(ContactSubmission))
    assert len(submissions) == 1
    assert submissions[0].email == "jane@example.com"


def test_unhandled_error_renders_500_page(client, monkeypatch):
    async def broken(db):
        raise RuntimeError("secret stack detail")
    monkeypatch.setattr(site, "get_all_content", broken)

    with TestClient(app, raise_server_exceptions=False) as raw_client:
        response = raw_client.get("/gallery")

    assert response.status_code == 500
    assert "Internal server error" in response.text
    assert "secret stack detail" not in response.text
