from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from muweb.models import Base, Event, News
from tests.conftest import admin_login, bearer, make_admin, make_news


class TestNewsListing:

    def test_only_published(self, client, db):
        make_news(db, "Live", status="published")
        make_news(db, "Hidden", status="draft")
        make_news(db, "Old", status="archived")

        body = client.get("/api/news").json()

        assert [item["title"] for item in body["data"]] == ["Live"]
        assert body["pagination"]["total"] == 1

    def test_pagination(self, client, db):
        start = datetime(2024, 1, 1)
        for i in range(21):
            make_news(db, f"News {i}", created_at=start + timedelta(hours=i))
        make_news(db, "Draft", status="draft")

        body = client.get("/api/news", params={"page": 3, "limit": 10}).json()

        assert body["pagination"] == {"page": 3, "limit": 10, "total": 21, "totalPages": 3}
        assert [item["title"] for item in body["data"]] == ["News 0"]

    def test_newest_first(self, client, db):
        make_news(db, "Older", created_at=datetime(2024, 1, 1))
        make_news(db, "Newer", created_at=datetime(2024, 2, 1))

        titles = [item["title"] for item in client.get("/api/news").json()["data"]]

        assert titles == ["Newer", "Older"]


class TestNewsDetail:

    def test_counts_views(self, client, db):
        article = make_news(db, "Patch notes")

        first = client.get(f"/api/news/{article.id}").json()["data"]
        second = client.get(f"/api/news/{article.id}").json()["data"]

        assert first["views"] == 1
        assert second["views"] == 2
        with db() as session:
            assert session.get(News, article.id).views_count == 2

    def test_draft_is_not_found(self, client, db):
        article = make_news(db, "Secret", status="draft")

        response = client.get(f"/api/news/{article.id}")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "News article not found"}


class TestCategoriesAndEvents:

    def test_categories(self, client, db):
        make_news(db, "A", category="updates")
        make_news(db, "B", category="events")
        make_news(db, "C", category="updates")
        make_news(db, "D", category="maintenance", status="draft")

        assert client.get("/api/news/categories/list").json()["data"] == ["events", "updates"]

    def test_upcoming_events(self, client, db):
        now = datetime.now()
        with db() as session:
            session.add_all([
                Event(title="Castle Siege", start_date=now + timedelta(days=1), end_date=now + timedelta(days=2)),
                Event(title="Blood Castle", start_date=now - timedelta(hours=1), end_date=now + timedelta(hours=1)),
                Event(title="Finished", start_date=now - timedelta(days=3), end_date=now - timedelta(days=2)),
                Event(title="Cancelled", start_date=now, end_date=now + timedelta(days=1), status="inactive"),
            ])
            session.commit()

        titles = [e["title"] for e in client.get("/api/news/events/upcoming").json()["data"]]

        assert titles == ["Blood Castle", "Castle Siege"]


class TestWithoutNewsTable:

    @pytest.fixture
    def engine(self):
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(
            engine,
            tables=[t for t in Base.metadata.sorted_tables if t.name != "news"],
        )
        yield engine
        engine.dispose()

    def test_public_routes_degrade(self, client):
        listing = client.get("/api/news")
        categories = client.get("/api/news/categories/list")
        detail = client.get("/api/news/1")

        assert listing.status_code == 200
        assert listing.json()["data"] == []
        assert listing.json()["pagination"]["total"] == 0
        assert categories.json() == {"success": True, "data": []}
        assert detail.status_code == 404

    def test_admin_routes_degrade(self, client, db):
        make_admin(db)
        headers = bearer(admin_login(client))
        payload = {"title": "Title", "content": "Body"}

        listing = client.get("/api/admin/news", headers=headers)

        assert listing.status_code == 200
        assert listing.json()["data"] == []
        assert client.post("/api/admin/news", json=payload, headers=headers).status_code == 404
        assert client.put("/api/admin/news/1", json=payload, headers=headers).status_code == 404
        assert client.delete("/api/admin/news/1", headers=headers).status_code == 404
