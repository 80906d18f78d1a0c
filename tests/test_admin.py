"""Admin panel routes and the audit trail they leave."""
import logging

import jwt
import pytest
from sqlalchemy import select

from muweb.database import REQUIRED_TABLES, SchemaCapabilities
from muweb.enums import AdminRole
from muweb.models import Account, AdminAction, AdminCredential, Character, News
from muweb.security import hash_admin_password
from tests.conftest import (
    TEST_SECRET,
    bearer,
    count_rows,
    login,
    make_account,
    make_admin,
    make_character,
    make_news,
)


@pytest.fixture
def admin(db):
    return make_admin(db)


@pytest.fixture
def headers(client, admin):
    response = client.post("/api/admin/auth/login", json={"username": "gm", "password": "adminpass"})
    return bearer(response.json()["data"]["token"])


def audit_rows(db):
    with db() as session:
        return session.execute(select(AdminAction).order_by(AdminAction.id)).scalars().all()


# ============================================================================
# AUTHENTICATION
# ============================================================================


class TestAdminAuth:

    def test_login(self, client, db, admin):
        response = client.post("/api/admin/auth/login", json={"username": "gm", "password": "adminpass"})

        data = response.json()["data"]
        claims = jwt.decode(data["token"], TEST_SECRET, algorithms=["HS256"])
        assert claims["adminId"] == admin.id
        assert claims["role"] == "admin"
        assert claims["exp"] - claims["iat"] == 8 * 60 * 60
        assert data["admin"]["permissions"] == ["accounts", "news", "server"]

    def test_role_defaults_to_admin(self, db):
        with db() as session:
            admin = AdminCredential(username="helper", password=hash_admin_password("x"))
            session.add(admin)
            session.commit()

            assert admin.role == AdminRole.ADMIN.value

    def test_wrong_password(self, client, admin):
        response = client.post("/api/admin/auth/login", json={"username": "gm", "password": "nope"})

        assert response.status_code == 401

    def test_verify(self, client, headers):
        response = client.get("/api/admin/auth/verify", headers=headers)

        assert response.json()["data"]["admin"]["username"] == "gm"

    def test_player_token_rejected(self, client, db):
        make_account(db, "player1")
        token = login(client)

        response = client.get("/api/admin/dashboard/stats", headers=bearer(token))

        assert response.status_code == 403

    def test_token_required(self, client):
        assert client.get("/api/admin/accounts").status_code == 401


# ============================================================================
# DASHBOARD AND ACCOUNTS
# ============================================================================


class TestDashboard:

    def test_stats(self, client, db, headers):
        account = make_account(db, "player1")
        make_character(db, account, "Hero", level=380, race=32, online=1)
        make_character(db, account, "Alt", level=20)
        make_news(db, "Live")
        make_news(db, "Draft", status="draft")

        data = client.get("/api/admin/dashboard/stats", headers=headers).json()["data"]

        assert data["totals"] == {"accounts": 1, "characters": 2, "onlineCharacters": 1, "news": 1}
        assert sum(day["count"] for day in data["recentRegistrations"]) == 1
        assert data["topCharacters"][0] == {
            "characterName": "Hero",
            "characterLevel": 380,
            "characterClass": "Fairy Elf",
        }
        assert data["serverStatus"] == "online"


class TestAccounts:

    def test_list_with_filters(self, client, db, headers):
        active = make_account(db, "player1")
        make_account(db, "player2", blocked=1)
        make_character(db, active, "Hero")

        body = client.get("/api/admin/accounts", headers=headers).json()
        blocked = client.get("/api/admin/accounts", params={"status": "blocked"}, headers=headers).json()
        search = client.get("/api/admin/accounts", params={"search": "player1"}, headers=headers).json()

        assert body["pagination"]["total"] == 2
        assert [a["username"] for a in blocked["data"]] == ["player2"]
        assert search["data"][0]["character_count"] == 1

    def test_detail(self, client, db, headers):
        account = make_account(db, "player1")
        make_character(db, account, "Hero", world=3)

        data = client.get(f"/api/admin/accounts/{account.guid}", headers=headers).json()["data"]

        assert data["account"]["username"] == "player1"
        assert data["characters"][0]["map"] == "Noria"

    def test_detail_not_found(self, client, headers):
        assert client.get("/api/admin/accounts/999", headers=headers).status_code == 404

    def test_update_is_audited(self, client, db, admin, headers):
        account = make_account(db, "player1")

        response = client.put(
            f"/api/admin/accounts/{account.guid}",
            json={"blocked": True, "gm_level": 2},
            headers=headers,
        )

        assert response.status_code == 200
        with db() as session:
            updated = session.get(Account, account.guid)
            assert (updated.blocked, updated.gm_level) == (1, 2)
        rows = audit_rows(db)
        assert len(rows) == 1
        assert rows[0].admin_id == admin.id
        assert rows[0].action_type == "update_account"
        assert rows[0].target_name == "player1"

    def test_update_without_audit_table(self, client, app, db, headers, caplog):
        account = make_account(db, "player1")
        app.state.capabilities = SchemaCapabilities(REQUIRED_TABLES | {"admin_credentials"})

        with caplog.at_level(logging.WARNING, logger="muweb.routes.admin"):
            response = client.put(
                f"/api/admin/accounts/{account.guid}", json={"activated": True}, headers=headers
            )

        assert response.status_code == 200
        with db() as session:
            assert session.get(Account, account.guid).activated == 1
        assert count_rows(db, AdminAction) == 0
        assert "update_account by gm not audited" in caplog.text

    def test_update_without_fields(self, client, db, headers):
        account = make_account(db, "player1")

        response = client.put(f"/api/admin/accounts/{account.guid}", json={}, headers=headers)

        assert response.status_code == 400
        assert count_rows(db, AdminAction) == 0


# ============================================================================
# CHARACTERS
# ============================================================================


class TestCharacters:

    def test_list_online(self, client, db, headers):
        account = make_account(db, "player1")
        make_character(db, account, "Online", online=1)
        make_character(db, account, "Offline")

        data = client.get("/api/admin/characters", params={"online": "true"}, headers=headers).json()["data"]

        assert [c["characterName"] for c in data] == ["Online"]
        assert data[0]["accountName"] == "player1"

    def test_clear_pk_is_audited(self, client, db, headers):
        account = make_account(db, "player1")
        character = make_character(db, account, "Killer", pk_level=4, pk_count=9)

        response = client.post("/api/admin/characters/Killer/clear-pk", headers=headers)

        assert response.status_code == 200
        with db() as session:
            reloaded = session.get(Character, character.guid)
            assert (reloaded.pk_level, reloaded.pk_count) == (0, 0)
        assert [r.action_type for r in audit_rows(db)] == ["clear_pk"]

    def test_clear_pk_missing_character(self, client, db, headers):
        response = client.post("/api/admin/characters/Nobody/clear-pk", headers=headers)

        assert response.status_code == 404
        assert count_rows(db, AdminAction) == 0


# ============================================================================
# NEWS
# ============================================================================


class TestNewsManagement:

    def test_list_includes_drafts(self, client, db, headers):
        make_news(db, "Live")
        make_news(db, "Draft", status="draft")

        everything = client.get("/api/admin/news", headers=headers).json()
        drafts = client.get("/api/admin/news", params={"status": "draft"}, headers=headers).json()

        assert everything["pagination"]["total"] == 2
        assert [n["title"] for n in drafts["data"]] == ["Draft"]

    def test_create_published(self, client, db, headers):
        response = client.post("/api/admin/news", json={
            "title": "Season 20",
            "content": "New season is live",
            "status": "published",
            "featured": True,
        }, headers=headers)

        assert response.status_code == 201
        news_id = response.json()["data"]["id"]
        with db() as session:
            article = session.get(News, news_id)
            assert article.published_at is not None
            assert article.author == "gm"
            assert article.featured == 1
        assert [r.action_type for r in audit_rows(db)] == ["create_news"]
        assert client.get(f"/api/news/{news_id}").status_code == 200

    def test_create_requires_title(self, client, db, headers):
        response = client.post("/api/admin/news", json={"content": "body"}, headers=headers)

        assert response.status_code == 400
        assert count_rows(db, News) == 0

    def test_update_and_delete(self, client, db, headers):
        article = make_news(db, "Draft", status="draft")

        updated = client.put(f"/api/admin/news/{article.id}", json={
            "title": "Final",
            "content": "Final text",
            "status": "published",
        }, headers=headers)
        deleted = client.delete(f"/api/admin/news/{article.id}", headers=headers)

        assert updated.status_code == 200
        assert deleted.status_code == 200
        assert count_rows(db, News) == 0
        assert [r.action_type for r in audit_rows(db)] == ["update_news", "delete_news"]

    def test_missing_article(self, client, headers):
        payload = {"title": "x", "content": "y"}

        assert client.put("/api/admin/news/42", json=payload, headers=headers).status_code == 404
        assert client.delete("/api/admin/news/42", headers=headers).status_code == 404


# ============================================================================
# SERVER
# ============================================================================


class TestServerManagement:

    def test_status(self, client, db, headers):
        account = make_account(db, "player1")
        make_character(db, account, "Hero", online=1)

        data = client.get("/api/admin/server/status", headers=headers).json()["data"]

        assert data["gameServer"]["players"] == 1
        assert data["webServer"]["status"] == "online"
        assert 0 <= data["webServer"]["memory"] <= 100

    def test_broadcast_is_audited(self, client, db, headers):
        response = client.post("/api/admin/server/broadcast", json={"message": "Restart in 5 minutes"},
                               headers=headers)

        assert response.status_code == 200
        rows = audit_rows(db)
        assert rows[0].action_type == "broadcast"
        assert "Restart in 5 minutes" in rows[0].details

    def test_broadcast_requires_message(self, client, db, headers):
        response = client.post("/api/admin/server/broadcast", json={}, headers=headers)

        assert response.status_code == 400
        assert count_rows(db, AdminAction) == 0
