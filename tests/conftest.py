"""Shared fixtures: an in-memory database, the app under test and row factories."""
import hashlib
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from muweb.accounts import dependent_rows, register_timestamp
from muweb.app import create_app
from muweb.config import DEFAULT_CONFIG
from muweb.models import (
    Account,
    AdminCredential,
    Base,
    Character,
    Guild,
    GuildMember,
    News,
)
from muweb.security import hash_admin_password, hash_password

TEST_SECRET = "muweb-test-secret-0123456789abcdef"


# ============================================================================
# DATABASE AND APP
# ============================================================================


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    """Session factory for arranging rows and checking results"""
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def config(tmp_path):
    config = DEFAULT_CONFIG.copy()
    config.update({
        "environment": "test",
        "jwt_secret": TEST_SECRET,
        "downloads_dir": str(tmp_path / "downloads"),
        "cors_origins": ["http://localhost:3000"],
        "pk_clear_cost": 100,
    })
    return config


@pytest.fixture
def app(config, engine):
    return create_app(config, engine)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


# ============================================================================
# FACTORIES
# ============================================================================


def count_rows(db, model, *conditions):
    with db() as session:
        query = select(func.count()).select_from(model)
        if conditions:
            query = query.where(*conditions)
        return session.execute(query).scalar_one()


def make_account(db, username="player1", password="secret123", email=None,
                 blocked=0, credits=0, stored_password=None):
    """Account with the four dependent rows, as registration leaves it"""
    with db() as session:
        account = Account(
            account=username,
            password=stored_password or hash_password(username, password),
            email=email or f"{username}@example.com",
            register=register_timestamp(),
            blocked=blocked,
        )
        session.add(account)
        session.flush()
        rows = dependent_rows(account.guid, username, "127.0.0.1")
        rows[0].credits = credits
        session.add_all(rows)
        session.commit()
        return account


def make_character(db, account, name, **fields):
    with db() as session:
        character = Character(account_id=account.guid, name=name, **fields)
        session.add(character)
        session.commit()
        return character


def make_guild(db, name, master, members=(), score=0):
    """Guild led by `master`; `members` join with the default rank"""
    with db() as session:
        guild = Guild(name=name, score=score, notice=f"{name} notice")
        session.add(guild)
        session.flush()
        session.add(GuildMember(guild_id=guild.guid, char_id=master.guid, ranking=0))
        for member in members:
            session.add(GuildMember(guild_id=guild.guid, char_id=member.guid, ranking=128))
        session.commit()
        return guild


def make_news(db, title="Patch notes", status="published", created_at=None, **fields):
    with db() as session:
        article = News(
            title=title,
            content=f"{title} content",
            status=status,
            created_at=created_at or datetime.now(),
            published_at=datetime.now() if status == "published" else None,
            **fields,
        )
        session.add(article)
        session.commit()
        return article


def make_admin(db, username="gm", password="adminpass", role="admin"):
    with db() as session:
        admin = AdminCredential(
            username=username,
            password=hash_admin_password(password),
            role=role,
            permissions=["accounts", "news", "server"],
        )
        session.add(admin)
        session.commit()
        return admin


def md5(text):
    return hashlib.md5(text.encode("utf-8")).hexdigest()


# ============================================================================
# AUTH HELPERS
# ============================================================================


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def login(client, username="player1", password="secret123"):
    response = client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["data"]["token"]


def admin_login(client, username="gm", password="adminpass"):
    response = client.post("/api/admin/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["data"]["token"]
