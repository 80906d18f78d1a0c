"""Admin panel routes.

Every mutation writes an `admin_actions` row in the same transaction as
the change it records, when that table exists.
"""
import json
import logging
import os
import time
from datetime import datetime, timedelta, timezone

import psutil
from fastapi import APIRouter, Depends, Request
from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError

from muweb.database import get_capabilities, get_config, get_session
from muweb.enums import AccountFilter, AdminActionType, NewsStatus
from muweb.envelope import Page, ok
from muweb.errors import AuthenticationError, InternalError, NotFoundError, ValidationError
from muweb.lookups import class_name, map_name
from muweb.models import (
    Account,
    AccountValidation,
    AdminAction,
    AdminCredential,
    Character,
    News,
)
from muweb.routes.news import news_item
from muweb.schemas import AccountUpdateRequest, AdminLoginRequest, BroadcastRequest, NewsRequest
from muweb.security import create_admin_token, current_admin, hash_admin_password

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


def admin_projection(admin):
    permissions = admin.permissions
    if isinstance(permissions, str):
        permissions = json.loads(permissions)
    return {
        "id": admin.id,
        "username": admin.username,
        "role": admin.role,
        "permissions": permissions,
        "lastLogin": admin.last_login,
    }


def record_action(session, capabilities, admin, action, target_type, target_name, details, request=None):
    """Add an audit row to the current transaction"""
    if not capabilities.has("admin_actions"):
        log.warning("admin_actions table missing, %s by %s not audited", action.value, admin.username)
        return
    session.add(AdminAction(
        admin_id=admin.id,
        admin_username=admin.username,
        action_type=action.value,
        target_type=target_type,
        target_name=str(target_name),
        details=details,
        ip_address=request.client.host if request is not None and request.client else None,
    ))


def audited_write(session, description):
    """Commit the change and its audit row together or neither"""
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        log.error("%s rolled back: %s", description, e)
        raise InternalError(f"Failed to {description}") from e


# Authentication
@router.post("/auth/login")
def admin_login(body: AdminLoginRequest, session=Depends(get_session), config: dict = Depends(get_config)):
    if not body.username or not body.password:
        raise ValidationError("Username and password are required")

    admin = session.execute(
        select(AdminCredential).where(
            AdminCredential.username == body.username,
            AdminCredential.password == hash_admin_password(body.password),
        )
    ).scalar_one_or_none()
    if admin is None:
        log.info("Failed admin login for %s", body.username)
        raise AuthenticationError("Invalid username or password")

    admin.last_login = datetime.now()
    session.commit()
    log.info("Admin %s logged in", admin.username)
    return ok({"token": create_admin_token(admin, config), "admin": admin_projection(admin)})


@router.get("/auth/verify")
def admin_verify(admin=Depends(current_admin)):
    return ok({"admin": admin_projection(admin)})


# Dashboard
@router.get("/dashboard/stats")
def dashboard_stats(
    admin=Depends(current_admin),
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    def count(model, *conditions):
        query = select(func.count()).select_from(model)
        return session.execute(query.where(*conditions) if conditions else query).scalar_one()

    news_total = 0
    if capabilities.has("news"):
        news_total = count(News, News.status == NewsStatus.PUBLISHED.value)

    since = datetime.now() - timedelta(days=7)
    day = func.date(Account.created_at)
    registrations = session.execute(
        select(day.label("date"), func.count().label("count"))
        .where(Account.created_at >= since)
        .group_by(day)
        .order_by(day)
    ).mappings()

    top = session.execute(
        select(Character.name, Character.level, Character.race)
        .order_by(Character.level.desc())
        .limit(10)
    ).mappings()

    return ok({
        "totals": {
            "accounts": count(Account),
            "characters": count(Character),
            "onlineCharacters": count(Character, Character.online == 1),
            "news": news_total,
        },
        "recentRegistrations": [{"date": str(r["date"]), "count": r["count"]} for r in registrations],
        "topCharacters": [
            {
                "characterName": r["name"],
                "characterLevel": r["level"],
                "characterClass": class_name(r["race"]),
            }
            for r in top
        ],
        "serverStatus": "online",
        "schema": capabilities.as_dict(),
    })


# Accounts
def account_row(account, character_count=None):
    row = {
        "id": account.guid,
        "username": account.account,
        "email": account.email,
        "created_at": account.created_at,
        "blocked": account.blocked == 1,
        "activated": account.activated == 1,
        "web_admin": account.web_admin or 0,
        "gm_level": account.gm_level or 0,
    }
    if character_count is not None:
        row["character_count"] = character_count
    return row


@router.get("/accounts")
def list_accounts(
    page: int = 1,
    limit: int = 20,
    search: str = "",
    status: AccountFilter = AccountFilter.ALL,
    admin=Depends(current_admin),
    session=Depends(get_session),
):
    paging = Page(page, limit)
    conditions = []
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(Account.account.like(pattern), Account.email.like(pattern)))
    if status == AccountFilter.ACTIVE:
        conditions.append(Account.blocked == 0)
    elif status == AccountFilter.BLOCKED:
        conditions.append(Account.blocked == 1)
    elif status == AccountFilter.UNVERIFIED:
        conditions.append(Account.activated == 0)

    total = session.execute(
        select(func.count()).select_from(Account).where(*conditions)
    ).scalar_one()

    character_count = (
        select(func.count(Character.guid))
        .where(Character.account_id == Account.guid)
        .correlate(Account)
        .scalar_subquery()
    )
    rows = session.execute(
        select(Account, character_count.label("character_count"))
        .where(*conditions)
        .order_by(Account.created_at.desc(), Account.guid.desc())
        .limit(paging.limit)
        .offset(paging.offset)
    ).all()
    return ok(
        [account_row(account, chars) for account, chars in rows],
        pagination=paging.pagination(total),
    )


@router.get("/accounts/{account_id}")
def get_account(account_id: int, admin=Depends(current_admin), session=Depends(get_session)):
    account = session.get(Account, account_id)
    if account is None:
        raise NotFoundError("Account not found")

    validation = session.get(AccountValidation, account_id)
    detail = account_row(account)
    detail["email_verified"] = bool(validation and validation.email_verified)
    detail["phone_verified"] = bool(validation and validation.phone_verified)

    characters = session.execute(
        select(Character)
        .where(Character.account_id == account_id)
        .order_by(Character.level.desc())
    ).scalars()
    return ok({
        "account": detail,
        "characters": [
            {
                "character_name": c.name,
                "character_level": c.level,
                "character_class": class_name(c.race),
                "map": map_name(c.world),
                "pk_count": c.pk_count or 0,
                "pk_level": c.pk_level or 0,
                "connected": c.online == 1,
            }
            for c in characters
        ],
    })


@router.put("/accounts/{account_id}")
def update_account(
    account_id: int,
    body: AccountUpdateRequest,
    request: Request,
    admin=Depends(current_admin),
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    account = session.get(Account, account_id)
    if account is None:
        raise NotFoundError("Account not found")

    changes = body.model_dump(exclude_none=True)
    if not changes:
        raise ValidationError("No fields to update")
    if "blocked" in changes:
        account.blocked = 1 if changes["blocked"] else 0
    if "activated" in changes:
        account.activated = 1 if changes["activated"] else 0
    if "web_admin" in changes:
        account.web_admin = changes["web_admin"]
    if "gm_level" in changes:
        account.gm_level = changes["gm_level"]

    record_action(
        session, capabilities, admin, AdminActionType.UPDATE_ACCOUNT,
        "account", account.account, json.dumps(changes, sort_keys=True), request,
    )
    audited_write(session, "update account")
    log.info("Admin %s updated account %s: %s", admin.username, account.account, changes)
    return ok(message="Account updated successfully")


# Characters
@router.get("/characters")
def list_characters(
    page: int = 1,
    limit: int = 20,
    search: str = "",
    online: str = "all",
    admin=Depends(current_admin),
    session=Depends(get_session),
):
    paging = Page(page, limit)
    conditions = []
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(Character.name.like(pattern), Account.account.like(pattern)))
    if online == "true":
        conditions.append(Character.online == 1)
    elif online == "false":
        conditions.append(Character.online == 0)

    base = select(func.count()).select_from(Character).outerjoin(
        Account, Account.guid == Character.account_id
    )
    total = session.execute(base.where(*conditions)).scalar_one()

    rows = session.execute(
        select(Character, Account.account)
        .outerjoin(Account, Account.guid == Character.account_id)
        .where(*conditions)
        .order_by(Character.level.desc(), Character.name)
        .limit(paging.limit)
        .offset(paging.offset)
    ).all()
    return ok(
        [
            {
                "characterName": c.name,
                "characterLevel": c.level,
                "characterClass": class_name(c.race),
                "map": map_name(c.world),
                "pkCount": c.pk_count or 0,
                "pkLevel": c.pk_level or 0,
                "connected": c.online == 1,
                "strength": c.strength or 0,
                "agility": c.agility or 0,
                "vitality": c.vitality or 0,
                "energy": c.energy or 0,
                "leadership": c.leadership or 0,
                "zen": c.money or 0,
                "accountId": c.account_id,
                "accountName": account_name,
            }
            for c, account_name in rows
        ],
        pagination=paging.pagination(total),
    )


@router.post("/characters/{character_name}/clear-pk")
def admin_clear_pk(
    character_name: str,
    request: Request,
    admin=Depends(current_admin),
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    character = session.execute(
        select(Character).where(Character.name == character_name).with_for_update()
    ).scalar_one_or_none()
    if character is None:
        raise NotFoundError("Character not found")

    details = f"PK cleared by admin (pk_count={character.pk_count or 0}, pk_level={character.pk_level or 0})"
    character.pk_count = 0
    character.pk_level = 0
    record_action(
        session, capabilities, admin, AdminActionType.CLEAR_PK,
        "character", character.name, details, request,
    )
    audited_write(session, "clear character PK")
    log.info("Admin %s cleared PK for %s", admin.username, character.name)
    return ok(message="Character PK cleared successfully")


# News
@router.get("/news")
def admin_list_news(
    page: int = 1,
    limit: int = 10,
    status: str = "all",
    admin=Depends(current_admin),
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    paging = Page(page, limit)
    if not capabilities.has("news"):
        return ok([], pagination=paging.pagination(0))
    conditions = []
    if status != "all":
        try:
            conditions.append(News.status == NewsStatus(status).value)
        except ValueError:
            raise ValidationError(f"Unknown news status: {status}") from None

    total = session.execute(select(func.count()).select_from(News).where(*conditions)).scalar_one()
    rows = session.execute(
        select(News)
        .where(*conditions)
        .order_by(News.created_at.desc(), News.id.desc())
        .limit(paging.limit)
        .offset(paging.offset)
    ).scalars()
    items = []
    for row in rows:
        item = news_item(row, with_views=True)
        item.update({
            "status": row.status,
            "meta_title": row.meta_title,
            "meta_description": row.meta_description,
        })
        items.append(item)
    return ok(items, pagination=paging.pagination(total))


def apply_news_fields(article, body, author=None):
    status = body.status or NewsStatus.DRAFT
    article.title = body.title
    article.content = body.content
    article.excerpt = body.excerpt or ""
    article.category = body.category or "general"
    article.featured = 1 if body.featured else 0
    article.image_url = body.image_url or None
    article.meta_title = body.meta_title or body.title
    article.meta_description = body.meta_description or body.excerpt or ""
    if author is not None:
        article.author = author
    if status == NewsStatus.PUBLISHED:
        # Keep the original publication date on edits of a published article
        if article.status != NewsStatus.PUBLISHED.value or article.published_at is None:
            article.published_at = datetime.now()
    else:
        article.published_at = None
    article.status = status.value


def require_news_table(capabilities):
    if not capabilities.has("news"):
        raise NotFoundError("News feature not available")


def require_news_body(body):
    if not body.title or not body.content:
        raise ValidationError("Title and content are required")


@router.post("/news", status_code=201)
def create_news(
    body: NewsRequest,
    request: Request,
    admin=Depends(current_admin),
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    require_news_table(capabilities)
    require_news_body(body)
    article = News()
    apply_news_fields(article, body, author=admin.username or "Admin")
    session.add(article)
    try:
        session.flush()
    except SQLAlchemyError as e:
        session.rollback()
        log.error("News insert failed: %s", e)
        raise InternalError("Failed to create news article") from e

    record_action(
        session, capabilities, admin, AdminActionType.CREATE_NEWS,
        "news", article.id, article.title, request,
    )
    audited_write(session, "create news article")
    return ok({"id": article.id}, message="News article created successfully")


@router.put("/news/{news_id}")
def update_news(
    news_id: int,
    body: NewsRequest,
    request: Request,
    admin=Depends(current_admin),
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    require_news_table(capabilities)
    require_news_body(body)
    article = session.get(News, news_id)
    if article is None:
        raise NotFoundError("News article not found")

    apply_news_fields(article, body)
    record_action(
        session, capabilities, admin, AdminActionType.UPDATE_NEWS,
        "news", news_id, article.title, request,
    )
    audited_write(session, "update news article")
    return ok(message="News article updated successfully")


@router.delete("/news/{news_id}")
def delete_news(
    news_id: int,
    request: Request,
    admin=Depends(current_admin),
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    require_news_table(capabilities)
    article = session.get(News, news_id)
    if article is None:
        raise NotFoundError("News article not found")

    title = article.title
    session.execute(delete(News).where(News.id == news_id))
    record_action(
        session, capabilities, admin, AdminActionType.DELETE_NEWS,
        "news", news_id, title, request,
    )
    audited_write(session, "delete news article")
    return ok(message="News article deleted successfully")


# Server
def uptime_text(seconds):
    days, rest = divmod(int(seconds), 86400)
    hours = rest // 3600
    return f"{days} days, {hours} hours"


@router.get("/server/status")
def admin_server_status(
    request: Request,
    admin=Depends(current_admin),
    session=Depends(get_session),
    config: dict = Depends(get_config),
):
    """Online count from the database, web process figures from psutil"""
    online = session.execute(
        select(func.count()).select_from(Character).where(Character.online == 1)
    ).scalar_one()

    process = psutil.Process(os.getpid())
    pool = session.get_bind().pool
    started_at = request.app.state.started_at
    started = datetime.fromtimestamp(started_at, timezone.utc)
    return ok({
        "gameServer": {
            "players": online,
            "maxPlayers": config.get("max_players", 1000),
        },
        "webServer": {
            "status": "online",
            "uptime": uptime_text(time.time() - started_at),
            "cpu": psutil.cpu_percent(interval=None),
            "memory": round(process.memory_percent(), 1),
            "lastRestart": started.isoformat(),
        },
        "database": {
            "status": "online",
            "pool": pool.status(),
        },
    })


@router.post("/server/broadcast")
def broadcast(
    body: BroadcastRequest,
    request: Request,
    admin=Depends(current_admin),
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    """Record a broadcast request; delivery to the game server is out of band"""
    if not body.message:
        raise ValidationError("Message is required")

    record_action(
        session, capabilities, admin, AdminActionType.BROADCAST,
        "server", "global", f"Message: {body.message}, Type: {body.type}", request,
    )
    audited_write(session, "send broadcast message")
    return ok(message="Broadcast message sent successfully")
