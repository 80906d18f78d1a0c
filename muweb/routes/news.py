from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import func, select, update

from muweb.database import get_capabilities, get_session
from muweb.enums import EventStatus, NewsStatus
from muweb.envelope import Page, ok
from muweb.errors import NotFoundError
from muweb.models import Event, News

router = APIRouter(prefix="/api/news", tags=["news"])

UPCOMING_EVENTS_LIMIT = 10


def news_item(row, with_views=False):
    item = {
        "id": row.id,
        "title": row.title,
        "content": row.content,
        "excerpt": row.excerpt,
        "image_url": row.image_url,
        "category": row.category,
        "author": row.author,
        "featured": bool(row.featured),
        "created_at": row.created_at,
        "updated_at": row.updated_at,
        "published_at": row.published_at,
    }
    if with_views:
        item["views"] = row.views_count or 0
    return item


@router.get("")
def list_news(
    page: int = 1,
    limit: int = 10,
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    """Published articles, newest first"""
    paging = Page(page, limit)
    if not capabilities.has("news"):
        return ok([], pagination=paging.pagination(0))
    published = News.status == NewsStatus.PUBLISHED.value
    total = session.execute(select(func.count()).select_from(News).where(published)).scalar_one()
    rows = session.execute(
        select(News)
        .where(published)
        .order_by(News.created_at.desc(), News.id.desc())
        .limit(paging.limit)
        .offset(paging.offset)
    ).scalars()
    return ok([news_item(row) for row in rows], pagination=paging.pagination(total))


@router.get("/categories/list")
def list_categories(session=Depends(get_session), capabilities=Depends(get_capabilities)):
    if not capabilities.has("news"):
        return ok([])
    rows = session.execute(
        select(News.category)
        .where(News.status == NewsStatus.PUBLISHED.value, News.category.is_not(None))
        .distinct()
        .order_by(News.category)
    ).scalars()
    return ok(list(rows))


@router.get("/events/upcoming")
def upcoming_events(session=Depends(get_session), capabilities=Depends(get_capabilities)):
    if not capabilities.has("events"):
        return ok([])
    rows = session.execute(
        select(Event)
        .where(Event.status == EventStatus.ACTIVE.value, Event.end_date > datetime.now())
        .order_by(Event.start_date)
        .limit(UPCOMING_EVENTS_LIMIT)
    ).scalars()
    return ok([
        {
            "id": event.id,
            "title": event.title,
            "description": event.description,
            "start_date": event.start_date,
            "end_date": event.end_date,
            "event_type": event.event_type,
            "rewards": event.rewards,
            "image_url": event.image_url,
        }
        for event in rows
    ])


@router.get("/{news_id}")
def get_news(news_id: int, session=Depends(get_session), capabilities=Depends(get_capabilities)):
    """One published article; each read counts as a view"""
    if not capabilities.has("news"):
        raise NotFoundError("News article not found")
    article = session.execute(
        select(News).where(News.id == news_id, News.status == NewsStatus.PUBLISHED.value)
    ).scalar_one_or_none()
    if article is None:
        raise NotFoundError("News article not found")

    session.execute(
        update(News)
        .where(News.id == news_id)
        .values(views_count=func.coalesce(News.views_count, 0) + 1, updated_at=News.updated_at)
    )
    session.commit()
    session.refresh(article)
    return ok(news_item(article, with_views=True))
