from fastapi import APIRouter, Depends
from sqlalchemy import func, select

from muweb import queries
from muweb.database import get_capabilities, get_session
from muweb.enums import RankingType
from muweb.envelope import Page, ok
from muweb.models import Guild

router = APIRouter(prefix="/api/rankings", tags=["rankings"])


@router.get("/players")
def player_rankings(
    type: str = RankingType.LEVEL.value,
    page: int = 1,
    limit: int = 50,
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    """Characters ranked by level, resets, master level, PK count or online"""
    try:
        ranking = RankingType(type)
    except ValueError:
        ranking = RankingType.LEVEL
    paging = Page(page, limit)
    rows = queries.player_rankings(session, capabilities, ranking, paging.limit, paging.offset)
    total = queries.count_ranked_characters(session, ranking)
    players = [
        queries.ranking_entry(paging.offset + index + 1, row)
        for index, row in enumerate(rows)
    ]
    return ok({"players": players, "type": ranking.value}, pagination=paging.pagination(total))


@router.get("/guilds")
def guild_rankings(
    page: int = 1,
    limit: int = 20,
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    paging = Page(page, limit)
    if not queries.has_guilds(capabilities):
        return ok({"guilds": []}, pagination=paging.pagination(0))

    rows = queries.guild_rankings(session, paging.limit, paging.offset)
    total = session.execute(select(func.count()).select_from(Guild)).scalar_one()
    guilds = []
    for index, row in enumerate(rows):
        entry = queries.guild_summary(row)
        entry["rank"] = paging.offset + index + 1
        guilds.append(entry)
    return ok({"guilds": guilds}, pagination=paging.pagination(total))
