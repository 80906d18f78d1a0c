from fastapi import APIRouter, Depends
from sqlalchemy import or_, select

from muweb import queries
from muweb.database import get_capabilities, get_session
from muweb.enums import GuildOrder
from muweb.envelope import ok
from muweb.errors import NotFoundError, ValidationError
from muweb.models import GuildWar

router = APIRouter(prefix="/api/guilds", tags=["guilds"])

MIN_SEARCH_LENGTH = 2


def require_guild_tables(capabilities):
    if not queries.has_guilds(capabilities):
        raise NotFoundError("Guild data not available")


# Fixed paths are registered before /{guild_name}
@router.get("/rankings/top")
def top_guilds(
    orderBy: GuildOrder = GuildOrder.SCORE,
    limit: int = 20,
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    require_guild_tables(capabilities)
    limit = min(max(limit, 1), 100)
    rows = queries.top_guilds(session, orderBy, limit)
    return ok([queries.guild_summary(row) for row in rows])


@router.get("/search/{query}")
def search_guilds(
    query: str,
    limit: int = 10,
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    if len(query) < MIN_SEARCH_LENGTH:
        raise ValidationError(
            f"Search query must be at least {MIN_SEARCH_LENGTH} characters long"
        )
    require_guild_tables(capabilities)
    limit = min(max(limit, 1), 50)
    rows = queries.search_guilds(session, query, limit)
    return ok([queries.guild_summary(row) for row in rows])


@router.get("/wars/active")
def active_wars(session=Depends(get_session), capabilities=Depends(get_capabilities)):
    if not capabilities.has("guild_wars"):
        return ok([], message="Guild wars feature not available")

    wars = session.execute(
        select(GuildWar)
        .where(or_(GuildWar.status == "active", GuildWar.status == "scheduled"))
        .order_by(GuildWar.start_time)
    ).scalars()
    return ok([
        {
            "guild1Name": war.guild1_name,
            "guild2Name": war.guild2_name,
            "warType": war.war_type,
            "startTime": war.start_time,
            "endTime": war.end_time,
            "guild1Score": war.guild1_score or 0,
            "guild2Score": war.guild2_score or 0,
            "status": war.status,
        }
        for war in wars
    ])


@router.get("/{guild_name}")
def guild_info(guild_name: str, session=Depends(get_session), capabilities=Depends(get_capabilities)):
    """Guild with members and member statistics"""
    require_guild_tables(capabilities)
    detail = queries.guild_detail(session, guild_name)
    if detail is None:
        raise NotFoundError("Guild not found")

    members = detail["members"]
    levels = [m["level"] or 0 for m in members]
    detail["statistics"] = {
        "totalMembers": len(members),
        "averageLevel": round(sum(levels) / len(levels)) if levels else 0,
        "highestLevel": max(levels) if levels else 0,
        "totalResets": sum(m["resets"] for m in members),
        "onlineMembers": sum(1 for m in members if m["online"]),
    }
    return ok(detail)
