import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from muweb.database import get_capabilities, get_config, get_session
from muweb.envelope import ok
from muweb.lookups import class_name, map_name
from muweb.models import Account, Character, Guild

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/server", tags=["server"])


def server_info(config):
    return {
        "name": config.get("server_name"),
        "season": config.get("server_season"),
        "rates": config.get("server_rates", {}),
        "features": config.get("server_features", []),
        "maxLevel": config.get("max_level"),
        "maxMasterLevel": config.get("max_master_level"),
        "maxResets": config.get("max_resets"),
    }


def count(session, model, *conditions):
    query = select(func.count()).select_from(model)
    if conditions:
        query = query.where(*conditions)
    return session.execute(query).scalar_one()


def server_statistics(session, capabilities):
    top = session.execute(
        select(Character.name, Character.level, Character.reset)
        .order_by(Character.level.desc(), Character.reset.desc())
        .limit(1)
    ).mappings().first()
    return {
        "playersOnline": count(session, Character, Character.online == 1),
        "totalAccounts": count(session, Account),
        "totalCharacters": count(session, Character),
        "totalGuilds": count(session, Guild) if capabilities.has("guild_list") else 0,
        "topPlayer": dict(top) if top else None,
        "castleOwner": "No Owner",
    }


@router.get("")
def server_status(
    session=Depends(get_session),
    config: dict = Depends(get_config),
    capabilities=Depends(get_capabilities),
):
    """Configured server description plus live counts"""
    info = server_info(config)
    try:
        statistics = server_statistics(session, capabilities)
        info["status"] = "Online"
    except SQLAlchemyError as e:
        # The landing page still renders with zeroed statistics
        log.error("Server statistics unavailable: %s", e)
        session.rollback()
        statistics = {
            "playersOnline": 0,
            "totalAccounts": 0,
            "totalCharacters": 0,
            "totalGuilds": 0,
            "topPlayer": None,
            "castleOwner": "No Owner",
        }
        info["status"] = "Unknown"
    return ok({
        "server": info,
        "statistics": statistics,
        "lastUpdate": datetime.now(timezone.utc).isoformat(),
    })


@router.get("/online")
def online_players(limit: int = 50, session=Depends(get_session)):
    limit = min(max(limit, 1), 200)
    rows = session.execute(
        select(
            Character.name,
            Character.level,
            Character.level_master,
            Character.reset,
            Character.race,
            Character.world,
            Character.last_use,
        )
        .where(Character.online == 1)
        .order_by(Character.level.desc(), Character.reset.desc())
        .limit(limit)
    ).mappings()
    players = [
        {
            "name": row["name"],
            "level": row["level"],
            "masterLevel": row["level_master"] or 0,
            "resets": row["reset"] or 0,
            "class": class_name(row["race"]),
            "location": map_name(row["world"]),
            "lastActive": (
                datetime.fromtimestamp(row["last_use"], timezone.utc).isoformat()
                if row["last_use"] else None
            ),
        }
        for row in rows
    ]
    return ok({
        "players": players,
        "total": len(players),
        "lastUpdate": datetime.now(timezone.utc).isoformat(),
    })
