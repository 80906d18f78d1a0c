from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import select

from muweb import queries
from muweb.database import get_capabilities, get_session
from muweb.envelope import ok
from muweb.errors import NotFoundError
from muweb.models import Account, Character
from muweb.security import current_account

router = APIRouter(prefix="/api/players", tags=["players"])


@router.get("/profile/{player_name}")
def player_profile(
    player_name: str,
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    """Public character sheet with its guild and worn equipment"""
    character = session.execute(
        select(Character).where(Character.name == player_name)
    ).scalar_one_or_none()
    if character is None:
        raise NotFoundError("Player not found")

    account = session.get(Account, character.account_id)
    guild = queries.character_guild(session, capabilities, character.guid)
    return ok({
        "character": queries.character_profile(character, account, guild),
        "equipment": queries.character_equipment(session, capabilities, character.name),
        "lastUpdate": datetime.now(timezone.utc).isoformat(),
    })


@router.get("/characters")
def my_characters(
    account=Depends(current_account),
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    characters = queries.account_characters(session, capabilities, account.guid)
    return ok({"characters": characters, "total": len(characters)})


@router.get("/guild/{guild_name}")
def player_guild(guild_name: str, session=Depends(get_session), capabilities=Depends(get_capabilities)):
    if not queries.has_guilds(capabilities):
        raise NotFoundError("Guild not found")
    detail = queries.guild_detail(session, guild_name)
    if detail is None:
        raise NotFoundError("Guild not found")
    return ok(detail)
