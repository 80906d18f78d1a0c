import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from muweb import accounts, queries
from muweb.database import get_capabilities, get_config, get_session
from muweb.enums import TransactionType
from muweb.envelope import ok
from muweb.errors import ConflictError, InternalError, NotFoundError, ValidationError
from muweb.models import (
    AccountData,
    AccountStatus,
    AccountValidation,
    Character,
    CharacterTransaction,
)
from muweb.schemas import ChangePasswordRequest, UpdateProfileRequest
from muweb.security import current_account

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/profile")
def get_profile(
    account=Depends(current_account),
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    data = session.get(AccountData, account.guid)
    status = session.get(AccountStatus, account.guid)
    validation = session.get(AccountValidation, account.guid)

    profile = accounts.user_projection(account, data)
    profile.update({
        "registered": account.register,
        "activated": account.activated == 1,
        "lastLogin": status.last_online if status else None,
        "lastIp": status.last_ip if status else None,
        "emailVerified": bool(validation and validation.email_verified),
    })
    characters = queries.account_characters(session, capabilities, account.guid)
    return ok({"profile": profile, "characters": characters})


@router.put("/profile")
def update_profile(body: UpdateProfileRequest, account=Depends(current_account), session=Depends(get_session)):
    if body.email is not None:
        if not accounts.is_valid_email(body.email):
            raise ValidationError("Invalid email format")
        if accounts.email_taken(session, body.email, exclude_id=account.guid):
            raise ConflictError("Email already registered")
        account.email = body.email
    session.commit()
    return ok(message="Profile updated successfully")


@router.put("/change-password")
def change_password(body: ChangePasswordRequest, account=Depends(current_account), session=Depends(get_session)):
    accounts.change_password(session, account, body.current_password, body.new_password)
    return ok(message="Password changed successfully")


@router.get("/stats")
def user_stats(account=Depends(current_account), session=Depends(get_session)):
    row = session.execute(
        select(
            func.count(Character.guid).label("total_characters"),
            func.max(Character.level).label("highest_level"),
            func.avg(Character.level).label("average_level"),
            func.sum(Character.reset).label("total_resets"),
            func.sum(Character.money).label("total_zen"),
            func.sum(Character.pk_count).label("total_kills"),
        ).where(Character.account_id == account.guid)
    ).mappings().one()
    return ok({
        "totalCharacters": row["total_characters"] or 0,
        "highestLevel": row["highest_level"] or 0,
        "averageLevel": round(row["average_level"] or 0),
        "totalResets": int(row["total_resets"] or 0),
        "totalZen": int(row["total_zen"] or 0),
        "totalKills": int(row["total_kills"] or 0),
    })


@router.get("/guild")
def user_guild(
    account=Depends(current_account),
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    """Guild of the account's first guilded character"""
    characters = session.execute(
        select(Character.guid)
        .where(Character.account_id == account.guid)
        .order_by(Character.level.desc())
    ).scalars()
    for guid in characters:
        guild = queries.character_guild(session, capabilities, guid)
        if guild is not None:
            return ok(guild)
    return ok(None, message="User is not in a guild")


@router.get("/characters")
def user_characters(
    account=Depends(current_account),
    session=Depends(get_session),
    capabilities=Depends(get_capabilities),
):
    characters = queries.account_characters(session, capabilities, account.guid)
    return ok({"characters": characters, "total": len(characters)})


@router.post("/characters/{character_name}/clear-pk")
def clear_pk(
    character_name: str,
    account=Depends(current_account),
    session=Depends(get_session),
    config: dict = Depends(get_config),
    capabilities=Depends(get_capabilities),
):
    """Paid PK clear: credits, PK fields and the log row change together"""
    cost = int(config.get("pk_clear_cost", 100))

    character = session.execute(
        select(Character).where(
            Character.name == character_name,
            Character.account_id == account.guid,
        ).with_for_update()
    ).scalar_one_or_none()
    if character is None:
        raise NotFoundError("Character not found or does not belong to your account")
    if (character.pk_level or 0) <= 0:
        raise ValidationError("Character has no PK status to clear")

    data = session.get(AccountData, account.guid, with_for_update=True)
    if data is None or (data.credits or 0) < cost:
        raise ValidationError(f"Insufficient credits. PK clear costs {cost} credits.")

    try:
        data.credits = data.credits - cost
        character.pk_level = 0
        character.pk_count = 0
        if capabilities.has("character_transaction_log"):
            session.add(CharacterTransaction(
                account_id=account.guid,
                character_name=character.name,
                transaction_type=TransactionType.PK_CLEAR.value,
                amount=cost,
                description="PK status cleared",
            ))
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        log.error("PK clear for %s rolled back: %s", character_name, e)
        raise InternalError("Failed to clear PK status") from e

    log.info("PK cleared for %s by account %s", character.name, account.account)
    return ok(
        {"creditsDeducted": cost, "remainingCredits": data.credits},
        message=f"PK status cleared for {character.name}",
    )
