"""Character and guild queries shared by the public, user and admin routes."""
from sqlalchemy import and_, func, null, select
from sqlalchemy.orm import aliased

from muweb.enums import GuildOrder, RankingType
from muweb.lookups import class_name, guild_rank, map_name
from muweb.models import Account, Character, CharacterItem, Guild, GuildMember

# Inventory sections 0-11 are the worn slots
EQUIPMENT_SECTIONS = (0, 11)

RANKING_ORDER = {
    RankingType.LEVEL: (Character.level.desc(), Character.experience.desc()),
    RankingType.RESETS: (Character.reset.desc(), Character.level.desc()),
    RankingType.MASTER_LEVEL: (Character.level_master.desc(), Character.experience_master.desc()),
    RankingType.PK: (Character.pk_count.desc(),),
    RankingType.ONLINE: (Character.level.desc(),),
}


def has_guilds(capabilities):
    return capabilities.has("guild_list") and capabilities.has("guild_members")


def with_guild_name(query, capabilities):
    """Left join the character's guild name when the guild tables exist"""
    if not has_guilds(capabilities):
        return query.add_columns(null().label("guild_name"))
    return (
        query.add_columns(Guild.name.label("guild_name"))
        .outerjoin(GuildMember, GuildMember.char_id == Character.guid)
        .outerjoin(Guild, Guild.guid == GuildMember.guild_id)
    )


def ranking_filter(ranking_type):
    if ranking_type == RankingType.ONLINE:
        return Character.online == 1
    return None


def player_rankings(session, capabilities, ranking_type, limit, offset):
    query = select(
        Character.name,
        Character.level,
        Character.experience,
        Character.reset,
        Character.level_master,
        Character.experience_master,
        Character.race,
        Character.pk_count,
        Character.pk_level,
    ).join(Account, Account.guid == Character.account_id)
    query = with_guild_name(query, capabilities)
    condition = ranking_filter(ranking_type)
    if condition is not None:
        query = query.where(condition)
    query = query.order_by(*RANKING_ORDER[ranking_type]).limit(limit).offset(offset)
    return session.execute(query).mappings().all()


def count_ranked_characters(session, ranking_type):
    query = (
        select(func.count())
        .select_from(Character)
        .join(Account, Account.guid == Character.account_id)
    )
    condition = ranking_filter(ranking_type)
    if condition is not None:
        query = query.where(condition)
    return session.execute(query).scalar_one()


def ranking_entry(rank, row):
    return {
        "rank": rank,
        "name": row["name"],
        "level": row["level"],
        "experience": row["experience"],
        "resets": row["reset"] or 0,
        "masterLevel": row["level_master"] or 0,
        "masterExperience": row["experience_master"] or 0,
        "characterClass": class_name(row["race"]),
        "pkCount": row["pk_count"] or 0,
        "pkLevel": row["pk_level"] or 0,
        "guildName": row["guild_name"] or "None",
    }


def guild_summary_query():
    """Guilds with master name and member aggregates, one row per guild"""
    member_char = aliased(Character)
    master_member = aliased(GuildMember)
    master_char = aliased(Character)

    member_count = func.count(GuildMember.char_id).label("member_count")
    average_level = func.avg(member_char.level).label("average_level")
    highest_level = func.max(member_char.level).label("highest_level")
    total_resets = func.sum(member_char.reset).label("total_resets")

    query = (
        select(
            Guild.guid,
            Guild.name,
            Guild.notice,
            Guild.emblem,
            Guild.score,
            master_char.name.label("guild_master"),
            member_count,
            average_level,
            highest_level,
            total_resets,
        )
        .select_from(Guild)
        .outerjoin(GuildMember, GuildMember.guild_id == Guild.guid)
        .outerjoin(member_char, member_char.guid == GuildMember.char_id)
        .outerjoin(
            master_member,
            and_(master_member.guild_id == Guild.guid, master_member.ranking == 0),
        )
        .outerjoin(master_char, master_char.guid == master_member.char_id)
        .group_by(
            Guild.guid,
            Guild.name,
            Guild.notice,
            Guild.emblem,
            Guild.score,
            master_char.name,
        )
    )
    columns = {
        "score": Guild.score,
        "member_count": member_count,
        "average_level": average_level,
        "total_resets": total_resets,
        "guild_master": master_char.name,
    }
    return query, columns


def guild_summary(row):
    return {
        "name": row["name"],
        "guildMaster": row["guild_master"] or "N/A",
        "memberCount": row["member_count"] or 0,
        "averageLevel": round(row["average_level"] or 0),
        "highestLevel": row["highest_level"] or 0,
        "totalResets": int(row["total_resets"] or 0),
        "score": row["score"] or 0,
        "notice": row["notice"] or "",
        "logo": row["emblem"],
    }


def guild_rankings(session, limit, offset):
    query, columns = guild_summary_query()
    query = query.order_by(
        columns["total_resets"].desc(),
        columns["average_level"].desc(),
        columns["member_count"].desc(),
    )
    return session.execute(query.limit(limit).offset(offset)).mappings().all()


def top_guilds(session, order, limit):
    query, columns = guild_summary_query()
    query = query.order_by(columns[GuildOrder(order).value].desc(), Guild.name)
    return session.execute(query.limit(limit)).mappings().all()


def search_guilds(session, text, limit):
    query, columns = guild_summary_query()
    pattern = f"%{text}%"
    master = columns["guild_master"]
    query = query.where(Guild.name.like(pattern) | master.like(pattern))
    query = query.order_by(Guild.score.desc()).limit(limit)
    return session.execute(query).mappings().all()


def find_guild(session, name):
    query, _ = guild_summary_query()
    return session.execute(query.where(Guild.name == name)).mappings().first()


def guild_members(session, guild_id):
    query = (
        select(
            Character.name,
            Character.level,
            Character.reset,
            Character.race,
            Character.level_master,
            Character.pk_count,
            Character.online,
            GuildMember.ranking,
        )
        .join(GuildMember, GuildMember.char_id == Character.guid)
        .where(GuildMember.guild_id == guild_id)
        .order_by(GuildMember.ranking, Character.level.desc())
    )
    return [
        {
            "name": row["name"],
            "level": row["level"],
            "resets": row["reset"] or 0,
            "characterClass": class_name(row["race"]),
            "masterLevel": row["level_master"] or 0,
            "pkCount": row["pk_count"] or 0,
            "status": guild_rank(row["ranking"]),
            "online": row["online"] == 1,
        }
        for row in session.execute(query).mappings()
    ]


def guild_detail(session, name):
    """Guild summary with its member list, or None"""
    row = find_guild(session, name)
    if row is None:
        return None
    return {"guild": guild_summary(row), "members": guild_members(session, row["guid"])}


def character_guild(session, capabilities, character_guid):
    if not has_guilds(capabilities):
        return None
    master_member = aliased(GuildMember)
    master_char = aliased(Character)
    query = (
        select(
            Guild.name.label("guild_name"),
            master_char.name.label("guild_master"),
            GuildMember.ranking,
        )
        .join(GuildMember, GuildMember.guild_id == Guild.guid)
        .outerjoin(
            master_member,
            and_(master_member.guild_id == Guild.guid, master_member.ranking == 0),
        )
        .outerjoin(master_char, master_char.guid == master_member.char_id)
        .where(GuildMember.char_id == character_guid)
    )
    row = session.execute(query).mappings().first()
    if row is None:
        return None
    return {
        "name": row["guild_name"],
        "guildMaster": row["guild_master"] or "Unknown",
        "status": guild_rank(row["ranking"]),
    }


def account_characters(session, capabilities, account_id):
    query = select(
        Character.name,
        Character.level,
        Character.race,
        Character.world,
        Character.money,
        Character.pk_level,
        Character.pk_count,
        Character.online,
        Character.reset,
        Character.level_master,
    )
    query = with_guild_name(query, capabilities)
    query = query.where(Character.account_id == account_id).order_by(Character.level.desc())
    return [
        {
            "name": row["name"],
            "level": row["level"],
            "class": class_name(row["race"]),
            "map": map_name(row["world"]),
            "money": row["money"] or 0,
            "pkLevel": row["pk_level"] or 0,
            "pkCount": row["pk_count"] or 0,
            "online": row["online"] == 1,
            "guild": row["guild_name"],
            "resets": row["reset"] or 0,
            "masterLevel": row["level_master"] or 0,
        }
        for row in session.execute(query).mappings()
    ]


def character_profile(character, account=None, guild=None):
    return {
        "name": character.name,
        "level": character.level,
        "experience": character.experience,
        "resets": character.reset or 0,
        "masterLevel": character.level_master or 0,
        "masterExperience": character.experience_master or 0,
        "characterClass": class_name(character.race),
        "strength": character.strength or 0,
        "dexterity": character.agility or 0,
        "vitality": character.vitality or 0,
        "energy": character.energy or 0,
        "leadership": character.leadership or 0,
        "levelUpPoint": character.points or 0,
        "money": character.money or 0,
        "pkCount": character.pk_count or 0,
        "pkLevel": character.pk_level or 0,
        "pkTime": character.pk_time or 0,
        "map": map_name(character.world),
        "mapNumber": character.world or 0,
        "mapPosX": character.world_x or 0,
        "mapPosY": character.world_y or 0,
        "mapDir": character.direction or 0,
        "online": character.online == 1,
        "accountCreated": account.register if account else None,
        "guild": guild,
    }


def character_equipment(session, capabilities, character_name):
    """Worn items, empty when the item table is absent"""
    if not capabilities.has("character_item"):
        return []
    first, last = EQUIPMENT_SECTIONS
    rows = session.execute(
        select(CharacterItem)
        .where(
            CharacterItem.character_name == character_name,
            CharacterItem.item_section.between(first, last),
        )
        .order_by(CharacterItem.item_section)
    ).scalars()
    return [
        {
            "section": item.item_section,
            "itemId": item.item_id,
            "itemLevel": item.item_level or 0,
            "itemOption": item.item_option or 0,
            "itemDuration": item.item_duration or 0,
            "itemSerial": item.item_serial or 0,
        }
        for item in rows
    ]
