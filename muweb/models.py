"""Declarative mappings for the game server tables the website touches.

The schema is owned by the MuEmu server; only the columns the API reads
or writes are mapped here.
"""
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, BigInteger, String, Text
from sqlalchemy.orm import declarative_base

from muweb.enums import AdminRole

Base = declarative_base()


class Account(Base):
    __tablename__ = "accounts"

    guid = Column(Integer, primary_key=True, autoincrement=True)
    account = Column(String(20), unique=True, nullable=False)
    password = Column(String(64), nullable=False)
    email = Column(String(50))
    register = Column(String(14))
    security_code = Column(String(16), default="devemu")
    golden_channel = Column(BigInteger, default=1500434821)
    secured = Column(Integer, default=1)
    activated = Column(Integer, default=0)
    blocked = Column(Integer, default=0)
    facebook_status = Column(Integer, default=0)
    web_admin = Column(Integer, default=0)
    gm_level = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.now)


class AccountData(Base):
    __tablename__ = "account_data"

    account_id = Column(Integer, primary_key=True, autoincrement=False)
    vip_status = Column(Integer, default=-1)
    vip_duration = Column(BigInteger, default=0)
    expanded_warehouse = Column(Integer, default=0)
    expanded_warehouse_time = Column(BigInteger, default=0)
    special_character = Column(Integer, default=0)
    credits = Column(Integer, default=0)
    web_credits = Column(Integer)
    current_character = Column(Integer, default=0)
    current_type = Column(Integer, default=0)
    current_server = Column(Integer, default=65535)
    goblin_points = Column(Integer, default=0)


class AccountStatus(Base):
    __tablename__ = "accounts_status"

    account_id = Column(Integer, primary_key=True, autoincrement=False)
    server_group = Column(Integer, default=0)
    current_server = Column(Integer, default=0)
    start_server = Column(Integer, default=0)
    dest_server = Column(Integer, default=-1)
    dest_world = Column(Integer, default=-1)
    dest_x = Column(Integer, default=-1)
    dest_y = Column(Integer, default=-1)
    warp_time = Column(Integer, default=0)
    warp_auth_1 = Column(Integer, default=0)
    warp_auth_2 = Column(Integer, default=0)
    warp_auth_3 = Column(Integer, default=0)
    warp_auth_4 = Column(Integer, default=0)
    last_ip = Column(String(16))
    last_mac = Column(String(50), default="00:00:00:00:00:00")
    last_online = Column(DateTime)
    online = Column(Integer, default=0)
    disk_serial = Column(BigInteger, default=0)
    type = Column(Integer, default=0)


class AccountSecurity(Base):
    __tablename__ = "accounts_security"

    account_id = Column(Integer, primary_key=True, autoincrement=False)
    account = Column(String(20), nullable=False)
    ip = Column(String(16))
    mac = Column(String(50), default="00:00:00:00:00:00")
    disk_serial = Column(BigInteger, default=0)


class AccountValidation(Base):
    __tablename__ = "accounts_validation"

    account_id = Column(Integer, primary_key=True, autoincrement=False)
    disk_serial = Column(BigInteger, default=0)
    email_verified = Column(Integer, default=0)
    phone_verified = Column(Integer, default=0)


class Character(Base):
    __tablename__ = "character_info"

    guid = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, nullable=False, index=True)
    name = Column(String(10), unique=True, nullable=False)
    race = Column(Integer, default=0)
    level = Column(Integer, default=1)
    level_master = Column(Integer, default=0)
    experience = Column(BigInteger, default=0)
    experience_master = Column(BigInteger, default=0)
    reset = Column(Integer, default=0)
    strength = Column(Integer, default=0)
    agility = Column(Integer, default=0)
    vitality = Column(Integer, default=0)
    energy = Column(Integer, default=0)
    leadership = Column(Integer, default=0)
    life = Column(Integer, default=0)
    mana = Column(Integer, default=0)
    points = Column(Integer, default=0)
    money = Column(BigInteger, default=0)
    pk_count = Column(Integer, default=0)
    pk_level = Column(Integer, default=0)
    pk_time = Column(Integer, default=0)
    world = Column(Integer, default=0)
    world_x = Column(Integer, default=0)
    world_y = Column(Integer, default=0)
    direction = Column(Integer, default=0)
    online = Column(Integer, default=0)
    last_use = Column(BigInteger, default=0)
    create_date = Column(BigInteger, default=0)


class CharacterItem(Base):
    __tablename__ = "character_item"

    id = Column(Integer, primary_key=True, autoincrement=True)
    character_name = Column(String(10), nullable=False, index=True)
    item_section = Column(Integer, nullable=False)
    item_id = Column(Integer, nullable=False)
    item_level = Column(Integer, default=0)
    item_option = Column(Integer, default=0)
    item_duration = Column(Integer, default=0)
    item_serial = Column(BigInteger, default=0)


class Guild(Base):
    __tablename__ = "guild_list"

    guid = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(8), unique=True, nullable=False)
    notice = Column(String(128))
    emblem = Column(String(64))
    score = Column(Integer, default=0)


class GuildMember(Base):
    __tablename__ = "guild_members"

    guild_id = Column(Integer, primary_key=True, autoincrement=False)
    char_id = Column(Integer, primary_key=True, autoincrement=False)
    ranking = Column(Integer, default=128)


class GuildWar(Base):
    __tablename__ = "guild_wars"

    id = Column(Integer, primary_key=True, autoincrement=True)
    guild1_name = Column(String(8))
    guild2_name = Column(String(8))
    war_type = Column(String(32))
    start_time = Column(DateTime)
    end_time = Column(DateTime)
    guild1_score = Column(Integer, default=0)
    guild2_score = Column(Integer, default=0)
    status = Column(String(16))


class News(Base):
    __tablename__ = "news"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(Text)
    image_url = Column(String(500))
    category = Column(String(100), default="general")
    status = Column(String(16), default="draft")
    featured = Column(Integer, default=0)
    author = Column(String(100))
    meta_title = Column(String(255))
    meta_description = Column(Text)
    views_count = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
    published_at = Column(DateTime)


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    event_type = Column(String(100), default="general")
    rewards = Column(Text)
    image_url = Column(String(500))
    status = Column(String(16), default="active")
    created_at = Column(DateTime, default=datetime.now)


class AdminCredential(Base):
    __tablename__ = "admin_credentials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False)
    password = Column(String(255), nullable=False)
    role = Column(String(16), default=AdminRole.ADMIN.value)
    permissions = Column(JSON)
    last_login = Column(DateTime)
    created_at = Column(DateTime, default=datetime.now)


class AdminAction(Base):
    __tablename__ = "admin_actions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    admin_id = Column(Integer, nullable=False, index=True)
    admin_username = Column(String(50))
    action_type = Column(String(100), nullable=False)
    target_type = Column(String(100))
    target_name = Column(String(255))
    details = Column(Text)
    ip_address = Column(String(45))
    created_at = Column(DateTime, default=datetime.now)


class CharacterTransaction(Base):
    __tablename__ = "character_transaction_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, nullable=False, index=True)
    character_name = Column(String(10), nullable=False)
    transaction_type = Column(String(32), nullable=False)
    amount = Column(Integer, default=0)
    description = Column(String(255))
    created_at = Column(DateTime, default=datetime.now)
