from enum import Enum


class NewsStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class EventStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ENDED = "ended"


class RankingType(str, Enum):
    LEVEL = "level"
    RESETS = "resets"
    MASTER_LEVEL = "master_level"
    PK = "pk"
    ONLINE = "online"


class AccountFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    BLOCKED = "blocked"
    UNVERIFIED = "unverified"


class GuildOrder(str, Enum):
    SCORE = "score"
    MEMBER_COUNT = "member_count"
    AVERAGE_LEVEL = "average_level"


class AdminRole(str, Enum):
    ADMIN = "admin"
    MODERATOR = "moderator"


class AdminActionType(str, Enum):
    # Account management
    UPDATE_ACCOUNT = "update_account"

    # Character management
    CLEAR_PK = "clear_pk"

    # News management
    CREATE_NEWS = "create_news"
    UPDATE_NEWS = "update_news"
    DELETE_NEWS = "delete_news"

    # Server management
    BROADCAST = "broadcast"


class TransactionType(str, Enum):
    PK_CLEAR = "pk_clear"
