"""Connection pool, per-request sessions and the startup schema probe."""
import logging

from fastapi import Request
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

log = logging.getLogger(__name__)

# Tables every route depends on
REQUIRED_TABLES = frozenset({
    "accounts",
    "account_data",
    "accounts_status",
    "accounts_security",
    "accounts_validation",
    "character_info",
})

# Tables whose routes degrade when missing
OPTIONAL_TABLES = frozenset({
    "guild_list",
    "guild_members",
    "guild_wars",
    "news",
    "events",
    "admin_credentials",
    "admin_actions",
    "character_transaction_log",
    "character_item",
})

# Older emulator generation, not served by this API
LEGACY_CHARACTER_TABLE = "character"


def build_url(config):
    return URL.create(
        "mysql+mysqlconnector",
        username=config.get("mysql_user", "root"),
        password=config.get("mysql_password", ""),
        host=config.get("mysql_host", "127.0.0.1"),
        port=int(config.get("mysql_port", 3306)),
        database=config.get("mysql_database", "muonline"),
        query={"charset": "utf8mb4"},
    )


def create_db_engine(config):
    """Create the pooled MySQL engine"""
    engine = create_engine(
        build_url(config),
        pool_size=int(config.get("mysql_pool_size", 10)),
        max_overflow=0,
        pool_pre_ping=True,
        pool_recycle=1800,
    )
    log.info(
        "Database engine created for %s:%s/%s (pool_size=%s)",
        config.get("mysql_host"),
        config.get("mysql_port"),
        config.get("mysql_database"),
        config.get("mysql_pool_size"),
    )
    return engine


def create_session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


class SchemaCapabilities:
    """Which game server tables are present in the connected database.

    Built once at startup. When the probe could not reach the database,
    every table is assumed present and failures surface per request.
    """

    def __init__(self, tables=None):
        self.probed = tables is not None
        self.tables = frozenset(tables or ())

    def has(self, table):
        return not self.probed or table in self.tables

    @property
    def missing_required(self):
        if not self.probed:
            return frozenset()
        return REQUIRED_TABLES - self.tables

    @property
    def missing_optional(self):
        if not self.probed:
            return frozenset()
        return OPTIONAL_TABLES - self.tables

    def as_dict(self):
        return {
            "probed": self.probed,
            "missingRequired": sorted(self.missing_required),
            "missingOptional": sorted(self.missing_optional),
        }


def probe_schema(engine):
    """Inspect the database once and record which tables exist"""
    try:
        tables = set(inspect(engine).get_table_names())
    except SQLAlchemyError as e:
        log.warning("Schema probe failed, database unavailable: %s", e)
        return SchemaCapabilities()

    capabilities = SchemaCapabilities(tables)
    if capabilities.missing_required:
        if "character_info" not in tables and LEGACY_CHARACTER_TABLE in tables:
            log.error(
                "Legacy `character` table found without `character_info`; "
                "this schema generation is not supported"
            )
        log.error("Missing required tables: %s", ", ".join(sorted(capabilities.missing_required)))
    for table in sorted(capabilities.missing_optional):
        log.warning("Optional table `%s` not found, related features are disabled", table)
    return capabilities


def check_connection(engine):
    """Return True when a trivial query succeeds"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        log.error("Database connection check failed: %s", e)
        return False


def get_session(request: Request):
    """FastAPI dependency yielding one session per request"""
    session = request.app.state.session_factory()
    try:
        yield session
    except BaseException:
        session.rollback()
        raise
    finally:
        session.close()


def get_capabilities(request: Request):
    return request.app.state.capabilities


def get_config(request: Request):
    return request.app.state.config
