import json
import logging
import os

log = logging.getLogger(__name__)

# Config file path
CONFIG_FILE = os.environ.get("MUWEB_CONFIG", "server_config.json")

# Default config
DEFAULT_CONFIG = {
    "server_host": "0.0.0.0",
    "server_port": 5000,
    "environment": "production",
    "log_level": "INFO",
    "cors_origins": [
        "http://localhost:5173",
        "http://localhost:3001",
        "http://localhost:3000",
    ],
    "jwt_secret": "your-secret-key",
    "token_expire_minutes": 24 * 60,
    "admin_token_expire_minutes": 8 * 60,
    "mysql_host": "127.0.0.1",
    "mysql_port": 3306,
    "mysql_user": "root",
    "mysql_password": "123456",
    "mysql_database": "muonline",
    "mysql_pool_size": 10,
    "downloads_dir": "uploads/downloads",
    "pk_clear_cost": 100,
    "server_name": "Mishki MU S19.2.3",
    "server_season": "Season 19 Part 2-3",
    "server_rates": {
        "experience": "9999x",
        "drop": "30%",
        "zen": "9999x",
        "jewel": "15%",
    },
    "server_features": [
        "Custom Wings",
        "Custom Sets",
        "Anti-Hack Protection",
        "Castle Siege",
        "Blood Castle",
        "Devil Square",
        "Chaos Castle",
        "Illusion Temple",
    ],
    "max_level": 400,
    "max_master_level": 400,
    "max_resets": 999,
    "max_players": 1000,
}

# Environment variable -> (config key, converter)
ENV_OVERRIDES = {
    "HOST": ("server_host", str),
    "PORT": ("server_port", int),
    "APP_ENV": ("environment", str),
    "LOG_LEVEL": ("log_level", str),
    "CORS_ORIGIN": ("cors_origins", lambda v: [o.strip() for o in v.split(",") if o.strip()]),
    "JWT_SECRET": ("jwt_secret", str),
    "TOKEN_EXPIRE_MINUTES": ("token_expire_minutes", int),
    "DB_HOST": ("mysql_host", str),
    "DB_PORT": ("mysql_port", int),
    "DB_USER": ("mysql_user", str),
    "DB_PASSWORD": ("mysql_password", str),
    "DB_NAME": ("mysql_database", str),
    "DB_POOL_SIZE": ("mysql_pool_size", int),
    "DOWNLOADS_DIR": ("downloads_dir", str),
}


def save_config(config_data, path=None):
    """Write the merged config to disk"""
    path = path or CONFIG_FILE
    try:
        # Make sure every required key is present
        final_config = DEFAULT_CONFIG.copy()
        final_config.update(config_data)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(final_config, f, indent=4, ensure_ascii=False)
        log.info("Config saved to %s", path)
        return True
    except OSError as e:
        log.error("Failed to save config to %s: %s", path, e)
        return False


def apply_env_overrides(config, environ=None):
    environ = os.environ if environ is None else environ
    for name, (key, convert) in ENV_OVERRIDES.items():
        raw = environ.get(name)
        if raw is None or raw == "":
            continue
        try:
            config[key] = convert(raw)
        except ValueError:
            log.warning("Ignoring invalid value for %s: %r", name, raw)
    return config


def load_config(path=None, environ=None):
    """Load config: defaults, then the JSON file, then the environment"""
    path = path or CONFIG_FILE
    config = DEFAULT_CONFIG.copy()
    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                config.update(json.load(f))
            log.info("Loaded config from %s", path)
        except (OSError, ValueError) as e:
            log.error("Failed to load config from %s: %s", path, e)
    return apply_env_overrides(config, environ)


def is_development(config):
    return str(config.get("environment", "")).lower() == "development"
