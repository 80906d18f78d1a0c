import json

from muweb.config import DEFAULT_CONFIG, apply_env_overrides, is_development, load_config, save_config


def test_defaults_without_file(tmp_path):
    config = load_config(tmp_path / "missing.json", environ={})

    assert config == DEFAULT_CONFIG


def test_file_then_environment(tmp_path):
    path = tmp_path / "server_config.json"
    path.write_text(json.dumps({"mysql_host": "db.internal", "server_port": 8080}), encoding="utf-8")

    config = load_config(path, environ={"PORT": "9000", "DB_NAME": "mu_s19"})

    assert config["mysql_host"] == "db.internal"
    assert config["server_port"] == 9000
    assert config["mysql_database"] == "mu_s19"


def test_cors_origin_list():
    config = apply_env_overrides({}, {"CORS_ORIGIN": "https://a.example, https://b.example,"})

    assert config["cors_origins"] == ["https://a.example", "https://b.example"]


def test_invalid_number_ignored():
    config = apply_env_overrides({"mysql_port": 3306}, {"DB_PORT": "not-a-port"})

    assert config["mysql_port"] == 3306


def test_broken_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "server_config.json"
    path.write_text("{not json", encoding="utf-8")

    assert load_config(path, environ={}) == DEFAULT_CONFIG


def test_save_merges_defaults(tmp_path):
    path = tmp_path / "server_config.json"

    assert save_config({"server_name": "Test MU"}, path)

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["server_name"] == "Test MU"
    assert saved["mysql_pool_size"] == DEFAULT_CONFIG["mysql_pool_size"]


def test_is_development():
    assert is_development({"environment": "Development"})
    assert not is_development({"environment": "production"})
