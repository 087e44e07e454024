"""Tests for configuration loading."""

import json

import pytest

from pgscope_svc.config import Config, DatabaseConfig


class TestDefaults:
    def test_defaults(self):
        config = Config()

        assert config.server.port == 3000
        assert config.database.host == "localhost"
        assert config.database.port == 5432
        assert config.cache.enabled is True
        assert config.impact.timeout_seconds == 0.0

    def test_dsn(self):
        db = DatabaseConfig(host="db", port=6543, user="app", password="pw", name="shop")

        assert db.dsn == "postgresql://app:pw@db:6543/shop"


class TestFiles:
    def test_from_dict_partial(self):
        config = Config.from_dict({"database": {"name": "shop"}, "impact": {"timeout_seconds": 5}})

        assert config.database.name == "shop"
        assert config.database.user == "postgres"
        assert config.impact.timeout_seconds == 5

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "server:\n"
            "  port: 8080\n"
            "cache:\n"
            "  directory: /var/cache/pgscope\n"
        )

        config = Config.from_yaml(str(path))

        assert config.server.port == 8080
        assert config.cache.directory == "/var/cache/pgscope"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert Config.from_yaml(str(path)) == Config()

    def test_from_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"logging": {"level": "DEBUG"}}))

        assert Config.from_json(str(path)).logging.level == "DEBUG"

    def test_unknown_key_rejected(self):
        with pytest.raises(TypeError):
            Config.from_dict({"database": {"hostname": "db"}})


class TestEnvironment:
    def test_env_overrides(self):
        config = Config().apply_env({
            "BD_HOST": "pg.internal",
            "BD_PORT": "5433",
            "BD_USER": "reader",
            "BD_NAME": "shop",
            "BD_PASS": "secret",
        })

        assert config.database.host == "pg.internal"
        assert config.database.port == 5433
        assert config.database.user == "reader"
        assert config.database.name == "shop"
        assert config.database.password == "secret"

    def test_empty_env_value_ignored(self):
        config = Config().apply_env({"BD_HOST": ""})

        assert config.database.host == "localhost"

    def test_load_file_then_env(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("database:\n  host: from-file\n  name: filedb\n")

        config = Config.load({"PGSCOPE_CONFIG": str(path), "BD_HOST": "from-env"})

        assert config.database.host == "from-env"
        assert config.database.name == "filedb"

    def test_load_without_file(self):
        assert Config.load({}) == Config()
