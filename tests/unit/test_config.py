"""Test Settings loading and storage validation."""

import pytest

from dispute_indexer.core.config import Settings, load_settings
from dispute_indexer.core.enums import StorageBackend
from dispute_indexer.core.errors import ConfigError


class TestSettingsDefaults:
    def test_default_settings(self):
        settings = Settings()
        assert settings.storage.backend == StorageBackend.MEMORY
        assert settings.content.gateway_url == "https://ipfs.io"
        assert settings.chain.block_tag == "latest"
        assert settings.observability.log_format == "json"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("INDEXER_STORAGE__BACKEND", "sql")
        monkeypatch.setenv("INDEXER_CHAIN__RPC_URL", "https://rpc.example")
        settings = Settings()
        assert settings.storage.backend == StorageBackend.SQL
        assert settings.chain.rpc_url == "https://rpc.example"


class TestLoadSettings:
    def test_toml_file(self, tmp_path):
        path = tmp_path / "indexer.toml"
        path.write_text(
            '[content]\ngateway_url = "https://gw.example"\ntimeout_seconds = 2.5\n'
            '[storage]\nbackend = "sql"\ndatabase_url = "sqlite+aiosqlite:///x.db"\n',
            encoding="utf-8",
        )
        settings = load_settings(path)
        assert settings.content.gateway_url == "https://gw.example"
        assert settings.content.timeout_seconds == 2.5
        assert settings.storage.backend == StorageBackend.SQL

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "absent.toml")
        assert settings.storage.backend == StorageBackend.MEMORY

    def test_overrides_merge_into_file_section(self, tmp_path):
        path = tmp_path / "indexer.toml"
        path.write_text('[storage]\necho = true\n', encoding="utf-8")
        settings = load_settings(
            path, overrides={"storage": {"backend": "sql", "database_url": "sqlite+aiosqlite:///y.db"}},
        )
        assert settings.storage.echo is True
        assert settings.storage.database_url == "sqlite+aiosqlite:///y.db"


class TestValidateStorage:
    def test_memory_passes(self):
        Settings().validate_storage()  # Should not raise

    def test_sql_without_url_raises(self):
        settings = Settings(storage={"backend": "sql", "database_url": ""})
        with pytest.raises(ConfigError, match="database_url"):
            settings.validate_storage()

    def test_sql_with_url_passes(self):
        Settings(storage={"backend": "sql"}).validate_storage()
