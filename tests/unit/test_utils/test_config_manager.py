"""
Unit tests for configuration manager
"""

import pytest
import json
from pathlib import Path

from utils.config_manager import UnifiedConfigManager, DatabaseConfig, ApiConfig
from utils.exceptions import ConfigurationError


@pytest.mark.unit
class TestConfigManager:
    """Test cases for UnifiedConfigManager"""

    @pytest.fixture
    def config_dir(self, tmp_path):
        """Config directory split over several JSON files"""
        (tmp_path / "api.json").write_text(json.dumps({
            "api_config": {"host": "127.0.0.1", "port": 9000, "cors_origins": ["http://localhost:3000"]}
        }), encoding="utf-8")
        (tmp_path / "database.json").write_text(json.dumps({
            "database_config": {"db_path": "data/test.db", "echo": True}
        }), encoding="utf-8")
        return tmp_path

    @pytest.fixture
    def config_manager(self, config_dir):
        return UnifiedConfigManager(str(config_dir))

    def test_files_are_merged(self, config_manager):
        assert "api_config" in config_manager
        assert "database_config" in config_manager

    def test_get_nested(self, config_manager):
        assert config_manager.get_nested("api_config.port") == 9000
        assert config_manager.get_nested("api_config.missing", "default") == "default"
        assert config_manager.get_nested("nope.deeper") is None

    def test_typed_api_config(self, config_manager):
        api_config = config_manager.get_api_config()
        assert isinstance(api_config, ApiConfig)
        assert api_config.host == "127.0.0.1"
        assert api_config.port == 9000
        assert api_config.workers == 1

    def test_typed_database_config(self, config_manager):
        db_config = config_manager.get_database_config()
        assert isinstance(db_config, DatabaseConfig)
        assert db_config.db_path == "data/test.db"
        assert db_config.echo is True

    def test_logging_config_defaults(self, config_manager):
        logging_config = config_manager.get_logging_config()
        assert logging_config.level == "INFO"
        assert logging_config.file_config.filename == "qod.log"
        assert logging_config.modules == {}

    def test_set_nested_invalidates_typed_cache(self, config_manager):
        assert config_manager.get_api_config().port == 9000
        config_manager.set_nested("api_config.port", 9100)
        assert config_manager.get_api_config().port == 9100

    def test_update_from_dict(self, config_manager):
        config_manager.update_from_dict({"database_config": {"db_path": "other.db"}})
        assert config_manager.get_database_config().db_path == "other.db"

    def test_save_config(self, config_manager, tmp_path):
        target = tmp_path / "out" / "merged.json"
        config_manager.save_config(str(target))
        saved = json.loads(target.read_text(encoding="utf-8"))
        assert saved["api_config"]["port"] == 9000

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ConfigurationError):
            UnifiedConfigManager(str(tmp_path / "does-not-exist"))

    def test_empty_directory(self, tmp_path):
        with pytest.raises(ConfigurationError):
            UnifiedConfigManager(str(tmp_path))

    def test_invalid_json(self, tmp_path):
        (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            UnifiedConfigManager(str(tmp_path))

    def test_shipped_configuration_loads(self):
        config_dir = Path(__file__).resolve().parents[3] / "config"
        manager = UnifiedConfigManager(str(config_dir))
        assert manager.get_database_config().db_path.endswith(".db")
        assert "QuoteManager" in manager.get_logging_config().modules
