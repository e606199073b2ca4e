"""
Configuration management for the QOD service.
Merges the JSON files under config/ and exposes typed sections for the
API server, the quote store and logging.
"""

import json
import logging
import os
from typing import Any, Optional, Dict, List, Callable, Type, TypeVar
from dataclasses import dataclass, field, fields
from pathlib import Path

from .exceptions import ConfigurationError, ErrorCodes
from .path_utils import CONFIG_DIR

config_logger = logging.getLogger("Config")

T = TypeVar('T')

# 导出文件与配置文件同目录，加载时跳过
MERGED_FILENAME = "config.merged.json"


# ============================================================================
# 配置段
# ============================================================================

@dataclass
class LoggingModuleConfig:
    """单个模块日志器的级别"""
    level: str = "INFO"
    enabled: bool = True


@dataclass
class FileLoggingConfig:
    enabled: bool = True
    directory: str = "log"
    filename: str = "qod.log"
    rotation: Optional[Dict[str, Any]] = None


@dataclass
class ConsoleLoggingConfig:
    enabled: bool = True


@dataclass
class PerformanceConfig:
    """慢查询告警阈值（秒）"""
    enabled: bool = True
    slow_operation_threshold: float = 1.0


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = "[%(levelname)s][%(asctime)s][%(filename)s:%(lineno)d] - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_config: FileLoggingConfig = field(default_factory=FileLoggingConfig)
    console_config: ConsoleLoggingConfig = field(default_factory=ConsoleLoggingConfig)
    modules: Dict[str, LoggingModuleConfig] = field(default_factory=dict)
    performance_monitoring: PerformanceConfig = field(default_factory=PerformanceConfig)


@dataclass
class DatabaseConfig:
    """名言库配置；相对路径以项目根目录为基准"""
    db_path: str = "data/qod.db"
    echo: bool = False


@dataclass
class ApiConfig:
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1
    reload: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


def _section(cls: Type[T], data: Optional[Dict[str, Any]]) -> T:
    """Build a config dataclass from a JSON object, ignoring unknown keys."""
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise TypeError(f"{cls.__name__} expects an object, got {type(data).__name__}")
    known = {f.name for f in fields(cls)}
    return cls(**{key: value for key, value in data.items() if key in known})


def _logging_section(data: Dict[str, Any]) -> LoggingConfig:
    config = _section(LoggingConfig, {
        key: value for key, value in data.items()
        if key not in ('file_config', 'console_config', 'modules', 'performance_monitoring')
    })
    config.file_config = _section(FileLoggingConfig, data.get('file_config'))
    config.console_config = _section(ConsoleLoggingConfig, data.get('console_config'))
    config.performance_monitoring = _section(PerformanceConfig, data.get('performance_monitoring'))
    config.modules = {
        name: _section(LoggingModuleConfig, module_data)
        for name, module_data in data.get('modules', {}).items()
    }
    return config


# ============================================================================
# 配置管理器
# ============================================================================

class UnifiedConfigManager:
    """
    Directory-backed configuration.

    Every ``*.json`` file in the directory is loaded in name order and merged
    at the top level, so each file normally owns one section
    (``api_config``, ``database_config``, ``logging_config``). Typed sections
    are built on first access and cached until the raw data changes.
    """

    def __init__(self, config_dir: str = None):
        self._config_dir = Path(config_dir or os.environ.get("QOD_CONFIG_DIR") or CONFIG_DIR)
        self._config_data: Dict[str, Any] = {}
        self._typed_cache: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """加载并合并配置目录下的 JSON 文件"""
        if not self._config_dir.is_dir():
            raise ConfigurationError(
                f"Configuration directory not found: {self._config_dir}",
                ErrorCodes.CONFIG_NOT_FOUND,
                {"config_dir": str(self._config_dir)}
            )

        config_files = [path for path in sorted(self._config_dir.glob('*.json')) if path.name != MERGED_FILENAME]
        if not config_files:
            raise ConfigurationError(
                f"No configuration files (.json) found in: {self._config_dir}",
                ErrorCodes.CONFIG_NOT_FOUND,
                {"config_dir": str(self._config_dir)}
            )

        merged: Dict[str, Any] = {}
        for config_file in config_files:
            try:
                merged.update(json.loads(config_file.read_text(encoding='utf-8')))
            except json.JSONDecodeError as e:
                raise ConfigurationError(
                    f"Invalid JSON in {config_file.name}: {e}",
                    ErrorCodes.CONFIG_INVALID_FORMAT,
                    {"file": config_file.name}
                ) from e
            except OSError as e:
                raise ConfigurationError(
                    f"Cannot read {config_file.name}: {e}",
                    ErrorCodes.CONFIG_LOAD_ERROR,
                    {"file": config_file.name}
                ) from e
            config_logger.debug(f"Merged configuration file {config_file.name}")

        self._config_data = merged
        self._typed_cache.clear()
        config_logger.info(f"Loaded {len(config_files)} configuration files from {self._config_dir}")

    def reload_config(self) -> None:
        self._load_config()

    # ------------------------------------------------------------------
    # 原始访问
    # ------------------------------------------------------------------

    def get(self, key: str, default: Optional[T] = None) -> Optional[T]:
        return self._config_data.get(key, default)

    def get_nested(self, path: str, default: Optional[T] = None) -> Optional[T]:
        """按点分隔路径读取，例如 ``api_config.port``"""
        current: Any = self._config_data
        for key in path.split('.'):
            if not isinstance(current, dict) or key not in current:
                return default
            current = current[key]
        return current

    def set(self, key: str, value: Any) -> None:
        self._config_data[key] = value
        self._typed_cache.pop(key, None)

    def set_nested(self, path: str, value: Any) -> None:
        """按点分隔路径写入，缺失的中间层自动创建"""
        *parents, leaf = path.split('.')
        current = self._config_data
        for key in parents:
            current = current.setdefault(key, {})
        current[leaf] = value
        self._typed_cache.pop(path.split('.', 1)[0], None)

    def __contains__(self, key: str) -> bool:
        return key in self._config_data

    def __getitem__(self, key: str) -> Any:
        return self._config_data[key]

    # ------------------------------------------------------------------
    # 类型化访问
    # ------------------------------------------------------------------

    def _typed(self, key: str, builder: Callable[[Dict[str, Any]], T], fallback: Callable[[], T]) -> T:
        if key not in self._typed_cache:
            try:
                self._typed_cache[key] = builder(self.get(key) or {})
            except (AttributeError, TypeError) as e:
                config_logger.error(f"Invalid {key} section, using defaults: {e}")
                self._typed_cache[key] = fallback()
        return self._typed_cache[key]

    def get_logging_config(self) -> LoggingConfig:
        return self._typed('logging_config', _logging_section, LoggingConfig)

    def get_database_config(self) -> DatabaseConfig:
        return self._typed('database_config', lambda data: _section(DatabaseConfig, data), DatabaseConfig)

    def get_api_config(self) -> ApiConfig:
        return self._typed('api_config', lambda data: _section(ApiConfig, data), ApiConfig)

    # ------------------------------------------------------------------
    # 导出与批量更新
    # ------------------------------------------------------------------

    def save_config(self, file_path: Optional[str] = None) -> Path:
        """Write the merged configuration to ``file_path`` (default: config.merged.json)."""
        save_path = Path(file_path) if file_path else self._config_dir / MERGED_FILENAME
        try:
            save_path.parent.mkdir(parents=True, exist_ok=True)
            save_path.write_text(json.dumps(self.to_dict(), indent=2, ensure_ascii=False), encoding='utf-8')
        except OSError as e:
            raise ConfigurationError(
                f"Failed to save configuration to {save_path}: {e}",
                ErrorCodes.CONFIG_SAVE_ERROR
            ) from e
        config_logger.info(f"Merged configuration saved to {save_path}")
        return save_path

    def to_dict(self) -> Dict[str, Any]:
        return json.loads(json.dumps(self._config_data))

    def update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        self._config_data.update(config_dict)
        self._typed_cache.clear()
        config_logger.info(f"Configuration sections replaced: {sorted(config_dict)}")

    def clear_cache(self) -> None:
        self._typed_cache.clear()


# 全局配置实例
config_manager = UnifiedConfigManager()
