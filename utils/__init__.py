"""
工具模块包
提供项目所需的通用工具和功能
"""

# 导出核心工具
from .config_manager import config_manager, LoggingConfig, DatabaseConfig, ApiConfig
from .exceptions import (
    QodError,
    ConfigurationError,
    DatabaseError,
    NotFoundError,
    EmptyCollectionError,
    ValidationError,
    SearchTermTooShortError,
    ErrorCodes,
    create_error_response
)
from .logging_manager import (
    LogContext,
    log_execution,
    log_performance,
    logging_manager,
    logger,
    initialize_logging,
    ModuleLoggers,
    api_logger,
    db_logger,
    qm_logger,
    config_logger,
    validation_logger
)
from .date_utils import epoch_day, day_offset, parse_date, local_today, utc_now
from .path_utils import BASE_DIR, CONFIG_DIR, LOG_DIR, DATA_DIR, resolve_path
from .validation import DataValidator, QueryValidator

# 版本信息
__version__ = "1.0.0"

__all__ = [
    # 配置管理
    "config_manager",
    "LoggingConfig",
    "DatabaseConfig",
    "ApiConfig",

    # 异常处理
    "QodError",
    "ConfigurationError",
    "DatabaseError",
    "NotFoundError",
    "EmptyCollectionError",
    "ValidationError",
    "SearchTermTooShortError",
    "ErrorCodes",
    "create_error_response",

    # 日志工具
    "LogContext",
    "log_execution",
    "log_performance",
    "logging_manager",
    "logger",
    "initialize_logging",
    "ModuleLoggers",
    "api_logger",
    "db_logger",
    "qm_logger",
    "config_logger",
    "validation_logger",

    # 日期工具
    "epoch_day",
    "day_offset",
    "parse_date",
    "local_today",
    "utc_now",

    # 路径工具
    "BASE_DIR",
    "CONFIG_DIR",
    "LOG_DIR",
    "DATA_DIR",
    "resolve_path",

    # 验证工具
    "DataValidator",
    "QueryValidator",
]
