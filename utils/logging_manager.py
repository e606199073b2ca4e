"""
Logging setup for the QOD service.

Configures the root logger from ``logging_config`` (console plus a rotating
log file), applies per-module levels and provides the helpers that time
service operations and store queries.
"""

import asyncio
import logging
import sys
import time
import functools
import inspect
import threading
from contextlib import contextmanager
from pathlib import Path
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Optional, Dict, Any, Callable, Iterator
from collections import Counter

from .exceptions import QodError, ConfigurationError, ErrorCodes
from .config_manager import config_manager, LoggingConfig
from .path_utils import resolve_path

logger = logging.getLogger("LoggingManager")


def _build_file_handler(config: LoggingConfig) -> logging.Handler:
    """按配置创建按大小或按天轮转的文件处理器"""
    file_config = config.file_config
    rotation = file_config.rotation or {}
    log_dir = resolve_path(file_config.directory)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = Path(log_dir) / file_config.filename
    backup_count = rotation.get('backup_count', 5)

    if rotation.get('type', 'size') == 'time':
        return TimedRotatingFileHandler(
            log_path, when="midnight", backupCount=backup_count, encoding="utf-8"
        )
    return RotatingFileHandler(
        log_path,
        maxBytes=int(rotation.get('max_bytes_mb', 10) * 1024 * 1024),
        backupCount=backup_count,
        encoding="utf-8"
    )


class LoggingManager:
    """进程级日志管理器（单例）"""

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._metrics = Counter()
                instance.slow_operation_threshold = 1.0
                instance.config = LoggingConfig()
                cls._instance = instance
        return cls._instance

    def configure(self, config: Optional[LoggingConfig] = None) -> None:
        """Replace the root handlers according to ``config``."""
        self.config = config or LoggingConfig()
        root = logging.getLogger()
        root.setLevel(logging.getLevelName(self.config.level.upper()))

        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()

        handlers = []
        if self.config.console_config.enabled:
            handlers.append(logging.StreamHandler(sys.stdout))
        if self.config.file_config.enabled:
            handlers.append(_build_file_handler(self.config))

        formatter = logging.Formatter(self.config.format, datefmt=self.config.date_format)
        for handler in handlers:
            handler.setFormatter(formatter)
            root.addHandler(handler)

        for name, module_config in self.config.modules.items():
            level = module_config.level.upper() if module_config.enabled else "CRITICAL"
            self.set_level(level, name)

        if self.config.performance_monitoring.enabled:
            self.slow_operation_threshold = self.config.performance_monitoring.slow_operation_threshold
        else:
            self.slow_operation_threshold = float("inf")

    def configure_from_config_file(self) -> LoggingConfig:
        try:
            logging_config = config_manager.get_logging_config()
            self.configure(logging_config)
        except (OSError, ValueError, TypeError) as e:
            raise ConfigurationError(
                f"Failed to configure logging: {e}",
                ErrorCodes.CONFIG_INVALID_FORMAT
            ) from e
        return logging_config

    def get_logger(self, name: Optional[str] = None) -> logging.Logger:
        return logging.getLogger(name or "qod")

    def set_level(self, level: str, logger_name: Optional[str] = None) -> None:
        level_value = logging.getLevelName(level.upper())
        if not isinstance(level_value, int):
            level_value = logging.INFO
        logging.getLogger(logger_name).setLevel(level_value)

    def count(self, key: str) -> None:
        self._metrics[key] += 1

    def get_metrics(self) -> Dict[str, int]:
        """按 ``模块.操作_结果`` 统计的调用次数"""
        return dict(self._metrics)

    def reset_metrics(self) -> None:
        self._metrics.clear()


class LogContext:
    """
    Time one service operation and log its outcome.

    Client errors (``QodError`` with a status below 500, e.g. an unknown quote
    id) are logged as warnings; anything else as an error with traceback.
    """

    def __init__(self, module: str, operation: str = None,
                 quote_id: str = None, source_id: str = None, **kwargs):
        self.module = module
        self.operation = operation or "operation"
        self.fields = {'quote': quote_id, 'source': source_id}
        self.fields.update(kwargs)
        self.logger = logging_manager.get_logger(module)
        self.start_time = 0.0

    @property
    def label(self) -> str:
        details = " ".join(f"{key}={value}" for key, value in self.fields.items() if value is not None)
        return f"{self.module}.{self.operation}" + (f" {details}" if details else "")

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.debug(f"[{self.label}] started")
        logging_manager.count(f"{self.module}.{self.operation}_started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - self.start_time
        if exc_type is None:
            self.logger.info(f"[{self.label}] done in {elapsed:.3f}s")
            logging_manager.count(f"{self.module}.{self.operation}_completed")
            return False

        message = f"[{self.label}] failed after {elapsed:.3f}s: {exc_val}"
        if isinstance(exc_val, QodError) and exc_val.status_code < 500:
            self.logger.warning(message)
        else:
            self.logger.error(message, exc_info=(exc_type, exc_val, exc_tb))
        logging_manager.count(f"{self.module}.{self.operation}_failed")
        return False


def _wrap(func: Callable, around: Callable[..., Any]) -> Callable:
    """用上下文管理器工厂包装同步或异步函数"""
    if asyncio.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            with around(args, kwargs):
                return await func(*args, **kwargs)
        return async_wrapper

    @functools.wraps(func)
    def sync_wrapper(*args, **kwargs):
        with around(args, kwargs):
            return func(*args, **kwargs)
    return sync_wrapper


def log_execution(module: str, operation: str = None):
    """记录操作开始、耗时和失败；参数中的 quote_id/source_id/target_date 写入日志"""
    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        def around(args, kwargs):
            try:
                bound = signature.bind_partial(*args, **kwargs).arguments
            except TypeError:
                bound = kwargs
            context = {key: str(bound[key]) for key in ('quote_id', 'source_id', 'target_date')
                       if bound.get(key) is not None}
            return LogContext(module, operation or func.__name__, **context)
        return _wrap(func, around)
    return decorator


def log_performance(module: str, threshold: float = None):
    """超过阈值的调用记为慢操作"""
    def decorator(func: Callable) -> Callable:
        @contextmanager
        def around(args, kwargs) -> Iterator[None]:
            start = time.perf_counter()
            try:
                yield
            finally:
                elapsed = time.perf_counter() - start
                limit = threshold if threshold is not None else logging_manager.slow_operation_threshold
                module_logger = logging_manager.get_logger(module)
                if elapsed > limit:
                    module_logger.warning(f"[{module}] Slow operation: {func.__name__} took {elapsed:.2f}s")
                else:
                    module_logger.debug(f"[{module}] {func.__name__} took {elapsed:.3f}s")
        return _wrap(func, around)
    return decorator


logging_manager = LoggingManager()


class ModuleLoggers:
    """模块日志器"""

    API = logging_manager.get_logger("API")
    Database = logging_manager.get_logger("Database")
    QuoteManager = logging_manager.get_logger("QuoteManager")
    Config = logging_manager.get_logger("Config")
    Validation = logging_manager.get_logger("Validation")

    @classmethod
    def get_logger(cls, module_name: str) -> logging.Logger:
        return logging_manager.get_logger(module_name)


api_logger = ModuleLoggers.API
db_logger = ModuleLoggers.Database
qm_logger = ModuleLoggers.QuoteManager
config_logger = ModuleLoggers.Config
validation_logger = ModuleLoggers.Validation


def initialize_logging(use_config_file: bool = True) -> bool:
    """Configure logging, falling back to defaults if the config is unusable."""
    if use_config_file:
        try:
            logging_config = logging_manager.configure_from_config_file()
            logger.info(
                f"Logging initialized (level={logging_config.level}, "
                f"file={logging_config.file_config.enabled}, console={logging_config.console_config.enabled})"
            )
            return True
        except ConfigurationError as e:
            print(f"Failed to initialize logging from config file: {e}", file=sys.stderr)

    logging_manager.configure()
    logger.info("Logging initialized with default configuration")
    return False


initialize_logging(use_config_file=True)
