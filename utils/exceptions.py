"""
统一异常定义模块
提供项目特定的异常类和错误处理机制
"""

from typing import Optional, Dict, Any


class QodError(Exception):
    """QOD服务基础异常类"""

    status_code = 500

    def __init__(self, message: str, error_code: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ConfigurationError(QodError):
    """配置相关错误"""
    pass


class DatabaseError(QodError):
    """数据库相关错误"""
    pass


class NotFoundError(QodError):
    """资源不存在"""
    status_code = 404


class EmptyCollectionError(NotFoundError):
    """没有可供选择的名言"""
    pass


class ValidationError(QodError):
    """数据验证错误"""
    status_code = 400


class SearchTermTooShortError(ValidationError):
    """搜索词过短"""
    pass


# 错误代码常量
class ErrorCodes:
    """错误代码常量"""

    # 配置错误
    CONFIG_NOT_FOUND = "CONFIG_001"
    CONFIG_INVALID_FORMAT = "CONFIG_002"
    CONFIG_LOAD_ERROR = "CONFIG_003"
    CONFIG_SAVE_ERROR = "CONFIG_004"

    # 数据库错误
    DB_CONNECTION_FAILED = "DB_001"
    DB_QUERY_FAILED = "DB_002"
    DB_TRANSACTION_FAILED = "DB_003"

    # 资源错误
    QUOTE_NOT_FOUND = "NOT_FOUND_001"
    SOURCE_NOT_FOUND = "NOT_FOUND_001"
    EMPTY_COLLECTION = "NOT_FOUND_002"

    # 验证错误
    VALIDATION_INVALID_VALUE = "VAL_001"
    VALIDATION_SEARCH_TERM_TOO_SHORT = "VAL_002"
    VALIDATION_MISSING_REQUIRED_FIELD = "VAL_003"


def create_error_response(error: QodError) -> Dict[str, Any]:
    """错误响应体（不含时间戳，由中间件补充）"""
    return {
        "error": error.__class__.__name__,
        "error_code": error.error_code,
        "message": error.message,
        "details": error.context
    }
