"""
Data validation utilities for the QOD service.
Provides functions to validate and sanitize input data.
"""

from typing import Optional

from .exceptions import ValidationError, SearchTermTooShortError, ErrorCodes
from .logging_manager import validation_logger


class DataValidator:
    """数据验证器"""

    @staticmethod
    def validate_text(text: Optional[str], field_name: str = "text") -> str:
        """名言文本必须存在且非空白"""
        if text is None or not text.strip():
            validation_logger.warning(f"Rejected empty {field_name}")
            raise ValidationError(
                f"{field_name} must not be empty",
                ErrorCodes.VALIDATION_MISSING_REQUIRED_FIELD,
                {"field": field_name}
            )
        return text


class QueryValidator:
    """查询参数验证器"""

    MIN_SEARCH_TERM_LENGTH = 3

    @classmethod
    def validate_search_term(cls, fragment: Optional[str]) -> str:
        """搜索片段至少包含 3 个字符"""
        fragment = fragment or ""
        if len(fragment) < cls.MIN_SEARCH_TERM_LENGTH:
            validation_logger.info(f"Search term too short: {fragment!r}")
            raise SearchTermTooShortError(
                f"Search term must be at least {cls.MIN_SEARCH_TERM_LENGTH} characters long",
                ErrorCodes.VALIDATION_SEARCH_TERM_TOO_SHORT,
                {"q": fragment, "min_length": cls.MIN_SEARCH_TERM_LENGTH}
            )
        return fragment
