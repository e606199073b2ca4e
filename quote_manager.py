"""
Quote Manager for the QOD service.
Provides the quote and source operations behind the REST API, including the
random quote and the date-derived quote of the day.
"""

from __future__ import annotations
from datetime import date
from typing import List, Dict, Any, Optional

from utils import (
    qm_logger, log_execution, day_offset, local_today,
    NotFoundError, EmptyCollectionError, ValidationError, ErrorCodes,
    DataValidator, QueryValidator
)
from database.operations import DatabaseOperations


class QuoteManager:
    """名言管理器"""

    def __init__(self, db_ops: DatabaseOperations = None):
        if db_ops is None:
            from database import db_ops
        self.db_ops = db_ops

    @log_execution("QuoteManager", "initialize")
    async def initialize(self) -> None:
        """初始化数据库表"""
        await self.db_ops.initialize()

    # ------------------------------------------------------------------
    # 查找（不存在即失败）
    # ------------------------------------------------------------------

    async def get_quote(self, quote_id: str) -> Dict[str, Any]:
        """获取名言，不存在时抛出 NotFoundError"""
        quote = await self.db_ops.get_quote_by_id(str(quote_id))
        if quote is None:
            raise NotFoundError(
                f"Quote not found: {quote_id}",
                ErrorCodes.QUOTE_NOT_FOUND,
                {"quote_id": str(quote_id)}
            )
        return quote

    async def get_source(self, source_id: str) -> Dict[str, Any]:
        """获取来源，不存在时抛出 NotFoundError"""
        source = await self.db_ops.get_source_by_id(str(source_id))
        if source is None:
            raise NotFoundError(
                f"Source not found: {source_id}",
                ErrorCodes.SOURCE_NOT_FOUND,
                {"source_id": str(source_id)}
            )
        return source

    async def _update_quote(self, quote_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """写入更新；名言在读取后被删除时抛出 NotFoundError"""
        updated = await self.db_ops.update_quote(quote_id, values)
        if updated is None:
            raise NotFoundError(
                f"Quote not found: {quote_id}",
                ErrorCodes.QUOTE_NOT_FOUND,
                {"quote_id": str(quote_id)}
            )
        return updated

    async def _resolve_source(self, source_id: Optional[str], source_name: Optional[str]) -> Optional[str]:
        """
        Turn a source reference from a request body into a stored source id.

        An id must name an existing source; a bare name creates a new source.
        """
        if source_id is not None:
            source = await self.get_source(source_id)
            return source['id']
        if source_name is not None:
            DataValidator.validate_text(source_name, "source.name")
            source = await self.db_ops.create_source(source_name)
            return source['id']
        raise ValidationError(
            "Source reference requires an id or a name",
            ErrorCodes.VALIDATION_MISSING_REQUIRED_FIELD,
            {"field": "source"}
        )

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------

    @log_execution("QuoteManager", "create_quote")
    async def create_quote(self, text: str, has_source: bool = False,
                           source_id: Optional[str] = None,
                           source_name: Optional[str] = None) -> Dict[str, Any]:
        DataValidator.validate_text(text)
        resolved = await self._resolve_source(source_id, source_name) if has_source else None
        return await self.db_ops.create_quote(text, resolved)

    async def list_quotes(self) -> List[Dict[str, Any]]:
        return await self.db_ops.get_all_quotes()

    @log_execution("QuoteManager", "search_quotes")
    async def search_quotes(self, fragment: str) -> List[Dict[str, Any]]:
        """搜索名言；片段不足 3 个字符时在查询前拒绝"""
        fragment = QueryValidator.validate_search_term(fragment)
        return await self.db_ops.search_quotes(fragment)

    @log_execution("QuoteManager", "get_random_quote")
    async def get_random_quote(self) -> Dict[str, Any]:
        quote = await self.db_ops.get_random_quote()
        if quote is None:
            raise EmptyCollectionError("No quotes available", ErrorCodes.EMPTY_COLLECTION)
        return quote

    @log_execution("QuoteManager", "get_quote_of_day")
    async def get_quote_of_day(self, target_date: Optional[date] = None) -> Dict[str, Any]:
        """
        Select the quote of the day for ``target_date`` (default: local today).

        The date's epoch day, taken modulo the number of quotes, indexes into
        the quotes ordered by text. The same date maps to the same quote for as
        long as the collection is unchanged.
        """
        target_date = target_date or local_today()
        count = await self.db_ops.count_quotes()
        if count == 0:
            raise EmptyCollectionError(
                "No quotes available for a quote of the day",
                ErrorCodes.EMPTY_COLLECTION,
                {"date": target_date.isoformat()}
            )

        offset = day_offset(target_date, count)
        qm_logger.debug(f"Quote of the day for {target_date}: offset {offset} of {count}")

        quote = await self.db_ops.get_quote_at_offset(offset)
        if quote is None:
            # 计数与读取之间集合发生了变化
            raise NotFoundError(
                f"No quote at offset {offset}",
                ErrorCodes.QUOTE_NOT_FOUND,
                {"date": target_date.isoformat(), "offset": offset, "count": count}
            )
        return quote

    @log_execution("QuoteManager", "replace_quote")
    async def replace_quote(self, quote_id: str, text: str, has_source: bool = False,
                            source_id: Optional[str] = None,
                            source_name: Optional[str] = None) -> Dict[str, Any]:
        """替换名言文本和来源；未提供来源时清除来源"""
        DataValidator.validate_text(text)
        quote = await self.get_quote(quote_id)
        resolved = await self._resolve_source(source_id, source_name) if has_source else None
        return await self._update_quote(quote['id'], {'text': text, 'source_id': resolved})

    @log_execution("QuoteManager", "replace_quote_text")
    async def replace_quote_text(self, quote_id: str, text: str) -> str:
        DataValidator.validate_text(text)
        quote = await self.get_quote(quote_id)
        updated = await self._update_quote(quote['id'], {'text': text})
        return updated['text']

    @log_execution("QuoteManager", "delete_quote")
    async def delete_quote(self, quote_id: str) -> None:
        """删除名言；不存在时不做任何操作"""
        deleted = await self.db_ops.delete_quote(str(quote_id))
        if not deleted:
            qm_logger.info(f"Quote {quote_id} not found, nothing to delete")

    @log_execution("QuoteManager", "attach_source")
    async def attach_source(self, quote_id: str, source_id: str) -> Dict[str, Any]:
        quote = await self.get_quote(quote_id)
        source = await self.get_source(source_id)
        if quote['source_id'] == source['id']:
            return quote
        return await self._update_quote(quote['id'], {'source_id': source['id']})

    @log_execution("QuoteManager", "detach_source")
    async def detach_source(self, quote_id: str, source_id: str) -> Dict[str, Any]:
        """仅当名言当前来源与指定来源一致时才解除关联"""
        quote = await self.get_quote(quote_id)
        source = await self.get_source(source_id)
        if quote['source_id'] != source['id']:
            return quote
        return await self._update_quote(quote['id'], {'source_id': None})

    @log_execution("QuoteManager", "clear_source")
    async def clear_source(self, quote_id: str) -> Dict[str, Any]:
        quote = await self.get_quote(quote_id)
        return await self._update_quote(quote['id'], {'source_id': None})

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    @log_execution("QuoteManager", "create_source")
    async def create_source(self, name: str) -> Dict[str, Any]:
        DataValidator.validate_text(name, "name")
        return await self.db_ops.create_source(name)

    async def list_sources(self) -> List[Dict[str, Any]]:
        return await self.db_ops.get_all_sources()

    @log_execution("QuoteManager", "update_source")
    async def update_source(self, source_id: str, name: str) -> Dict[str, Any]:
        DataValidator.validate_text(name, "name")
        source = await self.get_source(source_id)
        return await self.db_ops.update_source(source['id'], name)

    @log_execution("QuoteManager", "delete_source")
    async def delete_source(self, source_id: str) -> None:
        """删除来源；其名言保留但不再有来源"""
        deleted = await self.db_ops.delete_source(str(source_id))
        if not deleted:
            qm_logger.info(f"Source {source_id} not found, nothing to delete")

    async def list_source_quotes(self, source_id: str) -> List[Dict[str, Any]]:
        source = await self.get_source(source_id)
        return await self.db_ops.get_quotes_by_source(source['id'])

    # ------------------------------------------------------------------
    # 系统状态
    # ------------------------------------------------------------------

    async def get_statistics(self) -> Dict[str, int]:
        return {
            'total_quotes': await self.db_ops.count_quotes(),
            'total_sources': await self.db_ops.count_sources(),
            'unattributed_quotes': await self.db_ops.count_quotes(unattributed_only=True),
        }


# 全局名言管理器实例
quote_manager = QuoteManager()
