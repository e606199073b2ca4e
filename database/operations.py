"""
database operations for the QOD service.
Quote store and source store on top of async SQLAlchemy sessions.
"""

from typing import List, Dict, Any, Optional

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.future import select

from utils import db_logger, log_performance, DatabaseError, ErrorCodes
from .connection import db_manager, DatabaseManager
from .models import QuoteDB, SourceDB


def source_to_dict(source: Optional[SourceDB]) -> Optional[Dict[str, Any]]:
    if source is None:
        return None
    return {
        'id': source.id,
        'name': source.name,
        'created_at': source.created_at,
        'updated_at': source.updated_at,
    }


def quote_to_dict(quote: Optional[QuoteDB]) -> Optional[Dict[str, Any]]:
    if quote is None:
        return None
    return {
        'id': quote.id,
        'text': quote.text,
        'source_id': quote.source_id,
        'source': source_to_dict(quote.source),
        'created_at': quote.created_at,
        'updated_at': quote.updated_at,
    }


class DatabaseOperations:
    """database operations for quotes and sources"""

    def __init__(self, db: DatabaseManager = None, auto_initialize: bool = True):
        self.db = db or db_manager
        self.db_logger = db_logger

        if auto_initialize:
            self.db.initialize()

    async def initialize(self):
        """初始化数据库并建表"""
        self.db_logger.info("Initializing DatabaseOperations...")
        self.db.initialize()
        self.db.create_tables()
        self.db_logger.info("DatabaseOperations initialized successfully")

    def get_async_session(self):
        """Get async database session"""
        return self.db.get_async_session()

    def _fail(self, action: str, error: Exception, code: str = ErrorCodes.DB_QUERY_FAILED):
        self.db_logger.error(f"Failed to {action}: {error}")
        return DatabaseError(f"Failed to {action}: {error}", code)

    # === Source Operations ===

    async def create_source(self, name: str) -> Dict[str, Any]:
        """创建来源"""
        try:
            async with self.get_async_session() as session:
                source = SourceDB(name=name)
                session.add(source)
                await session.commit()
                self.db_logger.info(f"Created source {source.id}")
                return source_to_dict(source)
        except SQLAlchemyError as e:
            raise self._fail("create source", e, ErrorCodes.DB_TRANSACTION_FAILED) from e

    async def get_source_by_id(self, source_id: str) -> Optional[Dict[str, Any]]:
        """根据ID获取来源"""
        try:
            async with self.get_async_session() as session:
                return source_to_dict(await session.get(SourceDB, source_id))
        except SQLAlchemyError as e:
            raise self._fail(f"get source {source_id}", e) from e

    async def get_all_sources(self) -> List[Dict[str, Any]]:
        """获取全部来源，按名称排序"""
        try:
            async with self.get_async_session() as session:
                stmt = select(SourceDB).order_by(SourceDB.name.asc(), SourceDB.id.asc())
                result = await session.execute(stmt)
                return [source_to_dict(source) for source in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._fail("list sources", e) from e

    async def update_source(self, source_id: str, name: str) -> Optional[Dict[str, Any]]:
        """修改来源名称"""
        try:
            async with self.get_async_session() as session:
                source = await session.get(SourceDB, source_id)
                if source is None:
                    return None
                source.name = name
                await session.commit()
                return source_to_dict(await session.get(SourceDB, source_id, populate_existing=True))
        except SQLAlchemyError as e:
            raise self._fail(f"update source {source_id}", e, ErrorCodes.DB_TRANSACTION_FAILED) from e

    async def delete_source(self, source_id: str) -> bool:
        """删除来源；引用它的名言保留，但来源置空"""
        try:
            async with self.get_async_session() as session:
                source = await session.get(SourceDB, source_id)
                if source is None:
                    return False
                await session.execute(
                    update(QuoteDB).where(QuoteDB.source_id == source_id).values(source_id=None)
                )
                await session.delete(source)
                await session.commit()
                self.db_logger.info(f"Deleted source {source_id}")
                return True
        except SQLAlchemyError as e:
            raise self._fail(f"delete source {source_id}", e, ErrorCodes.DB_TRANSACTION_FAILED) from e

    async def count_sources(self) -> int:
        try:
            async with self.get_async_session() as session:
                result = await session.execute(select(func.count()).select_from(SourceDB))
                return result.scalar_one()
        except SQLAlchemyError as e:
            raise self._fail("count sources", e) from e

    # === Quote Operations ===

    async def _load_quote(self, session, quote_id: str) -> Optional[QuoteDB]:
        stmt = (
            select(QuoteDB)
            .where(QuoteDB.id == quote_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def create_quote(self, text: str, source_id: Optional[str] = None) -> Dict[str, Any]:
        """创建名言"""
        try:
            async with self.get_async_session() as session:
                quote = QuoteDB(text=text, source_id=source_id)
                session.add(quote)
                await session.commit()
                self.db_logger.info(f"Created quote {quote.id}")
                return quote_to_dict(await self._load_quote(session, quote.id))
        except SQLAlchemyError as e:
            raise self._fail("create quote", e, ErrorCodes.DB_TRANSACTION_FAILED) from e

    async def get_quote_by_id(self, quote_id: str) -> Optional[Dict[str, Any]]:
        """根据ID获取名言"""
        try:
            async with self.get_async_session() as session:
                return quote_to_dict(await self._load_quote(session, quote_id))
        except SQLAlchemyError as e:
            raise self._fail(f"get quote {quote_id}", e) from e

    async def get_all_quotes(self) -> List[Dict[str, Any]]:
        """获取全部名言，按文本升序"""
        try:
            async with self.get_async_session() as session:
                stmt = select(QuoteDB).order_by(QuoteDB.text.asc(), QuoteDB.id.asc())
                result = await session.execute(stmt)
                return [quote_to_dict(quote) for quote in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._fail("list quotes", e) from e

    @log_performance("Database")
    async def search_quotes(self, fragment: str) -> List[Dict[str, Any]]:
        """按子串搜索名言（区分大小写），按文本升序"""
        try:
            async with self.get_async_session() as session:
                # instr 区分大小写，并且不把 % 和 _ 当作通配符
                stmt = (
                    select(QuoteDB)
                    .where(func.instr(QuoteDB.text, fragment) > 0)
                    .order_by(QuoteDB.text.asc(), QuoteDB.id.asc())
                )
                result = await session.execute(stmt)
                return [quote_to_dict(quote) for quote in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._fail(f"search quotes for {fragment!r}", e) from e

    async def get_quotes_by_source(self, source_id: str) -> List[Dict[str, Any]]:
        """获取某来源的全部名言"""
        try:
            async with self.get_async_session() as session:
                stmt = (
                    select(QuoteDB)
                    .where(QuoteDB.source_id == source_id)
                    .order_by(QuoteDB.text.asc(), QuoteDB.id.asc())
                )
                result = await session.execute(stmt)
                return [quote_to_dict(quote) for quote in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._fail(f"list quotes of source {source_id}", e) from e

    async def count_quotes(self, unattributed_only: bool = False) -> int:
        """统计名言数量"""
        try:
            async with self.get_async_session() as session:
                stmt = select(func.count()).select_from(QuoteDB)
                if unattributed_only:
                    stmt = stmt.where(QuoteDB.source_id.is_(None))
                result = await session.execute(stmt)
                return result.scalar_one()
        except SQLAlchemyError as e:
            raise self._fail("count quotes", e) from e

    @log_performance("Database")
    async def get_quote_at_offset(self, offset: int) -> Optional[Dict[str, Any]]:
        """按 (text, id) 稳定排序取第 offset 条名言"""
        try:
            async with self.get_async_session() as session:
                stmt = (
                    select(QuoteDB)
                    .order_by(QuoteDB.text.asc(), QuoteDB.id.asc())
                    .offset(offset)
                    .limit(1)
                )
                result = await session.execute(stmt)
                return quote_to_dict(result.scalars().first())
        except SQLAlchemyError as e:
            raise self._fail(f"get quote at offset {offset}", e) from e

    @log_performance("Database")
    async def get_random_quote(self) -> Optional[Dict[str, Any]]:
        """随机取一条名言"""
        try:
            async with self.get_async_session() as session:
                stmt = select(QuoteDB).order_by(func.random()).limit(1)
                result = await session.execute(stmt)
                return quote_to_dict(result.scalars().first())
        except SQLAlchemyError as e:
            raise self._fail("get random quote", e) from e

    async def update_quote(self, quote_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """更新名言字段（text / source_id），返回更新后的名言"""
        try:
            async with self.get_async_session() as session:
                quote = await self._load_quote(session, quote_id)
                if quote is None:
                    return None
                for key in ('text', 'source_id'):
                    if key in values:
                        setattr(quote, key, values[key])
                await session.commit()
                self.db_logger.info(f"Updated quote {quote_id}: {sorted(values)}")
                return quote_to_dict(await self._load_quote(session, quote_id))
        except SQLAlchemyError as e:
            raise self._fail(f"update quote {quote_id}", e, ErrorCodes.DB_TRANSACTION_FAILED) from e

    async def delete_quote(self, quote_id: str) -> bool:
        """删除名言，不存在时返回 False"""
        try:
            async with self.get_async_session() as session:
                quote = await session.get(QuoteDB, quote_id)
                if quote is None:
                    return False
                await session.delete(quote)
                await session.commit()
                self.db_logger.info(f"Deleted quote {quote_id}")
                return True
        except SQLAlchemyError as e:
            raise self._fail(f"delete quote {quote_id}", e, ErrorCodes.DB_TRANSACTION_FAILED) from e
