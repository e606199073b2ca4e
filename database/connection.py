"""
Database connection management.
Provides SQLite database connections with async support.
"""

import os
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from utils import db_logger, config_manager, resolve_path, DatabaseError, ErrorCodes


def _enable_foreign_keys(dbapi_connection, connection_record):
    """确保外键约束生效（删除来源时置空引用）"""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


class DatabaseManager:
    """数据库管理器"""

    def __init__(self, db_path: Optional[str] = None, echo: Optional[bool] = None):
        db_config = config_manager.get_database_config()
        self.db_path = str(resolve_path(db_path or db_config.db_path))
        self.echo = db_config.echo if echo is None else echo
        db_logger.info(f"[Database] Using database path: {self.db_path}")
        self.sync_engine: Optional[Engine] = None
        self.async_engine = None
        self.SessionLocal = None
        self.AsyncSessionLocal = None

    @property
    def is_initialized(self) -> bool:
        return self.AsyncSessionLocal is not None

    def initialize(self):
        """初始化数据库连接"""
        if self.is_initialized:
            return

        try:
            # 确保数据目录存在
            os.makedirs(os.path.dirname(self.db_path), exist_ok=True)

            # 同步连接引擎（建表、命令行使用）
            self.sync_engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=self.echo,
                connect_args={"check_same_thread": False}
            )

            # 异步连接引擎，每个会话使用独立连接
            self.async_engine = create_async_engine(
                f"sqlite+aiosqlite:///{self.db_path}",
                echo=self.echo,
                poolclass=NullPool
            )

            event.listen(self.sync_engine, "connect", _enable_foreign_keys)
            event.listen(self.async_engine.sync_engine, "connect", _enable_foreign_keys)

            # 创建会话工厂
            self.SessionLocal = sessionmaker(
                autocommit=False,
                autoflush=False,
                bind=self.sync_engine
            )

            self.AsyncSessionLocal = sessionmaker(
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,
                bind=self.async_engine,
                class_=AsyncSession
            )

            db_logger.info("[Database] Database connection initialized successfully")

        except (SQLAlchemyError, OSError) as e:
            db_logger.error(f"[Database] Failed to initialize database: {e}")
            raise DatabaseError(
                f"Failed to initialize database: {e}",
                ErrorCodes.DB_CONNECTION_FAILED
            ) from e

    def create_tables(self):
        """创建数据库表"""
        if not self.sync_engine:
            raise DatabaseError("Database not initialized", ErrorCodes.DB_CONNECTION_FAILED)

        try:
            from .models import Base

            Base.metadata.create_all(bind=self.sync_engine)
            db_logger.info("[Database] Database tables created successfully")

        except SQLAlchemyError as e:
            db_logger.error(f"[Database] Failed to create tables: {e}")
            raise DatabaseError(
                f"Failed to create tables: {e}",
                ErrorCodes.DB_QUERY_FAILED
            ) from e

    def get_session(self) -> Session:
        """获取同步数据库会话"""
        if not self.SessionLocal:
            raise DatabaseError("Database not initialized", ErrorCodes.DB_CONNECTION_FAILED)
        return self.SessionLocal()

    def get_async_session(self) -> AsyncSession:
        """获取异步数据库会话"""
        if not self.AsyncSessionLocal:
            raise DatabaseError("Database not initialized", ErrorCodes.DB_CONNECTION_FAILED)
        return self.AsyncSessionLocal()

    async def close(self):
        """关闭数据库连接"""
        if self.async_engine:
            await self.async_engine.dispose()
        if self.sync_engine:
            self.sync_engine.dispose()
        db_logger.info("[Database] Database connections closed")


# 全局数据库管理器实例
db_manager = DatabaseManager()
