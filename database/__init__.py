"""
Database module for the QOD service.
Provides SQLite database operations with async support.
"""

from .connection import DatabaseManager, db_manager
from .operations import DatabaseOperations

# 创建全局数据库操作实例（只建立引擎，不连接数据库）
db_ops = DatabaseOperations(db_manager, auto_initialize=True)

__all__ = ['models', 'connection', 'operations', 'db_ops', 'db_manager', 'DatabaseManager', 'DatabaseOperations']
