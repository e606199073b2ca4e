"""
database models for the QOD service.
Quotes optionally reference the source they are attributed to.
"""

import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import declarative_base, relationship

from utils.date_utils import utc_now

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


class SourceDB(Base):
    """database model for quote sources (authors, books, speeches...)"""
    __tablename__ = 'sources'

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False, index=True)

    # Metadata
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    # Relationships
    quotes = relationship("QuoteDB", back_populates="source", passive_deletes=True)


class QuoteDB(Base):
    """database model for quotes"""
    __tablename__ = 'quotes'

    id = Column(String(36), primary_key=True, default=new_id)
    text = Column(Text, nullable=False)
    source_id = Column(String(36), ForeignKey('sources.id', ondelete='SET NULL'), nullable=True, index=True)

    # Metadata
    created_at = Column(DateTime, nullable=False, default=utc_now)  # 创建后不再修改
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    # Relationships
    source = relationship("SourceDB", back_populates="quotes", lazy="joined")

    __table_args__ = (
        # 列表、搜索和每日名言都按文本排序
        Index('idx_quotes_text_id', 'text', 'id'),
    )
