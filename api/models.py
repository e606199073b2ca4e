"""
API data models for the QOD service.
Pydantic models for request/response validation.
"""

from typing import Optional, Dict, Any
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field, validator


class SourceReference(BaseModel):
    """名言请求体中的来源引用：已有来源的 id，或新来源的名称"""
    id: Optional[UUID] = Field(None, description="已有来源ID")
    name: Optional[str] = Field(None, description="新来源名称", max_length=200)


class QuoteRequest(BaseModel):
    """创建/替换名言请求模型"""
    text: str = Field(..., description="名言文本", min_length=1)
    source: Optional[SourceReference] = Field(None, description="来源引用")

    @validator('text')
    def validate_text(cls, v):
        if not v.strip():
            raise ValueError("Quote text must not be blank")
        return v


class SourceRequest(BaseModel):
    """创建/修改来源请求模型"""
    name: str = Field(..., description="来源名称", min_length=1, max_length=200)

    @validator('name')
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Source name must not be blank")
        return v


class SourceIdRequest(BaseModel):
    """按请求体关联来源"""
    id: UUID = Field(..., description="来源ID")


class SourceResponse(BaseModel):
    """来源响应模型"""
    id: str = Field(..., description="来源ID")
    name: str = Field(..., description="来源名称")
    created_at: datetime = Field(..., description="创建时间")
    updated_at: datetime = Field(..., description="更新时间")
    href: str = Field(..., description="资源地址")

    class Config:
        from_attributes = True


class QuoteResponse(BaseModel):
    """名言响应模型"""
    id: str = Field(..., description="名言ID")
    text: str = Field(..., description="名言文本")
    source: Optional[SourceResponse] = Field(None, description="来源")
    created_at: datetime = Field(..., description="创建时间")
    updated_at: datetime = Field(..., description="更新时间")
    href: str = Field(..., description="资源地址")

    class Config:
        from_attributes = True


class SystemStatusResponse(BaseModel):
    """系统状态响应模型"""
    status: str = Field(..., description="服务状态")
    version: str = Field(..., description="版本")
    timestamp: datetime = Field(..., description="时间戳")
    total_quotes: int = Field(..., description="名言总数")
    total_sources: int = Field(..., description="来源总数")
    unattributed_quotes: int = Field(..., description="无来源名言数")


class ErrorResponse(BaseModel):
    """错误响应模型"""
    error: str = Field(..., description="错误类型")
    error_code: str = Field(..., description="错误代码")
    message: str = Field(..., description="错误信息")
    timestamp: float = Field(..., description="时间戳")
    details: Optional[Dict[str, Any]] = Field(None, description="详细信息")
