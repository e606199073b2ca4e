"""
API routes for the QOD service.
Maps the quote and source REST endpoints onto the quote manager.
"""

from typing import List, Optional, Dict, Any
from datetime import date, datetime
from uuid import UUID
from fastapi import APIRouter, Query, Request, Response
from fastapi.responses import PlainTextResponse

from quote_manager import quote_manager
from utils import ValidationError, ErrorCodes
from .models import (
    QuoteRequest, QuoteResponse, SourceRequest, SourceIdRequest,
    SourceResponse, SystemStatusResponse
)

router = APIRouter()

API_VERSION = "1.0.0"


def _source_response(request: Request, source: Optional[Dict[str, Any]]) -> Optional[SourceResponse]:
    if source is None:
        return None
    return SourceResponse(
        href=str(request.url_for("get_source", source_id=source['id'])),
        **source
    )


def _quote_response(request: Request, quote: Dict[str, Any]) -> QuoteResponse:
    return QuoteResponse(
        id=quote['id'],
        text=quote['text'],
        source=_source_response(request, quote['source']),
        created_at=quote['created_at'],
        updated_at=quote['updated_at'],
        href=str(request.url_for("get_quote", quote_id=quote['id']))
    )


def _source_args(body: QuoteRequest) -> Dict[str, Any]:
    """把请求体中的来源引用转换为管理器参数"""
    if body.source is None:
        return {"has_source": False}
    return {
        "has_source": True,
        "source_id": str(body.source.id) if body.source.id else None,
        "source_name": body.source.name,
    }


# System Status
@router.get("/system/status", response_model=SystemStatusResponse, tags=["System"])
async def get_system_status():
    """获取系统状态"""
    stats = await quote_manager.get_statistics()
    return SystemStatusResponse(
        status="running",
        version=API_VERSION,
        timestamp=datetime.now(),
        **stats
    )


# Quotes
@router.post("/quotes", response_model=QuoteResponse, status_code=201, tags=["Quotes"])
async def create_quote(body: QuoteRequest, request: Request, response: Response):
    """创建名言"""
    quote = await quote_manager.create_quote(body.text, **_source_args(body))
    result = _quote_response(request, quote)
    response.headers["Location"] = result.href
    return result


@router.get("/quotes", response_model=List[QuoteResponse], tags=["Quotes"])
async def list_quotes(request: Request):
    """获取全部名言，按文本排序"""
    quotes = await quote_manager.list_quotes()
    return [_quote_response(request, quote) for quote in quotes]


@router.get("/quotes/search", response_model=List[QuoteResponse], tags=["Quotes"])
async def search_quotes(request: Request, q: str = Query(..., description="搜索片段，至少3个字符")):
    """按文本片段搜索名言"""
    quotes = await quote_manager.search_quotes(q)
    return [_quote_response(request, quote) for quote in quotes]


@router.get("/quotes/random", response_model=QuoteResponse, tags=["Quotes"])
async def get_random_quote(request: Request):
    """随机名言"""
    return _quote_response(request, await quote_manager.get_random_quote())


@router.get("/quotes/qod", response_model=QuoteResponse, tags=["Quotes"])
async def get_quote_of_day(
    request: Request,
    target_date: Optional[date] = Query(None, alias="date", description="日期 (YYYY-MM-DD)，默认今天")
):
    """每日名言"""
    return _quote_response(request, await quote_manager.get_quote_of_day(target_date))


@router.get("/quotes/{quote_id}", response_model=QuoteResponse, tags=["Quotes"])
async def get_quote(quote_id: UUID, request: Request):
    """根据ID获取名言"""
    return _quote_response(request, await quote_manager.get_quote(str(quote_id)))


@router.put("/quotes/{quote_id}", response_model=QuoteResponse, tags=["Quotes"])
async def replace_quote(quote_id: UUID, body: QuoteRequest, request: Request):
    """替换名言的文本和来源"""
    quote = await quote_manager.replace_quote(str(quote_id), body.text, **_source_args(body))
    return _quote_response(request, quote)


@router.put("/quotes/{quote_id}/text", response_class=PlainTextResponse, tags=["Quotes"])
async def replace_quote_text(quote_id: UUID, request: Request):
    """仅替换名言文本（text/plain）"""
    body = await request.body()
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValidationError(
            "Quote text must be UTF-8 encoded",
            ErrorCodes.VALIDATION_INVALID_VALUE,
            {"field": "text"}
        ) from e
    text = await quote_manager.replace_quote_text(str(quote_id), text)
    return PlainTextResponse(text)


@router.delete("/quotes/{quote_id}", status_code=204, response_class=Response, tags=["Quotes"])
async def delete_quote(quote_id: UUID):
    """删除名言，不存在时同样返回 204"""
    await quote_manager.delete_quote(str(quote_id))
    return Response(status_code=204)


@router.put("/quotes/{quote_id}/source/{source_id}", response_model=QuoteResponse, tags=["Quotes"])
async def attach_source(quote_id: UUID, source_id: UUID, request: Request):
    """通过路径关联来源"""
    quote = await quote_manager.attach_source(str(quote_id), str(source_id))
    return _quote_response(request, quote)


@router.put("/quotes/{quote_id}/source", response_model=QuoteResponse, tags=["Quotes"])
async def attach_source_by_body(quote_id: UUID, body: SourceIdRequest, request: Request):
    """通过请求体关联来源"""
    quote = await quote_manager.attach_source(str(quote_id), str(body.id))
    return _quote_response(request, quote)


@router.delete("/quotes/{quote_id}/source/{source_id}", response_model=QuoteResponse, tags=["Quotes"])
async def detach_source(quote_id: UUID, source_id: UUID, request: Request):
    """解除指定来源；当前来源不一致时名言保持不变"""
    quote = await quote_manager.detach_source(str(quote_id), str(source_id))
    return _quote_response(request, quote)


@router.delete("/quotes/{quote_id}/source", response_model=QuoteResponse, tags=["Quotes"])
async def clear_source(quote_id: UUID, request: Request):
    """清除名言来源"""
    quote = await quote_manager.clear_source(str(quote_id))
    return _quote_response(request, quote)


# Sources
@router.post("/sources", response_model=SourceResponse, status_code=201, tags=["Sources"])
async def create_source(body: SourceRequest, request: Request, response: Response):
    """创建来源"""
    source = _source_response(request, await quote_manager.create_source(body.name))
    response.headers["Location"] = source.href
    return source


@router.get("/sources", response_model=List[SourceResponse], tags=["Sources"])
async def list_sources(request: Request):
    """获取全部来源，按名称排序"""
    sources = await quote_manager.list_sources()
    return [_source_response(request, source) for source in sources]


@router.get("/sources/{source_id}", response_model=SourceResponse, tags=["Sources"])
async def get_source(source_id: UUID, request: Request):
    """根据ID获取来源"""
    return _source_response(request, await quote_manager.get_source(str(source_id)))


@router.put("/sources/{source_id}", response_model=SourceResponse, tags=["Sources"])
async def update_source(source_id: UUID, body: SourceRequest, request: Request):
    """修改来源名称"""
    return _source_response(request, await quote_manager.update_source(str(source_id), body.name))


@router.delete("/sources/{source_id}", status_code=204, response_class=Response, tags=["Sources"])
async def delete_source(source_id: UUID):
    """删除来源；其名言保留但来源置空"""
    await quote_manager.delete_source(str(source_id))
    return Response(status_code=204)


@router.get("/sources/{source_id}/quotes", response_model=List[QuoteResponse], tags=["Sources"])
async def list_source_quotes(source_id: UUID, request: Request):
    """获取某来源的全部名言"""
    quotes = await quote_manager.list_source_quotes(str(source_id))
    return [_quote_response(request, quote) for quote in quotes]
