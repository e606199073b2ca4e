"""
FastAPI application for the QOD service.
Main application entry point for the API server.
"""

from datetime import datetime
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from utils import api_logger, config_manager

from .routes import router, API_VERSION
from .middleware import setup_middleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    api_logger.info("[API] Starting QOD API...")

    from quote_manager import quote_manager
    await quote_manager.initialize()
    api_logger.info("[API] QuoteManager initialized successfully")

    yield

    api_logger.info("[API] Shutting down QOD API...")
    await quote_manager.db_ops.db.close()


app = FastAPI(
    title="QOD API",
    description="Quotes, their sources, random quotes and a quote of the day",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

setup_middleware(app)

app.include_router(router)


@app.get("/", tags=["System"])
async def root():
    """根路径"""
    return {
        "message": "QOD API",
        "version": API_VERSION,
        "docs": "/docs",
        "status": "running"
    }


@app.get("/health", tags=["System"])
async def health_check():
    """健康检查端点"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": API_VERSION
    }


if __name__ == "__main__":
    api_config = config_manager.get_api_config()
    api_logger.info(f"[API] Starting server on {api_config.host}:{api_config.port}")

    if api_config.reload:
        uvicorn.run("api.app:app", host=api_config.host, port=api_config.port, reload=True, log_level="info")
    else:
        uvicorn.run(app, host=api_config.host, port=api_config.port, workers=api_config.workers, log_level="info")
