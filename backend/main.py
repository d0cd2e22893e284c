"""
Dashboard Derivation Engine - Main Application

FastAPI server that turns a tabular dataset into chart-ready dashboard data.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import get_settings
from api.routes import dashboard, explain, table, upload
from api.schemas.responses import ErrorResponse
from core.cache import derivation_cache, session_store
from core.logging_config import get_logger
from llm.ollama_client import ollama_client


logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()

    # Startup
    logger.info(f"{settings.app_name} v{settings.app_version} starting...")
    logger.info(f"Ollama model: {settings.ollama.model}")

    yield

    # Shutdown
    await ollama_client.close()
    logger.info("Shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Type inference, statistics, category and time series aggregation, table views and CSV export for dashboards",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(upload.router, prefix="/api/v1", tags=["Upload"])
    app.include_router(dashboard.router, prefix="/api/v1", tags=["Dashboard"])
    app.include_router(table.router, prefix="/api/v1", tags=["Table"])
    app.include_router(explain.router, prefix="/api/v1", tags=["Explain"])

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        """Log unexpected failures and answer with an ErrorResponse body."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        body = ErrorResponse(error="Internal server error", detail=str(exc), code=type(exc).__name__)
        return JSONResponse(status_code=500, content=body.model_dump())

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
            "sessions": len(session_store.list_sessions()),
            "cache": derivation_cache.stats(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
