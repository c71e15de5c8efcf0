#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Knowledge Base FastAPI Application
==================================
Entry point.  Start with:
    uvicorn knowledge_base.main:app --reload
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from knowledge_base.core.config import get_settings
from knowledge_base.core.log_config import configure_logging
from knowledge_base.routes import auth, topics
from knowledge_base.store import StoreError

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup / shutdown."""
    settings = get_settings()
    logger.info("Starting %s %s (%s, %s store)", settings.app_name, settings.app_version,
                settings.environment, settings.storage_backend)
    if settings.storage_backend == "sql":
        from knowledge_base.core.database import dispose_engine, init_db
        await init_db()
        yield
        await dispose_engine()
    else:
        yield


# -----------------------------------------------------------------------------

async def _store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Storage failure"})


# -----------------------------------------------------------------------------

def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        description="Hierarchical, versioned knowledge-base topics",
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # ── CORS ──────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StoreError, _store_error_handler)

    # ── Routers ───────────────────────────────────────────────────────────
    API = "/api/v1"
    app.include_router(auth.router,   prefix=API)
    app.include_router(topics.router, prefix=API)

    @app.get("/")
    async def root():
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/api/docs",
        }

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()


# -----------------------------------------------------------------------------
