"""Customer Records REST API — FastAPI application factory."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from customer_records.api.deps import (
    create_schema,
    dispose_engine,
    get_auth_service,
    init_session_factory,
)
from customer_records.api.errors import register_error_handlers
from customer_records.api.middleware.request_context import RequestContextMiddleware
from customer_records.api.routers import auth, customers
from customer_records.core.logging import setup_logging

log = structlog.get_logger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: init DB, create tables, ensure admin. Shutdown: dispose engine."""
    factory = init_session_factory()
    await create_schema()
    auth_svc = get_auth_service()
    async with factory() as session:
        async with session.begin():
            await auth_svc.ensure_admin_exists(session)
    log.info("app.started")
    yield
    await dispose_engine()
    log.info("app.stopped")


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    setup_logging()

    app = FastAPI(
        title="Customer Records",
        description="Customer registry with claims-based authorization.",
        lifespan=_lifespan,
    )

    register_error_handlers(app)

    cors_origins = os.environ.get("CUSTOMER_RECORDS_CORS_ORIGINS", "http://localhost:3000")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in cors_origins.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    @app.get("/health", tags=["ops"])
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    app.include_router(auth.router, tags=["user"])
    app.include_router(customers.router, tags=["customer"])

    return app
