"""FastAPI application factory"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from split_ledger.api.errors import register_exception_handlers
from split_ledger.api.middleware import RequestTracingMiddleware
from split_ledger.api.v1 import seed, settle, transactions, users
from split_ledger.api.v1.schemas import PROBLEM_RESPONSES
from split_ledger.config import Settings, settings as default_settings
from split_ledger.infrastructure.database.session import build_engine, build_session_factory
from split_ledger.infrastructure.observability.logging import setup_logging
from split_ledger.infrastructure.store.base import EntryStore
from split_ledger.infrastructure.store.idempotency import IdempotencyCache
from split_ledger.infrastructure.store.memory import InMemoryEntryStore
from split_ledger.infrastructure.store.sql import SqlEntryStore
from split_ledger.services.ledger_service import LedgerService


def build_store(config: Settings) -> EntryStore:
    """Pick the entry store backend from configuration"""
    if config.store_backend == "sql":
        return SqlEntryStore(build_session_factory(build_engine(config.database_url)))
    if config.store_backend == "memory":
        return InMemoryEntryStore()
    raise ValueError(f"Unknown store backend: {config.store_backend!r}")


def build_api_router() -> APIRouter:
    router = APIRouter(responses=PROBLEM_RESPONSES)
    router.include_router(users.router, tags=["users"])
    router.include_router(transactions.router, tags=["transactions"])
    router.include_router(settle.router, tags=["settlements"])
    router.include_router(seed.router, tags=["seed"])
    return router


def create_app(config: Optional[Settings] = None, store: Optional[EntryStore] = None) -> FastAPI:
    """Create and configure FastAPI application with its own ledger service"""
    config = config or default_settings
    setup_logging(config.log_level, config.service_name)

    app = FastAPI(
        title="Split Ledger",
        description="Shared expense ledger for two parties",
        version=config.service_version,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = config
    app.state.ledger_service = LedgerService(
        store=store if store is not None else build_store(config),
        idempotency=IdempotencyCache(),
        max_amount_cents=config.max_amount_cents,
    )

    app.add_middleware(RequestTracingMiddleware)

    register_exception_handlers(app)

    @app.get("/health")
    def health_check():
        return {
            "status": "healthy",
            "service": config.service_name,
            "version": config.service_version,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    api_router = build_api_router()
    app.include_router(api_router, prefix="/v1")
    if config.mount_root_routes:
        app.include_router(api_router)

    return app


app = create_app()
