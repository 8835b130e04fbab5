"""FastAPI application factory and lifespan management."""

import asyncio
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from autopilot.config import API_VERSION, settings
from autopilot.logging_config import configure_logging

# Configure logging at import time
_json_logs = os.environ.get("AUTOPILOT_LOCAL", "0") != "1"
configure_logging(log_level=settings.log_level, json_output=_json_logs)

logger = logging.getLogger(__name__)


def build_runtime(state, session_factory) -> None:
    """Attach supplier and marketplace clients and the job runner to ``state``."""
    from autopilot.integrations.cj import CJClient
    from autopilot.integrations.ebay import EbayTradingClient
    from autopilot.services.pricing import PricingConfig
    from autopilot.workers.base import WorkerServices
    from autopilot.workers.runner import JobRunner

    state.cj = CJClient.from_settings(settings, session_factory)
    state.ebay = EbayTradingClient.from_settings(settings)
    state.pricing = PricingConfig.from_settings(settings)
    services = WorkerServices(
        cj=state.cj,
        ebay=state.ebay,
        ebay_default_category_id=settings.ebay_default_category_id,
        ebay_order_lookback_days=settings.ebay_order_lookback_days,
    )
    state.job_runner = JobRunner.from_settings(settings, session_factory, services)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    from autopilot.db.engine import create_db_engine, create_session_factory, create_tables

    db_url = settings.effective_database_url
    engine = create_db_engine(db_url)

    # Auto-create tables for SQLite (local dev, no Alembic migrations)
    if "sqlite" in db_url:
        await create_tables(engine)
        logger.info("SQLite tables created (local mode)")

    app.state.db_engine = engine
    app.state.db_session_factory = create_session_factory(engine)
    build_runtime(app.state, app.state.db_session_factory)

    scheduler_task = None
    if settings.worker_enabled:
        from autopilot.workers.scheduler import run_scheduler
        scheduler_task = asyncio.create_task(run_scheduler(app, settings.worker_poll_interval))

    logger.info("Autopilot API started (db=%s)", "sqlite" if "sqlite" in db_url else "postgresql")
    yield

    # Shutdown
    if scheduler_task is not None:
        scheduler_task.cancel()
        try:
            await scheduler_task
        except asyncio.CancelledError:
            pass
    await engine.dispose()
    logger.info("Autopilot API shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Dropship Autopilot API",
        version=API_VERSION,
        description="Seller API for eBay orders, CJ Dropshipping fulfillment and listings.",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    from autopilot.api.middleware.gateway import GatewayMiddleware
    from autopilot.api.middleware.path_prefix import PathPrefixMiddleware
    from autopilot.api.middleware.trace_id import TraceIdMiddleware
    app.add_middleware(GatewayMiddleware)
    app.add_middleware(TraceIdMiddleware)

    # CORS for the seller dashboard
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(PathPrefixMiddleware)

    # Register error handlers
    from autopilot.errors.handlers import register_exception_handlers
    register_exception_handlers(app)

    # Import and mount routers
    from autopilot.api.router import api_router
    app.include_router(api_router)

    return app


app = create_app()
