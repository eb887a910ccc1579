"""Application factory and CLI entry point.

``create_app()`` builds the FastAPI application with:
  - Lifespan handler that loads the keyword table, builds the triage engine,
    the alert channels and dispatcher, and (optionally) the DB recorder
  - CORS middleware
  - Global exception handlers (WebhookError → 4xx/500, anything else → 500)
  - The webhook mounted under ``/api``
  - A ``/health`` endpoint for readiness checks

The ``cli()`` function is the ``postop-server`` console-script entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from postop_db.config import to_async_url
from postop_db.engine import dispose_engine, get_engine, get_session_factory
from postop_triage.engine import TriageEngine
from postop_triage.keywords import KeywordTable

from postop_server.channels import build_channels
from postop_server.config import ServerSettings, load_settings
from postop_server.dispatcher import AlertDispatcher
from postop_server.errors import WebhookError, generic_error_handler, webhook_error_handler
from postop_server.persistence import FeedbackRecorder
from postop_server.routes import register_routes

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Lifespan — runs once at startup/shutdown
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialise shared resources at startup, tear down on shutdown.

    Startup:
      1. Load the keyword table and build the ``TriageEngine``
      2. Open one shared ``httpx.AsyncClient`` and build alert channels
      3. Build the ``FeedbackRecorder`` if ``DATABASE_URL`` is set
      4. Stash everything on ``app.state`` for dependency injection

    Shutdown:
      1. Give in-flight alerts a grace period to finish
      2. Close the HTTP client and dispose the database pool
    """
    settings: ServerSettings = app.state.settings

    if not settings.secret_token:
        logger.error("Missing SECRET_TOKEN env - webhook will answer 500")

    # --- Triage engine ---
    keywords = KeywordTable(settings.keyword_table_path).load()
    app.state.engine = TriageEngine(keywords)

    # --- Alerting ---
    client = httpx.AsyncClient(
        timeout=settings.alert_timeout_seconds,
        transport=app.state.http_transport,
    )
    dispatcher = AlertDispatcher(
        build_channels(settings, client),
        timeout=settings.alert_timeout_seconds,
        link_wait=settings.case_link_wait_seconds,
    )
    app.state.dispatcher = dispatcher
    logger.info(
        "Alert channels enabled: %s",
        sorted(c.value for c in dispatcher.available_channels) or "none",
    )

    # --- Persistence (optional) ---
    app.state.recorder = None
    if settings.persistence_enabled:
        factory = get_session_factory(to_async_url(settings.database_url))  # type: ignore[arg-type]
        app.state.recorder = FeedbackRecorder(
            factory, timeout=settings.persist_timeout_seconds,
        )
        logger.info("Feedback persistence enabled")

    yield

    # --- Shutdown ---
    await dispatcher.drain(settings.shutdown_grace_seconds)
    await client.aclose()
    if settings.persistence_enabled:
        await dispose_engine()
        logger.info("Database engine disposed")


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(
    settings: ServerSettings | None = None,
    *,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build and return the configured FastAPI application.

    *http_transport* replaces the network transport of the shared alert
    client (e.g. ``httpx.MockTransport`` in tests).
    """
    if settings is None:
        settings = load_settings()

    # --- Configure logging ---
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Post-op Triage Webhook",
        description="Rule-based triage of post-operative symptom reports",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings so the lifespan handler and dependencies can read them
    app.state.settings = settings
    app.state.http_transport = http_transport

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["POST"],
        allow_headers=["Authorization", "Content-Type"],
    )

    # --- Exception handlers ---
    app.add_exception_handler(WebhookError, webhook_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # --- Health check (outside /api prefix) ---
    @app.get("/health")
    async def health() -> dict:
        """Readiness check — verifies DB connectivity when persistence is on."""
        if not settings.persistence_enabled:
            return {"status": "ok", "database": "disabled"}
        try:
            engine = get_engine()
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "ok", "database": "ok"}
        except Exception as exc:
            logger.error("Health check failed: %s", exc)
            return {"status": "error", "database": "unreachable"}

    # --- Mount all API routes ---
    register_routes(app)

    return app


# ------------------------------------------------------------------
# Module-level ASGI export (for uvicorn postop_server.app:app)
# ------------------------------------------------------------------
app = create_app()


# ------------------------------------------------------------------
# CLI entry point
# ------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: ``postop-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "postop_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
