"""Route registration — mounts the webhook router under ``/api``."""

from fastapi import FastAPI

from postop_server.routes.webhook import router as webhook_router

API_PREFIX = "/api"


def register_routes(app: FastAPI) -> None:
    """Include all sub-routers under the API prefix."""
    app.include_router(webhook_router, prefix=API_PREFIX)
