"""Webhook error taxonomy and global exception handlers.

Route code raises :class:`WebhookError` subclasses; a single handler maps
them to status codes.  The catch-all handler turns anything unexpected into
a generic 500.  Clients only ever see the ``public_detail`` string: the
exception message and traceback stay in the server log.

:class:`AlertDeliveryError` is deliberately *not* a ``WebhookError``: it is
raised by alert channels, caught per channel by the dispatcher, and never
reaches a request handler.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class WebhookError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = 500
    public_detail: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_detail)


class AuthError(WebhookError):
    """Missing or mismatched bearer token."""

    status_code = 401
    public_detail = "Unauthorized"


class ServerMisconfiguredError(AuthError):
    """The server has no shared secret configured; fail closed."""

    status_code = 500
    public_detail = "Server misconfiguration"


class MethodNotAllowedError(WebhookError):
    """The webhook only accepts POST."""

    status_code = 405
    public_detail = "Method Not Allowed"


class MalformedInputError(WebhookError):
    """The request body is empty, not JSON, or not a JSON object."""

    status_code = 400
    public_detail = "Invalid request body"


class InternalError(WebhookError):
    """Unexpected fault while triaging a report."""

    status_code = 500
    public_detail = "Internal server error"


class AlertDeliveryError(Exception):
    """A single alert channel failed to deliver.

    Args:
        channel: name of the failing channel (``messaging`` / ``email``)
        message: what went wrong, for the server log only
    """

    def __init__(self, channel: str, message: str) -> None:
        super().__init__(f"{channel}: {message}")
        self.channel = channel


# ------------------------------------------------------------------
# Handlers
# ------------------------------------------------------------------

async def webhook_error_handler(request: Request, exc: WebhookError) -> JSONResponse:
    """Map a :class:`WebhookError` to its status code and safe detail."""
    if exc.status_code >= 500:
        logger.error("%s [%d] at %s: %s", type(exc).__name__, exc.status_code, request.url.path, exc)
    else:
        logger.warning("%s [%d] at %s: %s", type(exc).__name__, exc.status_code, request.url.path, exc)

    headers = {"Allow": "POST"} if isinstance(exc, MethodNotAllowedError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "detail": exc.public_detail},
        headers=headers,
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"ok": False, "detail": "Internal server error"},
    )
