"""FastAPI dependency injection — settings, engine, dispatcher, recorder, auth.

Shared objects are built once in the lifespan handler and stashed on
``app.state``; these dependencies hand them to route functions.  Tests swap
them via ``app.dependency_overrides``.
"""

import hmac

from fastapi import Header, Request

from postop_triage.engine import TriageEngine

from postop_server.config import ServerSettings
from postop_server.dispatcher import AlertDispatcher
from postop_server.errors import AuthError, ServerMisconfiguredError
from postop_server.persistence import FeedbackRecorder


# ------------------------------------------------------------------
# Singletons — stashed on app.state during lifespan
# ------------------------------------------------------------------

def get_settings(request: Request) -> ServerSettings:
    """Return the settings the app was created with."""
    return request.app.state.settings


def get_engine(request: Request) -> TriageEngine:
    """Return the TriageEngine singleton from ``app.state``."""
    return request.app.state.engine


def get_dispatcher(request: Request) -> AlertDispatcher:
    """Return the AlertDispatcher singleton from ``app.state``."""
    return request.app.state.dispatcher


def get_recorder(request: Request) -> FeedbackRecorder | None:
    """Return the FeedbackRecorder, or ``None`` when persistence is disabled."""
    return request.app.state.recorder


# ------------------------------------------------------------------
# Authentication — shared bearer token
# ------------------------------------------------------------------

def extract_token(authorization: str | None) -> str:
    """Accept ``Bearer <token>`` or a raw token; return ``""`` if absent."""
    header = (authorization or "").strip()
    if header[:7].lower() == "bearer ":
        return header[7:].strip()
    return header


async def require_token(
    request: Request,
    authorization: str | None = Header(None),
) -> None:
    """Validate the ``Authorization`` header against ``SECRET_TOKEN``.

    Raises 500 when the server has no secret configured (fail closed) and
    401 when the token is missing or wrong.
    """
    secret = get_settings(request).secret_token
    if not secret:
        raise ServerMisconfiguredError("SECRET_TOKEN is not configured")

    token = extract_token(authorization)
    if not token:
        raise AuthError("missing bearer token")
    # Constant-time comparison to prevent timing side-channels.
    if not hmac.compare_digest(token.encode(), secret.encode()):
        raise AuthError("bearer token mismatch")
