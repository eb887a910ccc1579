"""Post-operative report webhook — ``POST /api/postop``.

Request flow:
  1. authenticate (bearer token) — nothing else runs on failure
  2. read the body as a JSON object (empty / non-JSON / non-object → 400)
  3. normalize → classify (pure, in-process)
  4. start storing the report, best-effort, bounded by a timeout
  5. decide on a staff alert and hand it to the dispatcher, detached; the
     alert waits briefly for the record id to carry a case link, then goes
     out with or without it
  6. answer the patient once storage has finished or timed out

Steps 4 and 5 can fail without affecting the response, and a slow database
never holds back the alert by more than ``CASE_LINK_WAIT_SECONDS``.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from postop_triage.alerts import decide
from postop_triage.engine import TriageEngine
from postop_triage.normalizer import extract_context, normalize

from postop_server.config import ServerSettings
from postop_server.dependencies import (
    get_dispatcher,
    get_engine,
    get_recorder,
    get_settings,
    require_token,
)
from postop_server.dispatcher import AlertDispatcher
from postop_server.errors import InternalError, MalformedInputError, MethodNotAllowedError
from postop_server.persistence import FeedbackRecorder

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhook"])


# ------------------------------------------------------------------
# Response models
# ------------------------------------------------------------------

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AlertStatus(_CamelModel):
    """Whether a staff alert was dispatched, and to which channels.

    ``sent`` means the alert was handed to the dispatcher, not that a
    provider accepted it: delivery is detached from the response.
    """
    sent: bool
    channels: list[str]


class TriageResponse(_CamelModel):
    """Body of a successful ``POST /api/postop``."""
    ok: bool = True
    record_id: str | None = None
    score: int
    level: str
    patient_message: str
    alert: AlertStatus


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

async def read_report(request: Request) -> dict[str, Any]:
    """Parse the request body as a JSON object.

    Any JSON object, including ``{}``, is accepted; the normalizer copes
    with missing fields.  An empty body, invalid JSON, or a non-object
    payload raises :class:`MalformedInputError`.
    """
    body = await request.body()
    if not body.strip():
        raise MalformedInputError("empty body")
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise MalformedInputError(f"body is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedInputError(f"body must be a JSON object, got {type(data).__name__}")
    return data


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/postop", dependencies=[Depends(require_token)])
async def receive_postop_report(
    request: Request,
    settings: ServerSettings = Depends(get_settings),
    engine: TriageEngine = Depends(get_engine),
    dispatcher: AlertDispatcher = Depends(get_dispatcher),
    recorder: FeedbackRecorder | None = Depends(get_recorder),
) -> TriageResponse:
    """Triage one post-operative symptom report.

    Returns 200 with the score, level, and patient message.  Alerting and
    storage are best-effort and never change the status code.
    """
    raw = await read_report(request)
    received_at = datetime.now(timezone.utc)

    try:
        signals = normalize(raw)
        context = extract_context(raw)
        result = engine.classify(signals)
    except Exception as exc:
        raise InternalError(f"triage failed: {exc!r}") from exc

    logger.info(
        "Triage: patient=%s score=%d level=%s overrides=%s",
        signals.patient_id, result.score, result.level.value, list(result.overrides),
    )

    # --- Storage (best-effort, runs alongside the alert) ---
    pending_record: asyncio.Task | None = None
    if recorder is not None:
        pending_record = asyncio.ensure_future(recorder.record(
            signals=signals, context=context, result=result, created_at=received_at,
        ))

    # --- Staff alert (detached) ---
    decision = decide(
        result,
        patient_id=signals.patient_id,
        raw_excerpt=signals.free_text,
        timestamp=received_at,
        available_channels=dispatcher.available_channels,
        context=context,
        days_post_op=signals.days_post_op,
    )
    sent = False
    try:
        task = dispatcher.dispatch(
            decision,
            pending_record=pending_record,
            dashboard_url=settings.dashboard_url,
        )
        sent = task is not None
    except Exception:
        logger.exception("Alert dispatch failed for patient=%s", signals.patient_id)

    record_id: str | None = None
    if pending_record is not None:
        try:
            record_id = await pending_record
        except Exception:
            logger.exception("Feedback recording failed for patient=%s", signals.patient_id)

    return TriageResponse(
        record_id=record_id,
        score=result.score,
        level=result.level.value,
        patient_message=result.patient_message,
        alert=AlertStatus(
            sent=sent,
            channels=sorted(c.value for c in decision.channels) if sent else [],
        ),
    )


@router.api_route(
    "/postop",
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def postop_method_not_allowed(request: Request) -> None:
    """Every verb except POST is rejected with 405 and ``Allow: POST``."""
    raise MethodNotAllowedError(f"{request.method} not allowed")
