"""AlertDispatcher — detached, best-effort delivery of staff alerts.

The webhook must answer the patient promptly even when notification
infrastructure is slow or down.  :meth:`AlertDispatcher.dispatch` therefore
schedules delivery as a separate asyncio task and returns immediately; the
response path never awaits it.

Guarantees:
  - every chosen channel is attempted, concurrently
  - each attempt is bounded by ``timeout`` seconds
  - one channel's failure never suppresses another's attempt
  - failures are logged, never raised to the caller
  - tasks are owned by the dispatcher, not the request, so a client
    disconnect does not cancel an in-flight alert

On shutdown, :meth:`drain` gives in-flight alerts a grace period to finish.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from postop_triage.alerts import build_case_url
from postop_triage.interfaces import AlertChannel
from postop_triage.models.enums import AlertChannelName
from postop_triage.models.triage import AlertDecision, AlertPayload

from postop_server.errors import AlertDeliveryError

logger = logging.getLogger(__name__)


class AlertDispatcher:
    """Fans an :class:`AlertDecision` out to configured channels.

    Args:
        channels: configured channel implementations, at most one per name
        timeout: per-channel send timeout in seconds
        link_wait: how long an alert waits for a pending record id before
            it is sent without a case link
    """

    def __init__(
        self,
        channels: Iterable[AlertChannel],
        *,
        timeout: float = 10.0,
        link_wait: float = 1.0,
    ) -> None:
        self._channels: dict[AlertChannelName, AlertChannel] = {}
        for channel in channels:
            if channel.name in self._channels:
                raise ValueError(f"Duplicate alert channel: {channel.name.value}")
            self._channels[channel.name] = channel
        self._timeout = timeout
        self._link_wait = link_wait
        # Strong references keep detached tasks alive until they finish
        self._inflight: set[asyncio.Task] = set()

    @property
    def available_channels(self) -> frozenset[AlertChannelName]:
        return frozenset(self._channels)

    @property
    def inflight(self) -> int:
        """Number of alert tasks that have not finished yet."""
        return len(self._inflight)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(
        self,
        decision: AlertDecision,
        *,
        pending_record: asyncio.Future | None = None,
        dashboard_url: str | None = None,
    ) -> asyncio.Task | None:
        """Schedule delivery of *decision* and return without waiting.

        *pending_record* is the still-running storage of the same report.
        The detached task waits at most ``link_wait`` seconds for its record
        id to add a case link; a slow or failed insert never delays the
        send beyond that.

        Returns the detached task (mainly for tests and shutdown), or
        ``None`` when there is nothing to send.  Must be called from a
        running event loop.
        """
        if not decision.should_alert or decision.payload is None:
            return None
        targets = [self._channels[n] for n in sorted(decision.channels) if n in self._channels]
        if not targets:
            logger.warning(
                "Alert wanted for patient=%s level=%s but no channel is configured",
                decision.payload.patient_id, decision.payload.level.value,
            )
            return None

        if pending_record is None:
            work = self.deliver(targets, decision.payload)
        else:
            work = self._deliver_with_link(
                targets, decision.payload, pending_record, dashboard_url,
            )
        task = asyncio.get_running_loop().create_task(
            work, name=f"alert-{decision.payload.level.value}",
        )
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _deliver_with_link(
        self,
        channels: list[AlertChannel],
        payload: AlertPayload,
        pending_record: asyncio.Future,
        dashboard_url: str | None,
    ) -> dict[AlertChannelName, bool]:
        done, _ = await asyncio.wait({pending_record}, timeout=self._link_wait)
        if (
            pending_record in done
            and not pending_record.cancelled()
            and pending_record.exception() is None
        ):
            record_id = pending_record.result()
            if record_id:
                payload = payload.model_copy(update={
                    "record_id": record_id,
                    "case_url": build_case_url(dashboard_url, record_id),
                })
        else:
            logger.info(
                "Record id unavailable after %.1fs; alerting patient=%s without case link",
                self._link_wait, payload.patient_id,
            )
        return await self.deliver(channels, payload)

    async def deliver(
        self, channels: list[AlertChannel], payload: AlertPayload,
    ) -> dict[AlertChannelName, bool]:
        """Send *payload* to every channel concurrently; return success per channel."""
        results = await asyncio.gather(*(self._send_one(c, payload) for c in channels))
        outcome = {c.name: ok for c, ok in zip(channels, results)}
        logger.info(
            "Alert delivery finished: patient=%s level=%s outcome=%s",
            payload.patient_id,
            payload.level.value,
            {name.value: ok for name, ok in outcome.items()},
        )
        return outcome

    async def _send_one(self, channel: AlertChannel, payload: AlertPayload) -> bool:
        """Send to one channel; log and swallow any failure."""
        try:
            await asyncio.wait_for(channel.send(payload), timeout=self._timeout)
        except AlertDeliveryError as exc:
            logger.warning("Alert delivery failed: %s", exc)
            return False
        except asyncio.TimeoutError:
            logger.warning(
                "Alert delivery timed out: %s after %.1fs", channel.name.value, self._timeout,
            )
            return False
        except Exception:
            # Isolate channel bugs from the other channels
            logger.exception("Unexpected error delivering alert via %s", channel.name.value)
            return False
        return True

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def drain(self, timeout: float) -> None:
        """Wait up to *timeout* seconds for in-flight alerts to finish.

        Tasks still running after the grace period are cancelled.
        """
        if not self._inflight:
            return
        pending = set(self._inflight)
        logger.info("Waiting for %d in-flight alert(s)", len(pending))
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning("Cancelled %d alert(s) still running at shutdown", len(still_running))
