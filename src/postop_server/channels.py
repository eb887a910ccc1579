"""Outbound alert channels — messaging bot and transactional email.

Both channels share one ``httpx.AsyncClient`` owned by the application
lifespan.  A channel either delivers or raises :class:`AlertDeliveryError`;
it never retries.

Channels are only constructed when their configuration is complete, see
:func:`build_channels`.
"""

from __future__ import annotations

import logging

import httpx

from postop_triage.alerts import render_body, render_subject
from postop_triage.interfaces import AlertChannel
from postop_triage.models.enums import AlertChannelName
from postop_triage.models.triage import AlertPayload

from postop_server.config import ServerSettings
from postop_server.errors import AlertDeliveryError

logger = logging.getLogger(__name__)

# Telegram rejects messages longer than 4096 characters.
TELEGRAM_MAX_TEXT = 4096


async def _post(
    client: httpx.AsyncClient,
    channel: AlertChannelName,
    url: str,
    *,
    json: dict,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """POST and convert transport errors / non-2xx into ``AlertDeliveryError``."""
    try:
        resp = await client.post(url, json=json, headers=headers)
    except httpx.HTTPError as exc:
        raise AlertDeliveryError(channel.value, f"transport error: {exc!r}") from exc
    if resp.is_error:
        # Provider error bodies are short JSON; keep a bounded slice for the log
        raise AlertDeliveryError(
            channel.value, f"HTTP {resp.status_code}: {resp.text[:300]}",
        )
    return resp


# ------------------------------------------------------------------
# Messaging bot
# ------------------------------------------------------------------

class TelegramChannel(AlertChannel):
    """Sends the alert as a chat message via the Telegram Bot API."""

    name = AlertChannelName.MESSAGING

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        bot_token: str,
        chat_id: str,
        api_base: str,
    ) -> None:
        self._client = client
        self._chat_id = chat_id
        self._url = f"{api_base.rstrip('/')}/bot{bot_token}/sendMessage"

    def build_request(self, payload: AlertPayload) -> dict:
        text = f"{render_subject(payload)}\n\n{render_body(payload)}"
        return {
            "chat_id": self._chat_id,
            "text": text[:TELEGRAM_MAX_TEXT],
            "disable_web_page_preview": True,
        }

    async def send(self, payload: AlertPayload) -> None:
        await _post(self._client, self.name, self._url, json=self.build_request(payload))


# ------------------------------------------------------------------
# Email
# ------------------------------------------------------------------

class SendGridChannel(AlertChannel):
    """Sends the alert as a plain-text email via the SendGrid v3 API."""

    name = AlertChannelName.EMAIL

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        api_key: str,
        sender: str,
        recipient: str,
        api_url: str,
    ) -> None:
        self._client = client
        self._api_key = api_key
        self._sender = sender
        self._recipient = recipient
        self._url = api_url

    def build_request(self, payload: AlertPayload) -> dict:
        return {
            "personalizations": [
                {
                    "to": [{"email": self._recipient}],
                    "subject": render_subject(payload),
                }
            ],
            "from": {"email": self._sender},
            "content": [{"type": "text/plain", "value": render_body(payload)}],
        }

    async def send(self, payload: AlertPayload) -> None:
        await _post(
            self._client,
            self.name,
            self._url,
            json=self.build_request(payload),
            headers={"Authorization": f"Bearer {self._api_key}"},
        )


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def build_channels(
    settings: ServerSettings, client: httpx.AsyncClient,
) -> list[AlertChannel]:
    """Return one channel per fully configured destination.

    A channel with any setting missing is skipped (logged once at startup),
    not treated as an error.
    """
    channels: list[AlertChannel] = []

    if settings.messaging_enabled:
        channels.append(
            TelegramChannel(
                client,
                bot_token=settings.telegram_bot_token,  # type: ignore[arg-type]
                chat_id=settings.telegram_chat_id,  # type: ignore[arg-type]
                api_base=settings.telegram_api_base,
            )
        )
    else:
        logger.warning("TELEGRAM_BOT_TOKEN or TELEGRAM_CHAT_ID not set - messaging alerts disabled")

    if settings.email_enabled:
        channels.append(
            SendGridChannel(
                client,
                api_key=settings.sendgrid_api_key,  # type: ignore[arg-type]
                sender=settings.email_from,  # type: ignore[arg-type]
                recipient=settings.alert_email,  # type: ignore[arg-type]
                api_url=settings.sendgrid_api_url,
            )
        )
    else:
        logger.warning("SENDGRID_API_KEY, EMAIL_FROM or ALERT_EMAIL not set - email alerts disabled")

    return channels
