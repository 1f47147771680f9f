"""Telegram delivery through the Bot API ``sendMessage`` method."""

from __future__ import annotations

import logging

import httpx

from goldpulse.core.config import TelegramConfig
from goldpulse.core.exceptions import NotificationError

logger = logging.getLogger(__name__)

# Bot API hard limit for one message
MAX_MESSAGE_LENGTH = 4096


def _truncate(text: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    """Cut ``text`` to at most ``limit`` chars without splitting an HTML entity.

    Cuts at the last newline that fits. A single over-long line is cut hard,
    dropping any trailing ``&...`` left without its closing ``;``.
    """
    if len(text) <= limit:
        return text
    cut = text.rfind("\n", 0, limit + 1)
    if cut > 0:
        return text[:cut]
    head = text[:limit]
    amp = head.rfind("&")
    if amp != -1 and ";" not in head[amp:]:
        head = head[:amp]
    return head


class TelegramNotifier:
    """Sends HTML-formatted text to one chat.

    Uses the caller's ``httpx.AsyncClient``. Delivery is a single attempt;
    any failure raises ``NotificationError``.
    """

    def __init__(self, config: TelegramConfig, client: httpx.AsyncClient) -> None:
        self._config = config
        self._client = client

    @property
    def _endpoint(self) -> str:
        return f"{self._config.api_base.rstrip('/')}/bot{self._config.bot_token}/sendMessage"

    async def send(self, text: str) -> None:
        """Deliver ``text`` to the configured chat.

        Raises:
            NotificationError: transport failure, non-2xx status, or a
                response with ``"ok": false``.
        """
        if len(text) > MAX_MESSAGE_LENGTH:
            logger.warning(
                "Message is %d chars, truncating to %d", len(text), MAX_MESSAGE_LENGTH
            )
            text = _truncate(text)

        payload = {
            "chat_id": self._config.chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        try:
            response = await self._client.post(self._endpoint, json=payload)
        except httpx.RequestError as e:
            # The request URL embeds the bot token, so only the type is logged
            logger.error("Error sending Telegram message: %s", type(e).__name__)
            raise NotificationError(
                f"Telegram request failed: {type(e).__name__}",
                context={"status_code": None},
            ) from e

        description = None
        ok = response.is_success
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            ok = ok and bool(body.get("ok", True))
            description = body.get("description")

        if not ok:
            logger.error(
                "Error sending Telegram message: %s %s",
                response.status_code,
                description or response.reason_phrase,
            )
            raise NotificationError(
                f"Telegram API error: {response.status_code} - "
                f"{description or response.reason_phrase}",
                context={"status_code": response.status_code, "description": description},
            )
        logger.debug("Telegram message delivered to chat %s", self._config.chat_id)
