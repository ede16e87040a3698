import logging
from typing import Any, Dict

import requests

from roombot.config import HTTP_TIMEOUT
from roombot.providers.base import ChatProvider

logger = logging.getLogger(__name__)


class TelegramApiError(Exception):
    pass


class TelegramProvider(ChatProvider):
    """Telegram Bot API over plain HTTPS."""

    def __init__(self, token: str, timeout: int = HTTP_TIMEOUT):
        self.token = token
        self.timeout = timeout
        self.api_base = f"https://api.telegram.org/bot{token}"

    def _call(self, method: str, payload: Dict[str, Any]) -> Any:
        r = requests.post(f"{self.api_base}/{method}", json=payload, timeout=self.timeout)
        body = r.json()
        if not body.get("ok"):
            raise TelegramApiError(f"{method} failed: {body.get('description') or r.status_code}")
        return body.get("result")

    def send_message(self, chat_id: str, text: str) -> None:
        # Telegram rejects empty messages
        if not text:
            logger.debug("Skipping empty message to chat %s", chat_id)
            return
        self._call("sendMessage", {"chat_id": chat_id, "text": text})

    def set_webhook(self, url: str) -> None:
        self._call("setWebhook", {"url": url})
        logger.info("Telegram webhook registered")
