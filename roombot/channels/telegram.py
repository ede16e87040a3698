import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Dict, Optional

from roombot.agents.conversation import ConversationAgent, get_output_text
from roombot.config import CHANNEL_TYPE, CONTEXT_TIMEZONE
from roombot.providers.base import ChatProvider
from roombot.store import ConversationStore

logger = logging.getLogger(__name__)


class TelegramAdapter:
    """
    Telegram webhook -> conversation turn -> reply.

    The webhook request is acknowledged right away; each message is
    processed on a worker thread. Failures of a turn are reported back
    to the chat as plain text.
    """

    def __init__(
        self,
        agent: ConversationAgent,
        store: ConversationStore,
        chat: ChatProvider,
        executor: Optional[Executor] = None,
    ):
        self.agent = agent
        self.store = store
        self.chat = chat
        self.executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix="telegram")

    def register_webhook(self, public_url: str, token: str) -> None:
        self.chat.set_webhook(f"{public_url.rstrip('/')}/bot{token}")

    def process_update(self, update: Dict[str, Any]) -> None:
        message = (update or {}).get("message")
        if not message or "chat" not in message:
            logger.debug("Ignoring update without a message: %s", (update or {}).get("update_id"))
            return
        self.executor.submit(self.handle_message, message)

    def handle_message(self, message: Dict[str, Any]) -> None:
        user_key = str(message["chat"]["id"])
        content = {"text": message.get("text") or ""}

        try:
            doc = self.store.get(user_key)
            context = doc["context"] if doc else {}

            data = self.agent.get_response(content, context)

            new_context = dict(data.get("context") or {})
            new_context["timezone"] = CONTEXT_TIMEZONE
            self.store.save(user_key, new_context, channel=CHANNEL_TYPE)

            self.chat.send_message(user_key, get_output_text(data))
        except Exception as e:
            logger.exception("Conversation turn failed for chat %s", user_key)
            try:
                self.chat.send_message(user_key, str(e))
            except Exception:
                logger.exception("Could not report the failure to chat %s", user_key)

    def shutdown(self) -> None:
        self.executor.shutdown(wait=False)
