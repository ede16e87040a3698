import logging
from typing import Any, Dict, Optional

from roombot.config import WORKSPACE_ID
from roombot.graph.graph import ActionDispatcher
from roombot.providers.base import NluProvider

logger = logging.getLogger(__name__)


class ConversationAgent:
    """
    One conversational turn: message + previous context -> NLU service ->
    booking action (if the dialog asked for one) -> response for the user.
    """

    def __init__(self, nlu: NluProvider, dispatcher: ActionDispatcher, workspace_id: str = WORKSPACE_ID):
        self.nlu = nlu
        self.dispatcher = dispatcher
        self.workspace_id = workspace_id

    def get_response(self, message: Optional[Dict[str, Any]], context: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        payload = {
            "workspace_id": self.workspace_id,
            "context": context or {},
            "input": message or {},
        }
        payload = self._pre_process(payload)

        data = self.nlu.message(payload)
        return self._post_process(data)

    def _pre_process(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        # hook for rewriting user input before it reaches the NLU service
        input_text = (payload.get("input") or {}).get("text")
        logger.info("User Input : %s", input_text)
        return payload

    def _post_process(self, data: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Conversation Output : %s", (data.get("output") or {}).get("text"))
        context = data.get("context") or {}
        if context.get("action"):
            return self.dispatcher.dispatch(data)
        return data


def get_output_text(data: Dict[str, Any]) -> str:
    text = (data.get("output") or {}).get("text")
    if isinstance(text, list):
        return "\n".join(str(t) for t in text)
    if text:
        return str(text)
    return ""
