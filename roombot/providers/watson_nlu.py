from __future__ import annotations

from typing import Any, Dict, Optional

import requests
from requests.auth import HTTPBasicAuth

from roombot.config import (
    CONVERSATION_APIKEY,
    CONVERSATION_PASSWORD,
    CONVERSATION_URL,
    CONVERSATION_USERNAME,
    CONVERSATION_VERSION,
    HTTP_TIMEOUT,
)
from roombot.providers.base import NluProvider


class NluServiceError(Exception):
    def __init__(self, message: str, code: int = 500):
        super().__init__(message)
        self.code = code


class WatsonConversationProvider(NluProvider):
    """
    Watson Conversation / Assistant v1 `message` endpoint.

    POST {url}/v1/workspaces/{workspace_id}/message?version=...
    body: {"input": {"text": ...}, "context": {...}}
    """

    def __init__(
        self,
        url: str = CONVERSATION_URL,
        version: str = CONVERSATION_VERSION,
        apikey: str = CONVERSATION_APIKEY,
        username: str = CONVERSATION_USERNAME,
        password: str = CONVERSATION_PASSWORD,
        timeout: int = HTTP_TIMEOUT,
    ):
        self.url = url.rstrip("/")
        self.version = version
        self.timeout = timeout
        if apikey:
            self.auth: Optional[HTTPBasicAuth] = HTTPBasicAuth("apikey", apikey)
        elif username:
            self.auth = HTTPBasicAuth(username, password)
        else:
            self.auth = None

    @staticmethod
    def _error_message(r: requests.Response) -> str:
        try:
            body = r.json()
        except ValueError:
            return r.text[:200] or f"Conversation service error {r.status_code}"
        return body.get("error") or body.get("message") or f"Conversation service error {r.status_code}"

    def message(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        workspace_id = payload.get("workspace_id")
        if not workspace_id:
            raise NluServiceError("workspace_id is required", 400)

        r = requests.post(
            f"{self.url}/v1/workspaces/{workspace_id}/message",
            params={"version": self.version},
            json={
                "input": payload.get("input") or {},
                "context": payload.get("context") or {},
            },
            auth=self.auth,
            timeout=self.timeout,
        )
        if r.status_code >= 400:
            raise NluServiceError(self._error_message(r), r.status_code)
        return r.json()
