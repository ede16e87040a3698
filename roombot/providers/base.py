from abc import ABC, abstractmethod
from typing import Any, Dict, List


class BookingProvider(ABC):
    @abstractmethod
    def get_freebusy(self, roomid: str, start_ms: int, end_ms: int) -> list[dict]:
        ...

    @abstractmethod
    def create_booking(self, roomid: str, start_ms: int, end_ms: int, purpose: str,
                       attendees: int, userid: str) -> bool:
        ...

    @abstractmethod
    def search_by_user(self, siteid: str, userid: str, start_ms: int, end_ms: int) -> list[dict]:
        ...

    @abstractmethod
    def search_by_site(self, siteid: str, start_ms: int, end_ms: int) -> list[dict]:
        ...

    @abstractmethod
    def cancel_booking(self, eventid: str, userid: str, roomid: str) -> bool:
        ...


class NluProvider(ABC):
    @abstractmethod
    def message(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        ...


class ChatProvider(ABC):
    @abstractmethod
    def send_message(self, chat_id: str, text: str) -> None:
        ...

    @abstractmethod
    def set_webhook(self, url: str) -> None:
        ...


def ensure_list(value: Any) -> List[dict]:
    return value if isinstance(value, list) else []
