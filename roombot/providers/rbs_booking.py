from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from roombot.config import HTTP_TIMEOUT, RBS_URL
from roombot.providers.base import BookingProvider, ensure_list

logger = logging.getLogger(__name__)


class BookingApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RbsBookingProvider(BookingProvider):
    """
    Client for the room booking service (RBS).

    Reads (freebusy, searches) raise BookingApiError on HTTP errors.
    Writes (book, cancel) report success as a bool so the caller can turn
    a refused booking into a chat message instead of an error.
    Transport errors and unparseable bodies propagate from requests.
    """

    def __init__(self, base_url: str = RBS_URL, timeout: int = HTTP_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        r = requests.get(url, params=params or {}, headers={"Accept": "application/json"}, timeout=self.timeout)
        if r.status_code >= 400:
            raise BookingApiError(f"RBS error {r.status_code}: {r.text[:200]}", r.status_code)
        return r.json()

    def get_freebusy(self, roomid: str, start_ms: int, end_ms: int) -> list[dict]:
        body = self._get("/freebusy/room", params={"roomid": roomid, "start": start_ms, "end": end_ms})
        return ensure_list((body or {}).get("freebusy"))

    def create_booking(self, roomid: str, start_ms: int, end_ms: int, purpose: str,
                       attendees: int, userid: str) -> bool:
        body = {
            "roomid": roomid,
            "start": start_ms,
            "end": end_ms,
            "purpose": purpose,
            "attendees": attendees,
            "user": {"userid": userid},
        }
        r = requests.post(
            f"{self.base_url}/book",
            json=body,
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        if not r.ok:
            logger.warning("Booking refused (%s): %s", r.status_code, r.text[:200])
        return r.ok

    def search_by_user(self, siteid: str, userid: str, start_ms: int, end_ms: int) -> list[dict]:
        return ensure_list(self._get("/book/search/byuser", params={
            "siteid": siteid,
            "userid": userid,
            "start": start_ms,
            "end": end_ms,
        }))

    def search_by_site(self, siteid: str, start_ms: int, end_ms: int) -> list[dict]:
        return ensure_list(self._get("/book/search/bysite", params={
            "siteid": siteid,
            "start": start_ms,
            "end": end_ms,
        }))

    def cancel_booking(self, eventid: str, userid: str, roomid: str) -> bool:
        r = requests.delete(
            f"{self.base_url}/book",
            params={"eventid": eventid, "userid": userid, "roomid": roomid},
            headers={"Accept": "text/plain"},
            timeout=self.timeout,
        )
        if not r.ok:
            logger.warning("Cancellation refused (%s): %s", r.status_code, r.text[:200])
        return r.ok
