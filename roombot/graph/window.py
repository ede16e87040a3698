from datetime import datetime, timedelta
from typing import Optional, Tuple

from dateutil import parser as dtparser
from dateutil.relativedelta import relativedelta

from roombot.config import KST
from roombot.context import ActionDirective

# A single slot (availability check / booking) vs. "what's coming up".
SLOT_SPAN = relativedelta(hours=1)
LISTING_SPAN = relativedelta(months=1)


class IncompleteActionError(ValueError):
    def __init__(self, command: Optional[str], missing: str):
        super().__init__(f"Action {command!r} is missing {missing}")
        self.command = command
        self.missing = missing


def combine(date_text: Optional[str], time_text: str, now: Optional[datetime] = None) -> datetime:
    """
    '2024-06-01' + '14:00' -> 2024-06-01T14:00+09:00

    A time without a date falls on today's date in UTC+9.
    """
    if not date_text:
        date_text = (now or datetime.now(KST)).astimezone(KST).date().isoformat()
    dt = dtparser.parse(f"{date_text} {time_text}")
    return dt.replace(tzinfo=KST)


def slot_window(action: ActionDirective, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    Window for check-availability / confirm-reservation.
    Start time is mandatory; end defaults to start + 1 hour.
    """
    if not action.start_time:
        raise IncompleteActionError(action.command, "a start time")

    start = combine(action.dates, action.start_time, now)
    if action.end_time:
        end = combine(action.dates, action.end_time, now)
    else:
        end = start + SLOT_SPAN
    return start, end


def listing_window(action: ActionDirective, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    Window for check-reservation. Without a start time the listing starts
    now; without an end time it runs one calendar month past the start.
    """
    if action.start_time:
        start = combine(action.dates, action.start_time, now)
    else:
        start = now or datetime.now(KST)

    if action.end_time:
        end = combine(action.dates, action.end_time, now)
    else:
        end = start + LISTING_SPAN
    return start, end


def day_ahead(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    start = now or datetime.now(KST)
    return start, start + timedelta(days=1)
