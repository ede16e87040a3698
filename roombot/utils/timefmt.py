from datetime import datetime, timezone
from typing import Any, Dict

from roombot.config import DATETIME_FORMAT, KST


def to_epoch_ms(dt: datetime) -> int:
    """
    The booking API speaks millisecond epoch timestamps.
    """
    return int(dt.timestamp() * 1000)


def from_epoch_ms(ms: int) -> datetime:
    return datetime.fromtimestamp(int(ms) / 1000, tz=timezone.utc)


def format_kst(ms: int) -> str:
    return from_epoch_ms(ms).astimezone(KST).strftime(DATETIME_FORMAT)


def format_reservation(resv: Dict[str, Any]) -> str:
    """
    '2024-06-01 14:00 ~ 2024-06-01 15:00, room1/camomile, quick review'
    """
    return (
        f"{format_kst(resv['start'])} ~ {format_kst(resv['end'])}, "
        f"{resv.get('roomid')}, {resv.get('purpose')}"
    )
