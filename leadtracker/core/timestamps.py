"""
Epoch-millisecond helpers. All stored timestamps are UTC epoch ms.
"""
import time
from datetime import date, datetime, time as dt_time, timedelta, timezone
from typing import Optional

from leadtracker.core.exceptions import ValidationError


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def to_epoch_ms(value: datetime) -> int:
    """Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - EPOCH) // timedelta(milliseconds=1)


def parse_date_bound(value: Optional[str], field: str, end_of_day: bool = False) -> Optional[int]:
    """
    Parse an ISO-8601 date or datetime query bound into epoch ms.

    A bare date is expanded to the start of that day, or to its last
    millisecond when `end_of_day` is set, so that both bounds are inclusive.
    """
    if value is None or not value.strip():
        return None
    raw = value.strip()

    if len(raw) == 10:
        try:
            day = date.fromisoformat(raw)
        except ValueError:
            raise ValidationError("must be an ISO-8601 date or datetime", field=field)
        moment = datetime.combine(day, dt_time.max if end_of_day else dt_time.min)
        return to_epoch_ms(moment)

    try:
        moment = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError("must be an ISO-8601 date or datetime", field=field)
    return to_epoch_ms(moment)
