"""
Hours-of-life calculation.

Birth and assessment instants are given as separate date (YYYY-MM-DD) and
time (HH:MM, 24h) strings in the same local frame. No timezone handling.
"""

import logging
import typing
from datetime import datetime

LOGGER = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"
# seconds are accepted but ignored by the form inputs that feed us
_TIMESTAMP_FORMATS = (f"{DATE_FORMAT} {TIME_FORMAT}", f"{DATE_FORMAT} {TIME_FORMAT}:%S")


def parse_timestamp(date_str: typing.Optional[str], time_str: typing.Optional[str]) -> typing.Optional[datetime]:
    """
    Combine a date and a time-of-day string into one naive datetime.
    Returns None if either part is missing or malformed.
    """
    if not date_str or not time_str:
        return None
    combined = f"{str(date_str).strip()} {str(time_str).strip()}"
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(combined, fmt)
        except ValueError:
            continue
    LOGGER.debug(f"Cannot parse timestamp from {date_str!r} {time_str!r}")
    return None


def hours_between(start: datetime, end: datetime) -> float:
    # signed, unrounded
    return (end - start).total_seconds() / 3600


def compute_hours_of_life(
    birth_date: typing.Optional[str],
    birth_time: typing.Optional[str],
    now_date: typing.Optional[str],
    now_time: typing.Optional[str],
) -> typing.Optional[float]:
    """
    Hours elapsed from birth to the assessment instant, rounded to 1 decimal.

    - any input missing or unparseable -> None
    - assessment before birth -> 0.0
    """
    birth = parse_timestamp(birth_date, birth_time)
    now = parse_timestamp(now_date, now_time)
    if birth is None or now is None:
        return None

    diff = hours_between(birth, now)
    if diff < 0:
        LOGGER.debug(f"Assessment {now} precedes birth {birth}; clamping hours of life to 0")
        return 0.0
    return round(diff, 1)


def current_date_and_time(now: typing.Optional[datetime] = None) -> typing.Tuple[str, str]:
    """Local wall clock as (YYYY-MM-DD, HH:MM), used to pre-fill the assessment instant."""
    now = now or datetime.now()
    return now.strftime(DATE_FORMAT), now.strftime(TIME_FORMAT)
