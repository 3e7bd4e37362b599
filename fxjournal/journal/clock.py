"""
Market clock for FX Journal.

Everything time-of-day related is evaluated on the Japan Standard Time clock
(UTC+9, no daylight saving). This module converts broker timestamps to JST and
derives the two calendar facts the aggregations group by:

- the market session a trade was opened in (Tokyo / London / New York / Other)
- the trading weekday, where early Saturday morning in Tokyo still belongs to
  the Friday New York session

Session windows on the JST clock (half-open hour ranges, first match wins):

    tokyo    08:00 - 14:59
    london   15:00 - 20:59
    newyork  21:00 - 01:59   (spans midnight)
    other    02:00 - 07:59
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Union
import logging

from fxjournal.config import settings

logger = logging.getLogger(__name__)

JST = timezone(timedelta(hours=9), "JST")


class ServerClock(str, Enum):
    """How a naive (offset-less) broker timestamp is interpreted."""

    XM = "xm"  # XM MT4/MT5 server time: JST - 7h in winter, JST - 6h in summer
    UTC = "utc"
    JST = "jst"


class MarketSession(str, Enum):
    """Market session labels."""

    TOKYO = "tokyo"
    LONDON = "london"
    NEWYORK = "newyork"
    OTHER = "other"


SESSION_ORDER: tuple[MarketSession, ...] = (
    MarketSession.TOKYO,
    MarketSession.LONDON,
    MarketSession.NEWYORK,
    MarketSession.OTHER,
)

SESSION_LABELS = {
    MarketSession.TOKYO: "Tokyo",
    MarketSession.LONDON: "London",
    MarketSession.NEWYORK: "New York",
    MarketSession.OTHER: "Other",
}

# (session, start hour inclusive, end hour exclusive) on the JST clock
SESSION_WINDOWS: tuple[tuple[MarketSession, int, int], ...] = (
    (MarketSession.TOKYO, 8, 15),
    (MarketSession.LONDON, 15, 21),
    (MarketSession.NEWYORK, 21, 2),
)

TRADING_WEEKDAYS: tuple[int, ...] = (1, 2, 3, 4, 5)

WEEKDAY_LABELS = {
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
}

# JST Saturday before this hour is still the Friday New York session
SATURDAY_CARRY_OVER_END_HOUR = 9

SERVER_TIME_FORMATS = (
    "%Y.%m.%d %H:%M:%S.%f",
    "%Y.%m.%d %H:%M:%S",
    "%Y.%m.%d %H:%M",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
)

TimestampLike = Union[datetime, str, None]


def parse_server_time(value: TimestampLike) -> Optional[datetime]:
    """
    Parse a broker timestamp.

    Accepts datetime objects, ISO-8601 strings (``T`` or space separator,
    with or without offset, a trailing ``Z`` means UTC) and MT4/MT5 export
    strings such as ``2024.01.15 10:00:00`` or ``2024.01.15 10:00:00.123``.

    Returns:
        datetime (naive or aware, as given), or None when the value is missing
        or cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        logger.debug(f"Unsupported timestamp type: {type(value).__name__}")
        return None

    text = value.strip()
    if not text:
        return None

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass

    for fmt in SERVER_TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    logger.debug(f"Invalid server timestamp: {value!r}")
    return None


def _last_sunday(year: int, month: int) -> date:
    if month == 12:
        last_day = date(year, 12, 31)
    else:
        last_day = date(year, month + 1, 1) - timedelta(days=1)
    # date.weekday(): Monday=0 ... Sunday=6
    return last_day - timedelta(days=(last_day.weekday() + 1) % 7)


def is_xm_server_dst(server_time: datetime) -> bool:
    """
    Check whether XM server summer time applies.

    Summer time runs from the last Sunday of March (00:00) up to the last
    Sunday of October (00:00), compared on the server's own wall clock.
    """
    naive = server_time.replace(tzinfo=None)
    year = naive.year
    start = datetime.combine(_last_sunday(year, 3), datetime.min.time())
    end = datetime.combine(_last_sunday(year, 10), datetime.min.time())
    return start <= naive < end


def resolve_server_clock(server_clock: Union[ServerClock, str, None] = None) -> ServerClock:
    """Resolve an explicit clock name, falling back to the configured one."""
    if isinstance(server_clock, ServerClock):
        return server_clock
    return ServerClock((server_clock or settings.server_clock).lower())


def _server_offset_hours(server_time: datetime, clock: ServerClock) -> int:
    if clock is ServerClock.XM:
        return 6 if is_xm_server_dst(server_time) else 7
    if clock is ServerClock.UTC:
        return 9
    return 0


def to_jst(
    value: TimestampLike,
    server_clock: Union[ServerClock, str, None] = None,
) -> Optional[datetime]:
    """
    Convert a broker timestamp to an aware JST datetime.

    Aware timestamps are converted with the fixed UTC+9 offset. Naive
    timestamps are wall-clock time of the broker server described by
    ``server_clock`` (defaults to the configured clock).

    Args:
        value: datetime or timestamp string
        server_clock: Interpretation of naive timestamps ('xm', 'utc', 'jst')

    Returns:
        Aware datetime in JST, or None if the value cannot be converted
    """
    parsed = parse_server_time(value)
    if parsed is None:
        return None

    try:
        if parsed.tzinfo is not None and parsed.utcoffset() is not None:
            return parsed.astimezone(JST)

        clock = resolve_server_clock(server_clock)
        shifted = parsed.replace(tzinfo=None) + timedelta(hours=_server_offset_hours(parsed, clock))
        return shifted.replace(tzinfo=JST)
    except OverflowError:
        logger.warning(f"Timestamp out of range for JST conversion: {value!r}")
        return None


def _as_jst_wall_clock(jst_time: datetime) -> datetime:
    if jst_time.tzinfo is not None and jst_time.utcoffset() is not None:
        return jst_time.astimezone(JST)
    return jst_time


def _hour_in_window(hour: int, start: int, end: int) -> bool:
    if start < end:
        return start <= hour < end
    # Window wraps past midnight
    return hour >= start or hour < end


def classify_session(jst_time: Optional[datetime]) -> Optional[MarketSession]:
    """
    Classify a JST timestamp into a market session.

    Args:
        jst_time: Timestamp on the JST clock (naive values are taken as JST
                  wall time, aware values are converted)

    Returns:
        MarketSession, or None when the timestamp is missing (unclassifiable)
    """
    if jst_time is None:
        return None

    hour = _as_jst_wall_clock(jst_time).hour
    for session, start, end in SESSION_WINDOWS:
        if _hour_in_window(hour, start, end):
            return session
    return MarketSession.OTHER


def trading_weekday(jst_time: Optional[datetime]) -> Optional[int]:
    """
    Trading weekday (1=Monday ... 5=Friday) of a JST timestamp.

    Saturday before 09:00 JST is reported as Friday, since the New York
    session of Friday is still open then. Later Saturday hours and all of
    Sunday return None.
    """
    if jst_time is None:
        return None

    local = _as_jst_wall_clock(jst_time)
    weekday = local.isoweekday()
    if weekday == 6 and local.hour < SATURDAY_CARRY_OVER_END_HOUR:
        return 5
    if weekday not in TRADING_WEEKDAYS:
        return None
    return weekday
