"""
Trade breakdowns for the dashboard and analysis report.

Computes per-bucket trade count, win rate and total profit:
- by market session (always 4 buckets)
- by symbol (one bucket per symbol seen)
- by trading weekday (always 5 buckets, Monday-Friday)
- by weekday x session (always 20 buckets)
- by JST calendar month

Trades without a profit are left out of every breakdown. Session- and
weekday-based breakdowns also leave out trades whose open time cannot be
converted to JST, and weekday breakdowns leave out weekend trades (after the
Saturday-morning carry-over to Friday).
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Iterable, Optional
import logging

from fxjournal.journal.clock import (
    SESSION_LABELS,
    SESSION_ORDER,
    TRADING_WEEKDAYS,
    WEEKDAY_LABELS,
    MarketSession,
    classify_session,
    trading_weekday,
)
from fxjournal.journal.models import (
    ValidTrade,
    collect_priced_trades,
    collect_valid_trades,
)

logger = logging.getLogger(__name__)


@dataclass
class AggregationBucket:
    """Running totals for one group of trades."""

    trades: int = 0
    wins: int = 0
    total_profit: float = 0.0

    def add(self, profit: float) -> None:
        self.trades += 1
        if profit > 0:
            self.wins += 1
        self.total_profit += profit

    @property
    def win_rate(self) -> float:
        """Percentage of winning trades (0 for an empty bucket)."""
        return self.wins / self.trades * 100 if self.trades > 0 else 0.0


@dataclass(frozen=True)
class SessionStats:
    zone: MarketSession
    label: str
    trades: int
    win_rate: float
    total_profit: float


@dataclass(frozen=True)
class SymbolStats:
    symbol: str
    trades: int
    win_rate: float
    total_profit: float


@dataclass(frozen=True)
class WeekdayStats:
    weekday: int
    label: str
    trades: int
    win_rate: float
    total_profit: float


@dataclass(frozen=True)
class WeekdaySessionStats:
    weekday: int
    zone: MarketSession
    win_rate: float
    trades: int


@dataclass(frozen=True)
class MonthlyWinRate:
    month: str  # YYYY-MM
    win_rate: float
    trades: int


def _fill(
    valid: Iterable[ValidTrade],
    keys: Iterable[Hashable],
    key_fn: Callable[[ValidTrade], Optional[Hashable]],
) -> dict[Hashable, AggregationBucket]:
    """Accumulate trades into a fixed, ordered set of buckets; None keys are dropped."""
    buckets = {key: AggregationBucket() for key in keys}
    dropped = 0
    for item in valid:
        key = key_fn(item)
        if key is None:
            dropped += 1
            continue
        buckets[key].add(item.profit)
    if dropped:
        logger.debug(f"{dropped} trades fall outside the {len(buckets)} fixed buckets")
    return buckets


def by_session(trades: Iterable[Any], server_clock: Optional[str] = None) -> list[SessionStats]:
    """
    Group trades by market session.

    Returns:
        Exactly four SessionStats in the order tokyo, london, newyork, other
    """
    valid, _ = collect_valid_trades(trades, server_clock)
    buckets = _fill(valid, SESSION_ORDER, lambda item: classify_session(item.opened_at))

    return [
        SessionStats(
            zone=session,
            label=SESSION_LABELS[session],
            trades=bucket.trades,
            win_rate=bucket.win_rate,
            total_profit=bucket.total_profit,
        )
        for session, bucket in buckets.items()
    ]


def by_symbol(trades: Iterable[Any]) -> list[SymbolStats]:
    """
    Group trades by symbol.

    The open time plays no part here, so trades with an unconvertible
    timestamp still count.

    Returns:
        One SymbolStats per distinct symbol, most traded first (ties by name)
    """
    buckets: dict[str, AggregationBucket] = defaultdict(AggregationBucket)
    for item in collect_priced_trades(trades):
        buckets[item.trade.symbol].add(item.profit)

    stats = [
        SymbolStats(
            symbol=symbol,
            trades=bucket.trades,
            win_rate=bucket.win_rate,
            total_profit=bucket.total_profit,
        )
        for symbol, bucket in buckets.items()
    ]
    return sorted(stats, key=lambda s: (-s.trades, s.symbol))


def by_weekday(trades: Iterable[Any], server_clock: Optional[str] = None) -> list[WeekdayStats]:
    """
    Group trades by trading weekday.

    Returns:
        Exactly five WeekdayStats, Monday (1) through Friday (5)
    """
    valid, _ = collect_valid_trades(trades, server_clock)
    buckets = _fill(valid, TRADING_WEEKDAYS, lambda item: trading_weekday(item.opened_at))

    return [
        WeekdayStats(
            weekday=weekday,
            label=WEEKDAY_LABELS[weekday],
            trades=bucket.trades,
            win_rate=bucket.win_rate,
            total_profit=bucket.total_profit,
        )
        for weekday, bucket in buckets.items()
    ]


def _weekday_session_key(item: ValidTrade) -> Optional[tuple[int, MarketSession]]:
    weekday = trading_weekday(item.opened_at)
    if weekday is None:
        return None
    return weekday, classify_session(item.opened_at)


def by_weekday_session(
    trades: Iterable[Any],
    server_clock: Optional[str] = None,
) -> list[WeekdaySessionStats]:
    """
    Group trades by weekday x session for the heatmap.

    Returns:
        Exactly 20 cells, weekday-major (Mon..Fri), session-minor
        (tokyo, london, newyork, other)
    """
    valid, _ = collect_valid_trades(trades, server_clock)
    keys = [(weekday, session) for weekday in TRADING_WEEKDAYS for session in SESSION_ORDER]
    buckets = _fill(valid, keys, _weekday_session_key)

    return [
        WeekdaySessionStats(
            weekday=weekday,
            zone=session,
            win_rate=bucket.win_rate,
            trades=bucket.trades,
        )
        for (weekday, session), bucket in buckets.items()
    ]


def monthly_win_rates(trades: Iterable[Any], server_clock: Optional[str] = None) -> list[MonthlyWinRate]:
    """Win rate per JST calendar month, oldest month first."""
    valid, _ = collect_valid_trades(trades, server_clock)
    buckets: dict[str, AggregationBucket] = defaultdict(AggregationBucket)
    for item in valid:
        buckets[item.opened_at.strftime("%Y-%m")].add(item.profit)

    return [
        MonthlyWinRate(month=month, win_rate=bucket.win_rate, trades=bucket.trades)
        for month, bucket in sorted(buckets.items())
    ]


def count_unclassifiable(trades: Iterable[Any], server_clock: Optional[str] = None) -> int:
    """Number of priced trades left out of session/weekday breakdowns for lack of a JST open time."""
    _, excluded = collect_valid_trades(trades, server_clock)
    return excluded
