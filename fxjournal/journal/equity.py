"""
Equity curve, drawdown and streak analysis.

Both calculations walk trades in ascending open-time order. Sorting is the
caller's job; the order is checked and an UnsortedTradesError is raised rather
than producing a wrong curve.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional
import logging

from fxjournal.journal.models import (
    UnsortedTradesError,
    ValidTrade,
    collect_valid_trades,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EquityPoint:
    """One step of the equity curve."""

    opened_at: datetime  # JST
    profit: float
    cumulative_profit: float
    peak: float
    drawdown: float
    drawdown_percent: float


@dataclass(frozen=True)
class StreakStats:
    """Consecutive win/loss statistics."""

    max_win_streak: int
    max_loss_streak: int
    current_streak: int  # Positive for wins, negative for losses


def ensure_ascending(valid: list[ValidTrade]) -> None:
    """Raise UnsortedTradesError unless open times are non-decreasing."""
    for index in range(1, len(valid)):
        if valid[index].opened_at < valid[index - 1].opened_at:
            raise UnsortedTradesError(
                f"Trades must be sorted by open time: position {index} "
                f"({valid[index].opened_at.isoformat()}) precedes "
                f"position {index - 1} ({valid[index - 1].opened_at.isoformat()})"
            )


def equity_series_from_valid(valid: list[ValidTrade]) -> list[EquityPoint]:
    """Equity curve over trades already validated and ordered."""
    ensure_ascending(valid)

    cumulative = 0.0
    # The account starts flat, so the first high-water mark is zero
    peak = 0.0
    points = []

    for item in valid:
        cumulative += item.profit
        if cumulative > peak:
            peak = cumulative
        drawdown = peak - cumulative
        drawdown_pct = (drawdown / peak * 100) if peak > 0 else 0.0

        points.append(
            EquityPoint(
                opened_at=item.opened_at,
                profit=item.profit,
                cumulative_profit=cumulative,
                peak=peak,
                drawdown=drawdown,
                drawdown_percent=drawdown_pct,
            )
        )

    return points


def streaks_from_valid(valid: list[ValidTrade]) -> StreakStats:
    """Streak statistics over trades already validated and ordered."""
    ensure_ascending(valid)

    win_streak = 0
    loss_streak = 0
    max_win_streak = 0
    max_loss_streak = 0

    for item in valid:
        if item.profit > 0:
            win_streak += 1
            loss_streak = 0
            max_win_streak = max(max_win_streak, win_streak)
        else:
            # Breakeven breaks a winning run
            loss_streak += 1
            win_streak = 0
            max_loss_streak = max(max_loss_streak, loss_streak)

    current = win_streak if win_streak else -loss_streak
    return StreakStats(
        max_win_streak=max_win_streak,
        max_loss_streak=max_loss_streak,
        current_streak=current,
    )


def compute_equity_series(
    trades: Iterable[Any],
    server_clock: Optional[str] = None,
) -> list[EquityPoint]:
    """
    Compute the equity curve with running peak and drawdown.

    Args:
        trades: Trades sorted ascending by open time
        server_clock: Interpretation of naive open times (see clock.to_jst)

    Returns:
        One EquityPoint per trade with a profit and a convertible open time

    Raises:
        UnsortedTradesError: If the trades are not in ascending open-time order
        TradeValidationError: If a profit is not a finite number
    """
    valid, _ = collect_valid_trades(trades, server_clock)
    points = equity_series_from_valid(valid)
    logger.debug(f"Equity series over {len(points)} trades")
    return points


def compute_streaks(
    trades: Iterable[Any],
    server_clock: Optional[str] = None,
) -> StreakStats:
    """
    Compute maximum consecutive wins and losses.

    A profit above zero extends the win streak; zero or below extends the
    loss streak.

    Args:
        trades: Trades sorted ascending by open time
        server_clock: Interpretation of naive open times

    Returns:
        StreakStats
    """
    valid, _ = collect_valid_trades(trades, server_clock)
    return streaks_from_valid(valid)


def max_drawdown(points: list[EquityPoint]) -> tuple[float, float]:
    """Largest drawdown and largest drawdown percent over a series (0, 0 if empty)."""
    return (
        max((p.drawdown for p in points), default=0.0),
        max((p.drawdown_percent for p in points), default=0.0),
    )
