"""
Portfolio statistics for the FX journal dashboard.

Computes:
- Gross profit / loss and net profit
- Win rate and profit factor
- Average and largest win / loss, risk-reward ratio
- Max win / loss streaks and max drawdown

Every ratio has an explicit zero fallback: an empty denominator yields 0,
never NaN or infinity.
"""

from dataclasses import dataclass, fields
from typing import Any, Iterable, Optional
import logging

import numpy as np

from fxjournal.journal.equity import (
    equity_series_from_valid,
    max_drawdown,
    streaks_from_valid,
)
from fxjournal.journal.models import collect_valid_trades, sort_by_open_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardSummary:
    """Overall portfolio statistics."""

    # P&L
    gross_profit: float
    gross_loss: float  # Absolute value
    net_profit: float

    # Counts
    total_trades: int
    win_rate: float  # Percent

    # Ratios
    profit_factor: float
    avg_profit: float
    avg_loss: float  # Absolute value
    largest_profit: float
    largest_loss: float  # Absolute value
    risk_reward_ratio: float

    # Streaks and drawdown
    max_win_streak: int
    max_loss_streak: int
    max_drawdown: float
    max_drawdown_percent: float

    @classmethod
    def empty(cls) -> "DashboardSummary":
        """Summary of zero trades: every field is zero."""
        return cls(**{f.name: 0 if f.type is int else 0.0 for f in fields(cls)})


def profit_factor(gross_profit: float, gross_loss: float) -> float:
    """
    Compute profit factor.

    Profit Factor = Gross Profit / Gross Loss, defined as 0 when there are no
    losing trades (including when there are winners).

    Args:
        gross_profit: Sum of winning trades
        gross_loss: Absolute sum of losing trades

    Returns:
        Profit factor (> 1 is profitable)
    """
    if gross_loss == 0:
        return 0.0
    return gross_profit / gross_loss


def compute_summary(trades: Iterable[Any], server_clock: Optional[str] = None) -> DashboardSummary:
    """
    Calculate the dashboard summary.

    Only trades with both a profit and a convertible open time are counted.
    They are ordered by JST open time here, so callers may pass trades in any
    order.

    Args:
        trades: Trade objects
        server_clock: Interpretation of naive open times

    Returns:
        DashboardSummary (all zeros when no trade qualifies)

    Raises:
        TradeValidationError: If a profit is not a finite number
    """
    valid, _ = collect_valid_trades(trades, server_clock)
    if not valid:
        return DashboardSummary.empty()

    ordered = sort_by_open_time(valid)
    profits = [item.profit for item in ordered]

    # Breakeven trades count toward the total but belong to neither side
    winners = [p for p in profits if p > 0]
    losers = [p for p in profits if p < 0]

    gross_profit = float(sum(winners))
    gross_loss = abs(float(sum(losers)))

    total_trades = len(profits)
    win_rate = len(winners) / total_trades * 100

    avg_profit = float(np.mean(winners)) if winners else 0.0
    avg_loss = abs(float(np.mean(losers))) if losers else 0.0

    largest_profit = float(np.max(winners)) if winners else 0.0
    largest_loss = abs(float(np.min(losers))) if losers else 0.0

    risk_reward = avg_profit / avg_loss if winners and losers else 0.0

    streaks = streaks_from_valid(ordered)
    dd, dd_pct = max_drawdown(equity_series_from_valid(ordered))

    logger.debug(f"Summary over {total_trades} trades: {len(winners)} wins, {len(losers)} losses")

    return DashboardSummary(
        gross_profit=gross_profit,
        gross_loss=gross_loss,
        net_profit=gross_profit - gross_loss,
        total_trades=total_trades,
        win_rate=win_rate,
        profit_factor=profit_factor(gross_profit, gross_loss),
        avg_profit=avg_profit,
        avg_loss=avg_loss,
        largest_profit=largest_profit,
        largest_loss=largest_loss,
        risk_reward_ratio=risk_reward,
        max_win_streak=streaks.max_win_streak,
        max_loss_streak=streaks.max_loss_streak,
        max_drawdown=dd,
        max_drawdown_percent=dd_pct,
    )
