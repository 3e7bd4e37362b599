"""Tests for dashboard summary statistics."""

import pytest

from fxjournal.journal.analytics import DashboardSummary, compute_summary, profit_factor
from fxjournal.journal.models import TradeValidationError


class TestProfitFactor:
    """Tests for profit factor calculation."""

    def test_profit_factor_profitable(self):
        """Test profit factor for profitable system."""
        assert profit_factor(200.0, 50.0) == 4.0

    def test_profit_factor_losing(self):
        """Test profit factor for losing system."""
        assert profit_factor(50.0, 200.0) == 0.25

    def test_profit_factor_no_losses(self):
        """No losing trades means a profit factor of zero, never infinity."""
        assert profit_factor(150.0, 0.0) == 0.0
        assert profit_factor(0.0, 0.0) == 0.0

    def test_summary_uses_same_rule(self, make_trade):
        """Open trades are ignored and the summary ratio matches the helper."""
        trades = [
            make_trade((2025, 1, 6, 10, 0), 100.0),
            make_trade((2025, 1, 6, 11, 0), None),
            make_trade((2025, 1, 6, 12, 0), -25.0),
        ]
        s = compute_summary(trades)

        assert s.profit_factor == 4.0
        assert s.profit_factor == profit_factor(s.gross_profit, s.gross_loss)

    def test_summary_rejects_nan(self, make_trade):
        with pytest.raises(TradeValidationError):
            compute_summary([make_trade((2025, 1, 6, 10, 0), float("nan"))])


class TestComputeSummary:
    """Tests for the dashboard summary."""

    def test_two_trade_example(self, make_trade):
        """A Monday win and a Tuesday loss."""
        trades = [
            make_trade((2025, 1, 6, 10, 0), 100.0),
            make_trade((2025, 1, 7, 10, 0), -50.0),
        ]
        s = compute_summary(trades)

        assert s.total_trades == 2
        assert s.win_rate == 50.0
        assert s.gross_profit == 100.0
        assert s.gross_loss == 50.0
        assert s.net_profit == 50.0
        assert s.profit_factor == 2.0
        assert s.avg_profit == 100.0
        assert s.avg_loss == 50.0
        assert s.risk_reward_ratio == 2.0
        assert s.largest_profit == 100.0
        assert s.largest_loss == 50.0
        assert s.max_win_streak == 1
        assert s.max_loss_streak == 1
        assert s.max_drawdown == 50.0
        assert s.max_drawdown_percent == 50.0

    def test_empty_input(self):
        """No trades gives an all-zero summary rather than NaN."""
        assert compute_summary([]) == DashboardSummary.empty()
        s = compute_summary([])
        assert s.total_trades == 0
        assert s.profit_factor == 0.0
        assert s.max_drawdown == 0.0

    def test_only_open_trades(self, make_trade):
        trades = [make_trade((2025, 1, 6, 10, 0), None), make_trade((2025, 1, 7, 10, 0), None)]
        assert compute_summary(trades) == DashboardSummary.empty()

    def test_no_losses(self, make_trade):
        trades = [make_trade((2025, 1, 6, 10, 0), 40.0), make_trade((2025, 1, 6, 11, 0), 60.0)]
        s = compute_summary(trades)

        assert s.profit_factor == 0.0
        assert s.risk_reward_ratio == 0.0
        assert s.avg_loss == 0.0
        assert s.win_rate == 100.0
        assert s.avg_profit == 50.0

    def test_breakeven_counts_in_total_only(self, make_trade):
        """A zero-profit trade is neither a winner nor a loser for P&L figures."""
        trades = [
            make_trade((2025, 1, 6, 10, 0), 100.0),
            make_trade((2025, 1, 6, 11, 0), 0.0),
        ]
        s = compute_summary(trades)

        assert s.total_trades == 2
        assert s.win_rate == 50.0
        assert s.gross_loss == 0.0
        assert s.avg_loss == 0.0
        assert s.max_loss_streak == 1

    def test_sample_week(self, sample_trades):
        s = compute_summary(sample_trades)

        assert s.total_trades == 8
        assert s.gross_profit == 220.0
        assert s.gross_loss == 140.0
        assert s.net_profit == 80.0
        assert s.win_rate == 50.0
        assert s.profit_factor == pytest.approx(220 / 140)
        assert s.avg_profit == 55.0
        assert s.avg_loss == pytest.approx(140 / 3)
        assert s.largest_profit == 100.0
        assert s.largest_loss == 80.0
        assert s.max_win_streak == 2
        assert s.max_loss_streak == 3
        assert s.max_drawdown == 100.0
        assert s.max_drawdown_percent == pytest.approx(100 / 120 * 100)

    def test_input_order_does_not_matter(self, sample_trades):
        """The summary orders trades by JST open time itself."""
        assert compute_summary(list(reversed(sample_trades))) == compute_summary(sample_trades)

    def test_unconvertible_open_time_is_excluded(self, make_trade):
        trades = [make_trade((2025, 1, 6, 10, 0), 10.0), make_trade(None, 999.0)]
        s = compute_summary(trades)
        assert s.total_trades == 1
        assert s.gross_profit == 10.0

    def test_nan_profit_raises(self, make_trade):
        with pytest.raises(TradeValidationError):
            compute_summary([make_trade((2025, 1, 6, 10, 0), float("nan"))])

    def test_ratios_are_finite(self, make_trade):
        trades = [make_trade((2025, 1, 6, 10, 0), -10.0)]
        s = compute_summary(trades)

        assert s.profit_factor == 0.0
        assert s.avg_profit == 0.0
        assert s.largest_profit == 0.0
        assert s.max_drawdown == 10.0
        assert s.max_drawdown_percent == 0.0
