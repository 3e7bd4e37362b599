"""Trade journal analytics for FX Journal."""

from fxjournal.journal.models import Trade, TradeDirection, TradeValidationError, UnsortedTradesError
from fxjournal.journal.clock import MarketSession, classify_session, to_jst, trading_weekday
from fxjournal.journal.equity import EquityPoint, compute_equity_series, compute_streaks
from fxjournal.journal.aggregation import by_session, by_symbol, by_weekday, by_weekday_session
from fxjournal.journal.analytics import DashboardSummary, compute_summary
from fxjournal.journal.filters import TradeFilter, apply_filter
from fxjournal.journal.ingest import TradeIngester

__all__ = [
    "Trade",
    "TradeDirection",
    "TradeValidationError",
    "UnsortedTradesError",
    "MarketSession",
    "classify_session",
    "to_jst",
    "trading_weekday",
    "EquityPoint",
    "compute_equity_series",
    "compute_streaks",
    "by_session",
    "by_symbol",
    "by_weekday",
    "by_weekday_session",
    "DashboardSummary",
    "compute_summary",
    "TradeFilter",
    "apply_filter",
    "TradeIngester",
]
