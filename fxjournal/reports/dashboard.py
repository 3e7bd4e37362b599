"""
Dashboard and analysis-report assembly.

Pure composition of the journal analytics into the payloads consumed by the
dashboard charts and by the narrative report writer. Fixed-size breakdowns
(sessions, weekdays, heatmap) are always fully populated, zero buckets
included.
"""

from typing import Any, Iterable, Optional
import logging

from fxjournal.journal.aggregation import (
    by_session,
    by_symbol,
    by_weekday,
    by_weekday_session,
    count_unclassifiable,
    monthly_win_rates,
)
from fxjournal.journal.analytics import compute_summary
from fxjournal.journal.equity import equity_series_from_valid
from fxjournal.journal.models import collect_valid_trades, sort_by_open_time
from fxjournal.reports.schemas import (
    AnalysisReport,
    DashboardData,
    DashboardGraphs,
    DashboardSummarySchema,
    DrawdownPoint,
    MonthlyWinRateData,
    ProfitPoint,
    SymbolStat,
    TimeZoneStat,
    WeekdayStat,
    WeekdayTimeZoneCell,
)

logger = logging.getLogger(__name__)


def profit_time_series(trades: Iterable[Any], server_clock: Optional[str] = None) -> list[ProfitPoint]:
    """Per-trade profit and running total, ascending by JST open time."""
    ordered = sort_by_open_time(collect_valid_trades(trades, server_clock)[0])
    points = equity_series_from_valid(ordered)
    return [
        ProfitPoint(
            date=p.opened_at.strftime("%Y-%m-%d"),
            profit=p.profit,
            cumulative_profit=p.cumulative_profit,
        )
        for p in points
    ]


def drawdown_time_series(trades: Iterable[Any], server_clock: Optional[str] = None) -> list[DrawdownPoint]:
    """Per-trade peak and drawdown, ascending by JST open time."""
    ordered = sort_by_open_time(collect_valid_trades(trades, server_clock)[0])
    return [
        DrawdownPoint(
            date=p.opened_at.strftime("%Y-%m-%d"),
            profit=p.profit,
            cumulative_profit=p.cumulative_profit,
            peak=p.peak,
            drawdown=p.drawdown,
            drawdown_percent=p.drawdown_percent,
        )
        for p in equity_series_from_valid(ordered)
    ]


def assemble_report(trades: Iterable[Any], server_clock: Optional[str] = None) -> AnalysisReport:
    """
    Assemble the analysis report.

    Args:
        trades: Trade objects, any order
        server_clock: Interpretation of naive open times

    Returns:
        AnalysisReport with summary, timeZoneStats (4), symbolStats,
        weekdayStats (5) and weekdayTimeZoneHeatmap (20)
    """
    trades = list(trades)

    excluded = count_unclassifiable(trades, server_clock)
    if excluded:
        logger.info(f"{excluded} trades have no usable open time and are left out of time-based stats")

    return AnalysisReport(
        summary=DashboardSummarySchema.model_validate(compute_summary(trades, server_clock)),
        time_zone_stats=[TimeZoneStat.model_validate(s) for s in by_session(trades, server_clock)],
        symbol_stats=[SymbolStat.model_validate(s) for s in by_symbol(trades)],
        weekday_stats=[WeekdayStat.model_validate(s) for s in by_weekday(trades, server_clock)],
        weekday_time_zone_heatmap=[
            WeekdayTimeZoneCell.model_validate(c) for c in by_weekday_session(trades, server_clock)
        ],
    )


def assemble_dashboard(trades: Iterable[Any], server_clock: Optional[str] = None) -> DashboardData:
    """Assemble the analysis report plus the profit, monthly win-rate and drawdown chart series."""
    trades = list(trades)
    report = assemble_report(trades, server_clock)

    graphs = DashboardGraphs(
        profit_time_series=profit_time_series(trades, server_clock),
        monthly_win_rates=[
            MonthlyWinRateData.model_validate(m) for m in monthly_win_rates(trades, server_clock)
        ],
        drawdown_time_series=drawdown_time_series(trades, server_clock),
    )
    return DashboardData(**dict(report), graphs=graphs)
