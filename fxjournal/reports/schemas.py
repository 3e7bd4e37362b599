"""
Pydantic schemas for report payloads.

Field names are snake_case in Python and camelCase on the wire; dump with
``model_dump(by_alias=True)`` (or ``to_payload``) for the JSON contract shared
by the dashboard charts and the report-writing step.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fxjournal.journal.clock import MarketSession


class ReportModel(BaseModel):
    """Base for all report payload models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# ==================== SUMMARY ====================


class DashboardSummarySchema(ReportModel):
    gross_profit: float
    gross_loss: float
    net_profit: float
    total_trades: int
    win_rate: float
    profit_factor: float
    avg_profit: float
    avg_loss: float
    largest_profit: float
    largest_loss: float
    max_win_streak: int
    max_loss_streak: int
    max_drawdown: float
    max_drawdown_percent: float
    risk_reward_ratio: float


# ==================== BREAKDOWNS ====================


class TimeZoneStat(ReportModel):
    zone: MarketSession
    label: str
    trades: int
    win_rate: float
    total_profit: float


class SymbolStat(ReportModel):
    symbol: str
    trades: int
    win_rate: float
    total_profit: float


class WeekdayStat(ReportModel):
    weekday: int = Field(ge=1, le=5)
    label: str
    trades: int
    win_rate: float
    total_profit: float


class WeekdayTimeZoneCell(ReportModel):
    weekday: int = Field(ge=1, le=5)
    zone: MarketSession
    win_rate: float
    trades: int


class MonthlyWinRateData(ReportModel):
    month: str
    win_rate: float
    trades: int


# ==================== TIME SERIES ====================


class ProfitPoint(ReportModel):
    date: str
    profit: float
    cumulative_profit: float


class DrawdownPoint(ReportModel):
    date: str
    profit: float
    cumulative_profit: float
    peak: float
    drawdown: float
    drawdown_percent: float


class DashboardGraphs(ReportModel):
    profit_time_series: list[ProfitPoint]
    monthly_win_rates: list[MonthlyWinRateData]
    drawdown_time_series: list[DrawdownPoint]


# ==================== PAYLOADS ====================


class AnalysisReport(ReportModel):
    """Input of the analysis-report writer and the dashboard breakdown charts."""

    summary: DashboardSummarySchema
    time_zone_stats: list[TimeZoneStat] = Field(min_length=4, max_length=4)
    symbol_stats: list[SymbolStat]
    weekday_stats: list[WeekdayStat] = Field(min_length=5, max_length=5)
    weekday_time_zone_heatmap: list[WeekdayTimeZoneCell] = Field(min_length=20, max_length=20)


class DashboardData(AnalysisReport):
    """Full dashboard payload: the report plus chart series."""

    graphs: DashboardGraphs
