"""Tests for analysis report and dashboard payload assembly."""

import json

import pytest
from pydantic import ValidationError

from fxjournal.reports.dashboard import (
    assemble_dashboard,
    assemble_report,
    drawdown_time_series,
    profit_time_series,
)
from fxjournal.reports.schemas import AnalysisReport


class TestAssembleReport:
    """Tests for the analysis report payload."""

    def test_payload_keys_are_camel_case(self, sample_trades):
        payload = assemble_report(sample_trades).to_payload()

        assert set(payload) == {
            "summary",
            "timeZoneStats",
            "symbolStats",
            "weekdayStats",
            "weekdayTimeZoneHeatmap",
        }
        assert "maxDrawdownPercent" in payload["summary"]
        assert "riskRewardRatio" in payload["summary"]
        assert set(payload["timeZoneStats"][0]) == {"zone", "label", "trades", "winRate", "totalProfit"}
        assert set(payload["weekdayTimeZoneHeatmap"][0]) == {"weekday", "zone", "winRate", "trades"}

    def test_fixed_cardinalities(self, sample_trades):
        payload = assemble_report(sample_trades).to_payload()

        assert len(payload["timeZoneStats"]) == 4
        assert len(payload["weekdayStats"]) == 5
        assert len(payload["weekdayTimeZoneHeatmap"]) == 20

    def test_empty_input_still_full_shape(self):
        payload = assemble_report([]).to_payload()

        assert payload["summary"]["totalTrades"] == 0
        assert payload["symbolStats"] == []
        assert [z["zone"] for z in payload["timeZoneStats"]] == ["tokyo", "london", "newyork", "other"]
        assert all(w["trades"] == 0 for w in payload["weekdayStats"])
        assert len(payload["weekdayTimeZoneHeatmap"]) == 20

    def test_sessions_for_three_trades(self, make_trade):
        """10:00, 17:00 and 23:00 JST land in Tokyo, London and New York."""
        trades = [
            make_trade((2025, 1, 7, 10, 0), 100.0),
            make_trade((2025, 1, 7, 17, 0), -50.0),
            make_trade((2025, 1, 7, 23, 0), 30.0),
        ]
        zones = {z["zone"]: z for z in assemble_report(trades).to_payload()["timeZoneStats"]}

        assert zones["tokyo"]["trades"] == 1
        assert zones["tokyo"]["winRate"] == 100.0
        assert zones["london"]["trades"] == 1
        assert zones["london"]["winRate"] == 0.0
        assert zones["newyork"]["trades"] == 1
        assert zones["other"]["trades"] == 0

    def test_saturday_morning_goes_to_friday(self, make_trade):
        trades = [make_trade((2025, 1, 11, 3, 0), 10.0)]
        weekdays = assemble_report(trades).to_payload()["weekdayStats"]

        assert weekdays[4]["weekday"] == 5
        assert weekdays[4]["trades"] == 1
        assert weekdays[4]["winRate"] == 100.0
        assert sum(w["trades"] for w in weekdays) == 1

    def test_saturday_afternoon_reaches_no_weekday(self, make_trade):
        trades = [make_trade((2025, 1, 11, 12, 0), 10.0)]
        payload = assemble_report(trades).to_payload()

        assert sum(w["trades"] for w in payload["weekdayStats"]) == 0
        assert payload["summary"]["totalTrades"] == 1

    def test_assembly_is_deterministic(self, sample_trades):
        """Same trades, same payload, down to the serialized bytes."""
        first = assemble_report(sample_trades).to_payload()
        second = assemble_report(list(sample_trades)).to_payload()

        assert first == second
        assert json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)

    def test_payload_is_json_serializable(self, sample_trades):
        json.dumps(assemble_report(sample_trades).to_payload())

    def test_schema_rejects_wrong_cardinality(self, sample_trades):
        payload = assemble_report(sample_trades).to_payload()
        payload["weekdayStats"] = payload["weekdayStats"][:4]

        with pytest.raises(ValidationError):
            AnalysisReport.model_validate(payload)

    def test_payload_round_trips_through_schema(self, sample_trades):
        payload = assemble_report(sample_trades).to_payload()
        assert AnalysisReport.model_validate(payload).to_payload() == payload


class TestDashboard:
    """Tests for the dashboard payload with chart series."""

    def test_graphs_present(self, sample_trades):
        payload = assemble_dashboard(sample_trades).to_payload()

        assert set(payload["graphs"]) == {"profitTimeSeries", "monthlyWinRates", "drawdownTimeSeries"}
        assert payload["summary"] == assemble_report(sample_trades).to_payload()["summary"]

    def test_profit_series_is_ascending_for_any_input_order(self, sample_trades):
        series = assemble_dashboard(list(reversed(sample_trades))).to_payload()["graphs"]["profitTimeSeries"]

        assert [p["date"] for p in series] == sorted(p["date"] for p in series)
        assert series[0] == {"date": "2025-01-06", "profit": 100.0, "cumulativeProfit": 100.0}
        assert series[-1]["cumulativeProfit"] == 80.0

    def test_drawdown_series(self, sample_trades):
        series = drawdown_time_series(sample_trades)

        assert len(series) == 8
        assert max(p.drawdown for p in series) == 100.0
        assert all(p.drawdown >= 0 for p in series)

    def test_series_dates_are_jst(self, make_trade):
        from datetime import datetime, timezone

        trade = make_trade(datetime(2025, 1, 31, 16, 0, tzinfo=timezone.utc), 5.0)
        assert profit_time_series([trade])[0].date == "2025-02-01"

    def test_monthly_win_rates(self, sample_trades):
        months = assemble_dashboard(sample_trades).to_payload()["graphs"]["monthlyWinRates"]
        assert months == [{"month": "2025-01", "winRate": 50.0, "trades": 8}]
