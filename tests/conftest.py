"""Pytest configuration and fixtures."""

from datetime import datetime

import pytest

from fxjournal.journal.clock import JST


@pytest.fixture(autouse=True)
def xm_server_clock(monkeypatch):
    """Pin the broker clock so a local config.yaml cannot change results."""
    monkeypatch.setenv("FXJOURNAL_SERVER_CLOCK", "xm")


@pytest.fixture
def make_trade():
    """Factory for Trade records opened at a JST wall-clock time."""
    from fxjournal.journal.models import Trade, TradeDirection

    counter = {"ticket": 1000}

    def _make(open_time, profit, symbol="usdjpy", direction=TradeDirection.BUY, **kwargs):
        if isinstance(open_time, tuple):
            open_time = datetime(*open_time, tzinfo=JST)
        counter["ticket"] += 1
        kwargs.setdefault("ticket", counter["ticket"])
        kwargs.setdefault("size", 0.1)
        return Trade(
            symbol=symbol,
            direction=direction,
            open_time=open_time,
            profit=profit,
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_trades(make_trade):
    """A week of trades across sessions and symbols (JST times)."""
    return [
        make_trade((2025, 1, 6, 10, 0), 100.0),  # Mon Tokyo
        make_trade((2025, 1, 6, 17, 30), -40.0, symbol="eurusd"),  # Mon London
        make_trade((2025, 1, 7, 22, 15), 60.0),  # Tue New York
        make_trade((2025, 1, 8, 3, 0), -20.0, symbol="gbpjpy"),  # Wed Other
        make_trade((2025, 1, 9, 9, 45), 0.0),  # Thu Tokyo, breakeven
        make_trade((2025, 1, 10, 23, 0), -80.0),  # Fri New York
        make_trade((2025, 1, 11, 1, 30), 50.0, symbol="eurusd"),  # Sat early -> Fri New York
        make_trade((2025, 1, 11, 12, 0), 10.0),  # Sat afternoon, no weekday
        make_trade((2025, 1, 12, 11, 0), None),  # Still open
    ]
