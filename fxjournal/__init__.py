"""
FX Trade Journal Analytics

Statistics engine for an FX trading journal: market-session classification on
the JST clock, equity/drawdown and streak analysis, and the per-session,
per-symbol and per-weekday breakdowns behind the dashboard and analysis report.
"""

__version__ = "0.1.0"
__author__ = "FX Journal Team"
