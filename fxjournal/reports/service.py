"""
Report service: filter, assemble and cache report payloads.
"""

from typing import Any, Iterable, Optional
import logging

from fxjournal.journal.clock import resolve_server_clock
from fxjournal.journal.filters import TradeFilter, apply_filter
from fxjournal.reports.cache import ReportCache, fingerprint
from fxjournal.reports.dashboard import assemble_dashboard, assemble_report

logger = logging.getLogger(__name__)


class ReportService:
    """
    Builds JSON-ready report payloads for a set of trades.

    The cache is injected; pass None to always recompute.
    """

    def __init__(self, cache: Optional[ReportCache] = None, server_clock: Optional[str] = None):
        self.cache = cache
        self.server_clock = resolve_server_clock(server_clock).value

    def _build(self, kind: str, trades: Iterable[Any], trade_filter: Optional[TradeFilter]) -> dict[str, Any]:
        selected = apply_filter(trades, trade_filter, self.server_clock)
        builder = assemble_report if kind == "report" else assemble_dashboard

        def compute() -> dict[str, Any]:
            logger.debug(f"Assembling {kind} over {len(selected)} trades")
            return builder(selected, self.server_clock).to_payload()

        if self.cache is None:
            return compute()

        key = fingerprint(
            kind,
            selected,
            {
                "filter": trade_filter.model_dump(mode="json") if trade_filter else None,
                "server_clock": self.server_clock,
            },
        )
        return self.cache.get_or_compute(key, compute)

    def analysis_report(
        self,
        trades: Iterable[Any],
        trade_filter: Optional[TradeFilter] = None,
    ) -> dict[str, Any]:
        """Analysis report payload (summary and breakdowns) for the matching trades."""
        return self._build("report", trades, trade_filter)

    def dashboard(
        self,
        trades: Iterable[Any],
        trade_filter: Optional[TradeFilter] = None,
    ) -> dict[str, Any]:
        """Dashboard payload (report plus chart series) for the matching trades."""
        return self._build("dashboard", trades, trade_filter)
