"""Report assembly for FX Journal."""

from fxjournal.reports.dashboard import assemble_dashboard, assemble_report
from fxjournal.reports.cache import ReportCache
from fxjournal.reports.service import ReportService

__all__ = ["assemble_report", "assemble_dashboard", "ReportCache", "ReportService"]
