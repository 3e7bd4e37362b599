"""
FX Journal CLI Application.

Command-line interface for the trade statistics engine.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from fxjournal.config import settings

# Initialize CLI app
app = typer.Typer(
    name="fxjournal",
    help="FX Journal - trade statistics by market session, weekday and symbol",
    add_completion=False,
)

# Sub-command groups
report_app = typer.Typer(help="Report commands")
config_app = typer.Typer(help="Configuration commands")

app.add_typer(report_app, name="report")
app.add_typer(config_app, name="config")

console = Console()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


def _parse_date(value: Optional[str], option: str):
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        console.print(f"[red]{option} must be YYYY-MM-DD, got {value!r}[/red]")
        raise typer.Exit(1)


def load_trades(
    path: Path,
    clock: Optional[str],
    start: Optional[str],
    end: Optional[str],
    symbols: Optional[list[str]],
    trade_type: Optional[str],
):
    """Load a trade file and apply the command-line filter."""
    from fxjournal.journal.clock import resolve_server_clock
    from fxjournal.journal.filters import TradeFilter, apply_filter
    from fxjournal.journal.ingest import TradeIngester

    try:
        resolve_server_clock(clock)
    except ValueError:
        console.print(f"[red]Unknown server clock {clock!r} (expected xm, utc or jst)[/red]")
        raise typer.Exit(1)

    try:
        trade_filter = TradeFilter(
            start_date=_parse_date(start, "--start"),
            end_date=_parse_date(end, "--end"),
            items=symbols or None,
            types=[trade_type] if trade_type else None,
            sort_order="asc",
        )
    except ValidationError as e:
        console.print(f"[red]Invalid filter: {e.errors()[0]['msg']}[/red]")
        raise typer.Exit(1)

    try:
        result = TradeIngester().load_file(path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading trades: {e}[/red]")
        raise typer.Exit(1)

    if result.errors:
        console.print(f"[yellow]{result.error_count} rows could not be read[/yellow]")

    return apply_filter(result.trades, trade_filter, clock), trade_filter


# Common options
PathArg = typer.Argument(..., help="Trade file (CSV or JSON)")
ClockOpt = typer.Option(None, "--clock", "-c", help="Server clock of naive timestamps (xm/utc/jst)")
StartOpt = typer.Option(None, "--start", help="First JST day (YYYY-MM-DD)")
EndOpt = typer.Option(None, "--end", help="Last JST day (YYYY-MM-DD)")
SymbolOpt = typer.Option(None, "--symbol", "-s", help="Symbol to include (repeatable)")
TypeOpt = typer.Option(None, "--type", "-t", help="Trade direction (buy/sell)")


def _pnl(value: float) -> str:
    style = "green" if value >= 0 else "red"
    return f"[{style}]{value:+,.0f}[/{style}]"


# ==================== REPORT COMMANDS ====================


@report_app.command("summary")
def report_summary(
    path: Path = PathArg,
    clock: Optional[str] = ClockOpt,
    start: Optional[str] = StartOpt,
    end: Optional[str] = EndOpt,
    symbol: Optional[list[str]] = SymbolOpt,
    trade_type: Optional[str] = TypeOpt,
):
    """Show overall performance summary."""
    from fxjournal.journal.analytics import compute_summary

    trades, _ = load_trades(path, clock, start, end, symbol, trade_type)
    s = compute_summary(trades, clock)

    if s.total_trades == 0:
        console.print("[yellow]No closed trades match the filter[/yellow]")
        return

    emoji = "🟢" if s.net_profit >= 0 else "🔴"
    console.print(
        Panel(
            f"[bold]Performance Summary[/bold]\n\n"
            f"Trades: {s.total_trades}\n"
            f"Win Rate: {s.win_rate:.1f}%\n"
            f"Net Profit: {_pnl(s.net_profit)} {emoji}\n"
            f"Gross Profit / Loss: {s.gross_profit:,.0f} / {s.gross_loss:,.0f}\n"
            f"Profit Factor: {s.profit_factor:.2f}\n"
            f"Avg Win / Loss: {s.avg_profit:,.0f} / {s.avg_loss:,.0f} (R:R {s.risk_reward_ratio:.2f})\n"
            f"Largest Win / Loss: {s.largest_profit:,.0f} / {s.largest_loss:,.0f}\n"
            f"Max Streaks: {s.max_win_streak}W / {s.max_loss_streak}L\n"
            f"Max Drawdown: {s.max_drawdown:,.0f} ({s.max_drawdown_percent:.1f}%)",
            title="📊 Summary",
            border_style="blue",
        )
    )


@report_app.command("sessions")
def report_sessions(
    path: Path = PathArg,
    clock: Optional[str] = ClockOpt,
    start: Optional[str] = StartOpt,
    end: Optional[str] = EndOpt,
    symbol: Optional[list[str]] = SymbolOpt,
    trade_type: Optional[str] = TypeOpt,
):
    """Show performance by market session (JST clock)."""
    from fxjournal.journal.aggregation import by_session, count_unclassifiable

    trades, _ = load_trades(path, clock, start, end, symbol, trade_type)

    table = Table(title="Market Sessions (JST)")
    table.add_column("Session", style="cyan")
    table.add_column("Trades", justify="right")
    table.add_column("Win%", justify="right")
    table.add_column("Profit", justify="right")

    for s in by_session(trades, clock):
        table.add_row(s.label, str(s.trades), f"{s.win_rate:.1f}", _pnl(s.total_profit))

    console.print(table)

    excluded = count_unclassifiable(trades, clock)
    if excluded:
        console.print(f"[dim]{excluded} trades without a usable open time were left out[/dim]")


@report_app.command("weekdays")
def report_weekdays(
    path: Path = PathArg,
    clock: Optional[str] = ClockOpt,
    start: Optional[str] = StartOpt,
    end: Optional[str] = EndOpt,
    symbol: Optional[list[str]] = SymbolOpt,
    trade_type: Optional[str] = TypeOpt,
):
    """Show performance by trading weekday."""
    from fxjournal.journal.aggregation import by_weekday

    trades, _ = load_trades(path, clock, start, end, symbol, trade_type)

    table = Table(title="Weekdays (JST, Saturday morning counts as Friday)")
    table.add_column("Day", style="cyan")
    table.add_column("Trades", justify="right")
    table.add_column("Win%", justify="right")
    table.add_column("Profit", justify="right")

    for w in by_weekday(trades, clock):
        table.add_row(w.label, str(w.trades), f"{w.win_rate:.1f}", _pnl(w.total_profit))

    console.print(table)


@report_app.command("symbols")
def report_symbols(
    path: Path = PathArg,
    clock: Optional[str] = ClockOpt,
    start: Optional[str] = StartOpt,
    end: Optional[str] = EndOpt,
    trade_type: Optional[str] = TypeOpt,
):
    """Show performance by symbol."""
    from fxjournal.journal.aggregation import by_symbol

    trades, _ = load_trades(path, clock, start, end, None, trade_type)
    stats = by_symbol(trades)

    if not stats:
        console.print("[yellow]No closed trades match the filter[/yellow]")
        return

    table = Table(title="Symbols")
    table.add_column("Symbol", style="cyan")
    table.add_column("Trades", justify="right")
    table.add_column("Win%", justify="right")
    table.add_column("Profit", justify="right")

    for s in stats:
        table.add_row(s.symbol, str(s.trades), f"{s.win_rate:.1f}", _pnl(s.total_profit))

    console.print(table)


@report_app.command("heatmap")
def report_heatmap(
    path: Path = PathArg,
    clock: Optional[str] = ClockOpt,
    start: Optional[str] = StartOpt,
    end: Optional[str] = EndOpt,
    symbol: Optional[list[str]] = SymbolOpt,
    trade_type: Optional[str] = TypeOpt,
):
    """Show win rate by weekday x session."""
    from fxjournal.journal.aggregation import by_weekday_session
    from fxjournal.journal.clock import SESSION_LABELS, SESSION_ORDER, WEEKDAY_LABELS

    trades, _ = load_trades(path, clock, start, end, symbol, trade_type)
    cells = {(c.weekday, c.zone): c for c in by_weekday_session(trades, clock)}

    table = Table(title="Win% by Weekday x Session (trades)")
    table.add_column("Day", style="cyan")
    for session in SESSION_ORDER:
        table.add_column(SESSION_LABELS[session], justify="right")

    for weekday, label in WEEKDAY_LABELS.items():
        row = []
        for session in SESSION_ORDER:
            cell = cells[(weekday, session)]
            row.append(f"{cell.win_rate:.0f}% ({cell.trades})" if cell.trades else "-")
        table.add_row(label, *row)

    console.print(table)


@report_app.command("json")
def report_json(
    path: Path = PathArg,
    clock: Optional[str] = ClockOpt,
    start: Optional[str] = StartOpt,
    end: Optional[str] = EndOpt,
    symbol: Optional[list[str]] = SymbolOpt,
    trade_type: Optional[str] = TypeOpt,
    dashboard: bool = typer.Option(False, "--dashboard", help="Include chart series"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
):
    """Emit the analysis report (or full dashboard) payload as JSON."""
    from fxjournal.reports.service import ReportService

    trades, _ = load_trades(path, clock, start, end, symbol, trade_type)
    service = ReportService(server_clock=clock)
    payload = service.dashboard(trades) if dashboard else service.analysis_report(trades)

    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if output:
        output.write_text(text, encoding="utf-8")
        console.print(f"[green]Report written to {output}[/green]")
    else:
        typer.echo(text)


# ==================== CONFIG COMMANDS ====================


@config_app.command("show")
def config_show():
    """Show effective configuration."""
    console.print(Panel(yaml.dump(settings.as_dict(), sort_keys=False), title="Configuration"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Dot-notation key, e.g. reports.cache_ttl_seconds"),
    value: str = typer.Argument(..., help="New value (parsed as YAML)"),
):
    """Change a setting in config.yaml."""
    from fxjournal.config import CONFIG_KEYS, LOG_LEVELS, SERVER_CLOCKS, load_config, save_config

    if key not in CONFIG_KEYS:
        console.print(f"[red]Unknown setting {key!r} (expected one of {', '.join(CONFIG_KEYS)})[/red]")
        raise typer.Exit(1)

    parsed = yaml.safe_load(value)
    if key == "server_clock" and str(parsed).lower() not in SERVER_CLOCKS:
        console.print(f"[red]server_clock must be one of {', '.join(SERVER_CLOCKS)}[/red]")
        raise typer.Exit(1)
    if key == "logging.level" and str(parsed).upper() not in LOG_LEVELS:
        console.print(f"[red]logging.level must be one of {', '.join(LOG_LEVELS)}[/red]")
        raise typer.Exit(1)
    if key.startswith("reports.") and (not isinstance(parsed, (int, float)) or isinstance(parsed, bool) or parsed <= 0):
        console.print(f"[red]{key} must be a positive number[/red]")
        raise typer.Exit(1)

    config = load_config()
    section = config
    *parents, leaf = key.split(".")
    for name in parents:
        section = section.setdefault(name, {})
    section[leaf] = parsed

    save_config(config)
    settings.reload()
    console.print(f"[green]✓ {key} = {parsed}[/green]")


# ==================== MAIN ====================


@app.callback()
def main():
    """
    FX Journal

    Trade statistics for FX journals: summary, market sessions on the JST
    clock, weekdays, symbols and the weekday x session heatmap.

    QUICK START:

    1. fxjournal report summary trades.csv
    2. fxjournal report json trades.csv --dashboard
    """
    pass


if __name__ == "__main__":
    app()
