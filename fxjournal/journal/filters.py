"""
Trade filter for report and listing requests.

The filter is parsed and validated once at the boundary; an unset field is
None and means "no constraint". Date bounds are whole JST calendar days, both
ends inclusive.
"""

from datetime import date
from typing import Any, Iterable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from fxjournal.journal.clock import to_jst
from fxjournal.journal.models import TradeDirection

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 200
MIN_PAGE_SIZE = 10
MAX_PAGE_SIZE = 1000

SortField = Literal["open_time", "close_time", "profit", "size", "symbol", "ticket", "open_price"]

# Names used by the upload pipeline for the same columns
_SORT_ALIASES = {
    "openTime": "open_time",
    "startDate": "open_time",
    "closeTime": "close_time",
    "item": "symbol",
    "openPrice": "open_price",
}


class TradeFilter(BaseModel):
    """Validated trade filter."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    types: Optional[list[TradeDirection]] = None
    items: Optional[list[str]] = None
    ticket_ids: Optional[list[int]] = None

    size_min: Optional[float] = None
    size_max: Optional[float] = None
    profit_min: Optional[float] = None
    profit_max: Optional[float] = None
    open_price_min: Optional[float] = None
    open_price_max: Optional[float] = None

    sort_by: SortField = "open_time"
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = Field(DEFAULT_PAGE, ge=1)
    page_size: int = Field(DEFAULT_PAGE_SIZE, ge=MIN_PAGE_SIZE, le=MAX_PAGE_SIZE)

    @field_validator("types", mode="before")
    @classmethod
    def _normalize_types(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list):
            value = [v.strip().lower() if isinstance(v, str) else v for v in value]
            # "all" in the UI means no direction constraint
            if "all" in value:
                return None
        return value

    @field_validator("items", mode="before")
    @classmethod
    def _normalize_items(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list):
            value = [v.strip().lower() for v in value if isinstance(v, str) and v.strip()] or None
        return value

    @field_validator("sort_by", mode="before")
    @classmethod
    def _normalize_sort_by(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _SORT_ALIASES.get(value, value)
        return value

    @model_validator(mode="after")
    def _check_ranges(self) -> "TradeFilter":
        for low, high in (
            ("start_date", "end_date"),
            ("size_min", "size_max"),
            ("profit_min", "profit_max"),
            ("open_price_min", "open_price_max"),
        ):
            low_value = getattr(self, low)
            high_value = getattr(self, high)
            if low_value is not None and high_value is not None and low_value > high_value:
                raise ValueError(f"{low} ({low_value}) must not exceed {high} ({high_value})")
        return self

    @property
    def is_empty(self) -> bool:
        """True when no field constrains which trades match."""
        return all(
            getattr(self, name) is None
            for name in (
                "start_date",
                "end_date",
                "types",
                "items",
                "ticket_ids",
                "size_min",
                "size_max",
                "profit_min",
                "profit_max",
                "open_price_min",
                "open_price_max",
            )
        )


def _within(value: Optional[float], low: Optional[float], high: Optional[float]) -> bool:
    if low is None and high is None:
        return True
    if value is None:
        return False
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def matches(trade: Any, trade_filter: TradeFilter, server_clock: Optional[str] = None) -> bool:
    """Check whether a single trade satisfies the filter."""
    f = trade_filter

    if f.start_date is not None or f.end_date is not None:
        opened_at = to_jst(trade.open_time, server_clock)
        if opened_at is None:
            return False
        day = opened_at.date()
        if f.start_date is not None and day < f.start_date:
            return False
        if f.end_date is not None and day > f.end_date:
            return False

    if f.types is not None and trade.direction not in f.types:
        return False
    if f.items is not None and trade.symbol.strip().lower() not in f.items:
        return False
    if f.ticket_ids is not None and trade.ticket not in f.ticket_ids:
        return False

    return (
        _within(trade.size, f.size_min, f.size_max)
        and _within(trade.profit, f.profit_min, f.profit_max)
        and _within(trade.open_price, f.open_price_min, f.open_price_max)
    )


def _sort_value(trade: Any, sort_by: str, server_clock: Optional[str]) -> Any:
    if sort_by == "open_time":
        return to_jst(trade.open_time, server_clock)
    if sort_by == "close_time":
        return to_jst(trade.close_time, server_clock)
    if sort_by == "symbol":
        return trade.symbol.lower()
    return getattr(trade, sort_by)


def apply_filter(
    trades: Iterable[Any],
    trade_filter: Optional[TradeFilter] = None,
    server_clock: Optional[str] = None,
) -> list[Any]:
    """
    Select and order trades.

    Trades missing the sort value are placed last regardless of sort order.

    Args:
        trades: Trade objects
        trade_filter: Filter (None matches everything, default ordering)
        server_clock: Interpretation of naive timestamps

    Returns:
        Matching trades, sorted by the filter's sort field
    """
    f = trade_filter or TradeFilter()
    selected = [t for t in trades if matches(t, f, server_clock)]

    keyed = [(t, _sort_value(t, f.sort_by, server_clock)) for t in selected]
    present = [pair for pair in keyed if pair[1] is not None]
    missing = [pair[0] for pair in keyed if pair[1] is None]

    present.sort(key=lambda pair: pair[1], reverse=f.sort_order == "desc")
    return [pair[0] for pair in present] + missing


def paginate(trades: list[Any], trade_filter: Optional[TradeFilter] = None) -> dict[str, Any]:
    """Slice one page out of an already filtered list."""
    f = trade_filter or TradeFilter()
    start = (f.page - 1) * f.page_size
    return {
        "records": trades[start : start + f.page_size],
        "total": len(trades),
        "page": f.page,
        "pageSize": f.page_size,
    }
