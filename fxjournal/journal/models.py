"""
Trade records for the FX journal.

Models:
- Trade: Immutable normalized trade record (one closed or open position)
- TradeDirection: Buy / sell
- PricedTrade / ValidTrade: Trades admitted to the statistics, with their
  validated profit (and JST open time)
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, NamedTuple, Optional
import enum
import logging
import math
import numbers
import uuid

from fxjournal.journal.clock import parse_server_time, to_jst

logger = logging.getLogger(__name__)


class TradeValidationError(ValueError):
    """Raised when trade data cannot be used for statistics."""


class UnsortedTradesError(TradeValidationError):
    """Raised when a sequence that must be ordered by open time is not."""


class TradeDirection(str, enum.Enum):
    """Trade direction enum."""

    BUY = "buy"
    SELL = "sell"

    @classmethod
    def parse(cls, value: Any) -> "TradeDirection":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower() if value is not None else ""
        try:
            return cls(text)
        except ValueError:
            raise TradeValidationError(f"Unknown trade direction: {value!r}") from None


@dataclass(frozen=True)
class Trade:
    """Individual trade record."""

    symbol: str
    direction: TradeDirection
    open_time: Optional[datetime]
    profit: Optional[float]

    ticket: Optional[int] = None
    size: Optional[float] = None
    open_price: Optional[float] = None
    close_price: Optional[float] = None
    close_time: Optional[datetime] = None

    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    commission: Optional[float] = None
    taxes: Optional[float] = None
    swap: Optional[float] = None

    memo: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __repr__(self):
        return f"<Trade(ticket={self.ticket}, symbol='{self.symbol}', open_time='{self.open_time}', profit={self.profit})>"

    @property
    def is_closed(self) -> bool:
        return self.profit is not None

    @property
    def is_winner(self) -> bool:
        """Check if trade was profitable."""
        return self.profit is not None and self.profit > 0

    def with_memo(self, memo: Optional[str]) -> "Trade":
        """Return a copy with a corrected memo; nothing else about a trade changes."""
        return replace(self, memo=memo)

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation with camelCase keys."""
        return {
            "id": self.id,
            "ticket": self.ticket,
            "openTime": self.open_time.isoformat() if self.open_time else None,
            "type": self.direction.value,
            "size": self.size,
            "item": self.symbol,
            "openPrice": self.open_price,
            "stopLoss": self.stop_loss,
            "takeProfit": self.take_profit,
            "closeTime": self.close_time.isoformat() if self.close_time else None,
            "closePrice": self.close_price,
            "commission": self.commission,
            "taxes": self.taxes,
            "swap": self.swap,
            "profit": self.profit,
            "memo": self.memo,
        }

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> "Trade":
        """
        Build a Trade from a loosely typed record.

        Accepts the camelCase keys of the upload pipeline (``openTime``,
        ``item``, ``type`` ...) as well as snake_case attribute names.
        Timestamps that cannot be parsed are kept as None so the trade is
        excluded from time-based statistics instead of failing the import.

        Raises:
            TradeValidationError: Missing symbol/direction or non-numeric fields
        """

        def pick(*keys: str) -> Any:
            for key in keys:
                if key in record and not _is_missing(record[key]):
                    return record[key]
            return None

        symbol = pick("symbol", "item")
        if symbol is None or not str(symbol).strip():
            raise TradeValidationError("Trade record has no symbol")

        direction = pick("direction", "type")
        if direction is None:
            raise TradeValidationError("Trade record has no direction")

        raw_open_time = pick("open_time", "openTime")
        open_time = parse_server_time(raw_open_time)
        if raw_open_time is not None and open_time is None:
            logger.warning(f"Unparseable open time {raw_open_time!r} for ticket {pick('ticket')}")

        ticket = pick("ticket")
        kwargs: dict[str, Any] = {}
        trade_id = pick("id")
        if trade_id is not None:
            kwargs["id"] = str(trade_id)

        return cls(
            symbol=str(symbol).strip(),
            direction=TradeDirection.parse(direction),
            open_time=open_time,
            profit=_to_float(pick("profit"), "profit"),
            ticket=_to_ticket(ticket),
            size=_to_float(pick("size"), "size"),
            open_price=_to_float(pick("open_price", "openPrice"), "open_price"),
            close_price=_to_float(pick("close_price", "closePrice"), "close_price"),
            close_time=parse_server_time(pick("close_time", "closeTime")),
            stop_loss=_to_float(pick("stop_loss", "stopLoss"), "stop_loss"),
            take_profit=_to_float(pick("take_profit", "takeProfit"), "take_profit"),
            commission=_to_float(pick("commission"), "commission"),
            taxes=_to_float(pick("taxes"), "taxes"),
            swap=_to_float(pick("swap"), "swap"),
            memo=pick("memo"),
            **kwargs,
        )


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    # pandas.NaT and friends compare unequal to themselves
    try:
        return bool(value != value)
    except (TypeError, ValueError):
        return False


def _to_float(value: Any, field_name: str) -> Optional[float]:
    """Boundary conversion: numeric strings are accepted, anything else non-numeric is rejected."""
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip().replace(",", "").replace(" ", "")
        try:
            value = float(text)
        except ValueError:
            raise TradeValidationError(f"{field_name} is not numeric: {value!r}") from None
    return validate_number(value, field_name)


def _to_ticket(value: Any) -> Optional[int]:
    number = _to_float(value, "ticket")
    if number is None:
        return None
    if not number.is_integer():
        raise TradeValidationError(f"ticket must be a whole number, got {value!r}")
    return int(number)


def validate_number(value: Any, field_name: str = "profit") -> float:
    """
    Validate a numeric trade field.

    Raises:
        TradeValidationError: For booleans, non-numbers, NaN and infinities
    """
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, Decimal)):
        raise TradeValidationError(f"{field_name} must be a number, got {type(value).__name__}: {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise TradeValidationError(f"{field_name} must be finite, got {value!r}")
    return number


class PricedTrade(NamedTuple):
    """A trade with a validated, non-null profit."""

    profit: float
    trade: Any


class ValidTrade(NamedTuple):
    """A priced trade whose open time converts to JST."""

    opened_at: datetime
    profit: float
    trade: Any


def collect_priced_trades(trades: Iterable[Any]) -> list[PricedTrade]:
    """
    Keep trades with a profit, validating it.

    Trades with a null profit (still open) are skipped; a profit that is
    present but not a finite number raises TradeValidationError.
    """
    priced = []
    for trade in trades:
        profit = getattr(trade, "profit", None)
        if profit is None:
            continue
        priced.append(PricedTrade(validate_number(profit, "profit"), trade))
    return priced


def collect_valid_trades(
    trades: Iterable[Any],
    server_clock: Optional[str] = None,
) -> tuple[list[ValidTrade], int]:
    """
    Keep priced trades whose open time converts to JST, in input order.

    Returns:
        Tuple of (valid trades, number of priced trades dropped because their
        open time is missing or unconvertible)
    """
    valid = []
    excluded = 0
    for item in collect_priced_trades(trades):
        opened_at = to_jst(getattr(item.trade, "open_time", None), server_clock)
        if opened_at is None:
            excluded += 1
            continue
        valid.append(ValidTrade(opened_at, item.profit, item.trade))

    if excluded:
        logger.debug(f"Excluded {excluded} trades without a convertible open time")
    return valid, excluded


def sort_by_open_time(valid: Iterable[ValidTrade]) -> list[ValidTrade]:
    """Stable ascending sort on the JST open time."""
    return sorted(valid, key=lambda item: item.opened_at)
