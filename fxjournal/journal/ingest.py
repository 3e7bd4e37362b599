"""
Trade ingestion for FX Journal.

Loads normalized trade records (as produced by the upload pipeline) from:
- CSV files, including the MT4/MT5 statement column headings
- JSON files holding a list of records (or {"records": [...]})
- In-memory record dicts
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable
import json
import logging

import pandas as pd

from fxjournal.journal.models import Trade, TradeValidationError

logger = logging.getLogger(__name__)

# Lower-cased CSV headings -> Trade.from_dict keys
COLUMN_MAP = {
    # MT4/MT5 statement headings
    "ticket": "ticket",
    "open time": "open_time",
    "type": "direction",
    "size": "size",
    "item": "symbol",
    "price": "open_price",
    "price.1": "close_price",  # Second "Price" column, de-duplicated by pandas
    "s / l": "stop_loss",
    "s/l": "stop_loss",
    "t / p": "take_profit",
    "t/p": "take_profit",
    "close time": "close_time",
    "commission": "commission",
    "taxes": "taxes",
    "swap": "swap",
    "profit": "profit",
    # Normalized export headings
    "opentime": "open_time",
    "open_time": "open_time",
    "closetime": "close_time",
    "close_time": "close_time",
    "openprice": "open_price",
    "open_price": "open_price",
    "closeprice": "close_price",
    "close_price": "close_price",
    "stoploss": "stop_loss",
    "stop_loss": "stop_loss",
    "takeprofit": "take_profit",
    "take_profit": "take_profit",
    "symbol": "symbol",
    "direction": "direction",
    "memo": "memo",
    "id": "id",
}

TRADE_TYPES = {"buy", "sell"}


@dataclass
class IngestResult:
    """Outcome of loading a batch of records."""

    trades: list[Trade] = field(default_factory=list)
    skipped: int = 0  # Non-trade rows (balance, deposit, ...)
    errors: list[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)


class TradeIngester:
    """Turns normalized records into Trade objects."""

    def __init__(self, skip_errors: bool = True):
        self.skip_errors = skip_errors

    def load_records(self, records: Iterable[dict[str, Any]]) -> IngestResult:
        """
        Convert record dicts into trades.

        Rows whose type is not buy/sell (balance, deposit, ...) are skipped.
        Invalid rows are collected as errors, or raised when skip_errors is
        False.
        """
        result = IngestResult()

        for idx, record in enumerate(records):
            try:
                if not isinstance(record, dict):
                    raise TradeValidationError(f"expected a mapping, got {type(record).__name__}")
                kind = record.get("direction", record.get("type"))
                if isinstance(kind, str) and kind.strip().lower() not in TRADE_TYPES:
                    result.skipped += 1
                    continue
                result.trades.append(Trade.from_dict(record))
            except (TradeValidationError, ValueError, TypeError) as e:
                msg = f"Row {idx + 1}: {str(e)}"
                result.errors.append(msg)
                logger.warning(msg)
                if not self.skip_errors:
                    raise

        logger.info(
            f"Loaded {len(result.trades)} trades, {result.skipped} skipped, {result.error_count} errors"
        )
        return result

    def load_csv(self, file_path: str | Path) -> IngestResult:
        """
        Load trades from a CSV file.

        Args:
            file_path: Path to CSV file

        Returns:
            IngestResult
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"CSV file not found: {file_path}")

        # Keep timestamps as text: naive broker time must not be reinterpreted
        df = pd.read_csv(file_path, dtype=str, keep_default_na=True)
        df.columns = df.columns.str.lower().str.strip()
        df = df.rename(columns={c: COLUMN_MAP[c] for c in df.columns if c in COLUMN_MAP})

        records = [
            {key: value for key, value in row.items() if not pd.isna(value)}
            for row in df.to_dict(orient="records")
        ]
        return self.load_records(records)

    def load_json(self, file_path: str | Path) -> IngestResult:
        """Load trades from a JSON list of records (or an object with a "records" list)."""
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"JSON file not found: {file_path}")

        with open(file_path, "r", encoding="utf-8") as f:
            payload = json.load(f)

        if isinstance(payload, dict):
            payload = payload.get("records", [])
        if not isinstance(payload, list):
            raise TradeValidationError(f"{file_path} does not contain a list of trade records")

        return self.load_records(payload)

    def load_file(self, file_path: str | Path) -> IngestResult:
        """Dispatch on file extension (.json, otherwise CSV)."""
        if Path(file_path).suffix.lower() == ".json":
            return self.load_json(file_path)
        return self.load_csv(file_path)
