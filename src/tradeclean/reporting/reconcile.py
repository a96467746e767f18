from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path
from typing import Mapping, Union

from tradeclean.errors import TransformerError
from tradeclean.model import (
    CleanedTradeRecord,
    ExceptionRecord,
    ExceptionType,
    FillRecord,
    SymbolReference,
    TradeRecord,
)

logger = logging.getLogger(__name__)

ReconcileResult = Union[CleanedTradeRecord, ExceptionRecord]


def has_discrepancy(trade: TradeRecord, fill: FillRecord, threshold: Decimal) -> bool:
    """Price differs by more than ``threshold`` or quantities differ."""
    price_diff = (trade.price - fill.price).copy_abs()
    return price_diff > threshold or trade.quantity != fill.quantity


class Transformer:
    """Certify executed trades against symbol reference data and fills.

    Checks run in a fixed order and the first failure decides the outcome:

    1. trade id already seen            -> DUPLICATE_TRADE_ID
    2. symbol not in reference data     -> INVALID_SYMBOL
    3. symbol marked inactive           -> INACTIVE_SYMBOL
    4. fill lookup by trade id (absence is not an error)
    5. fill symbol differs              -> FILL_SYMBOL_MISMATCH
    6. fill not strictly after trade    -> FILL_TIMESTAMP_INVALID
    7. discrepancy flag from price/quantity differences

    A trade id is recorded on first sight, whatever the eventual outcome, so
    any later row reusing it is a duplicate. The seen-id set belongs to this
    instance; separate runs should use separate transformers.
    """

    def __init__(
        self,
        symbols: Mapping[str, SymbolReference],
        fills: Mapping[str, FillRecord],
        *,
        price_discrepancy_threshold: Decimal,
        seen_trade_ids: set[str] | None = None,
    ) -> None:
        if price_discrepancy_threshold < 0:
            raise ValueError("price_discrepancy_threshold must be non-negative")
        self.symbols = symbols
        self.fills = fills
        self.price_discrepancy_threshold = price_discrepancy_threshold
        self._seen_trade_ids: set[str] = (
            seen_trade_ids if seen_trade_ids is not None else set()
        )

    @property
    def seen_count(self) -> int:
        return len(self._seen_trade_ids)

    def reconcile(self, trade: TradeRecord, source_file: str | Path) -> ReconcileResult:
        """Return a cleaned trade or an exception record for ``trade``.

        Business rejections come back as ExceptionRecord values. Anything else
        raised while checking is a bug, not bad data, and surfaces as
        TransformerError.
        """
        try:
            return self._reconcile(trade, str(source_file))
        except Exception as e:
            trade_id = getattr(trade, "trade_id", None)
            raise TransformerError(
                f"Fatal error while reconciling trade {trade_id!r}"
            ) from e

    def _reconcile(self, trade: TradeRecord, source_file: str) -> ReconcileResult:
        if trade.trade_id in self._seen_trade_ids:
            logger.debug("Duplicate trade_id: %s", trade.trade_id)
            return self._reject(
                trade,
                source_file,
                ExceptionType.DUPLICATE_TRADE_ID,
                f"Duplicate trade_id: {trade.trade_id}",
            )
        self._seen_trade_ids.add(trade.trade_id)

        symbol_ref = self.symbols.get(trade.symbol)
        if symbol_ref is None:
            return self._reject(
                trade,
                source_file,
                ExceptionType.INVALID_SYMBOL,
                f"Symbol in trade record not found in reference data: {trade.symbol}",
            )
        if not symbol_ref.is_active:
            return self._reject(
                trade,
                source_file,
                ExceptionType.INACTIVE_SYMBOL,
                f"Symbol in trade record is inactive: {trade.symbol}",
            )

        fill = self.fills.get(trade.trade_id)
        discrepancy = False
        if fill is not None:
            if fill.symbol != trade.symbol:
                return self._reject(
                    trade,
                    source_file,
                    ExceptionType.FILL_SYMBOL_MISMATCH,
                    f"Fill symbol {fill.symbol} does not match trade symbol "
                    f"{trade.symbol}",
                )
            if not fill.timestamp > trade.timestamp:
                return self._reject(
                    trade,
                    source_file,
                    ExceptionType.FILL_TIMESTAMP_INVALID,
                    f"Fill timestamp {fill.timestamp.isoformat()} is not after "
                    f"trade timestamp {trade.timestamp.isoformat()}",
                )
            discrepancy = has_discrepancy(
                trade, fill, self.price_discrepancy_threshold
            )
            if discrepancy:
                logger.debug(
                    "Discrepancy on %s: trade %s x %s vs fill %s x %s",
                    trade.trade_id,
                    trade.quantity,
                    trade.price,
                    fill.quantity,
                    fill.price,
                )

        return CleanedTradeRecord(
            trade_id=trade.trade_id,
            timestamp_utc=trade.timestamp,
            symbol=trade.symbol,
            quantity=trade.quantity,
            price=trade.price,
            buyer_id=trade.buyer_id,
            seller_id=trade.seller_id,
            counterparty_confirmed=fill is not None,
            discrepancy_flag=discrepancy,
        )

    @staticmethod
    def _reject(
        trade: TradeRecord,
        source_file: str,
        exception_type: ExceptionType,
        details: str,
    ) -> ExceptionRecord:
        return ExceptionRecord(
            record_id=trade.trade_id,
            source_file=source_file,
            exception_type=exception_type,
            details=details,
            raw_data=dict(trade.raw_data),
        )
