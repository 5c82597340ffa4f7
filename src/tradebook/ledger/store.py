"""Trade ledger operations.

Every function here takes the current list of trades and returns a new
list; inputs are never mutated. These are the only places that maintain
``remaining_amount = amount - sum(sold_amount)``.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from tradebook.ledger.models import SellRecord, Trade

logger = logging.getLogger(__name__)


class LedgerError(ValueError):
    """A ledger operation was rejected (missing field, oversell, ...)."""


class TradeNotFoundError(LedgerError, LookupError):
    def __init__(self, trade_id: str) -> None:
        super().__init__(f"No trade with id {trade_id!r}")
        self.trade_id = trade_id


class SellNotFoundError(LedgerError, LookupError):
    def __init__(self, trade_id: str, sell_id: str) -> None:
        super().__init__(f"Trade {trade_id!r} has no sell with id {sell_id!r}")
        self.trade_id = trade_id
        self.sell_id = sell_id


def new_id() -> str:
    return uuid.uuid4().hex


def create_trade(
    name: str,
    currency_name: str,
    price: float,
    amount: float,
    usdt_used: float,
    timestamp: datetime | None = None,
    trade_id: str | None = None,
) -> Trade:
    """Build a fresh trade with no sells and its full amount remaining.

    Raises:
        LedgerError: If name or currency is empty.
    """
    if not name or not currency_name:
        raise LedgerError("Trade name and currency are required")
    return Trade(
        id=trade_id or new_id(),
        name=name,
        currency_name=currency_name,
        price=price,
        amount=amount,
        usdt_used=usdt_used,
        timestamp=timestamp or datetime.now(UTC),
        sells=[],
        remaining_amount=amount,
    )


def add_trade(trades: list[Trade], trade: Trade) -> list[Trade]:
    return [*trades, trade]


def find_trade(trades: list[Trade], trade_id: str) -> Trade:
    for trade in trades:
        if trade.id == trade_id:
            return trade
    raise TradeNotFoundError(trade_id)


def _replace(trades: list[Trade], updated: Trade) -> list[Trade]:
    return [updated if t.id == updated.id else t for t in trades]


def record_sell(
    trades: list[Trade],
    trade_id: str,
    sell_price: float,
    sold_amount: float,
    usdt_received: float,
    timestamp: datetime | None = None,
    sell_id: str | None = None,
) -> list[Trade]:
    """Append a sell to a trade and reduce its remaining amount.

    Raises:
        TradeNotFoundError: If no trade has ``trade_id``.
        LedgerError: If the trade is already completed or ``sold_amount``
            exceeds the remaining amount.
    """
    trade = find_trade(trades, trade_id)
    if trade.is_completed:
        raise LedgerError(f"Trade {trade_id!r} is already completed")
    if sold_amount > trade.remaining_amount:
        raise LedgerError(
            f"Cannot sell more than remaining amount ({trade.remaining_amount:.8f})"
        )

    sell = SellRecord(
        id=sell_id or new_id(),
        sell_price=sell_price,
        sold_amount=sold_amount,
        usdt_received=usdt_received,
        timestamp=timestamp or datetime.now(UTC),
    )
    updated = trade.model_copy(
        update={
            "sells": [*trade.sells, sell],
            "remaining_amount": trade.remaining_amount - sold_amount,
        }
    )
    logger.debug("Recorded sell %s on trade %s (%s units)", sell.id, trade_id, sold_amount)
    return _replace(trades, updated)


def update_trade(
    trades: list[Trade],
    trade_id: str,
    *,
    name: str | None = None,
    currency_name: str | None = None,
    price: float | None = None,
    amount: float | None = None,
    usdt_used: float | None = None,
) -> list[Trade]:
    """Overwrite the given fields of a trade.

    A new ``amount`` resets ``remaining_amount`` to that amount. Existing
    sells are kept as they are and are not rescaled.
    """
    trade = find_trade(trades, trade_id)
    if name == "" or currency_name == "":
        raise LedgerError("Trade name and currency are required")

    changes: dict = {}
    if name is not None:
        changes["name"] = name
    if currency_name is not None:
        changes["currency_name"] = currency_name
    if price is not None:
        changes["price"] = price
    if usdt_used is not None:
        changes["usdt_used"] = usdt_used
    if amount is not None:
        changes["amount"] = amount
        changes["remaining_amount"] = amount
        if trade.sells:
            logger.warning(
                "Trade %s has %d sells; remaining amount reset to %s without "
                "accounting for them",
                trade_id,
                len(trade.sells),
                amount,
            )
    return _replace(trades, trade.model_copy(update=changes))


def _find_sell(trade: Trade, sell_id: str) -> SellRecord:
    for sell in trade.sells:
        if sell.id == sell_id:
            return sell
    raise SellNotFoundError(trade.id, sell_id)


def update_sell(
    trades: list[Trade],
    trade_id: str,
    sell_id: str,
    *,
    sell_price: float,
    sold_amount: float,
    usdt_received: float,
) -> list[Trade]:
    """Replace a sell's figures in place, keeping its id and timestamp.

    Raises:
        LedgerError: If the new amount exceeds what the trade has left
            plus what this sell already took.
    """
    trade = find_trade(trades, trade_id)
    old = _find_sell(trade, sell_id)
    available = trade.remaining_amount + old.sold_amount
    if sold_amount > available:
        raise LedgerError(
            f"Cannot increase sell amount beyond remaining amount ({available:.8f})"
        )

    new_sell = old.model_copy(
        update={
            "sell_price": sell_price,
            "sold_amount": sold_amount,
            "usdt_received": usdt_received,
        }
    )
    updated = trade.model_copy(
        update={
            "sells": [new_sell if s.id == sell_id else s for s in trade.sells],
            "remaining_amount": trade.remaining_amount + old.sold_amount - sold_amount,
        }
    )
    return _replace(trades, updated)


def delete_sell(trades: list[Trade], trade_id: str, sell_id: str) -> list[Trade]:
    """Remove a sell and give its amount back to the trade."""
    trade = find_trade(trades, trade_id)
    sell = _find_sell(trade, sell_id)
    updated = trade.model_copy(
        update={
            "sells": [s for s in trade.sells if s.id != sell_id],
            "remaining_amount": trade.remaining_amount + sell.sold_amount,
        }
    )
    return _replace(trades, updated)


def delete_trade(trades: list[Trade], trade_id: str) -> list[Trade]:
    """Remove a trade together with all of its sells."""
    find_trade(trades, trade_id)
    return [t for t in trades if t.id != trade_id]


def sort_for_display(trades: list[Trade]) -> list[Trade]:
    """Active trades first, then completed ones; newest first within each."""
    by_newest = sorted(trades, key=lambda t: t.timestamp, reverse=True)
    return sorted(by_newest, key=lambda t: t.is_completed)
