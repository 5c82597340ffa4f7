"""Trade ledger — models and the pure operations that change them."""

from tradebook.ledger.calculator import QuantityCalculator
from tradebook.ledger.coins import (
    CoinNotFoundError,
    add_coin,
    delete_coin,
    resolve_coin_name,
    update_coin,
)
from tradebook.ledger.models import COMPLETION_TOLERANCE, CustomCoin, SellRecord, Trade
from tradebook.ledger.store import (
    LedgerError,
    SellNotFoundError,
    TradeNotFoundError,
    add_trade,
    create_trade,
    delete_sell,
    delete_trade,
    find_trade,
    record_sell,
    sort_for_display,
    update_sell,
    update_trade,
)

__all__ = [
    # Models
    "COMPLETION_TOLERANCE",
    "CustomCoin",
    "SellRecord",
    "Trade",
    # Errors
    "CoinNotFoundError",
    "LedgerError",
    "SellNotFoundError",
    "TradeNotFoundError",
    # Trade store
    "add_trade",
    "create_trade",
    "delete_sell",
    "delete_trade",
    "find_trade",
    "record_sell",
    "sort_for_display",
    "update_sell",
    "update_trade",
    # Coin registry
    "add_coin",
    "delete_coin",
    "resolve_coin_name",
    "update_coin",
    # Entry helpers
    "QuantityCalculator",
]
