"""Coin registry operations.

The registry only supplies display names; nothing in the analytics engine
reads it. Like the trade store, every operation returns a new list.
"""

from __future__ import annotations

from tradebook.ledger.models import CustomCoin
from tradebook.ledger.store import LedgerError, new_id


class CoinNotFoundError(LedgerError, LookupError):
    def __init__(self, coin_id: str) -> None:
        super().__init__(f"No coin with id {coin_id!r}")
        self.coin_id = coin_id


def _require(name: str, symbol: str) -> None:
    if not name or not symbol:
        raise LedgerError("Coin name and symbol are required")


def add_coin(coins: list[CustomCoin], name: str, symbol: str) -> list[CustomCoin]:
    """Register a coin. Symbols are stored upper-cased."""
    _require(name, symbol)
    return [*coins, CustomCoin(id=new_id(), name=name, symbol=symbol.upper())]


def update_coin(
    coins: list[CustomCoin], coin_id: str, name: str, symbol: str
) -> list[CustomCoin]:
    _require(name, symbol)
    if not any(c.id == coin_id for c in coins):
        raise CoinNotFoundError(coin_id)
    return [
        c.model_copy(update={"name": name, "symbol": symbol.upper()}) if c.id == coin_id else c
        for c in coins
    ]


def delete_coin(coins: list[CustomCoin], coin_id: str) -> list[CustomCoin]:
    if not any(c.id == coin_id for c in coins):
        raise CoinNotFoundError(coin_id)
    return [c for c in coins if c.id != coin_id]


def resolve_coin_name(coins: list[CustomCoin], symbol: str) -> str:
    """Display name for a symbol, or the symbol itself if unregistered."""
    for coin in coins:
        if coin.symbol == symbol:
            return coin.name
    return symbol
