"""Persistence backends for the coin registry and trade ledger."""

from tradebook.storage.base import KeyValueStore, StorageError
from tradebook.storage.file import FileStore
from tradebook.storage.registry import (
    COINS_KEY,
    TRADES_KEY,
    load_coins,
    load_trades,
    save_coins,
    save_trades,
)

__all__ = [
    "COINS_KEY",
    "FileStore",
    "KeyValueStore",
    "StorageError",
    "TRADES_KEY",
    "load_coins",
    "load_trades",
    "save_coins",
    "save_trades",
]
