"""Loading and saving the coin registry and trade ledger blobs.

The coin registry is a convenience: failing to read or write it is
logged and otherwise ignored, and a missing or corrupt value reads as an
empty list. The trade ledger is the user's actual data, so its failures
propagate.
"""

from __future__ import annotations

import logging

from pydantic import TypeAdapter, ValidationError

from tradebook.ledger.models import CustomCoin, Trade
from tradebook.storage.base import KeyValueStore, StorageError

logger = logging.getLogger(__name__)

COINS_KEY = "customCoins"
TRADES_KEY = "trades"

_coins_adapter = TypeAdapter(list[CustomCoin])
_trades_adapter = TypeAdapter(list[Trade])


def load_coins(store: KeyValueStore) -> list[CustomCoin]:
    """Read the coin registry; never raises."""
    try:
        raw = store.get(COINS_KEY)
    except StorageError as exc:
        logger.error("Error loading custom coins: %s", exc)
        return []
    if raw is None:
        return []
    try:
        return _coins_adapter.validate_json(raw)
    except ValidationError as exc:
        logger.error("Stored custom coins are malformed, starting empty: %s", exc)
        return []


def save_coins(store: KeyValueStore, coins: list[CustomCoin]) -> None:
    """Overwrite the stored coin registry; failures are logged, not raised."""
    try:
        store.set(COINS_KEY, _coins_adapter.dump_json(coins).decode("utf-8"))
    except StorageError as exc:
        logger.error("Error saving custom coins: %s", exc)


def load_trades(store: KeyValueStore) -> list[Trade]:
    """Read the trade ledger. A missing ledger is empty.

    Raises:
        StorageError: If the backend fails or the stored ledger is malformed.
    """
    raw = store.get(TRADES_KEY)
    if raw is None:
        return []
    try:
        return _trades_adapter.validate_json(raw)
    except ValidationError as exc:
        raise StorageError(f"Stored trade ledger is malformed: {exc}") from exc


def save_trades(store: KeyValueStore, trades: list[Trade]) -> None:
    """Overwrite the stored trade ledger.

    Raises:
        StorageError: If the backend cannot be written.
    """
    store.set(TRADES_KEY, _trades_adapter.dump_json(trades, indent=2).decode("utf-8"))
    logger.debug("Saved %d trades to %s store", len(trades), store.name)
