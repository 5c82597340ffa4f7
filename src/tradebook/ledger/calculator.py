"""Three-field quantity calculator for buy and sell entry.

A purchase (or sale) is described by three figures that determine each
other: ``amount`` (units of the asset), ``price`` (quote per unit) and
``quote`` (total quote currency, ``amount * price``). The user types any
two and the third is derived.

Rule: the field the user edited last is authoritative. Editing amount
derives quote; editing quote derives amount; editing price re-derives
whichever of amount/quote was not the last one edited.
"""

from __future__ import annotations

from typing import Literal

from tradebook.ledger.store import LedgerError

QUOTE_DECIMALS = 2
AMOUNT_DECIMALS = 8

EditableField = Literal["amount", "quote"]


class QuantityCalculator:
    """Holds amount/price/quote and keeps them consistent as they are edited."""

    __slots__ = ("_amount", "_price", "_quote", "_last_edited")

    def __init__(
        self,
        amount: float | None = None,
        price: float | None = None,
        quote: float | None = None,
    ) -> None:
        self._amount = amount
        self._price = price
        self._quote = quote
        self._last_edited: EditableField | None = None

    @property
    def amount(self) -> float | None:
        return self._amount

    @property
    def price(self) -> float | None:
        return self._price

    @property
    def quote(self) -> float | None:
        return self._quote

    @property
    def last_edited(self) -> EditableField | None:
        return self._last_edited

    def _quote_from_amount(self) -> float | None:
        if self._amount is None or self._price is None:
            return None
        return round(self._amount * self._price, QUOTE_DECIMALS)

    def _amount_from_quote(self) -> float | None:
        if self._quote is None or not self._price:
            return None
        return round(self._quote / self._price, AMOUNT_DECIMALS)

    def set_amount(self, value: float | None) -> None:
        self._amount = value
        self._last_edited = "amount"
        self._quote = self._quote_from_amount()

    def set_quote(self, value: float | None) -> None:
        self._quote = value
        self._last_edited = "quote"
        self._amount = self._amount_from_quote()

    def set_price(self, value: float | None) -> None:
        """Update price and re-derive the field that was not last edited.

        With no edit history, an existing amount wins over an existing quote.
        Clearing the price leaves amount and quote untouched.
        """
        self._price = value
        if value is None:
            return
        if self._last_edited == "quote" and self._quote is not None:
            self._amount = self._amount_from_quote()
        elif self._amount is not None:
            self._quote = self._quote_from_amount()
        elif self._quote is not None:
            self._amount = self._amount_from_quote()

    def resolve(self) -> tuple[float, float]:
        """Final ``(amount, quote)`` pair, deriving whichever is missing.

        Raises:
            LedgerError: If price is missing, or neither amount nor quote
                is known, or amount must be derived from a zero price.
        """
        if self._price is None:
            raise LedgerError("Price is required")
        if self._amount is None and self._quote is None:
            raise LedgerError("Either amount or quote total is required")

        amount = self._amount if self._amount is not None else self._amount_from_quote()
        quote = self._quote if self._quote is not None else self._quote_from_amount()
        if amount is None or quote is None:
            raise LedgerError("Cannot derive amount from a zero price")
        return amount, quote

    def __repr__(self) -> str:
        return (
            f"QuantityCalculator(amount={self._amount}, price={self._price}, "
            f"quote={self._quote}, last_edited={self._last_edited})"
        )
