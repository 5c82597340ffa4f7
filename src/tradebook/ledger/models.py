"""Ledger data models: trades, their sells, and user-defined coins."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator

# Residue left by float subtraction chains (e.g. 0.3 - 0.1 - 0.2) must not
# keep a fully sold trade "Active".
COMPLETION_TOLERANCE = 1e-9


def _as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class SellRecord(BaseModel):
    """One partial or full disposal against a trade."""

    id: str = Field(description="Opaque unique identifier")
    sell_price: float = Field(description="Unit price received")
    sold_amount: float = Field(description="Quantity disposed in this sell")
    usdt_received: float = Field(description="Total quote-currency proceeds")
    timestamp: datetime = Field(description="When the sell was recorded (UTC)")

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return _as_utc(value)

    model_config = {"frozen": True}


class Trade(BaseModel):
    """One purchase event and the sells recorded against it.

    Money and quantities are plain floats. The cost basis of any sold
    fraction is apportioned proportionally: ``sold / amount * usdt_used``.
    """

    id: str = Field(description="Opaque unique identifier")
    name: str = Field(description="Free-text label")
    currency_name: str = Field(description="Asset symbol, used as the grouping key")
    price: float = Field(description="Purchase unit price")
    amount: float = Field(description="Total quantity purchased")
    usdt_used: float = Field(description="Total quote-currency cost of the purchase")
    timestamp: datetime = Field(description="When the trade was opened (UTC)")
    sells: list[SellRecord] = Field(default_factory=list, description="Sells, insertion order")
    remaining_amount: float = Field(description="Quantity not yet sold")

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @property
    def sold_amount(self) -> float:
        """Total quantity disposed across all sells."""
        return sum(sell.sold_amount for sell in self.sells)

    @property
    def total_sell_value(self) -> float:
        """Total quote-currency proceeds across all sells."""
        return sum(sell.usdt_received for sell in self.sells)

    @property
    def is_completed(self) -> bool:
        return abs(self.remaining_amount) <= COMPLETION_TOLERANCE

    model_config = {"frozen": True}


class CustomCoin(BaseModel):
    """A user-defined asset descriptor, used only for display names."""

    id: str
    name: str
    symbol: str

    model_config = {"frozen": True}
