from datetime import datetime
from decimal import Decimal, InvalidOperation

from pydantic import BaseModel, Field, field_validator

from staydesk.data.meal_plans import meal_plan_label


def _to_decimal(value, default: Decimal | None) -> Decimal | None:
    if value is None or value == "":
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default


class TaxEntry(BaseModel):
    name: str = ""
    amount: Decimal = Decimal("0")
    included_by_supplier: bool = False
    included: bool = False
    currency_code: str | None = None

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, v):
        # Supplier feeds send strings, nulls and the occasional garbage
        return _to_decimal(v, Decimal("0"))

    @field_validator("included_by_supplier", "included", mode="before")
    @classmethod
    def _coerce_flag(cls, v):
        return bool(v)

    @property
    def paid_at_booking(self) -> bool:
        return self.included_by_supplier or self.included


class TaxData(BaseModel):
    taxes: list[TaxEntry] = []

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("taxes", mode="before")
    @classmethod
    def _drop_non_objects(cls, v):
        if not isinstance(v, list):
            return []
        return [t for t in v if isinstance(t, dict | TaxEntry)]


class Rate(BaseModel):
    """A priced room offer as returned by the hotel backend.

    ``price`` is the stay price for one room with the platform margin already
    applied.
    """
    room_name: str
    meal: str = "nomeal"
    price: Decimal
    currency: str = "USD"
    tax_data: TaxData | None = None
    total_taxes: Decimal | None = None
    free_cancellation: bool = False
    free_cancellation_before: datetime | None = None
    match_hash: str | None = None
    book_hash: str | None = None

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("tax_data", mode="before")
    @classmethod
    def _coerce_tax_data(cls, v):
        if isinstance(v, dict | TaxData):
            return v
        return None

    @field_validator("total_taxes", mode="before")
    @classmethod
    def _coerce_total_taxes(cls, v):
        return _to_decimal(v, None)

    @field_validator("meal", mode="before")
    @classmethod
    def _default_meal(cls, v):
        return v or "nomeal"

    @field_validator("currency", mode="before")
    @classmethod
    def _default_currency(cls, v):
        return str(v or "USD").strip().upper()

    @property
    def meal_label(self) -> str:
        return meal_plan_label(self.meal)

    @property
    def booking_hash(self) -> str | None:
        """Hash used to pre-book this rate."""
        return self.book_hash or self.match_hash


class RoomSelection(BaseModel):
    rate: Rate
    count: int = Field(1, ge=1)
