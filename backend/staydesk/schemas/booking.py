from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from staydesk.schemas.rate import Rate, RoomSelection


class PromoDiscount(BaseModel):
    valid: bool
    code: str | None = None
    discount: Decimal = Decimal("0")
    final_value: Decimal | None = None
    original_value: Decimal | None = None
    message: str | None = None


class LoyaltyDiscount(BaseModel):
    points_used: int = Field(0, ge=0)
    discount: Decimal = Decimal("0")


class GuestDetails(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    country: str = "EG"
    phone_code: str = "+20"
    phone: str = ""
    booking_for: str = "self"
    special_requests: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def full_phone(self) -> str:
        return f"{self.phone_code}{self.phone}"


class HotelSummary(BaseModel):
    id: str
    name: str
    address: str | None = None
    city: str = ""
    country: str = ""
    rating: float | None = None
    image: str = ""


class BookingDraft(BaseModel):
    """Client-held booking in progress. Never stored by this service."""
    hotel: HotelSummary
    check_in: date
    check_out: date
    guests: int = Field(2, ge=1)
    rooms: int = Field(1, ge=1)
    children_ages: list[int] = []
    selected_rate: Rate
    selected_rooms: list[RoomSelection] | None = None
    arrival_time: str | None = None
    guest: GuestDetails = GuestDetails()
    promo: PromoDiscount | None = None
    loyalty: LoyaltyDiscount | None = None

    def selections(self) -> list[RoomSelection]:
        """Room selections to price: the multi-room cart or the single rate."""
        if self.selected_rooms:
            return list(self.selected_rooms)
        return [RoomSelection(rate=self.selected_rate, count=self.rooms)]


class Quote(BaseModel):
    base: Decimal
    tax: Decimal
    total: Decimal
    promo_discount: Decimal = Decimal("0")
    loyalty_discount: Decimal = Decimal("0")
    final_amount: Decimal
    currency: str
    rooms: int
    nights: int
    tax_is_estimate: bool = False
    display_total: str | None = None


class PrebookResult(BaseModel):
    book_hash: str
    payment_amount: Decimal | None = None
    payment_currency: str | None = None
    show_amount: Decimal | None = None


class SubmitResponse(BaseModel):
    session_url: str
    quote: Quote
