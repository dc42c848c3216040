from datetime import date
from decimal import Decimal

import pytest

from staydesk.schemas.booking import BookingDraft, GuestDetails, HotelSummary
from staydesk.schemas.rate import Rate
from staydesk.services.cache_service import cache_service
from staydesk.session import BookingSession


@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    """Keep tests off Redis: every rate lookup misses and writes are dropped."""
    async def _get_rates(key):
        return None

    async def _set_rates(key, rates):
        return False

    monkeypatch.setattr(cache_service, "get_rates", _get_rates)
    monkeypatch.setattr(cache_service, "set_rates", _set_rates)


def make_rate(
    room_name: str = "Deluxe King",
    price="500",
    currency: str = "SAR",
    meal: str = "breakfast",
    taxes: list[dict] | None = None,
    total_taxes=None,
    match_hash: str | None = "m-1",
) -> Rate:
    data = {
        "room_name": room_name,
        "meal": meal,
        "price": price,
        "currency": currency,
        "match_hash": match_hash,
    }
    if taxes is not None:
        data["tax_data"] = {"taxes": taxes}
    if total_taxes is not None:
        data["total_taxes"] = total_taxes
    return Rate.model_validate(data)


@pytest.fixture
def session():
    return BookingSession(user_id="u-1", token="tok", currency="SAR")


@pytest.fixture
def sar_rate():
    return make_rate(
        taxes=[
            {"name": "vat", "amount": 20, "included": True},
            {"name": "city_tax", "amount": 5, "included_by_supplier": False, "included": False},
        ]
    )


@pytest.fixture
def draft(sar_rate):
    return BookingDraft(
        hotel=HotelSummary(id="8473727", name="Corniche Suites", city="Jeddah", country="SA"),
        check_in=date(2026, 11, 3),
        check_out=date(2026, 11, 6),
        guests=2,
        rooms=2,
        selected_rate=sar_rate,
        guest=GuestDetails(first_name="Mona", last_name="Saleh", email="mona@example.com", phone="1001234567"),
    )


def D(value) -> Decimal:
    return Decimal(str(value))
