import json
from datetime import date

import httpx
import pytest

from staydesk.services.booking_api_client import BookingAPIClient, BookingAPIError
from tests.conftest import D


def client_for(handler) -> BookingAPIClient:
    client = BookingAPIClient(transport=httpx.MockTransport(handler))
    client._backoff = 0
    return client


async def test_fetch_rates_parses_rates_and_skips_malformed(session):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={
            "success": True,
            "data": {"rates": [
                {"room_name": "Deluxe King", "meal": "breakfast", "price": "512.40", "currency": "SAR",
                 "tax_data": {"taxes": [{"amount": "20", "included": True}]}},
                {"meal": "nomeal", "price": 10},
            ]},
        })

    client = client_for(handler)
    rates = await client.fetch_rates(
        session, "8473727", date(2026, 11, 3), date(2026, 11, 6), adults=2, children_ages=[5, 8]
    )

    assert [r.room_name for r in rates] == ["Deluxe King"]
    assert rates[0].price == D("512.40")
    assert seen["path"].endswith("/hotels/details/8473727")
    assert seen["params"]["children"] == "5,8"
    assert seen["params"]["currency"] == "SAR"
    assert seen["auth"] == "Bearer tok"


async def test_fetch_rates_raises_on_not_found(session):
    client = client_for(lambda r: httpx.Response(404, json={"success": False, "message": "Hotel not found"}))
    with pytest.raises(BookingAPIError, match="Hotel not found"):
        await client.fetch_rates(session, "1", date(2026, 1, 1), date(2026, 1, 2))


async def test_promo_success(session):
    def handler(request):
        body = json.loads(request.content)
        assert body["bookingValue"] == 1040.0
        assert body["userId"] == "u-1"
        return httpx.Response(200, json={
            "success": True,
            "data": {"code": "EID25", "discount": 140, "finalValue": 900, "originalValue": 1040},
        })

    promo = await client_for(handler).validate_promo_code(session, "eid25", D(1040), "8473727", "Jeddah")
    assert promo.valid
    assert promo.code == "EID25"
    assert promo.final_value == D(900)
    assert promo.discount == D(140)


async def test_promo_rejection_is_an_invalid_result(session):
    client = client_for(lambda r: httpx.Response(400, json={"success": False, "message": "Promo code has expired"}))
    promo = await client.validate_promo_code(session, "OLD", D(100), "1")
    assert not promo.valid
    assert promo.message == "Promo code has expired"


async def test_server_error_raises(session):
    client = client_for(lambda r: httpx.Response(503, text="<html>down</html>"))
    with pytest.raises(BookingAPIError) as exc:
        await client.validate_promo_code(session, "X", D(100), "1")
    assert exc.value.status_code == 503


async def test_retries_rate_limit_then_succeeds(session):
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) < 3:
            return httpx.Response(429)
        return httpx.Response(200, json={"canRedeem": True, "availablePoints": 500})

    data = await client_for(handler).calculate_loyalty_redemption(session, D(100))
    assert len(calls) == 3
    assert data["availablePoints"] == 500


async def test_connection_errors_exhaust_retries(session):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(BookingAPIError, match="unavailable"):
        await client_for(handler).calculate_loyalty_redemption(session, D(100))


async def test_prebook_reads_book_hash_and_show_amount(session):
    def handler(request):
        return httpx.Response(200, json={
            "success": True,
            "data": {
                "bookHash": "bh-9",
                "payment": {"amount": "120.50", "currency": "USD"},
                "prebookData": {"hotels": [{"rates": [{"payment_options": {
                    "payment_types": [{"show_amount": "452.00"}]}}]}]},
            },
        })

    result = await client_for(handler).prebook_rate(session, "m-1", "8473727", date(2026, 11, 3), date(2026, 11, 6))
    assert result.book_hash == "bh-9"
    assert result.payment_amount == D("120.50")
    assert result.show_amount == D(452)


async def test_prebook_unavailable_rate(session):
    client = client_for(lambda r: httpx.Response(200, json={"success": False, "message": "No longer available"}))
    with pytest.raises(BookingAPIError) as exc:
        await client.prebook_rate(session, "m-1", "1", date(2026, 1, 1), date(2026, 1, 2))
    assert exc.value.status_code == 409


async def test_payment_session_requires_url(session):
    client = client_for(lambda r: httpx.Response(200, json={"success": True, "data": {}}))
    with pytest.raises(BookingAPIError, match="payment session"):
        await client.create_payment_session(session, {"totalPrice": 1})

    ok = client_for(lambda r: httpx.Response(200, json={"success": True, "data": {"sessionUrl": "https://pay/abc"}}))
    assert await ok.create_payment_session(session, {"totalPrice": 1}) == "https://pay/abc"
