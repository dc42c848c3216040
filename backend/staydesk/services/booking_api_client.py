"""Booking backend client — rates, promo codes, loyalty, prebook and payment sessions."""

import asyncio
import logging
from datetime import date
from decimal import Decimal

import httpx
from pydantic import ValidationError

from staydesk.config import settings
from staydesk.schemas.booking import PrebookResult, PromoDiscount
from staydesk.schemas.rate import Rate
from staydesk.session import BookingSession

logger = logging.getLogger(__name__)


class BookingAPIError(RuntimeError):
    """The booking backend could not be reached or refused the request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _json(resp: httpx.Response) -> dict:
    """Response body as a dict; anything else (empty, HTML error pages) is {}."""
    try:
        body = resp.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _message(resp: httpx.Response, default: str) -> str:
    return _json(resp).get("message") or default


def _decimal_or_none(value) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value))


class BookingAPIClient:
    """Adapter for the booking backend's JSON API."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._client: httpx.AsyncClient | None = None
        self._transport = transport
        self._backoff = 1.0

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=settings.booking_api_base_url,
                timeout=settings.booking_api_timeout,
                transport=self._transport,
            )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        session: BookingSession,
        *,
        params: dict | None = None,
        json: dict | None = None,
    ) -> httpx.Response:
        """Send a request, retrying on 429 and connection errors.

        4xx responses are returned to the caller; 5xx and exhausted retries
        raise BookingAPIError.
        """
        client = await self._get_client()
        attempts = settings.booking_api_max_attempts
        for attempt in range(attempts):
            try:
                resp = await client.request(
                    method, path, params=params, json=json, headers=session.auth_headers()
                )
            except httpx.RequestError as e:
                logger.warning(f"Booking API {method} {path} request error: {e}")
                if attempt < attempts - 1:
                    await asyncio.sleep(self._backoff * 2 ** attempt)
                    continue
                raise BookingAPIError(f"Booking service unavailable: {e}") from e

            if resp.status_code == 429 and attempt < attempts - 1:
                await asyncio.sleep(self._backoff * 2 ** attempt)
                continue
            if resp.status_code >= 500 or resp.status_code == 429:
                logger.error(f"Booking API {method} {path} failed: {resp.status_code}")
                raise BookingAPIError(
                    _message(resp, "Booking service error"), status_code=resp.status_code
                )
            return resp

        raise BookingAPIError("Booking service unavailable")

    async def fetch_rates(
        self,
        session: BookingSession,
        hotel_id: str,
        check_in: date,
        check_out: date,
        adults: int = 2,
        children_ages: list[int] | None = None,
        currency: str | None = None,
        language: str | None = None,
    ) -> list[Rate]:
        """Fetch bookable rates for a hotel in the requested currency."""
        resp = await self._request(
            "GET",
            f"/hotels/details/{hotel_id}",
            session,
            params={
                "checkin": check_in.isoformat(),
                "checkout": check_out.isoformat(),
                "adults": adults,
                "children": ",".join(str(a) for a in children_ages or []),
                "currency": currency or session.currency,
                "language": language or session.language,
            },
        )
        if resp.status_code >= 400:
            raise BookingAPIError(
                _message(resp, "Failed to fetch hotel rates"), status_code=resp.status_code
            )

        body = _json(resp)
        data = body.get("data") or body
        raw_rates = data.get("rates") or (data.get("hotel") or {}).get("rates") or []

        rates = []
        for raw in raw_rates:
            try:
                rates.append(Rate.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping malformed rate for hotel {hotel_id}: {e.error_count()} errors")
        return rates

    async def validate_promo_code(
        self,
        session: BookingSession,
        code: str,
        booking_value: Decimal,
        hotel_id: str,
        destination: str | None = None,
    ) -> PromoDiscount:
        """Ask the backend whether a promo code applies to this booking value."""
        resp = await self._request(
            "POST",
            "/promo-codes/validate",
            session,
            json={
                "code": code,
                "bookingValue": float(booking_value),
                "hotelId": hotel_id,
                "destination": destination,
                "userId": session.user_id,
            },
        )
        body = _json(resp)
        if resp.status_code >= 400 or not body.get("success"):
            return PromoDiscount(valid=False, message=body.get("message") or "Invalid promo code")

        data = body.get("data") or {}
        return PromoDiscount(
            valid=True,
            code=data.get("code", code),
            discount=Decimal(str(data.get("discount", 0))),
            final_value=_decimal_or_none(data.get("finalValue")),
            original_value=_decimal_or_none(data.get("originalValue")),
        )

    async def prebook_rate(
        self,
        session: BookingSession,
        match_hash: str,
        hotel_id: str,
        check_in: date,
        check_out: date,
    ) -> PrebookResult:
        """Hold a rate before payment; fails when it is no longer available."""
        resp = await self._request(
            "POST",
            "/bookings/prebook",
            session,
            json={
                "matchHash": match_hash,
                "hotelId": hotel_id,
                "checkIn": check_in.isoformat(),
                "checkOut": check_out.isoformat(),
            },
        )
        body = _json(resp)
        data = body.get("data")
        if resp.status_code >= 400 or not body.get("success") or not data or not data.get("bookHash"):
            raise BookingAPIError(
                body.get("message") or "Rate is no longer available", status_code=409
            )

        payment = data.get("payment") or {}
        show_amount = None
        try:
            # Supplier price shown to the traveler, in the supplier's display currency
            show_amount = data["prebookData"]["hotels"][0]["rates"][0][
                "payment_options"]["payment_types"][0]["show_amount"]
        except (KeyError, IndexError, TypeError):
            pass

        return PrebookResult(
            book_hash=data["bookHash"],
            payment_amount=_decimal_or_none(payment.get("amount")),
            payment_currency=payment.get("currency"),
            show_amount=_decimal_or_none(show_amount),
        )

    async def calculate_loyalty_redemption(
        self, session: BookingSession, booking_amount: Decimal
    ) -> dict:
        """Redeemable points and discount for a booking amount (USD)."""
        resp = await self._request(
            "GET",
            "/loyalty/calculate-redemption",
            session,
            params={"bookingAmount": str(booking_amount)},
        )
        if resp.status_code >= 400:
            raise BookingAPIError(
                _message(resp, "Error calculating redemption value"), status_code=resp.status_code
            )
        return _json(resp)

    async def create_payment_session(self, session: BookingSession, payload: dict) -> str:
        """Create a hosted payment session and return its redirect URL."""
        resp = await self._request("POST", "/payments/kashier/create-session", session, json=payload)
        body = _json(resp)
        session_url = (body.get("data") or {}).get("sessionUrl")
        if resp.status_code >= 400 or not body.get("success") or not session_url:
            raise BookingAPIError(
                body.get("message") or "Failed to create payment session. Please try again.",
                status_code=resp.status_code if resp.status_code >= 400 else None,
            )
        return session_url

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None


booking_api_client = BookingAPIClient()
