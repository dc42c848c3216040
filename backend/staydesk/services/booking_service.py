"""Booking service: quotes, promo validation and the prebook → payment-session hand-off."""

import logging

from staydesk.data.currency import round_money
from staydesk.schemas.booking import (
    BookingDraft,
    LoyaltyDiscount,
    PrebookResult,
    PromoDiscount,
    Quote,
    SubmitResponse,
)
from staydesk.services.booking_api_client import BookingAPIError, booking_api_client
from staydesk.services.guest_form import GuestValidationError, validate_guest_details
from staydesk.services.loyalty_service import loyalty_service
from staydesk.services.price_composer import apply_discounts, compose_quote, compute_displayed_total
from staydesk.session import BookingSession

logger = logging.getLogger(__name__)


def _float(value) -> float | None:
    return float(value) if value is not None else None


def build_payment_payload(
    draft: BookingDraft,
    quote: Quote,
    prebook: PrebookResult,
    promo: PromoDiscount | None = None,
    loyalty: LoyaltyDiscount | None = None,
) -> dict:
    """Payment-session request body in the booking backend's field names.

    ``promo`` and ``loyalty`` must be the server-checked discounts the quote was built from.
    """
    rate = draft.selected_rate
    hotel = draft.hotel
    promo_applied = promo is not None and promo.valid and promo.final_value is not None
    loyalty_applied = loyalty is not None and quote.loyalty_discount > 0

    return {
        "hotelId": hotel.id,
        "hotelName": hotel.name,
        "hotelAddress": hotel.address,
        "hotelCity": hotel.city,
        "hotelCountry": hotel.country,
        "hotelRating": hotel.rating,
        "hotelImage": hotel.image,
        "checkInDate": draft.check_in.isoformat(),
        "checkOutDate": draft.check_out.isoformat(),
        "numberOfGuests": draft.guests,
        "numberOfRooms": quote.rooms,
        "roomType": rate.room_name,
        "arrivalTime": draft.arrival_time,
        "guestName": draft.guest.full_name,
        "guestEmail": draft.guest.email.strip(),
        "guestPhone": draft.guest.full_phone,
        "specialRequests": draft.guest.special_requests,
        "totalPrice": float(quote.final_amount),
        "currency": quote.currency,
        "promoCode": promo.code if promo_applied else None,
        "discountAmount": float(quote.promo_discount) if promo_applied else 0,
        "loyaltyPointsUsed": loyalty.points_used if loyalty_applied else 0,
        "loyaltyDiscount": float(quote.loyalty_discount) if loyalty_applied else 0,
        "selectedRate": {
            "matchHash": rate.booking_hash,
            "bookHash": prebook.book_hash,
            "prebookPaymentAmount": _float(prebook.payment_amount),
            "prebookPaymentCurrency": prebook.payment_currency,
            "prebookShowAmount": _float(prebook.show_amount),
            "roomName": rate.room_name,
            "meal": rate.meal,
            "price": float(rate.price),
            "currency": rate.currency,
        },
    }


class BookingService:
    def quote(self, draft: BookingDraft) -> Quote:
        """Live preview from the draft as sent; submit() re-checks every discount."""
        return compose_quote(
            draft.selections(), draft.check_in, draft.check_out, draft.promo, draft.loyalty
        )

    async def validate_promo(
        self, session: BookingSession, draft: BookingDraft, code: str
    ) -> PromoDiscount:
        """Validate a promo code against the draft's pre-discount total."""
        code = code.strip()
        if not code:
            return PromoDiscount(valid=False, message="Promo code is required")

        breakdown = compute_displayed_total(draft.selections())
        booking_value = round_money(breakdown.total, breakdown.currency)

        try:
            return await booking_api_client.validate_promo_code(
                session,
                code=code,
                booking_value=booking_value,
                hotel_id=draft.hotel.id,
                destination=draft.hotel.city or None,
            )
        except BookingAPIError as e:
            logger.error(f"Promo validation failed for {code}: {e}")
            return PromoDiscount(valid=False, message="Failed to validate promo code")

    async def _checked_promo(self, session: BookingSession, draft: BookingDraft) -> PromoDiscount | None:
        if draft.promo is None or not draft.promo.code:
            return None
        promo = await self.validate_promo(session, draft, draft.promo.code)
        if not promo.valid:
            logger.warning(f"Dropping promo {draft.promo.code} at submit: {promo.message}")
            return None
        return promo

    async def _checked_loyalty(
        self, session: BookingSession, draft: BookingDraft, amount, currency: str
    ) -> LoyaltyDiscount | None:
        if draft.loyalty is None or draft.loyalty.points_used <= 0:
            return None
        preview = await loyalty_service.preview(session, amount, currency, draft.loyalty.points_used)
        if not preview.can_redeem or preview.discount is None:
            logger.warning(f"Dropping loyalty redemption at submit: {preview.message}")
            return None
        return preview.discount

    async def submit(self, session: BookingSession, draft: BookingDraft) -> SubmitResponse:
        """Price the draft from server-checked discounts, pre-book the rate and open a payment session.

        Discount amounts sent by the client are never charged as-is: the promo code is
        validated again against the recomputed total and the loyalty points are priced
        again. The rate is only held once the quote is known to be valid.
        """
        errors = validate_guest_details(draft.guest)
        if errors:
            raise GuestValidationError(errors)

        match_hash = draft.selected_rate.booking_hash
        if not match_hash:
            raise ValueError("Selected rate cannot be booked")

        selections = draft.selections()
        breakdown = compute_displayed_total(selections)
        total = round_money(breakdown.total, breakdown.currency)

        promo = await self._checked_promo(session, draft)
        after_promo = apply_discounts(total, promo, None, breakdown.currency)
        loyalty = await self._checked_loyalty(session, draft, after_promo, breakdown.currency)

        quote = compose_quote(selections, draft.check_in, draft.check_out, promo, loyalty)

        prebook = await booking_api_client.prebook_rate(
            session, match_hash, draft.hotel.id, draft.check_in, draft.check_out
        )
        logger.info(f"Prebooked hotel {draft.hotel.id}: book_hash={prebook.book_hash}")

        payload = build_payment_payload(draft, quote, prebook, promo, loyalty)
        session_url = await booking_api_client.create_payment_session(session, payload)

        logger.info(
            f"Payment session created for hotel {draft.hotel.id}: "
            f"{quote.final_amount} {quote.currency} ({quote.rooms} rooms, {quote.nights} nights)"
        )
        return SubmitResponse(session_url=session_url, quote=quote)


booking_service = BookingService()
