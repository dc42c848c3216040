"""Loyalty redemption preview — converts points into a discount in the booking currency.

Points are only previewed here; the backend deducts them after a successful payment.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from staydesk.config import settings
from staydesk.data.currency import normalize_currency, round_money, usd_exchange_rate
from staydesk.schemas.booking import LoyaltyDiscount
from staydesk.services.booking_api_client import booking_api_client
from staydesk.session import BookingSession

logger = logging.getLogger(__name__)


@dataclass
class LoyaltyPreview:
    can_redeem: bool
    currency: str
    available_points: int = 0
    max_points: int = 0
    points_per_dollar: int = 100
    tier: str | None = None
    discount: LoyaltyDiscount | None = None
    message: str | None = None


def points_to_discount(points: int, points_per_dollar: int, exchange_rate: float) -> Decimal:
    """Whole dollars bought by ``points``, expressed in the booking currency (2 dp)."""
    if points <= 0 or points_per_dollar <= 0:
        return Decimal("0")
    dollars = points // points_per_dollar
    return (Decimal(dollars) * Decimal(str(exchange_rate))).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )


def snap_points(points: int, step: int, max_points: int) -> int:
    """Round to the nearest step and keep within 0..max_points."""
    if step <= 0:
        return max(0, min(points, max_points))
    snapped = int(Decimal(points) / Decimal(step) + Decimal("0.5")) * step if points > 0 else 0
    return max(0, min(snapped, max_points))


class LoyaltyService:
    async def preview(
        self,
        session: BookingSession,
        booking_amount: Decimal,
        currency: str,
        points: int | None = None,
    ) -> LoyaltyPreview:
        """Discount a traveler would get by redeeming ``points`` (default: as many as allowed)."""
        currency = normalize_currency(currency)
        if not session.is_authenticated:
            return LoyaltyPreview(can_redeem=False, currency=currency, message="Sign in to use loyalty points")

        exchange_rate = usd_exchange_rate(currency)
        booking_amount_usd = round_money(Decimal(booking_amount) / Decimal(str(exchange_rate)), "USD")

        data = await booking_api_client.calculate_loyalty_redemption(session, booking_amount_usd)
        available = int(data.get("availablePoints") or 0)
        points_per_dollar = int(data.get("pointsPerDollar") or settings.loyalty_points_per_dollar)

        if not data.get("canRedeem") or available < settings.loyalty_min_redeemable_points:
            return LoyaltyPreview(
                can_redeem=False,
                currency=currency,
                available_points=available,
                points_per_dollar=points_per_dollar,
                tier=data.get("tier"),
                message=data.get("message") or "Not enough points to redeem",
            )

        max_points = int(data.get("pointsToUse") or 0)
        requested = max_points if points is None else points
        points_used = snap_points(requested, points_per_dollar, max_points)

        discount = points_to_discount(points_used, points_per_dollar, exchange_rate)
        discount = min(discount, round_money(Decimal(booking_amount), currency))

        logger.info(
            f"Loyalty preview for user {session.user_id}: {points_used} points = {discount} {currency}"
        )
        return LoyaltyPreview(
            can_redeem=True,
            currency=currency,
            available_points=available,
            max_points=max_points,
            points_per_dollar=points_per_dollar,
            tier=data.get("tier"),
            discount=LoyaltyDiscount(points_used=points_used, discount=discount),
        )


loyalty_service = LoyaltyService()
