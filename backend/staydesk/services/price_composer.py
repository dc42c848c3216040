"""Price composer — booking totals, taxes paid at booking, and discount stacking.

Rate prices already carry the platform margin, so nothing here re-applies it.
All arithmetic is done in Decimal and in the single currency of the rates;
currency conversion happens upstream when rates are re-fetched.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from staydesk.config import settings
from staydesk.data.currency import format_price, round_money
from staydesk.schemas.booking import LoyaltyDiscount, PromoDiscount, Quote
from staydesk.schemas.rate import Rate, RoomSelection

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class PriceBreakdown:
    base: Decimal
    tax: Decimal
    total: Decimal
    currency: str
    tax_is_estimate: bool = False


def _check_rate(rate: Rate, room_count: int) -> None:
    if room_count < 1:
        raise ValueError(f"Room count must be positive, got {room_count}")
    if rate.price < 0:
        raise ValueError(f"Rate '{rate.room_name}' has a negative price")


def has_tax_breakdown(rate: Rate) -> bool:
    return bool(rate.tax_data and rate.tax_data.taxes)


def compute_booking_taxes(rate: Rate, room_count: int) -> Decimal:
    """Taxes the traveler pays at booking time for ``room_count`` rooms.

    Uses the supplier breakdown when present (entries included by the supplier
    or included in the price), then the aggregate ``total_taxes`` figure, and
    finally a flat estimate of ``fallback_tax_rate`` of the room price.
    """
    _check_rate(rate, room_count)

    if has_tax_breakdown(rate):
        per_room = sum(
            (t.amount for t in rate.tax_data.taxes if t.paid_at_booking), ZERO
        )
        return max(per_room, ZERO) * room_count

    if rate.total_taxes is not None and rate.total_taxes > 0:
        return rate.total_taxes * room_count

    # Approximate: no tax data at all for this rate
    fallback = Decimal(str(settings.fallback_tax_rate))
    return rate.price * room_count * fallback


def is_tax_estimate(rate: Rate) -> bool:
    """True when compute_booking_taxes falls back to the flat estimate."""
    if has_tax_breakdown(rate):
        return False
    return not (rate.total_taxes is not None and rate.total_taxes > 0)


def compute_displayed_total(selections: list[RoomSelection]) -> PriceBreakdown:
    """Sum room prices and booking taxes over every selection."""
    if not selections:
        raise ValueError("At least one room selection is required")

    currencies = {s.rate.currency for s in selections}
    if len(currencies) > 1:
        raise ValueError(f"Room selections mix currencies: {', '.join(sorted(currencies))}")

    base = ZERO
    tax = ZERO
    estimate = False
    for selection in selections:
        _check_rate(selection.rate, selection.count)
        base += selection.rate.price * selection.count
        tax += compute_booking_taxes(selection.rate, selection.count)
        estimate = estimate or is_tax_estimate(selection.rate)

    return PriceBreakdown(
        base=base,
        tax=tax,
        total=base + tax,
        currency=currencies.pop(),
        tax_is_estimate=estimate,
    )


def apply_discounts(
    total: Decimal,
    promo: PromoDiscount | None = None,
    loyalty: LoyaltyDiscount | None = None,
    currency: str = "USD",
) -> Decimal:
    """Amount to hand to the payment gateway.

    The promo backend validated its final value against the pre-loyalty total,
    so the promo is applied first and loyalty is subtracted from its result.
    """
    amount = Decimal(total)

    if promo is not None and promo.valid and promo.final_value is not None:
        amount = Decimal(promo.final_value)

    if loyalty is not None and loyalty.discount > 0:
        amount = amount - Decimal(loyalty.discount)

    return round_money(max(amount, ZERO), currency)


def total_rooms(selections: list[RoomSelection] | None, rooms: int | None = None) -> int:
    """Rooms being booked: cart counts, else the requested rooms, else one."""
    if selections:
        return sum(s.count for s in selections)
    return rooms or 1


def stay_nights(check_in: date, check_out: date) -> int:
    return max(1, (check_out - check_in).days)


def compose_quote(
    selections: list[RoomSelection],
    check_in: date,
    check_out: date,
    promo: PromoDiscount | None = None,
    loyalty: LoyaltyDiscount | None = None,
) -> Quote:
    """Full price quote for a booking draft, discounts included."""
    breakdown = compute_displayed_total(selections)
    currency = breakdown.currency
    total = round_money(breakdown.total, currency)
    after_promo = apply_discounts(total, promo, None, currency)
    final_amount = apply_discounts(total, promo, loyalty, currency)

    promo_discount = ZERO
    if promo is not None and promo.valid and promo.final_value is not None:
        promo_discount = max(total - after_promo, ZERO)

    # Only the part of the loyalty discount that fit above zero was used
    loyalty_discount = max(after_promo - final_amount, ZERO)

    quote = Quote(
        base=round_money(breakdown.base, currency),
        tax=round_money(breakdown.tax, currency),
        total=total,
        promo_discount=round_money(promo_discount, currency),
        loyalty_discount=round_money(loyalty_discount, currency),
        final_amount=final_amount,
        currency=currency,
        rooms=total_rooms(selections),
        nights=stay_nights(check_in, check_out),
        tax_is_estimate=breakdown.tax_is_estimate,
        display_total=format_price(final_amount, currency),
    )
    logger.debug(
        f"Quote {currency}: base={quote.base} tax={quote.tax} "
        f"promo=-{quote.promo_discount} loyalty=-{quote.loyalty_discount} final={quote.final_amount}"
    )
    return quote
