"""Hotel rates router — cached rate lookup in the traveler's currency."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from staydesk.dependencies import get_session
from staydesk.services.booking_api_client import BookingAPIError
from staydesk.services.rate_service import rate_service
from staydesk.session import BookingSession

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_children(children: str) -> list[int]:
    """Comma-separated child ages; anything outside 0-17 is dropped."""
    ages = []
    for part in children.split(","):
        part = part.strip()
        if part.isdigit() and 0 <= int(part) <= 17:
            ages.append(int(part))
    return ages


@router.get("/{hotel_id}/rates")
async def get_hotel_rates(
    hotel_id: str,
    check_in: date = Query(...),
    check_out: date = Query(...),
    adults: int = Query(2, ge=1),
    children: str = Query(""),
    currency: str | None = Query(None),
    session: BookingSession = Depends(get_session),
):
    """Bookable rates for a hotel stay."""
    if check_in >= check_out:
        raise HTTPException(status_code=400, detail="check_in must be before check_out")

    try:
        rates = await rate_service.get_rates(
            session,
            hotel_id,
            check_in,
            check_out,
            adults=adults,
            children_ages=_parse_children(children),
            currency=currency,
        )
    except BookingAPIError as e:
        logger.error(f"Rate fetch failed for hotel {hotel_id}: {e}")
        raise HTTPException(status_code=502, detail=e.message)

    return {
        "hotel_id": hotel_id,
        "currency": (currency or session.currency).upper(),
        "rates": [{**r.model_dump(mode="json"), "meal_label": r.meal_label} for r in rates],
    }
