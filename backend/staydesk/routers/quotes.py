from fastapi import APIRouter, HTTPException

from staydesk.schemas.booking import BookingDraft, Quote
from staydesk.services.booking_service import booking_service

router = APIRouter()


@router.post("", response_model=Quote)
async def create_quote(draft: BookingDraft):
    """Price a booking draft: rooms, booking taxes, promo and loyalty discounts."""
    try:
        return booking_service.quote(draft)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
