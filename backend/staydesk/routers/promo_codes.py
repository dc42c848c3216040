from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from staydesk.dependencies import require_session
from staydesk.schemas.booking import BookingDraft, PromoDiscount
from staydesk.services.booking_service import booking_service
from staydesk.session import BookingSession

router = APIRouter()


class ValidatePromoRequest(BaseModel):
    code: str
    draft: BookingDraft


@router.post("/validate", response_model=PromoDiscount)
async def validate_promo_code(
    req: ValidatePromoRequest,
    session: BookingSession = Depends(require_session),
):
    """Validate a promo code against the draft's total before discounts."""
    try:
        return await booking_service.validate_promo(session, req.draft, req.code)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
