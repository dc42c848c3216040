import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from staydesk.dependencies import get_session
from staydesk.services.booking_api_client import BookingAPIError
from staydesk.services.loyalty_service import loyalty_service
from staydesk.session import BookingSession

logger = logging.getLogger(__name__)

router = APIRouter()


class LoyaltyPreviewRequest(BaseModel):
    booking_amount: Decimal = Field(..., gt=0)
    currency: str | None = None
    points: int | None = Field(None, ge=0)


@router.post("/preview")
async def preview_loyalty_discount(
    req: LoyaltyPreviewRequest,
    session: BookingSession = Depends(get_session),
):
    """Preview the discount for redeeming loyalty points. Nothing is deducted."""
    try:
        preview = await loyalty_service.preview(
            session, req.booking_amount, req.currency or session.currency, req.points
        )
    except BookingAPIError as e:
        logger.error(f"Loyalty preview failed for user {session.user_id}: {e}")
        raise HTTPException(status_code=502, detail=e.message)

    return {
        "can_redeem": preview.can_redeem,
        "currency": preview.currency,
        "available_points": preview.available_points,
        "max_points": preview.max_points,
        "points_per_dollar": preview.points_per_dollar,
        "tier": preview.tier,
        "points_used": preview.discount.points_used if preview.discount else 0,
        "discount": preview.discount.discount if preview.discount else Decimal("0"),
        "message": preview.message,
    }
