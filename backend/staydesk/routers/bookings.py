"""Booking router — guest checks, currency refresh and submission to payment."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from staydesk.dependencies import get_session, require_session
from staydesk.schemas.booking import BookingDraft, GuestDetails, SubmitResponse
from staydesk.schemas.rate import RoomSelection
from staydesk.services.booking_api_client import BookingAPIError
from staydesk.services.booking_service import booking_service
from staydesk.services.guest_form import GuestValidationError, prefill_from_user, validate_guest_details
from staydesk.services.rate_service import rate_service
from staydesk.session import BookingSession

logger = logging.getLogger(__name__)

router = APIRouter()


class RefreshRatesRequest(BaseModel):
    draft_key: str
    hotel_id: str
    check_in: date
    check_out: date
    adults: int = Field(2, ge=1)
    children_ages: list[int] = []
    currency: str
    selections: list[RoomSelection] = Field(..., min_length=1)


class GuestPrefillRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    nationality: str | None = None
    phone: str | None = None


@router.post("/refresh-rates")
async def refresh_rates(
    req: RefreshRatesRequest,
    session: BookingSession = Depends(get_session),
):
    """Re-price the draft's rooms after the traveler switches currency."""
    try:
        result = await rate_service.refresh(
            session,
            req.draft_key,
            req.hotel_id,
            req.check_in,
            req.check_out,
            req.selections,
            req.currency,
            adults=req.adults,
            children_ages=req.children_ages,
        )
    except BookingAPIError as e:
        logger.error(f"Rate refresh failed for hotel {req.hotel_id}: {e}")
        raise HTTPException(status_code=502, detail=e.message)

    return {
        "currency": result.currency,
        "stale": result.stale,
        "unmatched": result.unmatched,
        "selections": [s.model_dump(mode="json") for s in result.selections],
    }


@router.post("/validate-guest")
async def validate_guest(guest: GuestDetails):
    errors = validate_guest_details(guest)
    return {"valid": not errors, "errors": errors}


@router.post("/guest-prefill", response_model=GuestDetails)
async def guest_prefill(req: GuestPrefillRequest):
    """Guest form defaults from the signed-in user's profile."""
    return prefill_from_user(req.name, req.email, req.nationality, req.phone)


@router.post("/submit", response_model=SubmitResponse)
async def submit_booking(
    draft: BookingDraft,
    session: BookingSession = Depends(require_session),
):
    """Pre-book the selected rate and open a payment session for the final amount."""
    try:
        return await booking_service.submit(session, draft)
    except GuestValidationError as e:
        raise HTTPException(status_code=422, detail={"message": str(e), "errors": e.errors})
    except BookingAPIError as e:
        logger.error(f"Booking submission failed for hotel {draft.hotel.id}: {e}")
        raise HTTPException(status_code=409 if e.status_code == 409 else 502, detail=e.message)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
