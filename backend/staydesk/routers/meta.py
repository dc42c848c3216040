from fastapi import APIRouter, HTTPException, Query

from staydesk.data.currency import CURRENCY_SYMBOLS, SUPPORTED_CURRENCIES
from staydesk.data.meal_plans import MEAL_PLAN_LABELS
from staydesk.data.status_styles import RecordType, all_badges, badge_class, badge_label

router = APIRouter()


@router.get("")
async def get_meta():
    """Static lookups the booking pages and back-office render from."""
    return {
        "currencies": [
            {"code": code, "symbol": CURRENCY_SYMBOLS.get(code, code)} for code in SUPPORTED_CURRENCIES
        ],
        "meal_plans": {plan.value: label for plan, label in MEAL_PLAN_LABELS.items()},
        "status_badges": all_badges(),
    }


@router.get("/status-badge")
async def get_status_badge(record_type: str = Query(...), status: str = Query(...)):
    try:
        kind = RecordType(record_type)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown record type: {record_type}")
    return {"status": status, "label": badge_label(status), "class": badge_class(kind, status)}
