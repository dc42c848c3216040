"""Hotel rate service — cached rate fetches and currency-triggered refresh of a draft's selections."""

import itertools
import logging
from dataclasses import dataclass, field
from datetime import date

from staydesk.data.currency import normalize_currency
from staydesk.schemas.rate import Rate, RoomSelection
from staydesk.services.booking_api_client import booking_api_client
from staydesk.services.cache_service import cache_service
from staydesk.session import BookingSession

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    selections: list[RoomSelection]
    currency: str
    rates: list[Rate] = field(default_factory=list)
    unmatched: list[str] = field(default_factory=list)
    stale: bool = False


def _same_name(a: Rate, b: Rate) -> bool:
    return a.room_name.strip().lower() == b.room_name.strip().lower()


def _same_meal(a: Rate, b: Rate) -> bool:
    return a.meal.strip().lower() == b.meal.strip().lower()


def match_rate(previous: Rate, candidates: list[Rate]) -> Rate | None:
    """Counterpart of a previously selected rate in a freshly fetched list.

    Room name + meal plan first, then room name alone.
    """
    for rate in candidates:
        if _same_name(previous, rate) and _same_meal(previous, rate):
            return rate
    for rate in candidates:
        if _same_name(previous, rate):
            return rate
    return None


def rematch_selections(
    selections: list[RoomSelection], candidates: list[Rate]
) -> tuple[list[RoomSelection], list[str]]:
    """Swap each selection's rate for its counterpart; unmatched ones stay as they were."""
    rematched = []
    unmatched = []
    for selection in selections:
        match = match_rate(selection.rate, candidates)
        if match is None:
            unmatched.append(selection.rate.room_name)
            rematched.append(selection)
        else:
            rematched.append(RoomSelection(rate=match, count=selection.count))
    return rematched, unmatched


class RateService:
    """Fetches rates through the cache and re-prices drafts when the currency changes."""

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest: dict[str, int] = {}

    async def get_rates(
        self,
        session: BookingSession,
        hotel_id: str,
        check_in: date,
        check_out: date,
        adults: int = 2,
        children_ages: list[int] | None = None,
        currency: str | None = None,
    ) -> list[Rate]:
        children_ages = children_ages or []
        currency = normalize_currency(currency or session.currency)
        key = cache_service.rates_key(
            hotel_id, check_in, check_out, adults, children_ages, currency, session.language
        )

        cached = await cache_service.get_rates(key)
        if cached is not None:
            return [Rate.model_validate(r) for r in cached]

        rates = await booking_api_client.fetch_rates(
            session,
            hotel_id,
            check_in,
            check_out,
            adults=adults,
            children_ages=children_ages,
            currency=currency,
        )
        await cache_service.set_rates(key, [r.model_dump(mode="json") for r in rates])
        return rates

    async def refresh(
        self,
        session: BookingSession,
        draft_key: str,
        hotel_id: str,
        check_in: date,
        check_out: date,
        selections: list[RoomSelection],
        currency: str,
        adults: int = 2,
        children_ages: list[int] | None = None,
    ) -> RefreshResult:
        """Re-fetch rates in a new currency and re-match the draft's selections.

        Overlapping refreshes for one draft are sequenced: only the most
        recently started one may apply its result, earlier responses come back
        marked stale with the selections untouched.
        """
        currency = normalize_currency(currency)
        generation = next(self._counter)
        self._latest[draft_key] = generation

        try:
            rates = await self.get_rates(
                session, hotel_id, check_in, check_out,
                adults=adults, children_ages=children_ages, currency=currency,
            )
        except Exception:
            if self._latest.get(draft_key) == generation:
                del self._latest[draft_key]
            raise

        if self._latest.get(draft_key) != generation:
            logger.info(f"Discarding stale rate refresh for draft {draft_key} ({currency})")
            return RefreshResult(selections=selections, currency=currency, stale=True)
        del self._latest[draft_key]

        rematched, unmatched = rematch_selections(selections, rates)
        if unmatched:
            logger.warning(
                f"Rate refresh for hotel {hotel_id}: no {currency} match for {', '.join(unmatched)}"
            )
        return RefreshResult(
            selections=rematched, currency=currency, rates=rates, unmatched=unmatched
        )


rate_service = RateService()
