import asyncio
from datetime import date

from staydesk.schemas.rate import RoomSelection
from staydesk.services.booking_api_client import booking_api_client
from staydesk.services.rate_service import RateService, match_rate, rematch_selections
from tests.conftest import D, make_rate

CHECK_IN = date(2026, 11, 3)
CHECK_OUT = date(2026, 11, 6)


def test_match_prefers_name_and_meal():
    previous = make_rate(room_name="Deluxe King", meal="breakfast", price=500)
    candidates = [
        make_rate(room_name="Deluxe King", meal="nomeal", price=30, currency="USD"),
        make_rate(room_name="Deluxe King", meal="breakfast", price=135, currency="USD"),
    ]
    assert match_rate(previous, candidates).price == D(135)


def test_match_falls_back_to_room_name():
    previous = make_rate(room_name="Deluxe King", meal="half-board")
    candidates = [
        make_rate(room_name="Suite", meal="half-board", currency="USD"),
        make_rate(room_name="deluxe king", meal="nomeal", price=99, currency="USD"),
    ]
    assert match_rate(previous, candidates).price == D(99)


def test_unmatched_selection_is_left_unchanged():
    kept = RoomSelection(rate=make_rate(room_name="Penthouse"), count=1)
    moved = RoomSelection(rate=make_rate(room_name="Deluxe King"), count=2)
    rematched, unmatched = rematch_selections(
        [kept, moved], [make_rate(room_name="Deluxe King", price=140, currency="USD")]
    )
    assert rematched[0] is kept
    assert rematched[1].rate.currency == "USD"
    assert rematched[1].count == 2
    assert unmatched == ["Penthouse"]


async def test_refresh_rematches_in_new_currency(monkeypatch, session):
    async def fake_fetch(session, hotel_id, check_in, check_out, adults=2, children_ages=None, currency=None, language=None):
        return [make_rate(room_name="Deluxe King", meal="breakfast", price=6650, currency=currency)]

    monkeypatch.setattr(booking_api_client, "fetch_rates", fake_fetch)
    service = RateService()
    selections = [RoomSelection(rate=make_rate(), count=2)]

    result = await service.refresh(session, "draft-1", "h1", CHECK_IN, CHECK_OUT, selections, "egp")

    assert not result.stale
    assert result.currency == "EGP"
    assert result.selections[0].rate.currency == "EGP"
    assert result.selections[0].count == 2
    assert result.unmatched == []


async def test_overlapping_refresh_discards_older_response(monkeypatch, session):
    release_first = asyncio.Event()
    started = []

    async def fake_fetch(session, hotel_id, check_in, check_out, adults=2, children_ages=None, currency=None, language=None):
        started.append(currency)
        if currency == "USD":
            await release_first.wait()
        return [make_rate(room_name="Deluxe King", meal="breakfast", currency=currency)]

    monkeypatch.setattr(booking_api_client, "fetch_rates", fake_fetch)
    service = RateService()
    selections = [RoomSelection(rate=make_rate(), count=1)]

    first = asyncio.create_task(
        service.refresh(session, "draft-1", "h1", CHECK_IN, CHECK_OUT, selections, "USD")
    )
    while not started:
        await asyncio.sleep(0)

    second = await service.refresh(session, "draft-1", "h1", CHECK_IN, CHECK_OUT, selections, "EGP")
    release_first.set()
    first_result = await first

    assert not second.stale
    assert second.selections[0].rate.currency == "EGP"
    assert first_result.stale
    assert first_result.selections == selections


async def test_refreshes_for_different_drafts_do_not_interfere(monkeypatch, session):
    async def fake_fetch(session, hotel_id, check_in, check_out, adults=2, children_ages=None, currency=None, language=None):
        return [make_rate(currency=currency)]

    monkeypatch.setattr(booking_api_client, "fetch_rates", fake_fetch)
    service = RateService()
    selections = [RoomSelection(rate=make_rate(), count=1)]

    a, b = await asyncio.gather(
        service.refresh(session, "draft-a", "h1", CHECK_IN, CHECK_OUT, selections, "USD"),
        service.refresh(session, "draft-b", "h1", CHECK_IN, CHECK_OUT, selections, "EGP"),
    )
    assert not a.stale and not b.stale


async def test_get_rates_uses_cache(monkeypatch, session):
    from staydesk.services.cache_service import cache_service

    cached = [make_rate(price=77).model_dump(mode="json")]

    async def cached_rates(key):
        return cached

    async def fail_fetch(*args, **kwargs):
        raise AssertionError("backend should not be called on a cache hit")

    monkeypatch.setattr(cache_service, "get_rates", cached_rates)
    monkeypatch.setattr(booking_api_client, "fetch_rates", fail_fetch)

    rates = await RateService().get_rates(session, "h1", CHECK_IN, CHECK_OUT)
    assert rates[0].price == D(77)
