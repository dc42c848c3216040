"""Redis cache for fetched hotel rate lists."""

import json
import logging
from datetime import date

import redis.asyncio as redis

from staydesk.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """Rate-list cache keyed by hotel, stay, occupancy, currency and language.

    Redis problems count as misses; callers never see Redis errors.
    """

    def __init__(self):
        self._redis: redis.Redis | None = None

    async def _connection(self) -> redis.Redis | None:
        if self._redis is not None:
            return self._redis
        try:
            conn = redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
            await conn.ping()
        except Exception as e:
            logger.warning(f"Redis unavailable, rate cache disabled: {e}")
            return None
        self._redis = conn
        return conn

    @staticmethod
    def rates_key(
        hotel_id: str,
        check_in: date,
        check_out: date,
        adults: int,
        children_ages: list[int],
        currency: str,
        language: str,
    ) -> str:
        children = "-".join(str(a) for a in children_ages) or "0"
        return (
            f"rates:{hotel_id}:{check_in.isoformat()}:{check_out.isoformat()}:"
            f"{adults}:{children}:{currency.upper()}:{language}"
        )

    async def get_rates(self, key: str) -> list[dict] | None:
        """Cached raw rates for ``key``; None on a miss, a Redis error or an unreadable entry."""
        try:
            conn = await self._connection()
            raw = await conn.get(key) if conn is not None else None
        except Exception as e:
            logger.debug(f"Rate cache read failed for {key}: {e}")
            return None
        if raw is None:
            return None
        try:
            rates = json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding unreadable rate cache entry {key}")
            return None
        return rates if isinstance(rates, list) else None

    async def set_rates(self, key: str, rates: list[dict]) -> bool:
        """Store raw rates for ``rate_cache_ttl`` seconds. Returns False when nothing was written."""
        try:
            conn = await self._connection()
            if conn is None:
                return False
            await conn.set(key, json.dumps(rates, default=str), ex=settings.rate_cache_ttl)
        except Exception as e:
            logger.debug(f"Rate cache write failed for {key}: {e}")
            return False
        return True

    async def close(self):
        if self._redis:
            await self._redis.aclose()
            self._redis = None


cache_service = CacheService()
