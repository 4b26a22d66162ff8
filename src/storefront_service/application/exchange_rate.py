import math
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog

from storefront_service.application.ports import Clock, KeyValueStore, RateSourcePort
from storefront_service.domain.currency import convert_ars_to_usd, format_ars, format_usd
from storefront_service.domain.exceptions import RateFetchError
from storefront_service.domain.models import ExchangeRate, RateSource
from storefront_service.infrastructure.metrics import EXCHANGE_RATE_LOOKUPS_TOTAL


logger = structlog.get_logger()

RATE_KEY = "exchange_rate"
TIMESTAMP_KEY = "exchange_rate_timestamp"


def utc_now() -> datetime:
    return datetime.now(UTC)


def _usable_rate(rate: float | None) -> bool:
    return rate is not None and math.isfinite(rate) and rate > 0


class ExchangeRateCache:
    """
    ARS per USD rate with a time-based local cache.

    A stored rate younger than ``ttl`` is served without touching the source.
    Otherwise the source is queried and a successful result is stored. When the
    source fails the configured default is returned and nothing is stored, so
    the next call retries the fetch.
    """

    def __init__(
        self,
        source: RateSourcePort,
        store: KeyValueStore,
        default_rate: float,
        ttl: timedelta = timedelta(hours=1),
        clock: Clock = utc_now,
        currency_code: str = "USD",
    ) -> None:
        self._source = source
        self._store = store
        self._default_rate = default_rate
        self._ttl = ttl
        self._clock = clock
        self._currency_code = currency_code

    @property
    def default_rate(self) -> float:
        return self._default_rate

    async def get_rate(self) -> float:
        rate = await self.get_exchange_rate()
        return rate.rate_value

    async def get_exchange_rate(self) -> ExchangeRate:
        now = self._clock()

        cached = await self._read_cached(now)
        if cached is not None:
            EXCHANGE_RATE_LOOKUPS_TOTAL.labels(source=RateSource.CACHED.value).inc()
            return cached

        try:
            fetched = await self._source.fetch_rate()
        except RateFetchError as e:
            logger.warning("exchange_rate_fallback", error=str(e), default_rate=self._default_rate)
            EXCHANGE_RATE_LOOKUPS_TOTAL.labels(source=RateSource.FALLBACK.value).inc()
            return ExchangeRate(
                rate_value=self._default_rate,
                currency_code=self._currency_code,
                source=RateSource.FALLBACK,
                fetched_at=now,
            )

        rate = fetched if _usable_rate(fetched) else self._default_rate
        await self._store.set(RATE_KEY, repr(rate))
        await self._store.set(TIMESTAMP_KEY, now.isoformat())

        logger.info("exchange_rate_refreshed", rate=rate)
        EXCHANGE_RATE_LOOKUPS_TOTAL.labels(source=RateSource.MANUAL.value).inc()
        return ExchangeRate(
            rate_value=rate,
            currency_code=self._currency_code,
            source=RateSource.MANUAL,
            fetched_at=now,
        )

    async def clear(self) -> None:
        await self._store.delete(RATE_KEY, TIMESTAMP_KEY)
        logger.info("exchange_rate_cache_cleared")

    async def _read_cached(self, now: datetime) -> ExchangeRate | None:
        raw_rate = await self._store.get(RATE_KEY)
        raw_timestamp = await self._store.get(TIMESTAMP_KEY)
        if raw_rate is None or raw_timestamp is None:
            return None

        try:
            rate = float(raw_rate)
            fetched_at = datetime.fromisoformat(raw_timestamp)
        except ValueError:
            rate = math.nan
        if not _usable_rate(rate):
            logger.warning("exchange_rate_cache_corrupt", rate=raw_rate, timestamp=raw_timestamp)
            return None

        if now - fetched_at >= self._ttl:
            return None

        return ExchangeRate(
            rate_value=rate,
            currency_code=self._currency_code,
            source=RateSource.CACHED,
            fetched_at=fetched_at,
        )


@dataclass
class PriceQuote:
    amount_ars: float
    amount_usd: float
    rate: ExchangeRate

    def to_dict(self) -> dict[str, object]:
        return {
            "amountArs": self.amount_ars,
            "amountUsd": self.amount_usd,
            "rate": self.rate.rate_value,
            "rateSource": self.rate.source.value,
            "formattedArs": format_ars(self.amount_ars),
            "formattedUsd": format_usd(self.amount_usd),
        }


class PriceConverter:
    """Converts catalog prices in pesos to dollars using the cached rate."""

    def __init__(self, cache: ExchangeRateCache) -> None:
        self._cache = cache

    async def convert_ars_to_usd(self, amount_ars: float) -> float:
        rate = await self._cache.get_rate()
        return convert_ars_to_usd(amount_ars, rate)

    async def quote(self, amount_ars: float) -> PriceQuote:
        rate = await self._cache.get_exchange_rate()
        return PriceQuote(
            amount_ars=amount_ars,
            amount_usd=convert_ars_to_usd(amount_ars, rate.rate_value),
            rate=rate,
        )
