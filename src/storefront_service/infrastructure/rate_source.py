import math

import httpx

from storefront_service.domain.exceptions import RateFetchError
from storefront_service.infrastructure.http import describe_error_response, observe_outbound


class HttpRateSource:
    """Reads ``{"rate": <ARS per USD>}`` from a JSON endpoint."""

    def __init__(self, http_client: httpx.AsyncClient, url: str) -> None:
        self._http = http_client
        self._url = url

    async def fetch_rate(self) -> float:
        try:
            async with observe_outbound("exchange_rate"):
                response = await self._http.get(self._url)
        except httpx.HTTPError as e:
            raise RateFetchError(repr(e)) from e

        if response.is_error:
            raise RateFetchError(describe_error_response(response))

        try:
            data = response.json()
        except ValueError as e:
            raise RateFetchError("response body is not JSON") from e

        rate = data.get("rate") if isinstance(data, dict) else None
        if rate is None:
            return 0.0
        try:
            value = float(rate)
        except (TypeError, ValueError) as e:
            raise RateFetchError(f"rate is not numeric: {rate!r}") from e
        if not math.isfinite(value):
            raise RateFetchError(f"rate is not finite: {rate!r}")
        return value


class ManualRateSource:
    """Rate maintained by hand through the USD_EXCHANGE_RATE setting."""

    def __init__(self, rate: float) -> None:
        self._rate = rate

    async def fetch_rate(self) -> float:
        if not math.isfinite(self._rate) or self._rate <= 0:
            raise RateFetchError(f"configured rate must be positive, got {self._rate}")
        return self._rate
