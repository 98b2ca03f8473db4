"""Serves net-pay queries from the cache or the rate-limited upstream engine."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass

from taxcalc.errors import ParameterError
from taxcalc.jurisdictions.directory import JurisdictionDirectory
from taxcalc.request.builder import RequestBuilder
from taxcalc.request.types import PayFrequency, SalaryFrequency
from taxcalc.response import ComputationResponse
from taxcalc.services.cache import CacheKey, ResponseCache
from taxcalc.services.rate_limiter import RateLimiter
from taxcalc.upstream import CalculatorClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestParams:
    """Normalized inbound query parameters."""

    salary: float
    pay_frequency: PayFrequency = PayFrequency.MONTHLY
    state: str = ""

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> RequestParams:
        """Parse ``salary``, ``pay-frequency`` and ``state``.

        Raises:
            ParameterError: If salary is missing or not a finite number.
        """
        salary = query.get("salary")
        if not salary:
            raise ParameterError("salary must be specified")

        try:
            salary_value = float(salary)
        except ValueError:
            raise ParameterError(f"salary is not a valid float: {salary!r}") from None
        if not math.isfinite(salary_value):
            raise ParameterError(f"salary is not a valid float: {salary!r}")

        return cls(
            salary=salary_value,
            pay_frequency=PayFrequency.parse(query.get("pay-frequency")),
            state=(query.get("state") or "").strip().upper(),
        )

    @property
    def cache_key(self) -> CacheKey:
        return CacheKey.of(self.salary, self.state, self.pay_frequency)


class RequestCoordinator:
    """Cache-first fulfillment of net-pay queries.

    A hit returns immediately. A miss composes a fresh RequestBuilder, waits
    on the rate limiter, sends one request and caches the result. Nothing is
    retried and failures are not cached.
    """

    def __init__(
        self,
        directory: JurisdictionDirectory,
        client: CalculatorClient,
        cache: ResponseCache,
        limiter: RateLimiter,
        shutdown: asyncio.Event | None = None,
    ):
        self.directory = directory
        self.client = client
        self.cache = cache
        self.limiter = limiter
        self.shutdown = shutdown

    async def build_request(self, params: RequestParams) -> RequestBuilder:
        """Create a builder populated from ``params``."""
        builder = (
            RequestBuilder(self.directory, self.client)
            .with_salary(params.salary, SalaryFrequency.ANNUAL)
            .with_pay_frequency(params.pay_frequency)
        )
        if params.state:
            logger.debug("Adding state to request: %s", params.state)
            await builder.with_jurisdictions_by_code(params.state)
        return builder

    async def retrieve_or_request(self, params: RequestParams) -> ComputationResponse:
        """Return the cached response for ``params`` or fetch and cache it.

        Raises:
            ValidationError, DiscoveryError, TransportError, DecodeError,
            RateLimitError: Propagated from the limiter and builder.
        """
        key = params.cache_key
        cached, found = self.cache.get(key)
        if found:
            logger.debug("Found entry in cache for key %s, using cached response", key)
            return cached

        builder = await self.build_request(params)
        if builder.error is not None:
            # Invalid input never costs an upstream slot.
            raise builder.error

        logger.debug("No entry in cache for key %s, waiting for rate limit", key)
        await self.limiter.wait(self.shutdown)

        response = await builder.send()

        self.cache.put(key, response)
        return response
