"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import PlainTextResponse

from taxcalc.api.routes import calculations_router, health_router
from taxcalc.config import Settings, get_settings
from taxcalc.errors import ParameterError, TaxCalcError
from taxcalc.jurisdictions.directory import JurisdictionDirectory
from taxcalc.jurisdictions.scraper import BundleSource, HttpBundleSource
from taxcalc.services.cache import ResponseCache
from taxcalc.services.coordinator import RequestCoordinator
from taxcalc.services.rate_limiter import RateLimiter
from taxcalc.upstream import CalculatorClient

logger = logging.getLogger(__name__)

# All API paths are relative to this.
API_BASE_PATH = "/api/v1"


def build_coordinator(
    settings: Settings,
    http_client: httpx.AsyncClient,
    source: BundleSource | None = None,
    shutdown: asyncio.Event | None = None,
) -> RequestCoordinator:
    """Wire the directory, cache, limiter and upstream client together."""
    directory = JurisdictionDirectory(source or HttpBundleSource(http_client, settings.pwc_base_url))
    return RequestCoordinator(
        directory=directory,
        client=CalculatorClient(http_client, settings.api_url),
        cache=ResponseCache(settings.cache_size),
        limiter=RateLimiter(settings.rate_limit),
        shutdown=shutdown,
    )


def client_address(request: Request) -> str:
    """Client address, preferring X-Forwarded-For over the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded
    return request.client.host if request.client else "unknown"


def create_app(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
    source: BundleSource | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``http_client`` and ``source`` let callers substitute the network; a
    client created here is closed on shutdown.
    """
    settings = settings or get_settings()
    owns_client = http_client is None
    http_client = http_client or httpx.AsyncClient(timeout=settings.timeout)
    shutdown = asyncio.Event()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler."""
        yield
        # Shutdown: release anyone parked on the rate limiter.
        shutdown.set()
        if owns_client:
            await http_client.aclose()

    app = FastAPI(
        title="Tax Calculator API",
        description="Net income after tax, computed by the upstream gross-to-net engine",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.coordinator = build_coordinator(settings, http_client, source, shutdown)

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Log every inbound request with its client address."""
        logger.debug(
            "Handling request from %s to URL `%s`", client_address(request), request.url
        )
        return await call_next(request)

    # Exception handlers
    @app.exception_handler(ParameterError)
    async def parameter_error_handler(request: Request, exc: ParameterError) -> PlainTextResponse:
        """Missing or malformed query parameters are the client's fault."""
        logger.debug("Failed to parse request params: %s", exc)
        return PlainTextResponse(
            f"failed to parse request params: {exc}\n",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    @app.exception_handler(TaxCalcError)
    async def taxcalc_error_handler(request: Request, exc: TaxCalcError) -> PlainTextResponse:
        """Everything past parameter parsing is reported as a server error."""
        logger.debug("Failed to retrieve or request: %s", exc)
        return PlainTextResponse(
            f"failed to retrieve or request: {exc}\n",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unexpected error handling %s", request.url)
        return PlainTextResponse(
            "an unexpected error occurred\n",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    # Include routers; the liveness catch-all must come last.
    app.include_router(calculations_router, prefix=API_BASE_PATH)
    app.include_router(health_router)

    return app
