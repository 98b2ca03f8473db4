"""API routes."""

from taxcalc.api.routes.calculations import router as calculations_router
from taxcalc.api.routes.health import router as health_router

__all__ = ["calculations_router", "health_router"]
