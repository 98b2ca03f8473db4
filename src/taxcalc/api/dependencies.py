"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends, Request

from taxcalc.services.coordinator import RequestCoordinator


def get_coordinator(request: Request) -> RequestCoordinator:
    """Get the coordinator created by the app factory."""
    return request.app.state.coordinator


# Type aliases for cleaner dependency injection
Coordinator = Annotated[RequestCoordinator, Depends(get_coordinator)]
