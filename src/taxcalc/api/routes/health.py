"""Liveness endpoint."""

from fastapi import APIRouter, Response, status

router = APIRouter(tags=["health"])


@router.get("/{path:path}", status_code=status.HTTP_204_NO_CONTENT, include_in_schema=False)
async def liveness_check(path: str) -> Response:
    """Any path outside the API answers 204 for container probes."""
    return Response(status_code=status.HTTP_204_NO_CONTENT)
