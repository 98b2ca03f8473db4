"""Net pay endpoint."""

import logging
from typing import Annotated

from fastapi import APIRouter, Query, status
from fastapi.responses import PlainTextResponse

from taxcalc.api.dependencies import Coordinator
from taxcalc.services.coordinator import RequestParams

logger = logging.getLogger(__name__)

router = APIRouter(tags=["calculations"])


@router.get("/", response_class=PlainTextResponse, status_code=status.HTTP_200_OK)
@router.get("", response_class=PlainTextResponse, include_in_schema=False)
async def calculate_net(
    coordinator: Coordinator,
    salary: Annotated[str | None, Query()] = None,
    pay_frequency: Annotated[str | None, Query(alias="pay-frequency")] = None,
    state: Annotated[str | None, Query()] = None,
) -> PlainTextResponse:
    """Return the net amount per pay period as a one-line CSV body."""
    params = RequestParams.from_query(
        {"salary": salary or "", "pay-frequency": pay_frequency or "", "state": state or ""}
    )

    response = await coordinator.retrieve_or_request(params)

    logger.debug("Responding with %.2f to request with params %s", response.net_amount, params)
    return PlainTextResponse(response.format_net(), media_type="text/csv")
