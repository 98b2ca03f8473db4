"""HTTP client for the remote computation engine."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError as PydanticValidationError

from taxcalc.errors import DecodeError, TransportError
from taxcalc.request.types import API_URL, ComputationRequest
from taxcalc.response import ComputationResponse

logger = logging.getLogger(__name__)


class CalculatorClient:
    """POSTs computation requests and decodes the responses. No retries."""

    def __init__(self, client: httpx.AsyncClient, url: str = API_URL):
        self.client = client
        self.url = url

    async def compute(self, request: ComputationRequest) -> ComputationResponse:
        """Send ``request`` upstream.

        Raises:
            TransportError: On network failure or a non-200 status.
            DecodeError: If the body is not a valid computation response.
        """
        logger.debug("Sending request to %s", self.url)
        try:
            response = await self.client.post(self.url, json=request.to_wire())
        except httpx.HTTPError as e:
            raise TransportError(f"failed to send request: {e}") from e

        if response.status_code != httpx.codes.OK:
            raise TransportError(
                f"status was not OK sending request: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            return ComputationResponse.model_validate_json(response.content)
        except PydanticValidationError as e:
            raise DecodeError(f"failed to decode computation response: {e}") from e
