"""Pytest fixtures for taxcalc tests."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
import pytest_asyncio

from taxcalc.errors import DiscoveryError
from taxcalc.jurisdictions.directory import JurisdictionDirectory
from taxcalc.jurisdictions.types import Jurisdiction, JurisdictionCode, LevelCode
from taxcalc.request.types import API_URL
from taxcalc.upstream import CalculatorClient

DISCOVERED_FEDERAL_ID = "0f9a3c55-6a1e-4c1f-9e0e-7d0d3a2f9b11"
CALIFORNIA_ID = "1b5c1c2e-0b7a-4d0f-8b53-3f1c4e2a9d01"
NEW_YORK_ID = "7e2d4b1a-33c9-4a8e-a0f7-6c5b2d9e8f02"

LOADER_JS = (
    "(function(){\n"
    "const e=JSON.parse('{\"RC\":\"2024.25.0\",\"GA\":{\"pcc\":\"2024.24.0\",\"pwc\":\"3.1.0\"}}');\n"
    "return e;})();\n"
)

BUNDLE_JS = f"""
import {{ h }} from './index.js';

const FEDERAL_JURISDICTION = {{
  jurisdictionID: '{DISCOVERED_FEDERAL_ID}',
  jurisdictionCode: {{
    name: 'United States Federal',
    code: 'US'
  }},
  jurisdictionLevelCode: {{
    code: 'FEDERAL'
  }}
}};

function stateInfo(code) {{
  let info;
  switch (code) {{
    case 'CA':
      info = {{
        shortName: 'CA',
        longName: 'California',
        jurisdictionID: '{CALIFORNIA_ID}'
      }};
      break;
    case 'NY':
      info = {{
        shortName: 'NY',
        longName: 'New York',
        jurisdictionID: '{NEW_YORK_ID}'
      }};
      break;
  }}
  return info;
}}
"""


def upstream_body(net: float = 3950.12, gross: float = 5000.0) -> dict[str, Any]:
    """A computation response as the engine returns it."""
    summary = {"amount": gross - net, "currencyCode": "USD", "label": "Taxes"}
    return {
        "earnings": {
            "entities": [{"amount": gross, "currencyCode": "USD", "label": "Salary", "hours": 0}],
            "summaryEntity": {"amount": gross, "currencyCode": "USD", "label": "Earnings"},
        },
        "taxes": {
            "federal": {
                "entities": [
                    {
                        "amount": gross - net,
                        "currencyCode": "USD",
                        "label": "Federal Income Tax",
                        "jurisdiction": {
                            "jurisdictionID": DISCOVERED_FEDERAL_ID,
                            "jurisdictionCode": {"name": "United States Federal", "code": "US"},
                            "jurisdictionLevelCode": {"code": "FEDERAL"},
                        },
                    }
                ],
                "summaryEntity": summary,
            },
            "state": {"entities": [], "summaryEntity": {"amount": 0, "currencyCode": "USD", "label": ""}},
            "local": {"entities": [], "summaryEntity": {"amount": 0, "currencyCode": "USD", "label": ""}},
            "territory": {"entities": [], "summaryEntity": {"amount": 0, "currencyCode": "USD", "label": ""}},
            "summaryEntity": summary,
        },
        "gross": {"amount": gross, "currencyCode": "USD", "label": "Gross Pay"},
        "net": {"amount": net, "currencyCode": "USD", "label": "Net Pay"},
        "deductions": {"entities": [], "summaryEntity": {"amount": 0, "currencyCode": "USD", "label": ""}},
    }


class FakeBundleSource:
    """In-memory BundleSource that counts fetches."""

    def __init__(
        self,
        loader: str = LOADER_JS,
        bundle: str = BUNDLE_JS,
        error: DiscoveryError | None = None,
        delay: float = 0.0,
    ):
        self.loader = loader
        self.bundle = bundle
        self.error = error
        self.delay = delay
        self.loader_fetches = 0
        self.bundle_versions: list[str] = []

    async def fetch_loader(self) -> str:
        self.loader_fetches += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.loader

    async def fetch_bundle(self, version: str) -> str:
        self.bundle_versions.append(version)
        return self.bundle


class FakeEngine:
    """Stands in for the computation engine behind an httpx.MockTransport."""

    def __init__(self, status_code: int = 200, body: Any = None):
        self.status_code = status_code
        self.body = upstream_body() if body is None else body
        self.requests: list[dict[str, Any]] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if isinstance(self.body, (bytes, str)):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def federal() -> Jurisdiction:
    return Jurisdiction(
        jurisdiction_id=DISCOVERED_FEDERAL_ID,
        jurisdiction_code=JurisdictionCode(name="United States Federal", code="US"),
        jurisdiction_level_code=LevelCode(code="FEDERAL"),
    )


@pytest.fixture
def california() -> Jurisdiction:
    return Jurisdiction.state("CA", "California", CALIFORNIA_ID)


@pytest.fixture
def new_york() -> Jurisdiction:
    return Jurisdiction.state("NY", "New York", NEW_YORK_ID)


@pytest.fixture
def populated_directory(
    federal: Jurisdiction, california: Jurisdiction, new_york: Jurisdiction
) -> JurisdictionDirectory:
    """Directory that is already populated and never fetches."""
    return JurisdictionDirectory.from_jurisdictions([california, new_york, federal])


@pytest.fixture
def bundle_source() -> FakeBundleSource:
    return FakeBundleSource()


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest_asyncio.fixture
async def http_client(engine: FakeEngine) -> AsyncGenerator[httpx.AsyncClient, None]:
    """httpx client whose requests are answered by the fake engine."""
    async with httpx.AsyncClient(transport=engine.transport) as client:
        yield client


@pytest.fixture
def calculator(http_client: httpx.AsyncClient) -> CalculatorClient:
    return CalculatorClient(http_client, API_URL)
