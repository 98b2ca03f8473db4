"""Tests for the offline command line calculator."""

import json

import httpx
import pytest

from taxcalc.cli import TaxCalcCli
from taxcalc.config import Settings
from taxcalc.errors import TransportError
from taxcalc.request.types import PayFrequency

from tests.conftest import BUNDLE_JS, CALIFORNIA_ID, LOADER_JS, upstream_body


class RoutingHandler:
    """Answers loader, bundle and engine URLs like the real hosts."""

    def __init__(self, engine_status: int = 200):
        self.engine_status = engine_status
        self.paths: list[str] = []
        self.computations: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.paths.append(request.url.path)
        if request.url.path.endswith("/loader.js"):
            return httpx.Response(200, text=LOADER_JS)
        if request.url.path.endswith(".entry.js"):
            return httpx.Response(200, text=BUNDLE_JS)
        self.computations.append(json.loads(request.content))
        return httpx.Response(self.engine_status, json=upstream_body(net=1234.5))


@pytest.fixture
def cli() -> TaxCalcCli:
    return TaxCalcCli(Settings())


class TestTaxCalcCli:
    """Test TaxCalcCli."""

    @pytest.mark.asyncio
    async def test_calculate_federal_only(self, cli: TaxCalcCli):
        handler = RoutingHandler()

        net = await cli.calculate(
            Settings(), 60000, "", PayFrequency.MONTHLY, transport=httpx.MockTransport(handler)
        )

        assert net == pytest.approx(1234.5)
        # No state requested, so discovery never runs.
        assert len(handler.paths) == 1
        assert handler.computations[0]["payFrequencyCode"] == {"code": "MONTHLY"}

    @pytest.mark.asyncio
    async def test_calculate_with_lowercase_state(self, cli: TaxCalcCli):
        handler = RoutingHandler()

        await cli.calculate(
            Settings(), 85000, "ca", PayFrequency.BI_WEEKLY, transport=httpx.MockTransport(handler)
        )

        assert handler.paths[0] == "/pwc/dist/loader.js"
        assert "/pwc/dist/pcc/2024.24.0/" in handler.paths[1]
        lived_in = handler.computations[0]["jurisdictions"]["livedInJurisdictions"]
        assert CALIFORNIA_ID in [j["jurisdictionID"] for j in lived_in]
        assert handler.computations[0]["payFrequencyCode"] == {"code": "BI_WEEKLY"}

    @pytest.mark.asyncio
    async def test_calculate_upstream_error(self, cli: TaxCalcCli):
        handler = RoutingHandler(engine_status=500)

        with pytest.raises(TransportError):
            await cli.calculate(
                Settings(), 60000, "", PayFrequency.MONTHLY, transport=httpx.MockTransport(handler)
            )

    def test_run_prints_net(self, cli: TaxCalcCli, monkeypatch, capsys):
        seen = {}

        async def fake_calculate(settings, salary, state, pay_frequency, transport=None):
            seen.update(salary=salary, state=state, pay_frequency=pay_frequency)
            return 1234.5

        monkeypatch.setattr(cli, "calculate", fake_calculate)

        assert cli.run(["-s", "ny", "-p", "weekly", "52000"]) == 0
        assert capsys.readouterr().out == "1234.50\n"
        assert seen == {"salary": 52000.0, "state": "ny", "pay_frequency": PayFrequency.WEEKLY}

    def test_run_unknown_pay_frequency_defaults_to_monthly(self, cli: TaxCalcCli, monkeypatch):
        seen = {}

        async def fake_calculate(settings, salary, state, pay_frequency, transport=None):
            seen["pay_frequency"] = pay_frequency
            return 0.0

        monkeypatch.setattr(cli, "calculate", fake_calculate)

        assert cli.run(["-p", "fortnightly", "1000"]) == 0
        assert seen["pay_frequency"] == PayFrequency.MONTHLY

    def test_run_negative_salary_exits_2(self, cli: TaxCalcCli, capsys):
        """Validation fails before any network access."""
        assert cli.run(["-100"]) == 2
        assert capsys.readouterr().out == ""

    def test_run_upstream_error_exits_2(self, cli: TaxCalcCli, monkeypatch):
        async def failing_calculate(settings, salary, state, pay_frequency, transport=None):
            raise TransportError("status was not OK sending request: 500", status_code=500)

        monkeypatch.setattr(cli, "calculate", failing_calculate)

        assert cli.run(["60000"]) == 2

    def test_salary_must_be_numeric(self, cli: TaxCalcCli):
        with pytest.raises(SystemExit) as exc_info:
            cli.run(["sixty"])

        assert exc_info.value.code == 2
