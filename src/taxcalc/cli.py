"""Offline net pay calculator.

Sends a single request to the computation engine and prints the net income
per pay period.

Usage:
    taxcalc [-s STATE] [-p PAY_FREQUENCY] [-v] SALARY
    taxcalc -s CA -p bi-weekly 85000
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import httpx

from taxcalc.config import Settings, get_settings
from taxcalc.errors import TaxCalcError
from taxcalc.jurisdictions.directory import JurisdictionDirectory
from taxcalc.jurisdictions.scraper import HttpBundleSource
from taxcalc.request.builder import RequestBuilder
from taxcalc.request.types import PayFrequency, SalaryFrequency
from taxcalc.upstream import CalculatorClient

logger = logging.getLogger(__name__)


class TaxCalcCli:
    """taxcalc command line interface."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="taxcalc",
            description=(
                "Calculate the net income less tax per pay period for an annual salary."
            ),
        )
        parser.add_argument(
            "salary",
            type=float,
            help="annual salary in dollars",
        )
        parser.add_argument(
            "-s",
            "--state",
            type=str,
            default="",
            help="two letter state code to include state income tax for",
        )
        parser.add_argument(
            "-p",
            "--pay-frequency",
            type=PayFrequency.parse,
            default=PayFrequency.MONTHLY,
            help="one of monthly, semi-monthly, bi-weekly or weekly (default: monthly)",
        )
        parser.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            help="log at debug level",
        )
        return parser

    def run(self, argv: list[str] | None = None) -> int:
        """Parse arguments and print the net amount. Returns the exit code."""
        args = self.parser.parse_args(argv)

        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )

        try:
            settings = self.settings or get_settings()
            net = asyncio.run(self.calculate(settings, args.salary, args.state, args.pay_frequency))
        except (TaxCalcError, ValueError) as e:
            logger.error("failed to send request: %s", e)
            return 2

        print(f"{net:.2f}")
        return 0

    async def calculate(
        self,
        settings: Settings,
        salary: float,
        state: str,
        pay_frequency: PayFrequency,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> float:
        """Compute the net amount for one salary."""
        async with httpx.AsyncClient(timeout=settings.timeout, transport=transport) as client:
            directory = JurisdictionDirectory(HttpBundleSource(client, settings.pwc_base_url))
            builder = (
                RequestBuilder(directory, CalculatorClient(client, settings.api_url))
                .with_salary(salary, SalaryFrequency.ANNUAL)
                .with_pay_frequency(pay_frequency)
            )

            if state:
                state = state.strip().upper()
                logger.debug("adding state: %s", state)
                await builder.with_jurisdictions_by_code(state)

            response = await builder.send()
            return response.net_amount


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    return TaxCalcCli().run(argv)


if __name__ == "__main__":
    sys.exit(main())
