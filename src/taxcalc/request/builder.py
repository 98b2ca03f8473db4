"""Fluent builder for computation requests.

The builder accumulates income sources and jurisdictions, validating each
call. The first invalid call moves it into a terminal ``Failed`` state that
remembers the error and the last valid draft; every later mutating call is a
no-op. The error is only surfaced by :meth:`RequestBuilder.send`,
:meth:`RequestBuilder.build_request` or drained with
:meth:`RequestBuilder.handle_error`, so a chain never raises midway::

    builder = RequestBuilder(directory, client).with_salary(60000).with_pay_frequency("weekly")
    await builder.with_jurisdictions_by_code("CA")
    response = await builder.send()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import TYPE_CHECKING

from taxcalc.errors import DiscoveryError, TaxCalcError, ValidationError
from taxcalc.jurisdictions.directory import JurisdictionDirectory
from taxcalc.jurisdictions.types import Jurisdiction
from taxcalc.request.types import (
    GROSS_TO_NET,
    STATUTORY_POLICY_2020_W4,
    AdditionalEarnings,
    BusinessPolicy,
    Code,
    ComputationRequest,
    Jurisdictions,
    PayFrequency,
    PayLine,
    SalaryFrequency,
)

if TYPE_CHECKING:
    from taxcalc.response import ComputationResponse
    from taxcalc.upstream import CalculatorClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestDraft:
    """Inputs accumulated so far. Immutable; every change makes a new draft."""

    salaries: tuple[BusinessPolicy, ...] = ()
    hourlies: tuple[BusinessPolicy, ...] = ()
    overtime: tuple[PayLine, ...] = ()
    doubletime: tuple[PayLine, ...] = ()
    jurisdictions: tuple[Jurisdiction, ...] = ()
    pay_frequency: PayFrequency | None = None


@dataclass(frozen=True)
class Accumulating:
    """Valid state: further inputs are accepted."""

    draft: RequestDraft = field(default_factory=RequestDraft)


@dataclass(frozen=True)
class Failed:
    """Terminal state: holds the error and the last valid draft."""

    draft: RequestDraft
    error: TaxCalcError


DraftState = Accumulating | Failed


class RequestBuilder:
    """Builds and sends a gross-to-net computation request."""

    def __init__(self, directory: JurisdictionDirectory, client: CalculatorClient | None = None):
        self.directory = directory
        self.client = client
        self._state: DraftState = Accumulating()

    @property
    def state(self) -> DraftState:
        return self._state

    @property
    def draft(self) -> RequestDraft:
        return self._state.draft

    @property
    def error(self) -> TaxCalcError | None:
        return self._state.error if isinstance(self._state, Failed) else None

    def with_pay_frequency(self, pay_frequency: PayFrequency | str) -> RequestBuilder:
        """Set the reporting cadence. Monthly is used if never called."""
        if isinstance(self._state, Failed):
            return self

        if not isinstance(pay_frequency, PayFrequency):
            pay_frequency = PayFrequency.parse(pay_frequency)
        logger.debug("Setting pay frequency to %s", pay_frequency.label)

        return self._update(pay_frequency=pay_frequency)

    def with_jurisdictions(self, *jurisdictions: Jurisdiction) -> RequestBuilder:
        """Add already-resolved jurisdictions as both lived-in and worked-in."""
        if isinstance(self._state, Failed):
            return self

        logger.debug("Adding %d jurisdictions", len(jurisdictions))
        return self._update(jurisdictions=self.draft.jurisdictions + jurisdictions)

    async def with_jurisdictions_by_code(self, *codes: str) -> RequestBuilder:
        """Resolve codes through the directory and add them.

        Discovery runs on first use. If any code cannot be resolved, nothing is
        added and the builder fails.
        """
        if isinstance(self._state, Failed):
            return self

        logger.debug("Adding %d jurisdictions by code", len(codes))

        resolved: list[Jurisdiction] = []
        for code in codes:
            try:
                resolved.append(await self.directory.get(code))
            except (DiscoveryError, ValidationError) as e:
                logger.debug("Failed to resolve jurisdiction %s: %s", code, e)
                return self._fail(e)

        return self._update(jurisdictions=self.draft.jurisdictions + tuple(resolved))

    def with_salary(
        self, amount: float, frequency: SalaryFrequency | str = SalaryFrequency.ANNUAL
    ) -> RequestBuilder:
        """Add a salary in dollars per ``frequency`` (annual or periodic)."""
        if isinstance(self._state, Failed):
            return self

        logger.debug("Adding salary of %.2f with frequency %s", amount, frequency)

        if not amount >= 0:
            return self._fail(ValidationError("salary amount must be non-negative"))

        salary_frequency = SalaryFrequency.parse(frequency)
        if salary_frequency is None:
            return self._fail(ValidationError(f"invalid salary frequency: {frequency}"))

        policy = BusinessPolicy.salary(amount, salary_frequency, len(self.draft.salaries) + 1)
        return self._update(salaries=self.draft.salaries + (policy,))

    def with_hourly(self, hours: float, rate: float) -> RequestBuilder:
        """Add an hourly income source. ``rate`` is dollars per hour."""
        if isinstance(self._state, Failed):
            return self

        logger.debug("Adding hourly rate of %.2f with %.2f hours", rate, hours)

        error = _check_hours_and_rate("hourly", hours, rate)
        if error is not None:
            return self._fail(error)

        policy = BusinessPolicy.hourly(hours, rate, len(self.draft.hourlies) + 1)
        return self._update(hourlies=self.draft.hourlies + (policy,))

    def with_overtime(self, hours: float, rate: float) -> RequestBuilder:
        """Add overtime paid at 1.5x ``rate``."""
        if isinstance(self._state, Failed):
            return self

        logger.debug("Adding overtime rate of %.2f with %.2f hours", rate, hours)

        error = _check_hours_and_rate("overtime", hours, rate)
        if error is not None:
            return self._fail(error)

        return self._update(overtime=self.draft.overtime + (PayLine.overtime(hours, rate),))

    def with_doubletime(self, hours: float, rate: float) -> RequestBuilder:
        """Add double time paid at 2x ``rate``."""
        if isinstance(self._state, Failed):
            return self

        logger.debug("Adding double time rate of %.2f with %.2f hours", rate, hours)

        error = _check_hours_and_rate("double time", hours, rate)
        if error is not None:
            return self._fail(error)

        return self._update(doubletime=self.draft.doubletime + (PayLine.doubletime(hours, rate),))

    def handle_error(self) -> TaxCalcError | None:
        """Drain the sticky error, returning it (or None).

        The builder goes back to accumulating with the last valid draft.
        """
        if not isinstance(self._state, Failed):
            return None

        error = self._state.error
        self._state = Accumulating(self._state.draft)
        return error

    def build_request(self, pay_date: date | None = None) -> ComputationRequest:
        """Compose the upstream payload. Does not modify the builder.

        Raises:
            TaxCalcError: The sticky error, if one is set.
        """
        if isinstance(self._state, Failed):
            raise self._state.error

        draft = self._state.draft
        pay_frequency = draft.pay_frequency
        if pay_frequency is None:
            logger.debug("No pay frequency specified, defaulting to monthly")
            pay_frequency = PayFrequency.MONTHLY

        jurisdictions = list(draft.jurisdictions)
        if not any(jurisdiction.is_federal for jurisdiction in jurisdictions):
            jurisdictions.append(self.directory.get_federal())

        return ComputationRequest(
            calculation_type_code=GROSS_TO_NET,
            statutory_policy_inputs=[STATUTORY_POLICY_2020_W4],
            jurisdictions=Jurisdictions(worked_in=jurisdictions, lived_in=jurisdictions),
            pay_date=(pay_date or date.today()).isoformat(),
            pay_frequency_code=Code(code=pay_frequency.value),
            business_policies=[*draft.salaries, *draft.hourlies],
            additional_earnings=AdditionalEarnings(pay_lines=[*draft.overtime, *draft.doubletime]),
            deductions=[],
        )

    async def send(self, pay_date: date | None = None) -> ComputationResponse:
        """Build the request, send it upstream and decode the response.

        Raises:
            ValidationError: If the builder holds an input error.
            DiscoveryError: If jurisdiction discovery failed while building.
            TransportError: On network failure or a non-success status.
            DecodeError: If the response body is malformed.
        """
        request = self.build_request(pay_date)
        if self.client is None:
            raise RuntimeError("RequestBuilder has no CalculatorClient to send with")
        return await self.client.compute(request)

    def _update(self, **changes: object) -> RequestBuilder:
        self._state = Accumulating(replace(self._state.draft, **changes))
        return self

    def _fail(self, error: TaxCalcError) -> RequestBuilder:
        self._state = Failed(draft=self._state.draft, error=error)
        return self


def _check_hours_and_rate(kind: str, hours: float, rate: float) -> ValidationError | None:
    if not hours >= 0:
        return ValidationError(f"{kind} hours must be non-negative")
    if not rate >= 0:
        return ValidationError(f"{kind} rate must be non-negative")
    return None
