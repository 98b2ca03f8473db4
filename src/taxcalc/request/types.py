"""Canonical request payload for the gross-to-net computation engine."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from taxcalc.jurisdictions.types import Jurisdiction

logger = logging.getLogger(__name__)

API_URL = "https://paycheck-calculator.adp.com/api/pcc/v2/calculations"

OVERTIME_FACTOR = 1.5
DOUBLETIME_FACTOR = 2.0


class PayFrequency(str, Enum):
    """Cadence the net amount is reported for. Values are wire codes."""

    MONTHLY = "MONTHLY"
    SEMI_MONTHLY = "SEMI_MONTHLY"
    BI_WEEKLY = "BI_WEEKLY"
    WEEKLY = "WEEKLY"

    @property
    def label(self) -> str:
        return _PAY_FREQUENCY_LABELS[self]

    def __str__(self) -> str:
        return self.label

    @classmethod
    def parse(cls, value: str | None) -> PayFrequency:
        """Parse a user-facing label. Unrecognized values fall back to monthly."""
        frequency = _PAY_FREQUENCY_INPUTS.get((value or "").strip().lower())
        if frequency is None:
            logger.debug("Unrecognized pay frequency %r, defaulting to monthly", value)
            return cls.MONTHLY
        return frequency


_PAY_FREQUENCY_LABELS = {
    PayFrequency.MONTHLY: "monthly",
    PayFrequency.SEMI_MONTHLY: "semi-monthly",
    PayFrequency.BI_WEEKLY: "bi-weekly",
    PayFrequency.WEEKLY: "weekly",
}

_PAY_FREQUENCY_INPUTS = {
    "monthly": PayFrequency.MONTHLY,
    "semi-monthly": PayFrequency.SEMI_MONTHLY,
    "biweekly": PayFrequency.BI_WEEKLY,
    "bi-weekly": PayFrequency.BI_WEEKLY,
    "weekly": PayFrequency.WEEKLY,
}


class SalaryFrequency(str, Enum):
    """Whether a salary amount is per year or per pay period.

    Values are the engine's opaque policy aliases.
    """

    ANNUAL = "salary"
    PERIODIC = "salary_per_period"

    @property
    def label(self) -> str:
        return "annual" if self is SalaryFrequency.ANNUAL else "periodic"

    def __str__(self) -> str:
        return self.label

    @classmethod
    def parse(cls, value: SalaryFrequency | str) -> SalaryFrequency | None:
        """Accept a member, its wire value or its label; None if unrecognized."""
        if isinstance(value, SalaryFrequency):
            return value
        for member in cls:
            if value in (member.value, member.label):
                return member
        return None


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Code(_WireModel):
    code: str


class StatutoryPolicyInput(_WireModel):
    """Filing options such as W-4 form version."""

    id: str
    name: str
    value: Any
    type: str
    template_id: str = Field(alias="templateID")


# Use the 2020-and-later W-4; the engine assumes the 2019 form otherwise.
STATUTORY_POLICY_2020_W4 = StatutoryPolicyInput(
    id="w4Form2020Indicator",
    name="w4Form2020Indicator",
    value=True,
    type="boolean",
    template_id="e01a6863-4fc7-4c2a-ac8c-f8d896c6fba2",
)

GROSS_TO_NET = Code(code="GROSS_TO_NET")


class BusinessPolicyInput(_WireModel):
    name: str
    value: Any
    type: str


class BusinessPolicy(_WireModel):
    """One gross income source: a salary or an hourly wage."""

    id: str
    alias: str
    label: str
    inputs: list[BusinessPolicyInput]

    @classmethod
    def salary(cls, amount: float, frequency: SalaryFrequency, index: int) -> BusinessPolicy:
        """Salary source; ``index`` starts at 1 and makes the id unique."""
        return cls(
            id=f"salary-{index}",
            alias=frequency.value,
            label="SALARY",
            inputs=[BusinessPolicyInput(name="appliedPayPeriodAmount", value=amount, type="amount")],
        )

    @classmethod
    def hourly(cls, hours: float, rate: float, index: int) -> BusinessPolicy:
        """Hourly source; ``index`` starts at 1 and makes the id unique."""
        return cls(
            id=f"hourly-{index}",
            alias="hourly",
            label="HOURLY",
            inputs=[
                BusinessPolicyInput(name="appliedHourlyRate", value=rate, type="rate"),
                BusinessPolicyInput(name="regularHoursWorked", value=hours, type="quantity"),
            ],
        )


class EarningType(_WireModel):
    value: str
    label: str
    type: str


class ValueOf(_WireModel):
    value: Any


OVERTIME_EARNING_TYPE = EarningType(value="OvertimePay", label="OVERTIME", type="HUR")
DOUBLETIME_EARNING_TYPE = EarningType(value="DoubletimePay", label="DOUBLE_TIME", type="HUR")


class PayLine(_WireModel):
    """Supplemental hourly earnings. ``amount`` is the rate before the factor."""

    earning_type: EarningType = Field(alias="earningType")
    unit: ValueOf
    amount: ValueOf
    name: ValueOf
    client_factor: ValueOf = Field(alias="clientFactor")

    @classmethod
    def overtime(cls, hours: float, rate: float) -> PayLine:
        return cls._hourly_line(OVERTIME_EARNING_TYPE, "Overtime", OVERTIME_FACTOR, hours, rate)

    @classmethod
    def doubletime(cls, hours: float, rate: float) -> PayLine:
        return cls._hourly_line(DOUBLETIME_EARNING_TYPE, "Double time", DOUBLETIME_FACTOR, hours, rate)

    @classmethod
    def _hourly_line(
        cls, earning_type: EarningType, name: str, factor: float, hours: float, rate: float
    ) -> PayLine:
        return cls(
            earning_type=earning_type,
            unit=ValueOf(value=f"{hours:.2f}"),
            amount=ValueOf(value=rate),
            name=ValueOf(value=name),
            client_factor=ValueOf(value=factor),
        )


class Jurisdictions(_WireModel):
    worked_in: list[Jurisdiction] = Field(alias="workedInJurisdictions")
    lived_in: list[Jurisdiction] = Field(alias="livedInJurisdictions")


class AdditionalEarnings(_WireModel):
    pay_lines: list[PayLine] = Field(alias="payLines")


class ComputationRequest(_WireModel):
    """Body POSTed to the computation engine."""

    calculation_type_code: Code = Field(alias="calculationTypeCode")
    statutory_policy_inputs: list[StatutoryPolicyInput] = Field(alias="statutoryPolicyInputs")
    jurisdictions: Jurisdictions
    pay_date: str = Field(alias="payDate")
    pay_frequency_code: Code = Field(alias="payFrequencyCode")
    business_policies: list[BusinessPolicy] = Field(alias="businessPolicies")
    additional_earnings: AdditionalEarnings = Field(alias="additionalEarnings")
    deductions: list[dict[str, Any]] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
