"""Pydantic models for the computation engine's gross-to-net response."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from taxcalc.jurisdictions.types import Jurisdiction


class _ResponseModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class SummaryEntity(_ResponseModel):
    """Total of a response section."""

    amount: float = 0.0
    currency_code: str = Field(default="", alias="currencyCode")
    label: str = ""


class EarningsEntity(_ResponseModel):
    amount: float = 0.0
    currency_code: str = Field(default="", alias="currencyCode")
    label: str = ""
    hours: float = 0.0


class Earnings(_ResponseModel):
    entities: list[EarningsEntity] = Field(default_factory=list)
    summary_entity: SummaryEntity = Field(default_factory=SummaryEntity, alias="summaryEntity")


class TaxEntity(_ResponseModel):
    """A single tax withheld for one jurisdiction."""

    amount: float = 0.0
    currency_code: str = Field(default="", alias="currencyCode")
    label: str = ""
    jurisdiction: Jurisdiction | None = None
    parent_jurisdiction: Jurisdiction | None = Field(default=None, alias="parentJurisdiction")


class TaxEntities(_ResponseModel):
    entities: list[TaxEntity] = Field(default_factory=list)
    summary_entity: SummaryEntity = Field(default_factory=SummaryEntity, alias="summaryEntity")


class Taxes(_ResponseModel):
    federal: TaxEntities = Field(default_factory=TaxEntities)
    state: TaxEntities = Field(default_factory=TaxEntities)
    local: TaxEntities = Field(default_factory=TaxEntities)
    territory: TaxEntities = Field(default_factory=TaxEntities)
    summary_entity: SummaryEntity = Field(default_factory=SummaryEntity, alias="summaryEntity")


class Deductions(_ResponseModel):
    entities: list[dict[str, Any]] = Field(default_factory=list)
    summary_entity: SummaryEntity = Field(default_factory=SummaryEntity, alias="summaryEntity")


class ComputationResponse(_ResponseModel):
    """Gross, net, earnings, taxes and deductions for one computation."""

    earnings: Earnings = Field(default_factory=Earnings)
    taxes: Taxes = Field(default_factory=Taxes)
    gross: SummaryEntity
    net: SummaryEntity
    deductions: Deductions = Field(default_factory=Deductions)

    @property
    def net_amount(self) -> float:
        return self.net.amount

    def format_net(self) -> str:
        """Net amount as the service returns it: two decimals and a newline."""
        return f"{self.net.amount:.2f}\n"
