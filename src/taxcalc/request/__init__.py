"""Computation request payload and builder."""

from taxcalc.request.builder import Accumulating, Failed, RequestBuilder, RequestDraft
from taxcalc.request.types import ComputationRequest, PayFrequency, SalaryFrequency

__all__ = [
    "Accumulating",
    "ComputationRequest",
    "Failed",
    "PayFrequency",
    "RequestBuilder",
    "RequestDraft",
    "SalaryFrequency",
]
