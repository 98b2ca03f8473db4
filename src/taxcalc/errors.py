"""Exception hierarchy for the request-fulfillment pipeline."""

from __future__ import annotations

from enum import Enum


class TaxCalcError(Exception):
    """Base class for all errors raised by taxcalc."""


class ValidationError(TaxCalcError):
    """Raised when builder inputs are invalid (negative amounts, unknown codes)."""


class ParameterError(ValidationError):
    """Raised when an inbound query parameter is missing or unparseable."""


class DiscoveryErrorKind(str, Enum):
    """Ways jurisdiction discovery can fail."""

    LOADER_UNREACHABLE = "loader_unreachable"
    BUNDLE_UNREACHABLE = "bundle_unreachable"
    VERSION_NOT_FOUND = "version_not_found"
    PATTERN_NOT_FOUND = "pattern_not_found"
    MALFORMED_FEDERAL = "malformed_federal"


class DiscoveryError(TaxCalcError):
    """Raised when the jurisdiction bundle cannot be located or parsed."""

    def __init__(self, kind: DiscoveryErrorKind, message: str):
        self.kind = kind
        super().__init__(message)


class TransportError(TaxCalcError):
    """Raised on network failure or a non-success upstream status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class DecodeError(TaxCalcError):
    """Raised when the upstream response body cannot be decoded."""


class RateLimitError(TaxCalcError):
    """Raised when a rate limiter wait is canceled."""
