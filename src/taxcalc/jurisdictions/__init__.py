"""Tax jurisdiction discovery and lookup."""

from taxcalc.jurisdictions.directory import JurisdictionDirectory
from taxcalc.jurisdictions.scraper import BundleSource, HttpBundleSource
from taxcalc.jurisdictions.types import (
    FALLBACK_FEDERAL_JURISDICTION,
    Jurisdiction,
    JurisdictionCode,
    JurisdictionLevel,
    LevelCode,
)

__all__ = [
    "BundleSource",
    "FALLBACK_FEDERAL_JURISDICTION",
    "HttpBundleSource",
    "Jurisdiction",
    "JurisdictionCode",
    "JurisdictionDirectory",
    "JurisdictionLevel",
    "LevelCode",
]
