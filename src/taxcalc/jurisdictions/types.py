"""Tax jurisdiction types as they appear on the wire."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class JurisdictionLevel(str, Enum):
    """Jurisdiction level codes."""

    FEDERAL = "FEDERAL"
    STATE = "STATE"


class JurisdictionCode(BaseModel):
    """Long name and short code of a jurisdiction, e.g. ("California", "CA")."""

    model_config = ConfigDict(frozen=True)

    name: str
    code: str


class LevelCode(BaseModel):
    """Jurisdiction level wrapper."""

    model_config = ConfigDict(frozen=True)

    code: str


class Jurisdiction(BaseModel):
    """A taxing authority known to the computation engine."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    jurisdiction_id: str = Field(alias="jurisdictionID")
    jurisdiction_code: JurisdictionCode = Field(alias="jurisdictionCode")
    jurisdiction_level_code: LevelCode = Field(alias="jurisdictionLevelCode")

    @property
    def code(self) -> str:
        """Short code, e.g. "US" or "CA"."""
        return self.jurisdiction_code.code

    @property
    def is_federal(self) -> bool:
        return self.code == FEDERAL_CODE

    @classmethod
    def state(cls, short_name: str, long_name: str, jurisdiction_id: str) -> Jurisdiction:
        """Build a state jurisdiction from its scraped descriptor."""
        return cls(
            jurisdiction_id=jurisdiction_id,
            jurisdiction_code=JurisdictionCode(name=long_name, code=short_name),
            jurisdiction_level_code=LevelCode(code=JurisdictionLevel.STATE.value),
        )

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


FEDERAL_CODE = "US"

# Federal jurisdiction as published in bundle version 2024.24.0. Discovery is
# always preferred; this is only used before (or instead of) discovery.
FALLBACK_FEDERAL_JURISDICTION = Jurisdiction(
    jurisdiction_id="dea07e6d-9432-4f65-958b-25f09e18117e",
    jurisdiction_code=JurisdictionCode(name="United States Federal", code=FEDERAL_CODE),
    jurisdiction_level_code=LevelCode(code=JurisdictionLevel.FEDERAL.value),
)
