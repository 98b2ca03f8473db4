"""Process-wide directory of tax jurisdictions, populated lazily."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from taxcalc.errors import DiscoveryError, DiscoveryErrorKind, ValidationError
from taxcalc.jurisdictions.scraper import BundleSource, discover_jurisdictions
from taxcalc.jurisdictions.types import FALLBACK_FEDERAL_JURISDICTION, FEDERAL_CODE, Jurisdiction

logger = logging.getLogger(__name__)


class JurisdictionDirectory:
    """Maps jurisdiction codes to jurisdictions discovered from a BundleSource.

    Discovery runs at most once per directory. Concurrent first callers share
    a single fetch; all of them see the same populated map or the same
    DiscoveryError. A failed discovery is never retried.

    Usage:
        directory = JurisdictionDirectory(HttpBundleSource(client))
        california = await directory.get("CA")
        federal = directory.get_federal()  # never blocks
    """

    def __init__(self, source: BundleSource | None = None):
        self._source = source
        self._lock = asyncio.Lock()
        self._by_code: Mapping[str, Jurisdiction] | None = None
        self._jurisdictions: list[Jurisdiction] = []
        self._failure: DiscoveryError | None = None

    @classmethod
    def from_jurisdictions(cls, jurisdictions: Iterable[Jurisdiction]) -> JurisdictionDirectory:
        """Create an already-populated directory that never fetches."""
        directory = cls()
        directory._populate(list(jurisdictions))
        return directory

    @property
    def is_populated(self) -> bool:
        return self._by_code is not None

    def __len__(self) -> int:
        return len(self._by_code) if self._by_code is not None else 0

    def __contains__(self, code: object) -> bool:
        return self._by_code is not None and code in self._by_code

    async def load(self) -> list[Jurisdiction]:
        """Populate the directory if needed and return every jurisdiction.

        Raises:
            DiscoveryError: If discovery fails, now or on an earlier attempt.
        """
        await self._discover_once()
        return list(self._jurisdictions)

    async def get(self, code: str) -> Jurisdiction:
        """Look up a jurisdiction by short code, discovering on first use.

        Raises:
            DiscoveryError: If the directory cannot be populated.
            ValidationError: If no jurisdiction has this code.
        """
        by_code = await self._discover_once()
        try:
            return by_code[code]
        except KeyError:
            raise ValidationError(f"no jurisdiction found for code: {code}") from None

    def get_federal(self) -> Jurisdiction:
        """Return the discovered federal jurisdiction, or the fallback."""
        if self._by_code is None:
            return FALLBACK_FEDERAL_JURISDICTION
        return self._by_code.get(FEDERAL_CODE, FALLBACK_FEDERAL_JURISDICTION)

    async def _discover_once(self) -> Mapping[str, Jurisdiction]:
        if self._by_code is not None:
            return self._by_code
        self._raise_if_failed()

        async with self._lock:
            # Another caller may have finished while we waited.
            if self._by_code is not None:
                return self._by_code
            self._raise_if_failed()
            if self._source is None:
                self._failure = DiscoveryError(
                    DiscoveryErrorKind.LOADER_UNREACHABLE, "no bundle source configured"
                )
                raise self._failure

            logger.debug("No jurisdictions loaded, discovering now")
            try:
                jurisdictions = await discover_jurisdictions(self._source)
            except DiscoveryError as e:
                logger.warning("Jurisdiction discovery failed: %s", e)
                self._failure = e
                raise

            return self._populate(jurisdictions)

    def _raise_if_failed(self) -> None:
        failure = self._failure
        if failure is not None:
            # New instance per raise; the stored traceback stays fixed.
            raise DiscoveryError(failure.kind, str(failure)) from failure

    def _populate(self, jurisdictions: list[Jurisdiction]) -> Mapping[str, Jurisdiction]:
        by_code = {jurisdiction.code: jurisdiction for jurisdiction in jurisdictions}
        self._jurisdictions = jurisdictions
        # Published last so readers never observe a partial map.
        self._by_code = MappingProxyType(by_code)
        return self._by_code
