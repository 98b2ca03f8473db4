"""Jurisdiction discovery by scraping the calculator's script bundles.

There is no published listing of jurisdiction identifiers. The public
calculator ships them inside a versioned JavaScript bundle, so discovery is a
two-step scrape:

1. Fetch ``loader.js`` and pull the embedded version map out of its
   ``JSON.parse('...')`` call; the GA entry for ``pcc`` names the bundle.
2. Fetch that bundle and extract every ``info = {shortName, longName,
   jurisdictionID}`` state descriptor plus the ``FEDERAL_JURISDICTION``
   object literal.

Fetching sits behind :class:`BundleSource` so the parser can be driven by
fixtures in tests. Upstream format drift surfaces as :class:`DiscoveryError`.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Protocol

import httpx
from pydantic import ValidationError as PydanticValidationError

from taxcalc.errors import DiscoveryError, DiscoveryErrorKind
from taxcalc.jurisdictions.types import Jurisdiction

logger = logging.getLogger(__name__)

PWC_BASE_URL = "https://pwc.adp.com"
LOADER_PATH = "/pwc/dist/loader.js"
BUNDLE_PATH_TEMPLATE = "/pwc/dist/pcc/{version}/esm/pwc-dynamic-control-generator_20.entry.js"

# Sub-component whose GA version selects the bundle.
BUNDLE_COMPONENT = "pcc"

LOADER_VERSION_RE = re.compile(r"const [A-Za-z]=JSON\.parse\('(.+)'\)")
STATE_JURISDICTION_RE = re.compile(
    r"info = \{\s*shortName: '(.*?)',\s*longName: '(.*?)',\s*jurisdictionID: '(.*?)'\s*\};"
)
FEDERAL_JURISDICTION_RE = re.compile(r"const FEDERAL_JURISDICTION = (\{[\S\s]*?\});")
UNQUOTED_KEY_RE = re.compile(r"\s*([A-Za-z]+):")


class BundleSource(Protocol):
    """Fetches the raw loader script and versioned bundle text."""

    async def fetch_loader(self) -> str:
        """Return the loader script.

        Raises:
            DiscoveryError: LOADER_UNREACHABLE if it cannot be fetched.
        """
        ...

    async def fetch_bundle(self, version: str) -> str:
        """Return the bundle for ``version``.

        Raises:
            DiscoveryError: BUNDLE_UNREACHABLE if it cannot be fetched.
        """
        ...


class HttpBundleSource:
    """BundleSource backed by an httpx client."""

    def __init__(self, client: httpx.AsyncClient, base_url: str = PWC_BASE_URL):
        self.client = client
        self.base_url = base_url.rstrip("/")

    async def fetch_loader(self) -> str:
        return await self._get(self.base_url + LOADER_PATH, DiscoveryErrorKind.LOADER_UNREACHABLE, "loader")

    async def fetch_bundle(self, version: str) -> str:
        url = self.base_url + BUNDLE_PATH_TEMPLATE.format(version=version)
        return await self._get(url, DiscoveryErrorKind.BUNDLE_UNREACHABLE, "bundle")

    async def _get(self, url: str, kind: DiscoveryErrorKind, what: str) -> str:
        logger.debug("Fetching %s from %s", what, url)
        try:
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            raise DiscoveryError(kind, f"failed to get {what}: {e}") from e

        if response.status_code != httpx.codes.OK:
            raise DiscoveryError(
                kind,
                f"status was not OK getting {what}: {response.status_code} {response.reason_phrase}",
            )
        return response.text


def parse_bundle_version(loader: str, component: str = BUNDLE_COMPONENT) -> str:
    """Extract the GA version of ``component`` from the loader script."""
    match = LOADER_VERSION_RE.search(loader)
    if match is None:
        raise DiscoveryError(DiscoveryErrorKind.VERSION_NOT_FOUND, "could not find version in loader")

    try:
        versions = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        raise DiscoveryError(
            DiscoveryErrorKind.VERSION_NOT_FOUND, f"could not decode version map in loader: {e}"
        ) from e

    general_availability = versions.get("GA") if isinstance(versions, dict) else None
    version = general_availability.get(component) if isinstance(general_availability, dict) else None
    if not version:
        raise DiscoveryError(
            DiscoveryErrorKind.VERSION_NOT_FOUND, f"could not find {component} version in loader"
        )
    return version


def parse_state_jurisdictions(bundle: str) -> list[Jurisdiction]:
    """Extract every state descriptor from the bundle."""
    matches = STATE_JURISDICTION_RE.findall(bundle)
    if not matches:
        raise DiscoveryError(
            DiscoveryErrorKind.PATTERN_NOT_FOUND, "could not find state jurisdictions in bundle"
        )
    return [
        Jurisdiction.state(short_name, long_name, jurisdiction_id)
        for short_name, long_name, jurisdiction_id in matches
    ]


def repair_object_literal(literal: str) -> str:
    """Turn a JS object literal with bare keys and single quotes into JSON."""
    quoted = UNQUOTED_KEY_RE.sub(r'"\1":', literal)
    return quoted.replace("'", '"')


def parse_federal_jurisdiction(bundle: str) -> Jurisdiction:
    """Extract the federal jurisdiction object literal from the bundle."""
    match = FEDERAL_JURISDICTION_RE.search(bundle)
    if match is None:
        raise DiscoveryError(
            DiscoveryErrorKind.PATTERN_NOT_FOUND, "could not find federal jurisdiction in bundle"
        )

    try:
        return Jurisdiction.model_validate_json(repair_object_literal(match.group(1)))
    except PydanticValidationError as e:
        raise DiscoveryError(
            DiscoveryErrorKind.MALFORMED_FEDERAL, f"malformed federal jurisdiction: {e}"
        ) from e


async def discover_jurisdictions(source: BundleSource) -> list[Jurisdiction]:
    """Run both discovery stages; returns states followed by federal."""
    loader = await source.fetch_loader()
    version = parse_bundle_version(loader)
    logger.debug("Found %s version %s in loader", BUNDLE_COMPONENT, version)

    bundle = await source.fetch_bundle(version)
    jurisdictions = parse_state_jurisdictions(bundle)
    jurisdictions.append(parse_federal_jurisdiction(bundle))

    logger.info("Discovered %d jurisdictions from bundle %s", len(jurisdictions), version)
    return jurisdictions
