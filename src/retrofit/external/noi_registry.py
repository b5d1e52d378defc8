# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Building NOI sources.

The NOI stage needs a current-year baseline NOI. For cooperative (C0-C9)
and condominium (R4-RR, D4-D9) buildings the NYC Department of Finance
publishes reported NOI through NYC Open Data; ``OpenDataNOIRegistry``
queries it by BBL. Any building the registry cannot answer for falls back to
``market_rate_noi``, a deterministic rental estimate.

An unreachable registry is an error (``NOIRegistryError``), not a fallback:
it fails the stage outright and retries are left to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import requests

from ..constants import noi as noi_constants
from ..core.errors import NOIRegistryError
from ..core.primitives import Borough, Model, NOISource

logger = logging.getLogger(__name__)


class NOIEstimate(Model):
    """Annual building NOI and where it came from."""

    annual_noi: float
    source: NOISource


def registry_source_for_class(building_class: Optional[str]) -> Optional[NOISource]:
    """
    Which registry (if any) reports NOI for a building class.

    Cooperative classes match exactly. Condominium classes match as a
    prefix, so sub-classes such as ``"R4X"`` count as condominiums.
    """
    code = (building_class or "").strip().upper()
    if code in noi_constants.COOPERATIVE_BUILDING_CLASSES:
        return NOISource.COOPERATIVE
    if code.startswith(tuple(noi_constants.CONDOMINIUM_BUILDING_CLASSES)):
        return NOISource.CONDOMINIUM
    return None


def market_rate_noi(borough: Borough, year_built: int, units: int) -> float:
    """
    Market-rate rental NOI estimate.

    ``monthly rent × age multiplier × units × 12 × supplemental × NOI margin``

    Example:
        >>> round(market_rate_noi(Borough.BROOKLYN, 1960, 10), 2)
        88029.14
    """
    if year_built <= noi_constants.AGE_MULTIPLIER_CUTOFF_YEAR:
        age_multiplier = noi_constants.AGE_MULTIPLIER_PRE_CUTOFF
    else:
        age_multiplier = noi_constants.AGE_MULTIPLIER_POST_CUTOFF
    monthly_rent = noi_constants.MONTHLY_RENT_PER_UNIT[Borough(borough)] * age_multiplier
    gross_income = monthly_rent * units * 12 * noi_constants.SUPPLEMENTAL_INCOME_MULTIPLIER
    return gross_income * noi_constants.NOI_MARGIN


class NOIRegistry(Protocol):
    """Lookup of reported NOI keyed by building classification."""

    def lookup(self, bbl: Optional[str], building_class: Optional[str]) -> Optional[NOIEstimate]:
        """Return reported NOI, or None when the registry has no usable entry."""
        ...


class OpenDataNOIRegistry:
    """
    NYC Open Data client for cooperative and condominium NOI.

    Args:
        session: Optional ``requests.Session`` (inject one for connection
            pooling or testing)
        timeout: Request timeout in seconds
        app_token: Optional Socrata application token
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = noi_constants.DEFAULT_REQUEST_TIMEOUT,
        app_token: Optional[str] = None,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.app_token = app_token

    def _url_for(self, source: NOISource) -> str:
        if source is NOISource.COOPERATIVE:
            return noi_constants.COOPERATIVE_NOI_URL
        return noi_constants.CONDOMINIUM_NOI_URL

    def lookup(self, bbl: Optional[str], building_class: Optional[str]) -> Optional[NOIEstimate]:
        source = registry_source_for_class(building_class)
        if source is None or not bbl:
            return None

        url = self._url_for(source)
        headers = {"X-App-Token": self.app_token} if self.app_token else {}
        logger.info(f"Fetching {source.value} NOI for BBL {bbl}")
        try:
            response = self.session.get(
                url, params={"bbl": bbl}, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
            rows = response.json()
        except requests.RequestException as e:
            raise NOIRegistryError(
                f"NOI registry request failed for BBL {bbl}: {e}",
                {"bbl": bbl, "url": url},
            ) from e
        except ValueError as e:
            raise NOIRegistryError(
                f"NOI registry returned invalid JSON for BBL {bbl}",
                {"bbl": bbl, "url": url},
            ) from e

        if not isinstance(rows, list):
            raise NOIRegistryError(
                f"Unexpected NOI registry response for BBL {bbl}", {"bbl": bbl, "url": url}
            )
        if not rows:
            logger.warning(f"No {source.value} NOI data found for BBL {bbl}")
            return None

        noi = _parse_noi(rows[0].get(noi_constants.NOI_FIELD))
        if noi is None:
            logger.warning(
                f"Invalid {source.value} NOI for BBL {bbl}: {rows[0].get(noi_constants.NOI_FIELD)!r}"
            )
            return None
        return NOIEstimate(annual_noi=noi, source=source)


def _parse_noi(raw: Any) -> Optional[float]:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None
