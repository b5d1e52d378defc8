# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
NYC Local Law 97 constants and lookups.

LL97 caps annual building emissions per square foot by use type and
compliance period. Emissions above the cap are fined per metric ton.
Heating electrification projects earn a time-limited beneficial
electrification (BE) credit.

Emissions limits are loaded from a packaged JSON table keyed by Portfolio
Manager (ESPM) property type. When a building has no per-use breakdown, a
single building-class derived estimate is used instead.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from ..core.errors import ComputationError
from ..core.primitives import CompliancePeriod, EmissionsLimitCategory, FeeWindow

logger = logging.getLogger(__name__)

FEE_PER_TON_CO2E = 268.0  # $/tCO2e above the limit

# Emissions factors
EF_NATURAL_GAS = 0.05311  # tCO2e/MMBtu
GRID_FACTOR_BY_PERIOD: Dict[CompliancePeriod, float] = {  # tCO2e/kWh
    CompliancePeriod.P2024_2029: 0.000288962,
    CompliancePeriod.P2030_2034: 0.000145,
    CompliancePeriod.P2035_2039: 0.000145,
    CompliancePeriod.P2040_2049: 0.000145,
}

# Beneficial electrification credit coefficient, tCO2e per kWh of heat-pump heating
BE_CREDIT_COEFFICIENT: Dict[FeeWindow, float] = {
    FeeWindow.BEFORE_2027: 0.0013,
    FeeWindow.W2027_2029: 0.00065,
    FeeWindow.W2030_2034: 0.0,
    FeeWindow.W2035_2039: 0.0,
    FeeWindow.W2040_2049: 0.0,
}
BE_CREDIT_CUTOFF_YEAR = 2027  # Coefficient halves from this year

# Fallback limits (tCO2e/sq ft) for a residential building class, used when no
# per-use breakdown exists. Other categories are scaled from these.
FALLBACK_LIMITS_PER_SQFT: Dict[CompliancePeriod, float] = {
    CompliancePeriod.P2024_2029: 0.00892,
    CompliancePeriod.P2030_2034: 0.00453,
    CompliancePeriod.P2035_2039: 0.00165234,
    CompliancePeriod.P2040_2049: 0.000581893,
}
FALLBACK_CATEGORY_FACTOR: Dict[EmissionsLimitCategory, float] = {
    EmissionsLimitCategory.RESIDENTIAL: 1.0,
    EmissionsLimitCategory.WALK_UP: 0.8,
    EmissionsLimitCategory.OTHER: 0.9,
}

_LIMITS_RESOURCE = "ll97_emissions_limits.json"

EmissionsLimits = Dict[str, Dict[CompliancePeriod, float]]


def compliance_period_for_year(year: int) -> CompliancePeriod:
    """
    Compliance period whose limits apply in ``year``.

    Years before 2024 use the first period and years after 2049 the last one.
    """
    if year <= CompliancePeriod.P2024_2029.last_year:
        return CompliancePeriod.P2024_2029
    if year <= CompliancePeriod.P2030_2034.last_year:
        return CompliancePeriod.P2030_2034
    if year <= CompliancePeriod.P2035_2039.last_year:
        return CompliancePeriod.P2035_2039
    return CompliancePeriod.P2040_2049


def fee_window_for_year(year: int) -> FeeWindow:
    """Fee window for ``year``; splits 2024-2029 at the BE credit cutoff."""
    if year < BE_CREDIT_CUTOFF_YEAR:
        return FeeWindow.BEFORE_2027
    period = compliance_period_for_year(year)
    if period is CompliancePeriod.P2024_2029:
        return FeeWindow.W2027_2029
    return FeeWindow(period.value)


def get_emissions_limit_category(building_class: Optional[str]) -> EmissionsLimitCategory:
    """
    Map a DOF building class code onto a fallback emissions-limit category.

    Example:
        >>> get_emissions_limit_category("R6")
        <EmissionsLimitCategory.RESIDENTIAL: 'residential'>
    """
    code = (building_class or "").strip().upper()
    if code.startswith("R"):
        return EmissionsLimitCategory.RESIDENTIAL
    if code.startswith("C"):
        return EmissionsLimitCategory.WALK_UP
    return EmissionsLimitCategory.OTHER


def fallback_limits(category: EmissionsLimitCategory) -> Dict[CompliancePeriod, float]:
    """Per-square-foot limits for a building-class category."""
    factor = FALLBACK_CATEGORY_FACTOR[category]
    return {period: limit * factor for period, limit in FALLBACK_LIMITS_PER_SQFT.items()}


def _parse_limits(payload: Mapping) -> EmissionsLimits:
    table = payload.get("limits", payload)
    limits: EmissionsLimits = {}
    for use_type, by_period in table.items():
        try:
            limits[use_type] = {
                period: float(by_period[period.value]) for period in CompliancePeriod
            }
        except KeyError as e:
            raise ValueError(f"Emissions limits for {use_type!r} are missing period {e}") from e
    return limits


@lru_cache(maxsize=1)
def _default_limits() -> EmissionsLimits:
    text = resources.files("retrofit.data").joinpath(_LIMITS_RESOURCE).read_text(encoding="utf-8")
    limits = _parse_limits(json.loads(text))
    logger.debug(f"Loaded emissions limits for {len(limits)} property types")
    return limits


def load_emissions_limits(path: Optional[Union[str, Path]] = None) -> EmissionsLimits:
    """
    Load the per-use-type emissions-limit table.

    Args:
        path: Optional JSON file replacing the packaged table. It must map
            each use type to its four per-period limits, optionally nested
            under a ``"limits"`` key.

    Returns:
        ``{use type: {CompliancePeriod: tCO2e per sq ft}}``
    """
    if path is None:
        return _default_limits()
    with open(path, encoding="utf-8") as fh:
        return _parse_limits(json.load(fh))


def get_use_type_limits(
    use_type: str, limits: Optional[EmissionsLimits] = None
) -> Dict[CompliancePeriod, float]:
    """
    Per-period limits for one use type.

    Tries an exact match first, then a case-insensitive one.

    Raises:
        ComputationError: If the use type has no entry under either match.
            Defaulting silently would understate penalties.
    """
    table = limits if limits is not None else load_emissions_limits()
    if use_type in table:
        return table[use_type]
    folded = use_type.casefold()
    for name, by_period in table.items():
        if name.casefold() == folded:
            return by_period
    raise ComputationError(
        f"No LL97 emissions limit is defined for property use type {use_type!r}",
        {"field": "property_use_areas", "use_type": use_type},
    )
