# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Equivalent full-load heating hours (EFLH).

EFLH is a proxy for a building's heating demand. It is looked up from a
2x4 table keyed by height (low-rise up to 6 floors, high-rise above) and
construction era.
"""

from __future__ import annotations

from typing import Dict

from ..core.primitives import BuildingScale, ConstructionEra

LOW_RISE_MAX_FLOORS = 6
PRE_1940_MAX_YEAR = 1939
ERA_1940_1978_MAX_YEAR = 1978
ERA_1979_2006_MAX_YEAR = 2006

EFLH_TABLE: Dict[BuildingScale, Dict[ConstructionEra, int]] = {
    BuildingScale.LOW_RISE: {
        ConstructionEra.PRE_1940: 974,
        ConstructionEra.ERA_1940_1978: 738,
        ConstructionEra.ERA_1979_2006: 705,
        ConstructionEra.POST_2006: 491,
    },
    BuildingScale.HIGH_RISE: {
        ConstructionEra.PRE_1940: 987,
        ConstructionEra.ERA_1940_1978: 513,
        ConstructionEra.ERA_1979_2006: 385,
        ConstructionEra.POST_2006: 214,
    },
}


def building_scale(floors: int) -> BuildingScale:
    return BuildingScale.LOW_RISE if floors <= LOW_RISE_MAX_FLOORS else BuildingScale.HIGH_RISE


def construction_era(year_built: int) -> ConstructionEra:
    if year_built <= PRE_1940_MAX_YEAR:
        return ConstructionEra.PRE_1940
    if year_built <= ERA_1940_1978_MAX_YEAR:
        return ConstructionEra.ERA_1940_1978
    if year_built <= ERA_1979_2006_MAX_YEAR:
        return ConstructionEra.ERA_1979_2006
    return ConstructionEra.POST_2006


def get_eflh(year_built: int, floors: int) -> int:
    """
    Look up equivalent full-load heating hours.

    Args:
        year_built: Construction year
        floors: Number of floors above grade

    Returns:
        EFLH in hours per year

    Example:
        >>> get_eflh(1925, 5)
        974
        >>> get_eflh(1985, 12)
        385
    """
    return EFLH_TABLE[building_scale(floors)][construction_era(year_built)]
