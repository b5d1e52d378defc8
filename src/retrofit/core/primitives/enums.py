# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum


class StageName(str, Enum):
    """
    Names of the six calculation stages.

    Declaration order is the tie-break used when the registry derives the
    execution order from the dependency graph.
    """

    UNIT_BREAKDOWN = "unit-breakdown"
    ENERGY = "energy"
    EMISSIONS_COMPLIANCE = "emissions-compliance"
    FINANCIAL = "financial"
    NOI = "noi"
    PROPERTY_VALUE = "property-value"


class CompliancePeriod(str, Enum):
    """LL97 compliance periods, each with its own emissions limits."""

    P2024_2029 = "2024_to_2029"
    P2030_2034 = "2030_to_2034"
    P2035_2039 = "2035_to_2039"
    P2040_2049 = "2040_to_2049"

    @property
    def first_year(self) -> int:
        return int(self.value.split("_")[0])

    @property
    def last_year(self) -> int:
        return int(self.value.split("_")[-1])


class FeeWindow(str, Enum):
    """
    Fee windows used for adjusted penalties and fee avoidance.

    The 2024-2029 compliance period is split at 2027 because the beneficial
    electrification credit coefficient changes mid-period.
    """

    BEFORE_2027 = "before_2027"
    W2027_2029 = "2027_to_2029"
    W2030_2034 = "2030_to_2034"
    W2035_2039 = "2035_to_2039"
    W2040_2049 = "2040_to_2049"

    @property
    def period(self) -> CompliancePeriod:
        """Compliance period containing this window."""
        if self in (FeeWindow.BEFORE_2027, FeeWindow.W2027_2029):
            return CompliancePeriod.P2024_2029
        return CompliancePeriod(self.value)


class Borough(str, Enum):
    """NYC boroughs, keyed by the two-letter PLUTO code."""

    MANHATTAN = "MN"
    BRONX = "BX"
    BROOKLYN = "BK"
    QUEENS = "QN"
    STATEN_ISLAND = "SI"


class BuildingScale(str, Enum):
    """Height category used by the EFLH lookup."""

    LOW_RISE = "low_rise"  # 6 floors or fewer
    HIGH_RISE = "high_rise"


class ConstructionEra(str, Enum):
    """Construction-era buckets used by the EFLH lookup."""

    PRE_1940 = "pre_1940"
    ERA_1940_1978 = "1940_to_1978"
    ERA_1979_2006 = "1979_to_2006"
    POST_2006 = "post_2006"


class EmissionsLimitCategory(str, Enum):
    """Building-class derived category used when no use breakdown exists."""

    RESIDENTIAL = "residential"
    WALK_UP = "walk_up"
    OTHER = "other"


class NOISource(str, Enum):
    """Where a baseline NOI figure came from."""

    COOPERATIVE = "cooperative"
    CONDOMINIUM = "condominium"
    MARKET_RATE = "market-rate"
    OVERRIDE = "override"


class ValuationBasis(str, Enum):
    """Reference year used for the headline property-value figures."""

    FIRST_YEAR = "first_year"  # First year of the analysis window
    WORST_CASE = "worst_case"  # Year with the lowest no-upgrade NOI
