# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Net operating income sources.

Cooperative and condominium buildings have NOI reported by the NYC
Department of Finance through NYC Open Data. Everything else, and any
registry-backed building without a usable entry, falls back to a market-rate
rental estimate.
"""

from __future__ import annotations

from typing import Dict, FrozenSet

from ..core.primitives import Borough

COOPERATIVE_NOI_URL = "https://data.cityofnewyork.us/resource/myei-c3fa.json"
CONDOMINIUM_NOI_URL = "https://data.cityofnewyork.us/resource/9ck6-2jew.json"
NOI_FIELD = "net_operating_income"
DEFAULT_REQUEST_TIMEOUT = 30  # seconds

COOPERATIVE_BUILDING_CLASSES: FrozenSet[str] = frozenset(f"C{i}" for i in range(10))
CONDOMINIUM_BUILDING_CLASSES: FrozenSet[str] = frozenset(
    ["R4", "R5", "R6A", "R6B", "R7A", "R7B", "R8A", "R8B", "R9A", "R9B", "RM", "RR"]
    + [f"D{i}" for i in range(4, 10)]
)

# Market-rate rental fallback: monthly rent per unit by borough
MONTHLY_RENT_PER_UNIT: Dict[Borough, float] = {
    Borough.MANHATTAN: 2498.0,
    Borough.BRONX: 1224.0,
    Borough.BROOKLYN: 1640.0,
    Borough.QUEENS: 1603.0,
    Borough.STATEN_ISLAND: 1166.0,
}

# Rents are scaled by building age relative to the citywide average
AGE_MULTIPLIER_CUTOFF_YEAR = 1974
AGE_MULTIPLIER_PRE_CUTOFF = 1587 / 1769
AGE_MULTIPLIER_POST_CUTOFF = 2552 / 1769

SUPPLEMENTAL_INCOME_MULTIPLIER = 1.108
NOI_MARGIN = 0.45
