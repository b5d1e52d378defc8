# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Constant tables and pure lookups.

Physical, financial and regulatory constants used by the stages, plus the
EFLH table and LL97 period/limit lookups. No state.
"""

from . import eflh, energy, financial, ll97, noi, valuation
from .eflh import get_eflh
from .ll97 import (
    compliance_period_for_year,
    fee_window_for_year,
    get_emissions_limit_category,
    get_use_type_limits,
    load_emissions_limits,
)

__all__ = [
    "eflh",
    "energy",
    "financial",
    "ll97",
    "noi",
    "valuation",
    "compliance_period_for_year",
    "fee_window_for_year",
    "get_eflh",
    "get_emissions_limit_category",
    "get_use_type_limits",
    "load_emissions_limits",
]
