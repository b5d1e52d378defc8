# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Energy constants for the PTAC to PTHP comparison.

Per-unit PTAC figures describe the baseline system (gas heating, electric
cooling). PTHP figures describe the replacement heat pump. All values are
annual.
"""

from __future__ import annotations

# PTAC baseline, per unit
PTAC_THERMS_HEATING_PER_UNIT = 255.0
PTAC_KWH_COOLING_PER_UNIT = 16_000.0
PTAC_MMBTU_HEATING_PER_UNIT = 25.5
PTAC_MMBTU_COOLING_PER_UNIT = 5.459427

# PTHP replacement
PTHP_HEATING_CAPACITY_KBTU = 8.0
DEFAULT_PTHP_COP = 1.51

# Unit conversions
KWH_TO_MMBTU = 0.003412
THERMS_TO_MMBTU = 0.1
KBTU_PER_KW = 3.412

# Retrofit economics, per unit
DEFAULT_PTHP_UNIT_COST = 1_100.0
DEFAULT_PTHP_INSTALLATION_COST = 450.0
DEFAULT_PTHP_CONTINGENCY = 0.10

# Energy prices
DEFAULT_PRICE_KWH = 0.24  # $/kWh
DEFAULT_PRICE_THERM = 1.45  # $/therm

# Validation bounds
MIN_YEAR_BUILT = 1800
MIN_STORIES = 1
MAX_STORIES = 200
MAX_REASONABLE_COP = 10.0
MAX_REASONABLE_PRICE_KWH = 1.0
