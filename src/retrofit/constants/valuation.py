# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Direct capitalization defaults for the property-value stage."""

from ..core.primitives import ValuationBasis

DEFAULT_CAP_RATE = 0.04
MAX_REASONABLE_CAP_RATE = 0.20
DEFAULT_VALUATION_BASIS = ValuationBasis.WORST_CASE
