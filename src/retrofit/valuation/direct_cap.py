# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
DirectCap Valuation - Income Approach

Year-by-year property valuation using the income approach:
Value = NOI / Cap_Rate

The full series is kept (no period aggregation) so the with- and
without-retrofit scenarios can be charted and compared year by year.
"""

from __future__ import annotations

from typing import Iterable

import pandas as pd
from pydantic import Field

from ..core.primitives import Model


class DirectCapValuation(Model):
    """
    Income approach valuation using direct capitalization.

    Property Value = Net Operating Income / Capitalization Rate

    Attributes:
        cap_rate: Capitalization rate as a decimal (0.04 = 4%)

    Example:
        ```python
        valuation = DirectCapValuation(cap_rate=0.04)
        values = valuation.capitalize(noi_series)  # indexed by year
        ```
    """

    cap_rate: float = Field(..., gt=0, description="Capitalization rate (decimal)")

    def value(self, noi: float) -> float:
        """Capitalized value of a single annual NOI figure."""
        return noi / self.cap_rate

    def capitalize(self, noi: pd.Series) -> pd.Series:
        """Apply the cap rate pointwise to an NOI series, preserving its index."""
        return (noi / self.cap_rate).rename("Value")

    @staticmethod
    def sensitivity(noi: pd.Series, cap_rates: Iterable[float]) -> pd.DataFrame:
        """
        Values of an NOI series under several cap rates.

        Returns:
            DataFrame indexed like ``noi`` with one column per cap rate.
        """
        rates = list(cap_rates)
        if any(rate <= 0 for rate in rates):
            raise ValueError("Cap rates must be positive for sensitivity analysis")
        return pd.DataFrame({rate: noi / rate for rate in rates}, index=noi.index)
