# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Loan amortization calculations for retrofit financing"""

from __future__ import annotations

from typing import List

import pandas as pd
from pyxirr import pmt

from ..constants.financial import MONTHS_PER_YEAR
from ..core.primitives import Model, PositiveFloat, PositiveIntGt0


class LoanAmortization(Model):
    """
    Fixed-rate, fully amortizing retrofit loan.

    Provides the closed-form figures persisted by the financial stage:
    monthly payment, year-end balances and total interest.

    Attributes:
        principal (PositiveFloat): Amount borrowed
        term_years (PositiveIntGt0): Loan term in years
        annual_rate (PositiveFloat): Nominal annual interest rate (0.06 = 6%)
        start_year (int): Calendar year of origination, used to label balances

    Examples:
        >>> loan = LoanAmortization(principal=500_000.0, term_years=15, annual_rate=0.06)
        >>> round(loan.monthly_payment, 2)
        4219.28
        >>> loan.balance_by_year()[0], loan.balance_by_year()[-1]
        (500000.0, 0.0)
    """

    principal: PositiveFloat
    term_years: PositiveIntGt0
    annual_rate: PositiveFloat
    start_year: int = 2025

    @property
    def monthly_rate(self) -> float:
        return self.annual_rate / MONTHS_PER_YEAR

    @property
    def total_payments(self) -> int:
        return self.term_years * MONTHS_PER_YEAR

    @property
    def monthly_payment(self) -> float:
        """
        Level monthly payment ``P·r(1+r)^n / ((1+r)^n − 1)``.

        Zero principal pays nothing; a zero rate amortizes linearly (``P/n``).
        """
        if self.principal == 0:
            return 0.0
        if self.monthly_rate == 0:
            return self.principal / self.total_payments
        return pmt(self.monthly_rate, self.total_payments, self.principal) * -1

    def remaining_balance(self, years_elapsed: float) -> float:
        """
        Outstanding balance after ``years_elapsed`` years of payments.

        Uses the closed form ``P·((1+r)^n − (1+r)^m) / ((1+r)^n − 1)`` with
        ``m`` payments made. Equals the principal at 0 and zero at or after
        the end of the term.
        """
        if years_elapsed <= 0:
            return float(self.principal)
        if years_elapsed >= self.term_years or self.principal == 0:
            return 0.0
        if self.monthly_rate == 0:
            return self.principal * (1 - years_elapsed / self.term_years)
        growth = 1 + self.monthly_rate
        n = self.total_payments
        m = years_elapsed * MONTHS_PER_YEAR
        return self.principal * (growth**n - growth**m) / (growth**n - 1)

    def balance_by_year(self) -> List[float]:
        """Balances at ``t = 0..term_years``; ``term_years + 1`` entries."""
        return [self.remaining_balance(t) for t in range(self.term_years + 1)]

    def balance_series(self) -> pd.Series:
        """Year-end balances indexed by calendar year."""
        years = range(self.start_year, self.start_year + self.term_years + 1)
        return pd.Series(self.balance_by_year(), index=pd.Index(years, name="Year"), name="Balance")

    @property
    def total_interest(self) -> float:
        """Total interest over the term, ``payment × 12 × term − P``."""
        return self.monthly_payment * self.total_payments - self.principal

