# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Tests for retrofit loan amortization."""

import pydantic
import pytest

from retrofit.debt import LoanAmortization


class TestLoanAmortization:
    def test_standard_payment(self):
        """Test the level payment on a 500k / 15 year / 6% loan."""
        loan = LoanAmortization(principal=500_000.0, term_years=15, annual_rate=0.06)

        assert loan.monthly_payment == pytest.approx(4219.28, abs=0.01)
        assert loan.total_interest == pytest.approx(4219.28414 * 180 - 500_000, abs=1.0)

    def test_balance_by_year(self):
        loan = LoanAmortization(principal=500_000.0, term_years=15, annual_rate=0.06)
        balances = loan.balance_by_year()

        assert len(balances) == 16
        assert balances[0] == 500_000.0
        assert balances[-1] == 0.0
        assert all(later < earlier for earlier, later in zip(balances, balances[1:]))

    def test_balance_series_labels(self):
        loan = LoanAmortization(principal=100_000.0, term_years=3, annual_rate=0.05, start_year=2025)
        series = loan.balance_series()

        assert list(series.index) == [2025, 2026, 2027, 2028]
        assert series.index.name == "Year"

    def test_zero_rate(self):
        """Test a zero rate amortizes linearly."""
        loan = LoanAmortization(principal=120_000.0, term_years=10, annual_rate=0.0)

        assert loan.monthly_payment == pytest.approx(1000.0)
        assert loan.total_interest == pytest.approx(0.0)
        assert loan.remaining_balance(5) == pytest.approx(60_000.0)

    def test_zero_principal(self):
        loan = LoanAmortization(principal=0.0, term_years=15, annual_rate=0.06)

        assert loan.monthly_payment == 0.0
        assert loan.total_interest == 0.0
        assert loan.balance_by_year() == [0.0] * 16

    @pytest.mark.parametrize("term_years", [0, -5])
    def test_invalid_term(self, term_years):
        """Test a loan needs at least one year of payments."""
        with pytest.raises(pydantic.ValidationError):
            LoanAmortization(principal=1000.0, term_years=term_years, annual_rate=0.05)

    def test_single_year_term(self):
        loan = LoanAmortization(principal=1200.0, term_years=1, annual_rate=0.0)

        assert loan.monthly_payment == pytest.approx(100.0)
        assert loan.balance_by_year() == [1200.0, 0.0]
