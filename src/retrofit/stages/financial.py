# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Financial stage - fee avoidance, payback and retrofit loan

FEE AVOIDANCE:
    avoidance[window] = current LL97 fee[window's period] − adjusted fee[window]

CUMULATIVE SAVINGS (analysis start year .. end year):
    zero before ``savings_start_year``; afterwards each year accrues
    annual energy savings + fee avoidance for that year's window, with fee
    avoidance only counted from ``fees_assessed_year``.

SIMPLE PAYBACK:
    first year whose cumulative savings cover the capital cost, or
    ``PAYBACK_NOT_ACHIEVED``. A zero-cost retrofit pays back immediately.

LOAN:
    fixed-rate amortization of the retrofit cost (or an explicit principal);
    see ``retrofit.debt.LoanAmortization``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from ..constants import financial as C
from ..constants.ll97 import fee_window_for_year
from ..core.primitives import (
    AnalysisSettings,
    FeeWindow,
    StageName,
    ValidationIssue,
    ValidationReport,
)
from ..core.record import CalculationRecord, YearValue
from ..debt import LoanAmortization
from ..utils.rounding import round2
from .base import CalculationService, StageInput, StageOutput, check_range, require

logger = logging.getLogger(__name__)

CURRENT_FEE_FIELDS = [
    "current_ll97_fee_2024_to_2029",
    "current_ll97_fee_2030_to_2034",
    "current_ll97_fee_2035_to_2039",
    "current_ll97_fee_2040_to_2049",
]
ADJUSTED_FEE_FIELDS = [f"adjusted_ll97_fee_{window.value}" for window in FeeWindow]


class FinancialInput(StageInput):
    total_retrofit_cost: Optional[float] = None
    annual_energy_savings: Optional[float] = None

    current_ll97_fee_2024_to_2029: Optional[float] = None
    current_ll97_fee_2030_to_2034: Optional[float] = None
    current_ll97_fee_2035_to_2039: Optional[float] = None
    current_ll97_fee_2040_to_2049: Optional[float] = None

    adjusted_ll97_fee_before_2027: Optional[float] = None
    adjusted_ll97_fee_2027_to_2029: Optional[float] = None
    adjusted_ll97_fee_2030_to_2034: Optional[float] = None
    adjusted_ll97_fee_2035_to_2039: Optional[float] = None
    adjusted_ll97_fee_2040_to_2049: Optional[float] = None

    loan_term_years: int = C.DEFAULT_LOAN_TERM_YEARS
    annual_interest_rate: float = C.DEFAULT_ANNUAL_INTEREST_RATE
    loan_principal: Optional[float] = None  # Defaults to the retrofit cost

    def current_fee(self, window: FeeWindow) -> float:
        return getattr(self, f"current_ll97_fee_{window.period.value}")

    def adjusted_fee(self, window: FeeWindow) -> float:
        return getattr(self, f"adjusted_ll97_fee_{window.value}")


class FinancialOutput(StageOutput):
    annual_ll97_fee_avoidance_before_2027: float
    annual_ll97_fee_avoidance_2027_to_2029: float
    annual_ll97_fee_avoidance_2030_to_2034: float
    annual_ll97_fee_avoidance_2035_to_2039: float
    annual_ll97_fee_avoidance_2040_to_2049: float

    simple_payback_year: int
    cumulative_savings_by_year: List[YearValue]

    loan_balance_by_year: List[YearValue]
    monthly_payment: float
    total_interest_paid: float

    average_annual_savings: float
    total_savings_over_analysis_period: float
    net_present_value: float
    return_on_investment: float

    # Parameters, persisted so cascaded recomputation keeps earlier overrides
    loan_term_years: int
    annual_interest_rate: float
    loan_principal: Optional[float] = None


def fee_avoidance(data: FinancialInput) -> Dict[FeeWindow, float]:
    """Annual LL97 fee avoided by the retrofit, per fee window."""
    return {window: round2(data.current_fee(window) - data.adjusted_fee(window)) for window in FeeWindow}


def annual_savings_series(
    annual_energy_savings: float,
    avoidance: Dict[FeeWindow, float],
    analysis: AnalysisSettings,
) -> pd.Series:
    """Savings accrued in each year of the analysis window."""
    years = pd.Index(analysis.years, name="Year")
    savings = pd.Series(0.0, index=years, name="Savings")
    for year in years:
        if year < analysis.savings_start_year:
            continue
        amount = annual_energy_savings
        if year >= analysis.fees_assessed_year:
            amount += avoidance[fee_window_for_year(year)]
        savings.loc[year] = amount
    return savings


def payback_year(cumulative: pd.Series, cost: float) -> int:
    """First year whose cumulative savings reach ``cost``."""
    reached = cumulative[cumulative >= cost]
    if reached.empty:
        return C.PAYBACK_NOT_ACHIEVED
    return int(reached.index[0])


def calculate_financial(data: FinancialInput, analysis: AnalysisSettings) -> FinancialOutput:
    """
    Compute fee avoidance, payback and loan figures. ``data`` must be validated.

    ``average_annual_savings`` spreads total savings over the years from
    ``savings_start_year`` onward. Earlier years of the analysis window
    (the upgrade years, with no savings) are not counted, so the average
    is not diluted by the length of the construction period.
    """
    avoidance = fee_avoidance(data)
    cost = data.total_retrofit_cost

    savings = annual_savings_series(data.annual_energy_savings, avoidance, analysis)
    cumulative = savings.cumsum()
    payback = payback_year(cumulative, cost)

    principal = data.loan_principal if data.loan_principal is not None else cost
    loan = LoanAmortization(
        principal=float(principal),
        term_years=int(data.loan_term_years),
        annual_rate=float(data.annual_interest_rate),
        start_year=analysis.loan_start_year,
    )
    balances = loan.balance_series()

    total_savings = float(cumulative.iloc[-1]) if not cumulative.empty else 0.0
    savings_years = int((savings.index >= analysis.savings_start_year).sum())
    average = total_savings / savings_years if savings_years else 0.0
    roi = (total_savings - cost) / cost * 100 if cost > 0 else 0.0

    logger.debug(
        f"Financial: cost={cost:,.2f} total_savings={total_savings:,.2f} payback={payback} "
        f"payment={loan.monthly_payment:,.2f}"
    )

    return FinancialOutput(
        annual_ll97_fee_avoidance_before_2027=avoidance[FeeWindow.BEFORE_2027],
        annual_ll97_fee_avoidance_2027_to_2029=avoidance[FeeWindow.W2027_2029],
        annual_ll97_fee_avoidance_2030_to_2034=avoidance[FeeWindow.W2030_2034],
        annual_ll97_fee_avoidance_2035_to_2039=avoidance[FeeWindow.W2035_2039],
        annual_ll97_fee_avoidance_2040_to_2049=avoidance[FeeWindow.W2040_2049],
        simple_payback_year=payback,
        cumulative_savings_by_year=[
            YearValue(year=int(year), value=round2(value)) for year, value in cumulative.items()
        ],
        loan_balance_by_year=[
            YearValue(year=int(year), value=round2(value)) for year, value in balances.items()
        ],
        monthly_payment=round2(loan.monthly_payment),
        total_interest_paid=round2(loan.total_interest),
        average_annual_savings=round2(average),
        total_savings_over_analysis_period=round2(total_savings),
        net_present_value=round2(total_savings - cost),
        return_on_investment=round2(roi),
        loan_term_years=int(data.loan_term_years),
        annual_interest_rate=float(data.annual_interest_rate),
        loan_principal=data.loan_principal,
    )


class FinancialCalculationService(CalculationService[FinancialInput, FinancialOutput]):
    name = StageName.FINANCIAL
    version = "1.0.0"
    dependencies = (StageName.ENERGY, StageName.EMISSIONS_COMPLIANCE)
    input_model = FinancialInput
    output_model = FinancialOutput

    def read_record(self, record: CalculationRecord) -> Dict[str, Any]:
        fields = ["total_retrofit_cost", "annual_energy_savings"] + CURRENT_FEE_FIELDS + ADJUSTED_FEE_FIELDS
        values = {field: getattr(record, field) for field in fields}
        for field in ("loan_term_years", "annual_interest_rate", "loan_principal"):
            if getattr(record, field) is not None:
                values[field] = getattr(record, field)
        return values

    def validate(self, data: FinancialInput) -> ValidationReport:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []

        if require(errors, "total_retrofit_cost", data.total_retrofit_cost):
            check_range(errors, "total_retrofit_cost", data.total_retrofit_cost, ge=0)
        require(errors, "annual_energy_savings", data.annual_energy_savings)
        for field in CURRENT_FEE_FIELDS + ADJUSTED_FEE_FIELDS:
            require(errors, field, getattr(data, field), "is required; run the emissions-compliance stage first")

        check_range(errors, "loan_term_years", data.loan_term_years, ge=1)
        check_range(errors, "annual_interest_rate", data.annual_interest_rate, ge=0)
        check_range(errors, "loan_principal", data.loan_principal, ge=0)

        if data.loan_term_years > C.MAX_REASONABLE_LOAN_TERM_YEARS:
            warnings.append(
                ValidationIssue(
                    field="loan_term_years",
                    message=f"loan term of {data.loan_term_years} years is unusually long",
                )
            )
        if data.annual_interest_rate > C.MAX_REASONABLE_INTEREST_RATE:
            warnings.append(
                ValidationIssue(
                    field="annual_interest_rate",
                    message=f"interest rate of {data.annual_interest_rate:.1%} is unusually high",
                )
            )
        return ValidationReport.from_issues(errors, warnings)

    def compute(self, data: FinancialInput) -> FinancialOutput:
        return calculate_financial(data, self.settings.analysis)
