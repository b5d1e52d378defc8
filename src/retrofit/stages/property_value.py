# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Property value stage - direct capitalization of the NOI projections

    value(year) = NOI(year) / cap rate

for both the no-upgrade and with-upgrade series. The headline figures are
taken at a single reference year:

- ``worst_case``: the year with the lowest no-upgrade NOI (earliest year on
  ties), i.e. the year LL97 penalties bite hardest
- ``first_year``: the first year of the analysis window
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from ..constants import valuation as C
from ..core.primitives import StageName, ValidationIssue, ValidationReport, ValuationBasis
from ..core.record import CalculationRecord, YearValue
from ..utils.rounding import round2
from ..valuation import DirectCapValuation
from .base import CalculationService, StageInput, StageOutput, check_range

logger = logging.getLogger(__name__)


class PropertyValueInput(StageInput):
    cap_rate: float = C.DEFAULT_CAP_RATE
    valuation_basis: ValuationBasis = C.DEFAULT_VALUATION_BASIS
    noi_by_year_no_upgrade: Optional[List[YearValue]] = None
    noi_by_year_with_upgrade: Optional[List[YearValue]] = None


class PropertyValueOutput(StageOutput):
    cap_rate: float
    valuation_basis: ValuationBasis
    property_value_reference_year: int
    property_value_no_upgrade: float
    property_value_with_upgrade: float
    net_property_value_gain: float
    property_value_by_year_no_upgrade: List[YearValue]
    property_value_by_year_with_upgrade: List[YearValue]


def to_series(points: Iterable[YearValue], name: str = "NOI") -> pd.Series:
    """Year-indexed series from a list of ``YearValue`` points."""
    points = list(points)
    return pd.Series(
        [point.value for point in points],
        index=pd.Index([point.year for point in points], name="Year"),
        name=name,
        dtype=float,
    )


def reference_year(noi_no_upgrade: pd.Series, basis: ValuationBasis) -> int:
    if basis is ValuationBasis.FIRST_YEAR:
        return int(noi_no_upgrade.index[0])
    # idxmin returns the first occurrence of the minimum
    return int(noi_no_upgrade.idxmin())


def calculate_property_value(data: PropertyValueInput) -> PropertyValueOutput:
    """Capitalize both NOI series. ``data`` must be validated."""
    valuation = DirectCapValuation(cap_rate=data.cap_rate)
    noi_no_upgrade = to_series(data.noi_by_year_no_upgrade)
    noi_with_upgrade = to_series(data.noi_by_year_with_upgrade)

    values_no_upgrade = valuation.capitalize(noi_no_upgrade)
    values_with_upgrade = valuation.capitalize(noi_with_upgrade)

    year = reference_year(noi_no_upgrade, data.valuation_basis)
    value_no_upgrade = round2(values_no_upgrade.loc[year])
    value_with_upgrade = round2(values_with_upgrade.loc[year])

    logger.debug(
        f"Property value ({data.valuation_basis.value}, {year}): "
        f"{value_no_upgrade:,.2f} -> {value_with_upgrade:,.2f} at cap rate {data.cap_rate:.2%}"
    )

    return PropertyValueOutput(
        cap_rate=data.cap_rate,
        valuation_basis=data.valuation_basis,
        property_value_reference_year=year,
        property_value_no_upgrade=value_no_upgrade,
        property_value_with_upgrade=value_with_upgrade,
        net_property_value_gain=round2(value_with_upgrade - value_no_upgrade),
        property_value_by_year_no_upgrade=[
            YearValue(year=int(y), value=round2(v)) for y, v in values_no_upgrade.items()
        ],
        property_value_by_year_with_upgrade=[
            YearValue(year=int(y), value=round2(v)) for y, v in values_with_upgrade.items()
        ],
    )


def cap_rate_sensitivity(
    noi_by_year: List[YearValue], cap_rates: Iterable[float]
) -> pd.DataFrame:
    """
    Property value per year under several cap rates.

    Returns:
        DataFrame indexed by year with one column per cap rate
    """
    return DirectCapValuation.sensitivity(to_series(noi_by_year), cap_rates)


class PropertyValueCalculationService(CalculationService[PropertyValueInput, PropertyValueOutput]):
    name = StageName.PROPERTY_VALUE
    version = "1.0.0"
    dependencies = (StageName.NOI,)
    input_model = PropertyValueInput
    output_model = PropertyValueOutput

    def read_record(self, record: CalculationRecord) -> Dict[str, Any]:
        values: Dict[str, Any] = {
            "noi_by_year_no_upgrade": record.noi_by_year_no_upgrade,
            "noi_by_year_with_upgrade": record.noi_by_year_with_upgrade,
        }
        if record.cap_rate is not None:
            values["cap_rate"] = record.cap_rate
        if record.valuation_basis is not None:
            values["valuation_basis"] = record.valuation_basis
        return values

    def validate(self, data: PropertyValueInput) -> ValidationReport:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []

        check_range(errors, "cap_rate", data.cap_rate, gt=0)
        if data.cap_rate > C.MAX_REASONABLE_CAP_RATE:
            warnings.append(
                ValidationIssue(field="cap_rate", message=f"cap rate of {data.cap_rate:.1%} is unusually high")
            )

        for field in ("noi_by_year_no_upgrade", "noi_by_year_with_upgrade"):
            if not getattr(data, field):
                errors.append(ValidationIssue(field=field, message="is required; run the noi stage first"))

        if data.noi_by_year_no_upgrade and data.noi_by_year_with_upgrade:
            years_no = [point.year for point in data.noi_by_year_no_upgrade]
            years_with = [point.year for point in data.noi_by_year_with_upgrade]
            if years_no != years_with:
                errors.append(
                    ValidationIssue(
                        field="noi_by_year_with_upgrade",
                        message="must cover the same years as noi_by_year_no_upgrade",
                    )
                )

        return ValidationReport.from_issues(errors, warnings)

    def compute(self, data: PropertyValueInput) -> PropertyValueOutput:
        return calculate_property_value(data)
