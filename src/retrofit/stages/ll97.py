# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Emissions-compliance stage - NYC Local Law 97

For each compliance period (2024-2029, 2030-2034, 2035-2039, 2040-2049):

EMISSIONS BUDGET:
    budget = Σ (area of use type × per-period limit for that use type)
    Uses the LL84 property-use breakdown when available, otherwise a single
    building-class derived estimate over the total floor area. A use type
    with no known limit fails the stage: defaulting it would understate
    penalties.

CURRENT (NO RETROFIT) PENALTY:
    fee = max(0, (baseline emissions − budget) × $268/t)

BENEFICIAL ELECTRIFICATION CREDIT:
    credit = heat-pump heating kWh × coefficient
    (0.0013 before 2027, 0.00065 for 2027-2029, 0 afterwards)

ADJUSTED (RETROFIT) PENALTY:
    adjusted emissions = baseline − gas heating MMBtu × EF_gas
                                  + heat-pump heating kWh × grid factor(period)
    fee = max(0, (adjusted emissions − credit − budget) × $268/t)
    computed for five fee windows since 2024-2029 is split at 2027.

All persisted values are rounded to 2 decimal places.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..constants import ll97 as C
from ..core.errors import ComputationError
from ..core.primitives import (
    CompliancePeriod,
    FeeWindow,
    StageName,
    ValidationIssue,
    ValidationReport,
)
from ..core.record import CalculationRecord
from ..utils.property_use import parse_property_use_breakdown
from ..utils.rounding import round2
from .base import CalculationService, StageInput, StageOutput, check_range, require

logger = logging.getLogger(__name__)

LL84_EMISSIONS_FIELDS = ("total_location_based_ghg", "total_ghg_emissions")
LL84_PROPERTY_USE_FIELD = "list_of_all_property_use"


class LL97Input(StageInput):
    baseline_emissions: Optional[float] = None
    total_square_feet: Optional[float] = None
    building_class: Optional[str] = None
    property_use_areas: Optional[Dict[str, float]] = None
    fee_per_ton: float = C.FEE_PER_TON_CO2E
    annual_building_mmbtu_heating_ptac: Optional[float] = None
    annual_building_kwh_heating_pthp: Optional[float] = None


class LL97Output(StageOutput):
    property_use_areas: Optional[Dict[str, float]] = None
    fee_per_ton: float

    emissions_budget_2024_to_2029: float
    emissions_budget_2030_to_2034: float
    emissions_budget_2035_to_2039: float
    emissions_budget_2040_to_2049: float

    current_ll97_fee_2024_to_2029: float
    current_ll97_fee_2030_to_2034: float
    current_ll97_fee_2035_to_2039: float
    current_ll97_fee_2040_to_2049: float

    be_credit_before_2027: float
    be_credit_2027_to_2029: float

    adjusted_emissions_2024_to_2029: float
    adjusted_emissions_2030_to_2034: float
    adjusted_emissions_2035_to_2039: float
    adjusted_emissions_2040_to_2049: float

    adjusted_ll97_fee_before_2027: float
    adjusted_ll97_fee_2027_to_2029: float
    adjusted_ll97_fee_2030_to_2034: float
    adjusted_ll97_fee_2035_to_2039: float
    adjusted_ll97_fee_2040_to_2049: float

    worst_case_ll97_fee: float
    total_be_credit_available: float
    compliance_status: Dict[str, bool]

    def current_fee(self, period: CompliancePeriod) -> float:
        return getattr(self, f"current_ll97_fee_{period.value}")

    def adjusted_fee(self, window: FeeWindow) -> float:
        return getattr(self, f"adjusted_ll97_fee_{window.value}")


def emissions_budgets(
    *,
    total_square_feet: Optional[float],
    building_class: Optional[str],
    property_use_areas: Optional[Dict[str, float]],
    limits: Optional[C.EmissionsLimits] = None,
) -> Dict[CompliancePeriod, float]:
    """
    Emissions budget (tCO2e/yr) per compliance period.

    Raises:
        ComputationError: If a use type has no limit entry, or no area is
            available at all.
    """
    if property_use_areas:
        budgets = {period: 0.0 for period in CompliancePeriod}
        for use_type, area in property_use_areas.items():
            use_limits = C.get_use_type_limits(use_type, limits)
            for period in CompliancePeriod:
                budgets[period] += area * use_limits[period]
        return budgets

    if not total_square_feet:
        raise ComputationError(
            "Cannot compute an emissions budget without a floor area or property-use breakdown",
            {"field": "total_square_feet"},
        )
    category = C.get_emissions_limit_category(building_class)
    logger.debug(f"No property-use breakdown; using {category.value} fallback limits for {building_class}")
    return {
        period: total_square_feet * limit
        for period, limit in C.fallback_limits(category).items()
    }


def penalty(emissions: float, budget: float, fee_per_ton: float) -> float:
    """LL97 penalty, clamped at zero."""
    return max(0.0, (emissions - budget) * fee_per_ton)


def calculate_ll97(data: LL97Input, limits: Optional[C.EmissionsLimits] = None) -> LL97Output:
    """Compute budgets, current and adjusted penalties. ``data`` must be validated."""
    budgets = {
        period: round2(value)
        for period, value in emissions_budgets(
            total_square_feet=data.total_square_feet,
            building_class=data.building_class,
            property_use_areas=data.property_use_areas,
            limits=limits,
        ).items()
    }
    emissions = data.baseline_emissions
    heating_kwh = data.annual_building_kwh_heating_pthp
    gas_removed = data.annual_building_mmbtu_heating_ptac * C.EF_NATURAL_GAS

    current_fees = {
        period: round2(penalty(emissions, budgets[period], data.fee_per_ton))
        for period in CompliancePeriod
    }
    adjusted_emissions = {
        period: round2(emissions - gas_removed + heating_kwh * C.GRID_FACTOR_BY_PERIOD[period])
        for period in CompliancePeriod
    }
    credits = {window: round2(heating_kwh * C.BE_CREDIT_COEFFICIENT[window]) for window in FeeWindow}
    adjusted_fees = {
        window: round2(
            penalty(
                adjusted_emissions[window.period] - credits[window],
                budgets[window.period],
                data.fee_per_ton,
            )
        )
        for window in FeeWindow
    }

    fields: Dict[str, Any] = {
        "property_use_areas": dict(data.property_use_areas) if data.property_use_areas else None,
        "fee_per_ton": data.fee_per_ton,
        "be_credit_before_2027": credits[FeeWindow.BEFORE_2027],
        "be_credit_2027_to_2029": credits[FeeWindow.W2027_2029],
        "worst_case_ll97_fee": max(current_fees.values()),
        "total_be_credit_available": round2(
            credits[FeeWindow.BEFORE_2027] + credits[FeeWindow.W2027_2029]
        ),
        "compliance_status": {
            period.value: emissions <= budgets[period] for period in CompliancePeriod
        },
    }
    for period in CompliancePeriod:
        fields[f"emissions_budget_{period.value}"] = budgets[period]
        fields[f"current_ll97_fee_{period.value}"] = current_fees[period]
        fields[f"adjusted_emissions_{period.value}"] = adjusted_emissions[period]
    for window in FeeWindow:
        fields[f"adjusted_ll97_fee_{window.value}"] = adjusted_fees[window]

    logger.debug(
        f"LL97: budgets={[budgets[p] for p in CompliancePeriod]} "
        f"current fees={[current_fees[p] for p in CompliancePeriod]}"
    )
    return LL97Output(**fields)


def baseline_emissions_from_record(record: CalculationRecord) -> Optional[float]:
    """Baseline emissions from the record, falling back to raw LL84 fields."""
    if record.baseline_emissions is not None:
        return record.baseline_emissions
    for field in LL84_EMISSIONS_FIELDS:
        raw = record.raw_ll84_data.get(field)
        if raw in (None, ""):
            continue
        try:
            return float(raw)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-numeric LL84 {field} value {raw!r} for {record.id}")
    return None


def property_use_breakdown_from_record(record: CalculationRecord) -> Optional[str]:
    """Property-use string from the record, falling back to the raw LL84 field."""
    if record.property_use_breakdown:
        return record.property_use_breakdown
    raw = record.raw_ll84_data.get(LL84_PROPERTY_USE_FIELD)
    if raw is not None and not isinstance(raw, str):
        logger.warning(f"Ignoring non-text LL84 {LL84_PROPERTY_USE_FIELD} value {raw!r} for {record.id}")
        return None
    return raw


class LL97CalculationService(CalculationService[LL97Input, LL97Output]):
    name = StageName.EMISSIONS_COMPLIANCE
    version = "1.0.0"
    dependencies = (StageName.ENERGY,)
    input_model = LL97Input
    output_model = LL97Output

    def __init__(self, store, settings=None, limits: Optional[C.EmissionsLimits] = None):
        super().__init__(store, settings)
        self.limits = limits

    def read_record(self, record: CalculationRecord) -> Dict[str, Any]:
        areas = record.property_use_areas
        if not areas:
            areas = parse_property_use_breakdown(property_use_breakdown_from_record(record)) or None
        values: Dict[str, Any] = {
            "baseline_emissions": baseline_emissions_from_record(record),
            "total_square_feet": record.total_square_feet,
            "building_class": record.building_class,
            "property_use_areas": areas,
            "annual_building_mmbtu_heating_ptac": record.annual_building_mmbtu_heating_ptac,
            "annual_building_kwh_heating_pthp": record.annual_building_kwh_heating_pthp,
        }
        if record.fee_per_ton is not None:
            values["fee_per_ton"] = record.fee_per_ton
        return values

    def validate(self, data: LL97Input) -> ValidationReport:
        errors: List[ValidationIssue] = []

        if require(errors, "baseline_emissions", data.baseline_emissions):
            check_range(errors, "baseline_emissions", data.baseline_emissions, gt=0)
        if not data.property_use_areas:
            if require(errors, "total_square_feet", data.total_square_feet):
                check_range(errors, "total_square_feet", data.total_square_feet, gt=0)
        else:
            for use_type, area in data.property_use_areas.items():
                if area < 0:
                    errors.append(
                        ValidationIssue(
                            field="property_use_areas",
                            message=f"area for {use_type!r} must not be negative (got {area})",
                        )
                    )
        check_range(errors, "fee_per_ton", data.fee_per_ton, ge=0)
        if require(errors, "annual_building_mmbtu_heating_ptac", data.annual_building_mmbtu_heating_ptac):
            check_range(errors, "annual_building_mmbtu_heating_ptac", data.annual_building_mmbtu_heating_ptac, ge=0)
        if require(errors, "annual_building_kwh_heating_pthp", data.annual_building_kwh_heating_pthp):
            check_range(errors, "annual_building_kwh_heating_pthp", data.annual_building_kwh_heating_pthp, ge=0)

        return ValidationReport.from_issues(errors)

    def compute(self, data: LL97Input) -> LL97Output:
        return calculate_ll97(data, self.limits)
