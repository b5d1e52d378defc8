# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
The calculation record: one building's analysis.

A record is created once when a building is onboarded and is then updated
field-by-field as stages execute. Fields belonging to a stage are only ever
written by that stage's persister; the engine itself only touches the
metadata block (``service_versions``, ``service_calculated_at``,
``overridden_fields``, ``last_calculated_service``).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import Field

from .primitives import Borough, Model, NOISource, ValuationBasis


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class YearValue(Model):
    """One point of a year-indexed series."""

    year: int
    value: float


class UnitMix(Model):
    """Residential unit mix by bedroom count."""

    studio: int = 0
    one_bed: int = 0
    two_bed: int = 0
    three_plus: int = 0

    @property
    def total_units(self) -> int:
        return self.studio + self.one_bed + self.two_bed + self.three_plus


class OverrideEntry(Model):
    """Audit entry for a manually overridden stage input."""

    value: Any
    overridden_at: datetime
    overridden_by: str
    service: str


class BuildingProfile(Model):
    """Identity and raw characteristics supplied when a calculation is created."""

    bbl: Optional[str] = None
    address: Optional[str] = None
    borough: Optional[Borough] = None
    year_built: Optional[int] = None
    stories: Optional[int] = None
    building_class: Optional[str] = None
    total_square_feet: Optional[float] = None
    total_residential_units: Optional[int] = None
    is_rent_stabilized: bool = False
    property_use_breakdown: Optional[str] = None
    baseline_emissions: Optional[float] = None
    raw_pluto_data: Dict[str, Any] = Field(default_factory=dict)
    raw_ll84_data: Dict[str, Any] = Field(default_factory=dict)


class CalculationRecord(BuildingProfile):
    """Persisted state of one building's retrofit analysis."""

    id: str

    # Unit breakdown
    unit_mix: Optional[UnitMix] = None
    ptac_units: Optional[int] = None
    number_of_bedrooms: Optional[int] = None

    # Energy
    annual_building_mmbtu_cooling_ptac: Optional[float] = None
    annual_building_mmbtu_heating_ptac: Optional[float] = None
    annual_building_mmbtu_total_ptac: Optional[float] = None
    annual_building_mmbtu_heating_pthp: Optional[float] = None
    annual_building_mmbtu_cooling_pthp: Optional[float] = None
    annual_building_mmbtu_total_pthp: Optional[float] = None
    energy_reduction_percentage: Optional[float] = None
    total_retrofit_cost: Optional[float] = None
    annual_building_therms_heating_ptac: Optional[float] = None
    annual_building_kwh_cooling_ptac: Optional[float] = None
    annual_building_kwh_heating_pthp: Optional[float] = None
    annual_building_kwh_cooling_pthp: Optional[float] = None
    annual_building_cost_ptac: Optional[float] = None
    annual_building_cost_pthp: Optional[float] = None
    annual_energy_savings: Optional[float] = None
    price_kwh_hour: Optional[float] = None
    price_therm_hour: Optional[float] = None
    pthp_unit_cost: Optional[float] = None
    pthp_installation_cost: Optional[float] = None
    pthp_contingency: Optional[float] = None
    pthp_cop: Optional[float] = None

    # Emissions compliance (LL97)
    fee_per_ton: Optional[float] = None
    property_use_areas: Optional[Dict[str, float]] = None
    emissions_budget_2024_to_2029: Optional[float] = None
    emissions_budget_2030_to_2034: Optional[float] = None
    emissions_budget_2035_to_2039: Optional[float] = None
    emissions_budget_2040_to_2049: Optional[float] = None
    current_ll97_fee_2024_to_2029: Optional[float] = None
    current_ll97_fee_2030_to_2034: Optional[float] = None
    current_ll97_fee_2035_to_2039: Optional[float] = None
    current_ll97_fee_2040_to_2049: Optional[float] = None
    be_credit_before_2027: Optional[float] = None
    be_credit_2027_to_2029: Optional[float] = None
    adjusted_emissions_2024_to_2029: Optional[float] = None
    adjusted_emissions_2030_to_2034: Optional[float] = None
    adjusted_emissions_2035_to_2039: Optional[float] = None
    adjusted_emissions_2040_to_2049: Optional[float] = None
    adjusted_ll97_fee_before_2027: Optional[float] = None
    adjusted_ll97_fee_2027_to_2029: Optional[float] = None
    adjusted_ll97_fee_2030_to_2034: Optional[float] = None
    adjusted_ll97_fee_2035_to_2039: Optional[float] = None
    adjusted_ll97_fee_2040_to_2049: Optional[float] = None
    worst_case_ll97_fee: Optional[float] = None
    total_be_credit_available: Optional[float] = None
    compliance_status: Optional[Dict[str, bool]] = None

    # Financial
    loan_term_years: Optional[int] = None
    annual_interest_rate: Optional[float] = None
    loan_principal: Optional[float] = None
    annual_ll97_fee_avoidance_before_2027: Optional[float] = None
    annual_ll97_fee_avoidance_2027_to_2029: Optional[float] = None
    annual_ll97_fee_avoidance_2030_to_2034: Optional[float] = None
    annual_ll97_fee_avoidance_2035_to_2039: Optional[float] = None
    annual_ll97_fee_avoidance_2040_to_2049: Optional[float] = None
    simple_payback_year: Optional[int] = None
    cumulative_savings_by_year: Optional[List[YearValue]] = None
    loan_balance_by_year: Optional[List[YearValue]] = None
    monthly_payment: Optional[float] = None
    total_interest_paid: Optional[float] = None
    average_annual_savings: Optional[float] = None
    total_savings_over_analysis_period: Optional[float] = None
    net_present_value: Optional[float] = None
    return_on_investment: Optional[float] = None

    # NOI
    annual_building_noi: Optional[float] = None
    noi_source: Optional[NOISource] = None
    noi_by_year_no_upgrade: Optional[List[YearValue]] = None
    noi_by_year_with_upgrade: Optional[List[YearValue]] = None

    # Property value
    cap_rate: Optional[float] = None
    valuation_basis: Optional[ValuationBasis] = None
    property_value_reference_year: Optional[int] = None
    property_value_no_upgrade: Optional[float] = None
    property_value_with_upgrade: Optional[float] = None
    net_property_value_gain: Optional[float] = None
    property_value_by_year_no_upgrade: Optional[List[YearValue]] = None
    property_value_by_year_with_upgrade: Optional[List[YearValue]] = None

    # Metadata
    service_versions: Dict[str, str] = Field(default_factory=dict)
    service_calculated_at: Dict[str, datetime] = Field(default_factory=dict)
    overridden_fields: Dict[str, OverrideEntry] = Field(default_factory=dict)
    last_calculated_service: Optional[str] = None
    record_version: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
