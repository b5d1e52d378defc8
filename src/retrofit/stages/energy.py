# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Energy stage - PTAC baseline vs. PTHP retrofit

Compares the annual energy use and cost of the existing PTAC units (gas
heating, electric cooling) against packaged terminal heat pumps.

CALCULATION:
- PTAC: fixed per-unit heating (therms / MMBtu) and cooling (kWh / MMBtu)
- PTHP heating electricity:
  ``(heating capacity kBtu / 3.412) × (1 / COP) × EFLH × units``
  where EFLH comes from the construction-era × height table
- PTHP cooling is unchanged from the PTAC baseline
- Retrofit cost: ``(unit cost + installation) × units × (1 + contingency)``
- Annual savings: PTAC energy cost − PTHP energy cost

All outputs are rounded to 2 decimal places.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from ..constants import energy as C
from ..constants.eflh import get_eflh
from ..core.primitives import StageName, ValidationIssue, ValidationReport
from ..core.record import CalculationRecord
from ..utils.rounding import round2
from .base import CalculationService, StageInput, StageOutput, check_range, require

logger = logging.getLogger(__name__)

PERSISTED_PARAMETERS = (
    "pthp_unit_cost",
    "pthp_installation_cost",
    "pthp_contingency",
    "pthp_cop",
    "price_kwh_hour",
    "price_therm_hour",
)


class EnergyInput(StageInput):
    ptac_units: Optional[int] = None
    year_built: Optional[int] = None
    stories: Optional[int] = None
    pthp_unit_cost: float = C.DEFAULT_PTHP_UNIT_COST
    pthp_installation_cost: float = C.DEFAULT_PTHP_INSTALLATION_COST
    pthp_contingency: float = C.DEFAULT_PTHP_CONTINGENCY
    pthp_cop: float = C.DEFAULT_PTHP_COP
    price_kwh_hour: float = C.DEFAULT_PRICE_KWH
    price_therm_hour: float = C.DEFAULT_PRICE_THERM


class EnergyOutput(StageOutput):
    # PTAC baseline (MMBtu)
    annual_building_mmbtu_cooling_ptac: float
    annual_building_mmbtu_heating_ptac: float
    annual_building_mmbtu_total_ptac: float
    # PTHP retrofit (MMBtu)
    annual_building_mmbtu_heating_pthp: float
    annual_building_mmbtu_cooling_pthp: float
    annual_building_mmbtu_total_pthp: float
    energy_reduction_percentage: float
    total_retrofit_cost: float
    # Original units
    annual_building_therms_heating_ptac: float
    annual_building_kwh_cooling_ptac: float
    annual_building_kwh_heating_pthp: float
    annual_building_kwh_cooling_pthp: float
    # Cost
    annual_building_cost_ptac: float
    annual_building_cost_pthp: float
    annual_energy_savings: float
    # Parameters, persisted so cascaded recomputation keeps earlier overrides
    price_kwh_hour: float
    price_therm_hour: float
    pthp_unit_cost: float
    pthp_installation_cost: float
    pthp_contingency: float
    pthp_cop: float


def pthp_heating_kwh(units: int, cop: float, eflh: float) -> float:
    """Annual heat-pump heating electricity for ``units`` PTHPs."""
    capacity_kw = C.PTHP_HEATING_CAPACITY_KBTU / C.KBTU_PER_KW
    return capacity_kw * (1 / cop) * eflh * units


def calculate_energy(data: EnergyInput) -> EnergyOutput:
    """Compute the PTAC/PTHP energy comparison. ``data`` must be validated."""
    units = data.ptac_units
    eflh = get_eflh(data.year_built, data.stories)

    # PTAC baseline
    mmbtu_cooling_ptac = units * C.PTAC_MMBTU_COOLING_PER_UNIT
    mmbtu_heating_ptac = units * C.PTAC_MMBTU_HEATING_PER_UNIT
    mmbtu_total_ptac = mmbtu_cooling_ptac + mmbtu_heating_ptac
    therms_heating_ptac = units * C.PTAC_THERMS_HEATING_PER_UNIT
    kwh_cooling_ptac = units * C.PTAC_KWH_COOLING_PER_UNIT

    # PTHP retrofit
    kwh_heating_pthp = pthp_heating_kwh(units, data.pthp_cop, eflh)
    mmbtu_heating_pthp = kwh_heating_pthp * C.KWH_TO_MMBTU
    mmbtu_cooling_pthp = mmbtu_cooling_ptac
    kwh_cooling_pthp = kwh_cooling_ptac
    mmbtu_total_pthp = mmbtu_heating_pthp + mmbtu_cooling_pthp

    if mmbtu_total_ptac > 0:
        reduction_pct = (mmbtu_total_ptac - mmbtu_total_pthp) / mmbtu_total_ptac * 100
    else:
        reduction_pct = 0.0

    retrofit_cost = (
        (data.pthp_unit_cost + data.pthp_installation_cost) * units * (1 + data.pthp_contingency)
    )

    cost_ptac = kwh_cooling_ptac * data.price_kwh_hour + therms_heating_ptac * data.price_therm_hour
    cost_pthp = (kwh_heating_pthp + kwh_cooling_pthp) * data.price_kwh_hour

    logger.debug(
        f"Energy: units={units} eflh={eflh} pthp_kwh_heat={kwh_heating_pthp:,.0f} "
        f"cost_ptac={cost_ptac:,.2f} cost_pthp={cost_pthp:,.2f}"
    )

    return EnergyOutput(
        annual_building_mmbtu_cooling_ptac=round2(mmbtu_cooling_ptac),
        annual_building_mmbtu_heating_ptac=round2(mmbtu_heating_ptac),
        annual_building_mmbtu_total_ptac=round2(mmbtu_total_ptac),
        annual_building_mmbtu_heating_pthp=round2(mmbtu_heating_pthp),
        annual_building_mmbtu_cooling_pthp=round2(mmbtu_cooling_pthp),
        annual_building_mmbtu_total_pthp=round2(mmbtu_total_pthp),
        energy_reduction_percentage=round2(reduction_pct),
        total_retrofit_cost=round2(retrofit_cost),
        annual_building_therms_heating_ptac=round2(therms_heating_ptac),
        annual_building_kwh_cooling_ptac=round2(kwh_cooling_ptac),
        annual_building_kwh_heating_pthp=round2(kwh_heating_pthp),
        annual_building_kwh_cooling_pthp=round2(kwh_cooling_pthp),
        annual_building_cost_ptac=round2(cost_ptac),
        annual_building_cost_pthp=round2(cost_pthp),
        annual_energy_savings=round2(cost_ptac - cost_pthp),
        price_kwh_hour=data.price_kwh_hour,
        price_therm_hour=data.price_therm_hour,
        pthp_unit_cost=data.pthp_unit_cost,
        pthp_installation_cost=data.pthp_installation_cost,
        pthp_contingency=data.pthp_contingency,
        pthp_cop=data.pthp_cop,
    )


class EnergyCalculationService(CalculationService[EnergyInput, EnergyOutput]):
    name = StageName.ENERGY
    version = "1.0.0"
    dependencies = (StageName.UNIT_BREAKDOWN,)
    input_model = EnergyInput
    output_model = EnergyOutput

    def read_record(self, record: CalculationRecord) -> Dict[str, Any]:
        values = {
            "ptac_units": record.ptac_units,
            "year_built": record.year_built,
            "stories": record.stories,
        }
        for field in PERSISTED_PARAMETERS:
            if getattr(record, field) is not None:
                values[field] = getattr(record, field)
        return values

    def validate(self, data: EnergyInput) -> ValidationReport:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []

        if require(errors, "ptac_units", data.ptac_units):
            check_range(errors, "ptac_units", data.ptac_units, gt=0)
        if require(errors, "year_built", data.year_built):
            check_range(errors, "year_built", data.year_built, ge=C.MIN_YEAR_BUILT, le=date.today().year)
        if require(errors, "stories", data.stories):
            check_range(errors, "stories", data.stories, ge=C.MIN_STORIES, le=C.MAX_STORIES)

        check_range(errors, "pthp_unit_cost", data.pthp_unit_cost, ge=0)
        check_range(errors, "pthp_installation_cost", data.pthp_installation_cost, ge=0)
        check_range(errors, "pthp_contingency", data.pthp_contingency, ge=0)
        check_range(errors, "price_therm_hour", data.price_therm_hour, ge=0)

        if data.pthp_cop <= 0:
            errors.append(ValidationIssue(field="pthp_cop", message=f"must be greater than 0 (got {data.pthp_cop})"))
        elif data.pthp_cop > C.MAX_REASONABLE_COP:
            warnings.append(ValidationIssue(field="pthp_cop", message=f"COP of {data.pthp_cop} is unusually high"))

        if data.price_kwh_hour < 0:
            errors.append(
                ValidationIssue(field="price_kwh_hour", message=f"must not be negative (got {data.price_kwh_hour})")
            )
        elif data.price_kwh_hour == 0 or data.price_kwh_hour > C.MAX_REASONABLE_PRICE_KWH:
            warnings.append(
                ValidationIssue(
                    field="price_kwh_hour",
                    message=f"electricity price of ${data.price_kwh_hour}/kWh is outside the usual range",
                )
            )

        return ValidationReport.from_issues(errors, warnings)

    def compute(self, data: EnergyInput) -> EnergyOutput:
        return calculate_energy(data)
