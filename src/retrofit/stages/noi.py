# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Net operating income stage.

Projects the building's NOI year by year with and without the retrofit.

BASELINE NOI:
    an explicit ``current_noi`` override, else the NYC Open Data registry for
    cooperative/condominium building classes, else the market-rate rental
    estimate (borough rent × age multiplier × units × 12 × 1.108 × 0.45).

YEAR SERIES (every year of the analysis window):
    no upgrade:   baseline − current LL97 fee for the year's period
    with upgrade: baseline + energy savings − adjusted LL97 fee for the
                  year's fee window, from the year after the upgrade;
                  identical to the no-upgrade scenario up to the upgrade year
    LL97 fees are only charged from ``fees_assessed_year``.

A full series is produced rather than period aggregates because the
property-value stage capitalizes each year individually.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from ..constants.ll97 import compliance_period_for_year, fee_window_for_year
from ..core.errors import ComputationError
from ..core.primitives import (
    AnalysisSettings,
    Borough,
    EngineSettings,
    FeeWindow,
    NOISource,
    StageName,
    ValidationIssue,
    ValidationReport,
)
from ..core.record import CalculationRecord, YearValue
from ..core.store import RecordStore
from ..external.noi_registry import NOIEstimate, NOIRegistry, market_rate_noi
from ..utils.rounding import round2
from .base import CalculationService, StageInput, StageOutput, check_range, require
from .financial import ADJUSTED_FEE_FIELDS, CURRENT_FEE_FIELDS

logger = logging.getLogger(__name__)


class NOIInput(StageInput):
    current_noi: Optional[float] = None
    noi_source: Optional[NOISource] = None  # Set when the baseline is looked up
    bbl: Optional[str] = None
    building_class: Optional[str] = None
    borough: Optional[Borough] = None
    year_built: Optional[int] = None
    total_units: Optional[int] = None

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


class NOIOutput(StageOutput):
    annual_building_noi: float
    noi_source: NOISource
    noi_by_year_no_upgrade: List[YearValue]
    noi_by_year_with_upgrade: List[YearValue]


def noi_series(
    baseline: float,
    data: NOIInput,
    analysis: AnalysisSettings,
) -> Tuple[List[YearValue], List[YearValue]]:
    """Year-by-year NOI without and with the retrofit."""
    no_upgrade: List[YearValue] = []
    with_upgrade: List[YearValue] = []
    for year in analysis.years:
        fees_charged = year >= analysis.fees_assessed_year
        current_fee = getattr(data, f"current_ll97_fee_{compliance_period_for_year(year).value}")
        baseline_noi = baseline - (current_fee if fees_charged else 0.0)

        if year > analysis.upgrade_year:
            window: FeeWindow = fee_window_for_year(year)
            adjusted_fee = getattr(data, f"adjusted_ll97_fee_{window.value}")
            upgraded_noi = baseline + data.annual_energy_savings - (adjusted_fee if fees_charged else 0.0)
        else:
            upgraded_noi = baseline_noi

        no_upgrade.append(YearValue(year=year, value=round2(baseline_noi)))
        with_upgrade.append(YearValue(year=year, value=round2(upgraded_noi)))
    return no_upgrade, with_upgrade


def calculate_noi(data: NOIInput, analysis: AnalysisSettings) -> NOIOutput:
    """Project NOI over the analysis window. ``data`` must be validated."""
    no_upgrade, with_upgrade = noi_series(data.current_noi, data, analysis)
    return NOIOutput(
        annual_building_noi=round2(data.current_noi),
        noi_source=data.noi_source or NOISource.OVERRIDE,
        noi_by_year_no_upgrade=no_upgrade,
        noi_by_year_with_upgrade=with_upgrade,
    )


class NOICalculationService(CalculationService[NOIInput, NOIOutput]):
    """
    NOI stage. The baseline lookup is the only stage step that may reach an
    external system; it happens in ``build_input`` so ``compute`` stays pure.
    """

    name = StageName.NOI
    version = "1.0.0"
    dependencies = (StageName.FINANCIAL,)
    input_model = NOIInput
    output_model = NOIOutput

    def __init__(
        self,
        store: RecordStore,
        settings: Optional[EngineSettings] = None,
        noi_registry: Optional[NOIRegistry] = None,
    ):
        super().__init__(store, settings)
        self.noi_registry = noi_registry

    @property
    def overridable_fields(self) -> FrozenSet[str]:
        return super().overridable_fields - {"noi_source"}

    def read_record(self, record: CalculationRecord) -> Dict[str, Any]:
        total_units = record.unit_mix.total_units if record.unit_mix else record.total_residential_units
        values: Dict[str, Any] = {
            "bbl": record.bbl,
            "building_class": record.building_class,
            "borough": record.borough,
            "year_built": record.year_built,
            "total_units": total_units,
            "annual_energy_savings": record.annual_energy_savings,
        }
        for field in CURRENT_FEE_FIELDS + ADJUSTED_FEE_FIELDS:
            values[field] = getattr(record, field)
        # An overridden NOI sticks until overridden again
        if record.noi_source is NOISource.OVERRIDE:
            values["current_noi"] = record.annual_building_noi
        return values

    def resolve_baseline(self, data: NOIInput) -> NOIEstimate:
        """
        Baseline NOI from the registry, else the market-rate estimate.

        Raises:
            ComputationError: If no registry entry exists and the market-rate
                fallback lacks borough, year built or unit count.
            NOIRegistryError: If the registry cannot be reached.
        """
        if self.noi_registry is not None:
            estimate = self.noi_registry.lookup(data.bbl, data.building_class)
            if estimate is not None:
                return estimate

        missing = [
            field
            for field in ("borough", "year_built", "total_units")
            if getattr(data, field) is None
        ]
        if missing:
            raise ComputationError(
                f"Cannot estimate market-rate NOI: missing {', '.join(missing)}",
                {"fields": missing},
            )
        logger.info(f"Using market-rate NOI estimate for BBL {data.bbl} ({data.building_class})")
        return NOIEstimate(
            annual_noi=market_rate_noi(data.borough, data.year_built, data.total_units),
            source=NOISource.MARKET_RATE,
        )

    def build_input(self, record: CalculationRecord, overrides=None) -> NOIInput:
        data = super().build_input(record, overrides)
        if data.current_noi is not None:
            return data
        estimate = self.resolve_baseline(data)
        return data.copy(updates={"current_noi": estimate.annual_noi, "noi_source": estimate.source})

    def validate(self, data: NOIInput) -> ValidationReport:
        errors: List[ValidationIssue] = []
        if require(errors, "current_noi", data.current_noi):
            check_range(errors, "current_noi", data.current_noi, gt=0)
        require(errors, "annual_energy_savings", data.annual_energy_savings)
        for field in CURRENT_FEE_FIELDS + ADJUSTED_FEE_FIELDS:
            require(errors, field, getattr(data, field), "is required; run the emissions-compliance stage first")
        return ValidationReport.from_issues(errors)

    def compute(self, data: NOIInput) -> NOIOutput:
        return calculate_noi(data, self.settings.analysis)
