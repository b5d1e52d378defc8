# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit breakdown stage.

Derives the number of PTAC units to replace from the building's unit mix.
Each apartment has one unit per bedroom plus one for the living area:
studio 1, one-bed 2, two-bed 3, three-plus 4.

The initial mix comes from a ``UnitMixProvider`` when the calculation is
created; users may correct the mix or the PTAC count through overrides.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..core.primitives import StageName, ValidationIssue, ValidationReport
from ..core.record import CalculationRecord, UnitMix
from .base import CalculationService, StageInput, StageOutput

PTAC_UNITS_PER_APARTMENT: Dict[str, int] = {
    "studio": 1,
    "one_bed": 2,
    "two_bed": 3,
    "three_plus": 4,
}
BEDROOMS_PER_APARTMENT: Dict[str, int] = {
    "studio": 0,
    "one_bed": 1,
    "two_bed": 2,
    "three_plus": 3,
}


class UnitBreakdownInput(StageInput):
    studio: Optional[int] = None
    one_bed: Optional[int] = None
    two_bed: Optional[int] = None
    three_plus: Optional[int] = None
    ptac_units: Optional[int] = None  # Explicit count overrides the derived one


class UnitBreakdownOutput(StageOutput):
    unit_mix: UnitMix
    ptac_units: int
    number_of_bedrooms: int


def calculate_unit_breakdown(data: UnitBreakdownInput) -> UnitBreakdownOutput:
    mix = UnitMix(
        studio=data.studio or 0,
        one_bed=data.one_bed or 0,
        two_bed=data.two_bed or 0,
        three_plus=data.three_plus or 0,
    )
    derived = sum(getattr(mix, kind) * per for kind, per in PTAC_UNITS_PER_APARTMENT.items())
    bedrooms = sum(getattr(mix, kind) * per for kind, per in BEDROOMS_PER_APARTMENT.items())
    return UnitBreakdownOutput(
        unit_mix=mix,
        ptac_units=data.ptac_units if data.ptac_units is not None else derived,
        number_of_bedrooms=bedrooms,
    )


class UnitBreakdownService(CalculationService[UnitBreakdownInput, UnitBreakdownOutput]):
    name = StageName.UNIT_BREAKDOWN
    version = "1.0.0"
    dependencies = ()
    input_model = UnitBreakdownInput
    output_model = UnitBreakdownOutput

    def read_record(self, record: CalculationRecord) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        if record.unit_mix is not None:
            values.update(record.unit_mix.model_dump())
        # An overridden PTAC count sticks until overridden again
        if f"{self.name.value}.ptac_units" in record.overridden_fields and record.ptac_units is not None:
            values["ptac_units"] = record.ptac_units
        return values

    def validate(self, data: UnitBreakdownInput) -> ValidationReport:
        errors: List[ValidationIssue] = []
        counts = {kind: getattr(data, kind) for kind in PTAC_UNITS_PER_APARTMENT}
        for kind, count in counts.items():
            if count is not None and count < 0:
                errors.append(ValidationIssue(field=kind, message=f"must not be negative (got {count})"))
        if data.ptac_units is not None:
            if data.ptac_units <= 0:
                errors.append(
                    ValidationIssue(field="ptac_units", message=f"must be greater than 0 (got {data.ptac_units})")
                )
        elif not any(counts.values()):
            errors.append(ValidationIssue(field="unit_mix", message="unit mix is missing or empty"))
        return ValidationReport.from_issues(errors)

    def compute(self, data: UnitBreakdownInput) -> UnitBreakdownOutput:
        return calculate_unit_breakdown(data)
