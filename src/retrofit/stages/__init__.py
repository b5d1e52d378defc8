# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Calculation stages.

Each stage reads published fields from the calculation record, validates
them, computes its outputs and persists them back:

    unit-breakdown -> energy -> emissions-compliance -> financial -> noi -> property-value

(financial also reads energy directly.)
"""

from .base import (
    CalculationService,
    ExecutionResult,
    StageInput,
    StageOutput,
)
from .energy import (
    EnergyCalculationService,
    EnergyInput,
    EnergyOutput,
    calculate_energy,
)
from .financial import (
    FinancialCalculationService,
    FinancialInput,
    FinancialOutput,
    calculate_financial,
)
from .ll97 import (
    LL97CalculationService,
    LL97Input,
    LL97Output,
    calculate_ll97,
)
from .noi import (
    NOICalculationService,
    NOIInput,
    NOIOutput,
    calculate_noi,
)
from .property_value import (
    PropertyValueCalculationService,
    PropertyValueInput,
    PropertyValueOutput,
    calculate_property_value,
    cap_rate_sensitivity,
)
from .unit_breakdown import (
    UnitBreakdownInput,
    UnitBreakdownOutput,
    UnitBreakdownService,
    calculate_unit_breakdown,
)

__all__ = [
    # Contract
    "CalculationService",
    "ExecutionResult",
    "StageInput",
    "StageOutput",
    # Unit breakdown
    "UnitBreakdownInput",
    "UnitBreakdownOutput",
    "UnitBreakdownService",
    "calculate_unit_breakdown",
    # Energy
    "EnergyCalculationService",
    "EnergyInput",
    "EnergyOutput",
    "calculate_energy",
    # Emissions compliance
    "LL97CalculationService",
    "LL97Input",
    "LL97Output",
    "calculate_ll97",
    # Financial
    "FinancialCalculationService",
    "FinancialInput",
    "FinancialOutput",
    "calculate_financial",
    # NOI
    "NOICalculationService",
    "NOIInput",
    "NOIOutput",
    "calculate_noi",
    # Property value
    "PropertyValueCalculationService",
    "PropertyValueInput",
    "PropertyValueOutput",
    "calculate_property_value",
    "cap_rate_sensitivity",
]
