# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Retrofit Core Primitives

Building blocks shared by every stage: the immutable base model, constrained
types, enums, engine settings and validation reports.
"""

from .enums import (
    Borough,
    BuildingScale,
    CompliancePeriod,
    ConstructionEra,
    EmissionsLimitCategory,
    FeeWindow,
    NOISource,
    StageName,
    ValuationBasis,
)
from .model import Model
from .settings import AnalysisSettings, EngineSettings, ExecutionSettings
from .types import FloatBetween0And1, PositiveFloat, PositiveIntGt0, Year
from .validation import ValidationIssue, ValidationReport

__all__ = [
    # Base
    "Model",
    # Types
    "FloatBetween0And1",
    "PositiveFloat",
    "PositiveIntGt0",
    "Year",
    # Enums
    "Borough",
    "BuildingScale",
    "CompliancePeriod",
    "ConstructionEra",
    "EmissionsLimitCategory",
    "FeeWindow",
    "NOISource",
    "StageName",
    "ValuationBasis",
    # Settings
    "AnalysisSettings",
    "EngineSettings",
    "ExecutionSettings",
    # Validation
    "ValidationIssue",
    "ValidationReport",
]
