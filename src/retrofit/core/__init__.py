# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Retrofit Core Framework

Foundational building blocks for the calculation engine: primitives, the
calculation record, the record store boundary and the error taxonomy.
"""

from . import primitives
from .errors import (
    CalculationNotFoundError,
    ComputationError,
    ConcurrentModificationError,
    DependencyNotSatisfiedError,
    NOIRegistryError,
    RetrofitError,
    StageExecutionError,
    ValidationError,
)
from .record import (
    BuildingProfile,
    CalculationRecord,
    OverrideEntry,
    UnitMix,
    YearValue,
)
from .store import InMemoryRecordStore, RecordStore

__all__ = [
    "primitives",
    # Records
    "BuildingProfile",
    "CalculationRecord",
    "OverrideEntry",
    "UnitMix",
    "YearValue",
    # Storage
    "InMemoryRecordStore",
    "RecordStore",
    # Errors
    "CalculationNotFoundError",
    "ComputationError",
    "ConcurrentModificationError",
    "DependencyNotSatisfiedError",
    "NOIRegistryError",
    "RetrofitError",
    "StageExecutionError",
    "ValidationError",
]
