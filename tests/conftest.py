# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Test utilities and fixtures for retrofit testing.

Provides a reference building with hand-checked figures, an in-memory store
and a fully wired dependency engine so tests do not have to assemble the
stage graph themselves.

REFERENCE BUILDING:
    Brooklyn, built 1960, 8 stories, class R6, 100,000 sq ft, no property-use
    breakdown, baseline emissions 1,250.5 tCO2e, unit mix 20 one-bed + 20
    two-bed (40 units, 100 PTACs).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import pytest

from retrofit.core import BuildingProfile, CalculationRecord, InMemoryRecordStore, UnitMix
from retrofit.core.primitives import Borough, EngineSettings, ExecutionSettings
from retrofit.engine import DependencyEngine, build_default_registry, create_calculation


def reference_building(**updates: Any) -> BuildingProfile:
    """
    Create the reference building profile.

    Args:
        **updates: Field values replacing the reference ones

    Example:
        >>> reference_building(stories=5).stories
        5
    """
    fields: Dict[str, Any] = {
        "bbl": "3012340001",
        "address": "123 Example Ave, Brooklyn",
        "borough": Borough.BROOKLYN,
        "year_built": 1960,
        "stories": 8,
        "building_class": "R6",
        "total_square_feet": 100_000.0,
        "total_residential_units": 40,
        "baseline_emissions": 1250.5,
    }
    fields.update(updates)
    return BuildingProfile(**fields)


def reference_unit_mix() -> UnitMix:
    return UnitMix(one_bed=20, two_bed=20)


def create_test_record(
    store: InMemoryRecordStore,
    unit_mix: Optional[UnitMix] = None,
    **building_updates: Any,
) -> CalculationRecord:
    """Store a new calculation for the reference building."""
    return create_calculation(
        store,
        reference_building(**building_updates),
        unit_mix=unit_mix or reference_unit_mix(),
    )


class FixedUnitMixProvider:
    """Unit-mix provider returning a fixed mix and counting calls."""

    def __init__(self, mix: Optional[UnitMix] = None):
        self.mix = mix or reference_unit_mix()
        self.calls = 0

    def unit_mix(self, building: BuildingProfile) -> UnitMix:
        self.calls += 1
        return self.mix


@pytest.fixture
def store():
    """Create an empty in-memory record store."""
    return InMemoryRecordStore()


@pytest.fixture
def settings():
    """Create default engine settings."""
    return EngineSettings()


@pytest.fixture
def lenient_settings():
    """Engine settings that record cascade failures instead of raising."""
    return EngineSettings(execution=ExecutionSettings(fail_on_error=False))


@pytest.fixture
def registry(store, settings):
    """Create the standard six-stage registry without an NOI registry client."""
    return build_default_registry(store, settings=settings)


@pytest.fixture
def engine(registry, store, settings):
    """Create a dependency engine over the standard registry."""
    return DependencyEngine(registry, store, settings)


@pytest.fixture
def record(store):
    """Store the reference building and return its record."""
    return create_test_record(store)


@pytest.fixture
def calculated(engine, record, store):
    """Reference building with every stage executed once."""
    engine.execute_all_services(record.id)
    return store.get(record.id)


@pytest.fixture
def make_record(store):
    """Factory storing reference-building variants: ``make_record(stories=5)``."""

    def factory(unit_mix: Optional[UnitMix] = None, **building_updates: Any) -> CalculationRecord:
        return create_test_record(store, unit_mix=unit_mix, **building_updates)

    return factory


@pytest.fixture
def building():
    """Reference building profile."""
    return reference_building()


@pytest.fixture
def unit_mix_provider():
    """Unit-mix provider that counts how often it is consulted."""
    return FixedUnitMixProvider()
