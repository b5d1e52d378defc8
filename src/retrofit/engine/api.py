# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Calculation API

Public entry points for onboarding a building and running its analysis.
Creating a calculation is the only step that consults the unit-mix
provider; everything after that goes through the dependency engine.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from ..core.record import BuildingProfile, CalculationRecord, UnitMix
from ..core.store import RecordStore
from ..external.unit_mix import UnitMixProvider
from .dependency import CascadeReport, DependencyEngine

logger = logging.getLogger(__name__)


def create_calculation(
    store: RecordStore,
    building: BuildingProfile,
    unit_mix_provider: Optional[UnitMixProvider] = None,
    unit_mix: Optional[UnitMix] = None,
) -> CalculationRecord:
    """
    Create and store a new calculation record for ``building``.

    Workflow:
      1) Use the given unit mix, else ask the provider for one (once)
      2) Assign a fresh id
      3) Store the record with no stages calculated

    Args:
        store: Record store to create the record in.
        building: Identity and raw characteristics of the building.
        unit_mix_provider: Optional estimator for the initial unit mix.
        unit_mix: Explicit unit mix; takes precedence over the provider.

    Returns:
        The stored record.
    """
    if unit_mix is None and unit_mix_provider is not None:
        unit_mix = unit_mix_provider.unit_mix(building)

    record = CalculationRecord(
        id=str(uuid.uuid4()),
        unit_mix=unit_mix,
        **building.model_dump(),
    )
    created = store.create(record)
    logger.info(f"Created calculation {created.id} for BBL {building.bbl} ({building.address})")
    return created


def run_calculation(engine: DependencyEngine, calculation_id: str) -> CascadeReport:
    """Run every stage for ``calculation_id``; see ``DependencyEngine.execute_all_services``."""
    return engine.execute_all_services(calculation_id)
