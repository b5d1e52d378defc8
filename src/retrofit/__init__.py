# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

import importlib
import logging

"""
Retrofit - PTAC to PTHP retrofit analysis for NYC multifamily buildings

Estimates energy, Local Law 97 compliance, financial, NOI and property-value
impacts of replacing packaged terminal air conditioners with heat pumps.
Each concern is a calculation stage; the dependency engine runs stages in
order and cascades any change to everything downstream.

Key Entry Points:
- retrofit.engine.create_calculation() - Onboard a building
- retrofit.engine.DependencyEngine - Run and re-run stages
- retrofit.stages.* - The six calculation stages
- retrofit.constants.* - Regulatory and physical constants

Example Usage:
    ```python
    from retrofit.core import BuildingProfile, InMemoryRecordStore, UnitMix
    from retrofit.engine import DependencyEngine, build_default_registry, create_calculation

    store = InMemoryRecordStore()
    engine = DependencyEngine(build_default_registry(store), store)
    record = create_calculation(store, building, unit_mix=UnitMix(one_bed=40, two_bed=20))

    engine.execute_all_services(record.id)
    engine.execute_service(record.id, "energy", {"pthp_unit_cost": 1500})
    ```
"""

# Libraries should not configure logging; applications attach their own handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())


# Public API surface (lazy-loaded on first attribute access)
__all__ = [  # noqa: F822 - lazy loading
    "constants",
    "core",
    "debt",
    "engine",
    "external",
    "stages",
    "utils",
    "valuation",
]


_LAZY_MODULES = {
    "constants": "retrofit.constants",
    "core": "retrofit.core",
    "debt": "retrofit.debt",
    "engine": "retrofit.engine",
    "external": "retrofit.external",
    "stages": "retrofit.stages",
    "utils": "retrofit.utils",
    "valuation": "retrofit.valuation",
}


def __getattr__(name: str):
    module_path = _LAZY_MODULES.get(name)
    if module_path is None:
        raise AttributeError(f"module 'retrofit' has no attribute '{name}'")
    module = importlib.import_module(module_path)
    globals()[name] = module
    return module
