# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Calculation engine: the stage registry, the dependency engine that runs
stages in order and cascades changes downstream, and the public API.
"""

from .api import create_calculation, run_calculation
from .dependency import CascadeReport, DependencyEngine
from .registry import ServiceRegistry, build_default_registry

__all__ = [
    "CascadeReport",
    "DependencyEngine",
    "ServiceRegistry",
    "build_default_registry",
    "create_calculation",
    "run_calculation",
]
