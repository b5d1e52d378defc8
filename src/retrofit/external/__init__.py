# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
External collaborators consumed by the stages: the building NOI registry
and the initial unit-mix provider.
"""

from .noi_registry import (
    NOIEstimate,
    NOIRegistry,
    OpenDataNOIRegistry,
    market_rate_noi,
    registry_source_for_class,
)
from .unit_mix import UnitMixProvider

__all__ = [
    "NOIEstimate",
    "NOIRegistry",
    "OpenDataNOIRegistry",
    "UnitMixProvider",
    "market_rate_noi",
    "registry_source_for_class",
]
