# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Initial unit-mix provider boundary.

A provider estimates a building's unit mix (studios, one-, two- and
three-plus-bedroom units) from its identity and raw characteristics. It is
invoked once when a calculation is created, outside the stage graph; the
unit-breakdown stage then derives PTAC counts from whatever mix is stored.
"""

from __future__ import annotations

from typing import Protocol

from ..core.record import BuildingProfile, UnitMix


class UnitMixProvider(Protocol):
    def unit_mix(self, building: BuildingProfile) -> UnitMix: ...
