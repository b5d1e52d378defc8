# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .property_use import normalize_property_use, parse_property_use_breakdown
from .rounding import round2

__all__ = [
    "normalize_property_use",
    "parse_property_use_breakdown",
    "round2",
]
