# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .direct_cap import DirectCapValuation

__all__ = [
    "DirectCapValuation",
]
