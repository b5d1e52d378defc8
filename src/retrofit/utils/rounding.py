# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Rounding helpers for persisted currency and emissions values."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal


def round2(value: float, places: int = 2) -> float:
    """
    Round half away from zero to ``places`` decimals.

    Goes through ``Decimal(repr(value))`` so that values such as 2.675 round
    to 2.68 as written, instead of following their binary representation.
    """
    if not math.isfinite(value):
        raise ValueError(f"Cannot round non-finite value {value!r}")
    quantum = Decimal(1).scaleb(-places)
    rounded = float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))
    # Normalise negative zero so persisted values compare and serialise cleanly
    return rounded if rounded != 0 else 0.0
