# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Tests for persisted-value rounding."""

import math

import pytest

from retrofit.utils import round2


class TestRound2:
    def test_half_rounds_away_from_zero(self):
        """Test decimal halves round up as written."""
        assert round2(2.675) == 2.68
        assert round2(1.005) == 1.01
        assert round2(-2.675) == -2.68

    def test_plain_values(self):
        assert round2(17857.432863) == 17857.43
        assert round2(100) == 100.0

    def test_negative_zero_normalized(self):
        """Test tiny negatives round to a positive zero."""
        result = round2(-0.001)
        assert result == 0.0
        assert math.copysign(1.0, result) == 1.0

    def test_custom_places(self):
        assert round2(3.14159, places=3) == 3.142

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_rejected(self, value):
        with pytest.raises(ValueError, match="non-finite"):
            round2(value)
