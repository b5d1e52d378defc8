# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Tests for DirectCapValuation - Income Approach Valuation."""

import pandas as pd
import pydantic
import pytest

from retrofit.valuation import DirectCapValuation


@pytest.fixture
def noi_series():
    return pd.Series(
        [100_000.0, 80_000.0, 120_000.0],
        index=pd.Index([2024, 2025, 2026], name="Year"),
        name="NOI",
    )


class TestDirectCapValuation:
    """Test DirectCapValuation functionality."""

    def test_value(self):
        valuation = DirectCapValuation(cap_rate=0.04)

        assert valuation.value(100_000.0) == pytest.approx(2_500_000.0)

    def test_capitalize_preserves_index(self, noi_series):
        values = DirectCapValuation(cap_rate=0.05).capitalize(noi_series)

        assert list(values.index) == [2024, 2025, 2026]
        assert values.loc[2025] == pytest.approx(1_600_000.0)
        assert values.name == "Value"

    def test_sensitivity(self, noi_series):
        table = DirectCapValuation.sensitivity(noi_series, [0.04, 0.05])

        assert list(table.columns) == [0.04, 0.05]
        assert table.loc[2024, 0.04] == pytest.approx(2_500_000.0)
        assert table.loc[2024, 0.05] == pytest.approx(2_000_000.0)

    def test_sensitivity_rejects_non_positive_rate(self, noi_series):
        with pytest.raises(ValueError, match="positive"):
            DirectCapValuation.sensitivity(noi_series, [0.04, 0.0])

    @pytest.mark.parametrize("cap_rate", [0.0, -0.01])
    def test_cap_rate_must_be_positive(self, cap_rate):
        with pytest.raises(pydantic.ValidationError):
            DirectCapValuation(cap_rate=cap_rate)
