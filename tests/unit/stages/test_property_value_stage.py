# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit Tests for the Property Value Stage

Direct capitalization of the NOI series at a reference year.
"""

import pandas as pd
import pytest

from retrofit.core import YearValue
from retrofit.core.primitives import ValuationBasis
from retrofit.stages import (
    PropertyValueCalculationService,
    PropertyValueInput,
    calculate_property_value,
    cap_rate_sensitivity,
)
from retrofit.stages.property_value import reference_year, to_series


def series(values, start=2024):
    return [YearValue(year=start + offset, value=value) for offset, value in enumerate(values)]


@pytest.fixture
def simple_input():
    return PropertyValueInput(
        noi_by_year_no_upgrade=series([100.0, 80.0, 60.0, 60.0, 70.0]),
        noi_by_year_with_upgrade=series([100.0, 90.0, 95.0, 95.0, 98.0]),
    )


class TestReferenceYear:
    def test_worst_case_takes_earliest_minimum(self):
        noi = to_series(series([100.0, 80.0, 60.0, 60.0, 70.0]))

        assert reference_year(noi, ValuationBasis.WORST_CASE) == 2026

    def test_first_year(self):
        noi = to_series(series([100.0, 80.0, 60.0]))

        assert reference_year(noi, ValuationBasis.FIRST_YEAR) == 2024


class TestCalculatePropertyValue:
    def test_worst_case(self, simple_input):
        output = calculate_property_value(simple_input)

        assert output.valuation_basis is ValuationBasis.WORST_CASE
        assert output.property_value_reference_year == 2026
        assert output.property_value_no_upgrade == pytest.approx(1_500.0)
        assert output.property_value_with_upgrade == pytest.approx(2_375.0)
        assert output.net_property_value_gain == pytest.approx(875.0)

    def test_first_year(self, simple_input):
        output = calculate_property_value(
            simple_input.copy(updates={"valuation_basis": ValuationBasis.FIRST_YEAR})
        )

        assert output.property_value_reference_year == 2024
        assert output.net_property_value_gain == 0.0

    def test_series_follow_the_noi(self, simple_input):
        output = calculate_property_value(simple_input.copy(updates={"cap_rate": 0.05}))

        assert [p.year for p in output.property_value_by_year_no_upgrade] == list(range(2024, 2029))
        assert [p.value for p in output.property_value_by_year_no_upgrade] == pytest.approx(
            [2_000.0, 1_600.0, 1_200.0, 1_200.0, 1_400.0]
        )
        assert output.cap_rate == 0.05

    def test_higher_cap_rate_lowers_value(self, simple_input):
        low = calculate_property_value(simple_input.copy(updates={"cap_rate": 0.04}))
        high = calculate_property_value(simple_input.copy(updates={"cap_rate": 0.08}))

        assert high.property_value_with_upgrade < low.property_value_with_upgrade


def test_cap_rate_sensitivity():
    table = cap_rate_sensitivity(series([100.0, 200.0]), [0.04, 0.05])

    assert isinstance(table, pd.DataFrame)
    assert list(table.columns) == [0.04, 0.05]
    assert table.loc[2025, 0.05] == pytest.approx(4_000.0)


class TestPropertyValueValidation:
    @pytest.fixture
    def service(self, store):
        return PropertyValueCalculationService(store)

    def test_valid(self, service, simple_input):
        report = service.validate(simple_input)

        assert report.valid
        assert report.warnings == []

    def test_missing_series(self, service):
        report = service.validate(PropertyValueInput())

        assert {issue.field for issue in report.errors} == {
            "noi_by_year_no_upgrade",
            "noi_by_year_with_upgrade",
        }
        assert "run the noi stage first" in report.errors[0].message

    def test_non_positive_cap_rate(self, service, simple_input):
        report = service.validate(simple_input.copy(updates={"cap_rate": 0.0}))

        assert [issue.field for issue in report.errors] == ["cap_rate"]

    def test_high_cap_rate_warns(self, service, simple_input):
        report = service.validate(simple_input.copy(updates={"cap_rate": 0.25}))

        assert report.valid
        assert [issue.field for issue in report.warnings] == ["cap_rate"]

    def test_mismatched_years(self, service, simple_input):
        data = simple_input.copy(updates={"noi_by_year_with_upgrade": series([1.0, 2.0], start=2030)})

        report = service.validate(data)

        assert [issue.field for issue in report.errors] == ["noi_by_year_with_upgrade"]


class TestPropertyValueService:
    def test_reference_building(self, calculated):
        """Worst case is the first year of the 2040-2049 penalty window."""
        assert calculated.property_value_reference_year == 2040
        assert calculated.property_value_no_upgrade == pytest.approx(32_577.48 / 0.04, abs=0.02)
        assert calculated.property_value_with_upgrade == pytest.approx(83_634.75 / 0.04, abs=0.02)
        assert calculated.net_property_value_gain == pytest.approx(1_276_431.75, abs=0.02)

    def test_basis_override_persists(self, engine, store, calculated):
        engine.execute_service(calculated.id, "property-value", {"valuation_basis": "first_year"})
        engine.execute_service(calculated.id, "noi", {"current_noi": 400_000.0})

        saved = store.get(calculated.id)
        assert saved.valuation_basis is ValuationBasis.FIRST_YEAR
        assert saved.property_value_reference_year == 2024
        assert saved.net_property_value_gain == 0.0
