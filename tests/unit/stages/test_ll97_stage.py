# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit Tests for the Emissions-Compliance (LL97) Stage

Reference case: class R6, 100,000 sq ft, no property-use breakdown,
baseline 1,250.5 tCO2e, 2,550 MMBtu of PTAC gas heating replaced by
79,656.53 kWh of heat-pump heating.
"""

import pytest

from retrofit.core import ComputationError
from retrofit.core.primitives import CompliancePeriod, FeeWindow
from retrofit.stages import LL97CalculationService, LL97Input, calculate_ll97
from retrofit.stages.ll97 import emissions_budgets, penalty


@pytest.fixture
def reference_input():
    return LL97Input(
        baseline_emissions=1250.5,
        total_square_feet=100_000.0,
        building_class="R6",
        annual_building_mmbtu_heating_ptac=2550.0,
        annual_building_kwh_heating_pthp=79656.53,
    )


class TestEmissionsBudgets:
    def test_residential_fallback(self):
        budgets = emissions_budgets(total_square_feet=100_000.0, building_class="R6", property_use_areas=None)

        assert budgets[CompliancePeriod.P2024_2029] == pytest.approx(892.0)
        assert budgets[CompliancePeriod.P2030_2034] == pytest.approx(453.0)

    def test_property_use_breakdown(self):
        budgets = emissions_budgets(
            total_square_feet=None,
            building_class="R6",
            property_use_areas={"Multifamily Housing": 80_000.0, "Office": 20_000.0},
        )

        assert budgets[CompliancePeriod.P2024_2029] == pytest.approx(80_000 * 0.00675 + 20_000 * 0.00846)
        assert budgets[CompliancePeriod.P2040_2049] == pytest.approx(80_000 * 0.00166898 + 20_000 * 0.00105409)

    def test_lower_case_use_type(self):
        budgets = emissions_budgets(
            total_square_feet=None,
            building_class="R6",
            property_use_areas={"multifamily housing": 100_000.0},
        )

        assert budgets[CompliancePeriod.P2024_2029] == pytest.approx(100_000 * 0.00675)

    def test_unknown_use_type_fails(self):
        with pytest.raises(ComputationError, match="Bowling Alley"):
            emissions_budgets(
                total_square_feet=None, building_class=None, property_use_areas={"Bowling Alley": 5000.0}
            )

    def test_no_area_fails(self):
        with pytest.raises(ComputationError, match="floor area"):
            emissions_budgets(total_square_feet=None, building_class="R6", property_use_areas=None)


def test_penalty_never_negative():
    assert penalty(100.0, 150.0, 268.0) == 0.0
    assert penalty(150.0, 100.0, 268.0) == 13_400.0


class TestCalculateLL97:
    def test_current_fees(self, reference_input):
        output = calculate_ll97(reference_input)

        assert output.emissions_budget_2024_to_2029 == 892.0
        assert output.emissions_budget_2030_to_2034 == 453.0
        assert output.current_ll97_fee_2024_to_2029 == pytest.approx(96_078.0)
        assert output.current_ll97_fee_2030_to_2034 == pytest.approx(213_730.0)
        assert output.worst_case_ll97_fee == output.current_ll97_fee_2040_to_2049

    def test_be_credits(self, reference_input):
        output = calculate_ll97(reference_input.copy(updates={"annual_building_kwh_heating_pthp": 35_000.0}))

        assert output.be_credit_before_2027 == pytest.approx(45.5)
        assert output.be_credit_2027_to_2029 == pytest.approx(22.75)
        assert output.total_be_credit_available == pytest.approx(68.25)

    def test_adjusted_emissions_and_fees(self, reference_input):
        output = calculate_ll97(reference_input)

        assert output.adjusted_emissions_2024_to_2029 == pytest.approx(1138.09)
        assert output.adjusted_emissions_2030_to_2034 == pytest.approx(1126.62)
        assert output.adjusted_ll97_fee_before_2027 == pytest.approx(38_200.72)
        assert output.adjusted_ll97_fee_2027_to_2029 == pytest.approx(52_075.08)
        assert output.adjusted_ll97_fee_2030_to_2034 == pytest.approx(180_530.16)
        assert output.adjusted_ll97_fee_2040_to_2049 == pytest.approx(286_339.24)

    def test_retrofit_never_increases_fees(self, reference_input):
        output = calculate_ll97(reference_input)

        for window in FeeWindow:
            assert output.adjusted_fee(window) <= output.current_fee(window.period)

    def test_fees_clamped_at_zero(self, reference_input):
        output = calculate_ll97(reference_input.copy(updates={"baseline_emissions": 100.0}))

        assert output.current_ll97_fee_2024_to_2029 == 0.0
        assert all(output.adjusted_fee(window) == 0.0 for window in FeeWindow)
        assert output.compliance_status["2024_to_2029"] is True

    def test_compliance_status(self, reference_input):
        output = calculate_ll97(reference_input)

        assert output.compliance_status == {period.value: False for period in CompliancePeriod}

    def test_custom_fee_rate(self, reference_input):
        output = calculate_ll97(reference_input.copy(updates={"fee_per_ton": 100.0}))

        assert output.current_ll97_fee_2024_to_2029 == pytest.approx((1250.5 - 892) * 100)


class TestLL97Validation:
    @pytest.fixture
    def service(self, store):
        return LL97CalculationService(store)

    def test_reference_valid(self, service, reference_input):
        assert service.validate(reference_input).valid

    def test_missing_inputs(self, service):
        report = service.validate(LL97Input())

        assert {issue.field for issue in report.errors} == {
            "baseline_emissions",
            "total_square_feet",
            "annual_building_mmbtu_heating_ptac",
            "annual_building_kwh_heating_pthp",
        }

    def test_breakdown_replaces_floor_area(self, service, reference_input):
        data = reference_input.copy(
            updates={"total_square_feet": None, "property_use_areas": {"Office": 10_000.0}}
        )

        assert service.validate(data).valid

    @pytest.mark.parametrize(
        "updates, field",
        [
            ({"baseline_emissions": 0.0}, "baseline_emissions"),
            ({"total_square_feet": -5.0}, "total_square_feet"),
            ({"fee_per_ton": -1.0}, "fee_per_ton"),
            ({"property_use_areas": {"Office": -10.0}}, "property_use_areas"),
        ],
    )
    def test_errors(self, service, reference_input, updates, field):
        report = service.validate(reference_input.copy(updates=updates))

        assert field in [issue.field for issue in report.errors]


class TestLL97Service:
    def test_reads_breakdown_from_raw_ll84(self, engine, store, make_record):
        record = make_record(
            raw_ll84_data={"list_of_all_property_use": "Multifamily Housing (90000.0), Retail Store (10000.0)"}
        )
        engine.execute_service(record.id, "unit-breakdown")

        saved = store.get(record.id)
        assert saved.property_use_areas == {"Multifamily Housing": 90_000.0, "Retail Store": 10_000.0}
        assert saved.emissions_budget_2024_to_2029 == pytest.approx(90_000 * 0.00675 + 10_000 * 0.01181)

    def test_non_text_raw_breakdown_ignored(self, engine, store, make_record):
        """Test a malformed LL84 property-use value falls back to the floor-area estimate."""
        record = make_record(raw_ll84_data={"list_of_all_property_use": ["Office", 264550.0]})

        report = engine.execute_service(record.id, "unit-breakdown")

        assert report.succeeded
        saved = store.get(record.id)
        assert saved.property_use_areas is None
        assert saved.emissions_budget_2024_to_2029 == pytest.approx(892.0)

    def test_baseline_emissions_from_raw_ll84(self, engine, store, make_record):
        record = make_record(baseline_emissions=None, raw_ll84_data={"total_location_based_ghg": "1250.5"})
        engine.execute_service(record.id, "unit-breakdown")

        assert store.get(record.id).current_ll97_fee_2024_to_2029 == pytest.approx(96_078.0)
