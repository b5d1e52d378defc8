# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Tests for the unit-breakdown stage."""

import pytest

from retrofit.core import UnitMix
from retrofit.core.primitives import StageName
from retrofit.stages import UnitBreakdownInput, UnitBreakdownService, calculate_unit_breakdown


class TestCalculateUnitBreakdown:
    def test_ptac_count_from_mix(self):
        output = calculate_unit_breakdown(UnitBreakdownInput(studio=5, one_bed=10, two_bed=8, three_plus=2))

        assert output.ptac_units == 5 * 1 + 10 * 2 + 8 * 3 + 2 * 4
        assert output.number_of_bedrooms == 10 + 16 + 6
        assert output.unit_mix.total_units == 25

    def test_explicit_ptac_count_wins(self):
        output = calculate_unit_breakdown(UnitBreakdownInput(one_bed=10, ptac_units=7))

        assert output.ptac_units == 7
        assert output.number_of_bedrooms == 10


class TestUnitBreakdownValidation:
    @pytest.fixture
    def service(self, store):
        return UnitBreakdownService(store)

    def test_empty_mix_rejected(self, service):
        report = service.validate(UnitBreakdownInput())

        assert not report.valid
        assert report.errors[0].field == "unit_mix"

    def test_negative_count_rejected(self, service):
        report = service.validate(UnitBreakdownInput(studio=-1, one_bed=4))

        assert [issue.field for issue in report.errors] == ["studio"]

    def test_explicit_count_without_mix(self, service):
        assert service.validate(UnitBreakdownInput(ptac_units=12)).valid

    def test_non_positive_explicit_count(self, service):
        report = service.validate(UnitBreakdownInput(one_bed=4, ptac_units=0))

        assert report.errors[0].field == "ptac_units"


class TestUnitBreakdownService:
    def test_execute_persists_mix(self, store, record):
        service = UnitBreakdownService(store)

        result = service.execute(record.id)

        assert result.success
        saved = store.get(record.id)
        assert saved.ptac_units == 100
        assert saved.number_of_bedrooms == 60
        assert saved.service_versions == {StageName.UNIT_BREAKDOWN.value: "1.0.0"}
        assert saved.last_calculated_service == "unit-breakdown"

    def test_override_mix(self, store, record):
        service = UnitBreakdownService(store)

        service.execute(record.id, overrides={"studio": 10, "one_bed": 0, "two_bed": 0})

        saved = store.get(record.id)
        assert saved.unit_mix == UnitMix(studio=10)
        assert saved.ptac_units == 10

    def test_overridden_ptac_count_kept_on_rerun(self, store, record):
        service = UnitBreakdownService(store)
        service.execute(record.id, overrides={"ptac_units": 120})

        service.execute(record.id)

        assert store.get(record.id).ptac_units == 120

    def test_derived_ptac_count_recomputed(self, store, record):
        service = UnitBreakdownService(store)
        service.execute(record.id)

        service.execute(record.id, overrides={"studio": 10, "one_bed": 0, "two_bed": 0})

        assert store.get(record.id).ptac_units == 10
