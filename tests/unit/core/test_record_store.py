# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit Tests for the In-Memory Record Store

Covers record creation, partial updates, protected fields and the
compare-and-swap guard on ``record_version``.
"""

import pydantic
import pytest

from retrofit.core import (
    CalculationNotFoundError,
    CalculationRecord,
    ConcurrentModificationError,
    UnitMix,
)


@pytest.fixture
def stored(store):
    return store.create(CalculationRecord(id="calc-1", bbl="1000010001"))


class TestInMemoryRecordStore:
    def test_create_and_get(self, store, stored):
        assert "calc-1" in store
        assert len(store) == 1
        assert store.get("calc-1") == stored
        assert store.get("missing") is None

    def test_duplicate_create(self, store, stored):
        with pytest.raises(ValueError, match="already exists"):
            store.create(CalculationRecord(id="calc-1"))

    def test_update_bumps_version(self, store, stored):
        updated = store.update("calc-1", {"ptac_units": 100})

        assert updated.ptac_units == 100
        assert updated.record_version == stored.record_version + 1
        assert updated.updated_at >= stored.updated_at
        assert store.get("calc-1").ptac_units == 100

    def test_update_coerces_nested_models(self, store, stored):
        updated = store.update("calc-1", {"unit_mix": {"studio": 3, "one_bed": 2}})

        assert isinstance(updated.unit_mix, UnitMix)
        assert updated.unit_mix.total_units == 5

    def test_update_missing_record(self, store):
        with pytest.raises(CalculationNotFoundError, match="missing"):
            store.update("missing", {"ptac_units": 1})

    def test_unknown_field(self, store, stored):
        with pytest.raises(ValueError, match="Unknown calculation fields"):
            store.update("calc-1", {"not_a_field": 1})

    @pytest.mark.parametrize("field", ["id", "record_version", "created_at"])
    def test_protected_fields(self, store, stored, field):
        with pytest.raises(ValueError, match="cannot be updated"):
            store.update("calc-1", {field: None})

    def test_compare_and_swap(self, store, stored):
        store.update("calc-1", {"ptac_units": 10}, expected_version=0)

        with pytest.raises(ConcurrentModificationError) as exc_info:
            store.update("calc-1", {"ptac_units": 20}, expected_version=0)

        assert exc_info.value.expected == 0
        assert exc_info.value.actual == 1
        assert store.get("calc-1").ptac_units == 10

    def test_records_are_immutable(self, stored):
        with pytest.raises(pydantic.ValidationError):
            stored.ptac_units = 5
