# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Tests for the engine error taxonomy."""

from retrofit.core import (
    ComputationError,
    DependencyNotSatisfiedError,
    StageExecutionError,
    ValidationError,
)
from retrofit.core.primitives import ValidationIssue


def test_validation_error_lists_fields():
    error = ValidationError(
        "energy",
        [
            ValidationIssue(field="ptac_units", message="is required"),
            ValidationIssue(field="stories", message="must be at least 1 (got 0)"),
        ],
    )

    payload = error.to_dict()
    assert payload["code"] == "VALIDATION_ERROR"
    assert payload["error_type"] == "ValidationError"
    assert payload["details"]["fields"] == ["ptac_units", "stories"]
    assert "ptac_units: is required" in error.message


def test_dependency_error_names_missing_stages():
    error = DependencyNotSatisfiedError("financial", ["energy", "emissions-compliance"])

    assert error.code == "DEPENDENCY_NOT_SATISFIED"
    assert error.missing == ["energy", "emissions-compliance"]
    assert "energy, emissions-compliance" in str(error)


def test_stage_execution_error_wraps_cause():
    cause = ComputationError("no limit", {"use_type": "Bowling Alley"})
    error = StageExecutionError("emissions-compliance", cause, ["energy"])

    assert str(error) == "Failed to execute emissions-compliance service: no limit"
    assert error.completed == ["energy"]
    assert error.details["cause"]["code"] == "CALCULATION_ERROR"
