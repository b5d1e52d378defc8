# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Error taxonomy for the calculation engine.

Every error carries a machine-readable ``code``, a human-readable ``message``
and a ``details`` mapping so that a caller (for example an HTTP handler) can
report which field or stage failed without exposing internals.

- ``ValidationError``: stage input missing or out of range. Blocks that
  stage only and carries field-level issues.
- ``ComputationError``: an invariant the algorithm cannot satisfy, e.g. an
  emissions-limit use type with no known limit.
- ``DependencyNotSatisfiedError``: an upstream stage has never completed.
- ``CalculationNotFoundError``: no record with the requested id.
- ``StageExecutionError``: the engine's wrapper for a failed stage, listing
  the stages the cascade had completed before the failure.
- ``ConcurrentModificationError``: the record changed between read and write.
- ``NOIRegistryError``: the external NOI registry could not be queried.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

if TYPE_CHECKING:
    from .primitives.validation import ValidationIssue


class RetrofitError(Exception):
    """Base exception for all calculation engine errors."""

    code = "RETROFIT_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class CalculationNotFoundError(RetrofitError):
    code = "CALCULATION_NOT_FOUND"

    def __init__(self, calculation_id: str):
        self.calculation_id = calculation_id
        super().__init__(
            f"Calculation {calculation_id} not found",
            {"calculation_id": calculation_id},
        )


class ValidationError(RetrofitError):
    """Stage input failed validation; ``issues`` names the offending fields."""

    code = "VALIDATION_ERROR"

    def __init__(self, stage: str, issues: Sequence["ValidationIssue"]):
        self.stage = stage
        self.issues = list(issues)
        summary = "; ".join(str(issue) for issue in self.issues)
        super().__init__(
            f"Validation failed for {stage}: {summary}",
            {
                "stage": stage,
                "fields": [issue.field for issue in self.issues],
                "errors": [issue.message for issue in self.issues],
            },
        )


class ComputationError(RetrofitError):
    code = "CALCULATION_ERROR"


class DependencyNotSatisfiedError(RetrofitError):
    code = "DEPENDENCY_NOT_SATISFIED"

    def __init__(self, stage: str, missing: Sequence[str]):
        self.stage = stage
        self.missing = list(missing)
        super().__init__(
            f"Cannot execute {stage}: upstream stage(s) {', '.join(self.missing)} "
            "have not been calculated",
            {"stage": stage, "missing": self.missing},
        )


class StageExecutionError(RetrofitError):
    """A stage failed while the engine was running it."""

    code = "STAGE_EXECUTION_ERROR"

    def __init__(
        self,
        stage: str,
        cause: Exception,
        completed: Optional[List[str]] = None,
    ):
        self.stage = stage
        self.cause = cause
        self.completed = list(completed or [])
        details: Dict[str, Any] = {"stage": stage, "completed": self.completed}
        if isinstance(cause, RetrofitError):
            details["cause"] = cause.to_dict()
        super().__init__(f"Failed to execute {stage} service: {cause}", details)


class ConcurrentModificationError(RetrofitError):
    code = "CONCURRENT_MODIFICATION"

    def __init__(self, calculation_id: str, expected: int, actual: int):
        self.calculation_id = calculation_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Calculation {calculation_id} was modified concurrently "
            f"(expected version {expected}, found {actual})",
            {"calculation_id": calculation_id, "expected": expected, "actual": actual},
        )


class NOIRegistryError(RetrofitError):
    code = "NOI_REGISTRY_ERROR"
