# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Validation reports returned by calculation stages.

Stages never raise on bad input; they return a ``ValidationReport`` listing
field-level errors (which block computation) and warnings (which do not).
"""

from __future__ import annotations

from typing import Iterable, List

from pydantic import Field

from .model import Model


class ValidationIssue(Model):
    """A single problem with one input field."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ValidationReport(Model):
    """Outcome of validating a stage input."""

    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    @classmethod
    def from_issues(
        cls,
        errors: Iterable[ValidationIssue] = (),
        warnings: Iterable[ValidationIssue] = (),
    ) -> "ValidationReport":
        return cls(errors=list(errors), warnings=list(warnings))
