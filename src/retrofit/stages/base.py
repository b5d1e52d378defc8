# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Stage Contract - the uniform calculation service interface

Every calculation stage (unit breakdown, energy, emissions compliance,
financial, NOI, property value) implements ``CalculationService`` so the
dependency engine can treat them all alike.

EXECUTION FLOW:
1. Load the calculation record from the store
2. ``build_input``: read the stage's upstream fields from the record and
   merge caller overrides on top (caller values win)
3. ``validate``: report field-level errors (blocking) and warnings
   (non-blocking); validation failures are returned, never raised
4. ``compute``: pure function of the input
5. ``persist``: write the output fields, the stage's version marker and any
   override audit entries in a single atomic store update

Stages never read another stage's private state, only the published fields
on the record, and only a stage's own persister writes its output fields.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Generic,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

import pydantic
from pydantic import Field

from ..core.errors import (
    CalculationNotFoundError,
    ComputationError,
    RetrofitError,
    ValidationError,
)
from ..core.primitives import (
    EngineSettings,
    Model,
    StageName,
    ValidationIssue,
    ValidationReport,
)
from ..core.record import CalculationRecord, OverrideEntry, utcnow
from ..core.store import RecordStore

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"


class StageInput(Model):
    """
    Base class for stage inputs.

    Inputs are lenient on purpose: fields read from the record are Optional
    so that a missing value is reported by ``validate`` with its field name
    instead of failing model construction.
    """


class StageOutput(Model):
    """Base class for stage outputs; every field maps onto a record field."""


InputT = TypeVar("InputT", bound=StageInput)
OutputT = TypeVar("OutputT", bound=StageOutput)


class ExecutionResult(Model):
    """Outcome of running one stage for one calculation."""

    stage: StageName
    success: bool
    output: Optional[Dict[str, Any]] = None
    error: Optional[Dict[str, Any]] = None
    warnings: List[ValidationIssue] = Field(default_factory=list)
    overrides_applied: List[str] = Field(default_factory=list)
    execution_time: float = 0.0  # seconds


def issues_from_pydantic(exc: pydantic.ValidationError) -> List[ValidationIssue]:
    """Translate pydantic errors on an input model into field-level issues."""
    issues = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "__root__"
        issues.append(ValidationIssue(field=field, message=err.get("msg", "invalid value")))
    return issues


class CalculationService(ABC, Generic[InputT, OutputT]):
    """
    Base class for all calculation stages.

    Subclasses declare their identity as class attributes and implement
    ``read_record``, ``validate`` and ``compute``. ``build_input``,
    ``persist`` and ``execute`` are shared.

    Attributes:
        name: Stage name, the key in the dependency graph
        version: Version tag written to the record's service-version map
        dependencies: Upstream stages whose published fields this stage reads
        input_model: Pydantic input type; its fields are the overridable fields
        output_model: Pydantic output type; its fields are the persisted fields
    """

    name: ClassVar[StageName]
    version: ClassVar[str] = "1.0.0"
    dependencies: ClassVar[Tuple[StageName, ...]] = ()
    input_model: ClassVar[Type[StageInput]]
    output_model: ClassVar[Type[StageOutput]]

    def __init__(self, store: RecordStore, settings: Optional[EngineSettings] = None):
        self.store = store
        self.settings = settings or EngineSettings()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name.value!r}, version={self.version!r})"

    # === INPUT ===

    @property
    def overridable_fields(self) -> FrozenSet[str]:
        return frozenset(self.input_model.model_fields)

    def filter_overrides(self, overrides: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """
        Keep only overrides this stage knows about.

        Unknown field names are ignored (not errors) and ``None`` values are
        skipped, so a caller can post a sparse form.
        """
        if not overrides:
            return {}
        accepted = {}
        for key, value in overrides.items():
            if value is None:
                continue
            if key not in self.overridable_fields:
                logger.debug(f"[{self.name.value}] Ignoring unknown override field {key!r}")
                continue
            accepted[key] = value
        return accepted

    @abstractmethod
    def read_record(self, record: CalculationRecord) -> Dict[str, Any]:
        """Upstream values for the input model, read from the record."""

    def build_input(
        self, record: CalculationRecord, overrides: Optional[Mapping[str, Any]] = None
    ) -> InputT:
        """
        Build the typed stage input.

        Raises:
            pydantic.ValidationError: If an override cannot be coerced to the
                declared field type.
        """
        values = self.read_record(record)
        values.update(self.filter_overrides(overrides))
        return self.input_model.model_validate(values)

    # === CALCULATION ===

    @abstractmethod
    def validate(self, data: InputT) -> ValidationReport:
        """Check required fields and domain ranges."""

    @abstractmethod
    def compute(self, data: InputT) -> OutputT:
        """Pure calculation: no store access, no side effects."""

    # === OUTPUT ===

    def to_record_fields(self, output: OutputT) -> Dict[str, Any]:
        """Record fields written by this stage's persister."""
        return output.model_dump()

    def persist(
        self,
        calculation_id: str,
        output: OutputT,
        *,
        overrides: Optional[Mapping[str, Any]] = None,
        user_id: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> CalculationRecord:
        """
        Write output fields and stage metadata in one atomic update.

        Args:
            calculation_id: Record to update
            output: Computed stage output
            overrides: Accepted overrides to record in the audit trail
            user_id: Actor recorded on audit entries ("system" if absent)
            expected_version: Optional compare-and-swap guard

        Returns:
            The updated record
        """
        record = self.store.get(calculation_id)
        if record is None:
            raise CalculationNotFoundError(calculation_id)

        now = utcnow()
        fields = self.to_record_fields(output)
        fields["service_versions"] = {**record.service_versions, self.name.value: self.version}
        fields["service_calculated_at"] = {**record.service_calculated_at, self.name.value: now}
        fields["last_calculated_service"] = self.name.value

        if overrides:
            audit = dict(record.overridden_fields)
            for field, value in overrides.items():
                audit[f"{self.name.value}.{field}"] = OverrideEntry(
                    value=value,
                    overridden_at=now,
                    overridden_by=user_id or SYSTEM_ACTOR,
                    service=self.name.value,
                )
            fields["overridden_fields"] = audit

        return self.store.update(calculation_id, fields, expected_version=expected_version)

    # === EXECUTION ===

    def execute(
        self,
        calculation_id: str,
        overrides: Optional[Mapping[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> ExecutionResult:
        """
        Run the stage once for one calculation.

        Validation failures are returned as an unsuccessful result carrying a
        ``VALIDATION_ERROR``. Computation failures raise.

        Raises:
            CalculationNotFoundError: If the record does not exist
            ComputationError: If the algorithm cannot produce an output
            ConcurrentModificationError: If the record changed mid-execution
        """
        started = time.perf_counter()
        logger.info(f"[{self.name.value}] Starting calculation for {calculation_id}")

        record = self.store.get(calculation_id)
        if record is None:
            raise CalculationNotFoundError(calculation_id)

        accepted = self.filter_overrides(overrides)
        try:
            data = self.build_input(record, accepted)
        except pydantic.ValidationError as e:
            return self._invalid(ValidationReport.from_issues(issues_from_pydantic(e)), accepted, started)

        report = self.validate(data)
        for warning in report.warnings:
            logger.warning(f"[{self.name.value}] {calculation_id}: {warning}")
        if not report.valid:
            return self._invalid(report, accepted, started)

        try:
            output = self.compute(data)
        except RetrofitError:
            raise
        except (ArithmeticError, ValueError, KeyError, TypeError) as e:
            raise ComputationError(
                f"{self.name.value} calculation failed: {e}", {"stage": self.name.value}
            ) from e

        expected = record.record_version if self.settings.execution.verify_record_version else None
        self.persist(
            calculation_id, output, overrides=accepted, user_id=user_id, expected_version=expected
        )

        elapsed = time.perf_counter() - started
        logger.info(f"[{self.name.value}] Completed calculation for {calculation_id} in {elapsed:.3f}s")
        return ExecutionResult(
            stage=self.name,
            success=True,
            output=output.model_dump(mode="json"),
            warnings=report.warnings,
            overrides_applied=sorted(accepted),
            execution_time=elapsed,
        )

    def _invalid(
        self, report: ValidationReport, accepted: Mapping[str, Any], started: float
    ) -> ExecutionResult:
        error = ValidationError(self.name.value, report.errors)
        logger.warning(f"[{self.name.value}] {error.message}")
        return ExecutionResult(
            stage=self.name,
            success=False,
            error=error.to_dict(),
            warnings=report.warnings,
            overrides_applied=sorted(accepted),
            execution_time=time.perf_counter() - started,
        )


# === VALIDATION HELPERS ===


def require(
    errors: List[ValidationIssue], field: str, value: Optional[Any], message: Optional[str] = None
) -> bool:
    """Record an error if ``value`` is missing; returns True when present."""
    if value is None:
        errors.append(ValidationIssue(field=field, message=message or "is required"))
        return False
    return True


def check_range(
    issues: List[ValidationIssue],
    field: str,
    value: Optional[float],
    *,
    gt: Optional[float] = None,
    ge: Optional[float] = None,
    le: Optional[float] = None,
) -> None:
    """Record an issue if ``value`` is present and outside the given bounds."""
    if value is None:
        return
    if gt is not None and not value > gt:
        issues.append(ValidationIssue(field=field, message=f"must be greater than {gt} (got {value})"))
    elif ge is not None and not value >= ge:
        issues.append(ValidationIssue(field=field, message=f"must be at least {ge} (got {value})"))
    elif le is not None and not value <= le:
        issues.append(ValidationIssue(field=field, message=f"must be at most {le} (got {value})"))
