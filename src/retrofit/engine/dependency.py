# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Dependency engine - cascading recalculation

Runs stages against a calculation record in dependency order. Executing a
stage re-executes every stage downstream of it, so changing an input (for
example the PTHP unit cost) propagates through emissions compliance,
financial, NOI and property value. Upstream stages are never re-run.

FAILURE HANDLING:
- the requested stage: a validation failure raises ``ValidationError``;
  any other engine error is wrapped in ``StageExecutionError``
- a cascaded stage: with ``fail_on_error`` (the default) the cascade stops
  and ``StageExecutionError`` lists the stages that completed; otherwise
  the failure is logged, recorded on the report, and the failed stage's
  dependents are skipped
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Set

from pydantic import Field

from ..core.errors import (
    CalculationNotFoundError,
    DependencyNotSatisfiedError,
    RetrofitError,
    StageExecutionError,
    ValidationError,
)
from ..core.primitives import EngineSettings, Model, StageName, ValidationIssue
from ..core.record import CalculationRecord
from ..core.store import RecordStore
from ..stages import ExecutionResult
from .registry import ServiceRegistry

logger = logging.getLogger(__name__)


class CascadeReport(Model):
    """What one engine call did, stage by stage."""

    calculation_id: str
    requested: Optional[StageName] = None  # None for a full run
    executed: List[StageName] = Field(default_factory=list)
    skipped: List[StageName] = Field(default_factory=list)
    failed: List[StageName] = Field(default_factory=list)
    results: Dict[StageName, ExecutionResult] = Field(default_factory=dict)
    warnings: List[ValidationIssue] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failed


class _Cascade:
    """Mutable accumulator behind a ``CascadeReport``."""

    def __init__(self, calculation_id: str, requested: Optional[StageName]):
        self.calculation_id = calculation_id
        self.requested = requested
        self.executed: List[StageName] = []
        self.skipped: List[StageName] = []
        self.failed: List[StageName] = []
        self.results: Dict[StageName, ExecutionResult] = {}
        self.warnings: List[ValidationIssue] = []
        self.incomplete: Set[StageName] = set()  # Failed, or skipped behind a failure

    def fail(self, stage: StageName) -> None:
        self.failed.append(stage)
        self.incomplete.add(stage)

    def blocked(self, upstream: List[StageName]) -> bool:
        return any(stage in self.incomplete for stage in upstream)

    def report(self) -> CascadeReport:
        return CascadeReport(
            calculation_id=self.calculation_id,
            requested=self.requested,
            executed=self.executed,
            skipped=self.skipped,
            failed=self.failed,
            results=self.results,
            warnings=self.warnings,
        )


def validation_error_from_result(result: ExecutionResult) -> ValidationError:
    """Rebuild the ``ValidationError`` carried by an unsuccessful result."""
    details = (result.error or {}).get("details", {})
    issues = [
        ValidationIssue(field=field, message=message)
        for field, message in zip(details.get("fields", []), details.get("errors", []))
    ]
    return ValidationError(result.stage.value, issues)


class DependencyEngine:
    """
    Orchestrates stage execution over a ``ServiceRegistry``.

    Example:
        ```python
        engine = DependencyEngine(build_default_registry(store), store)
        engine.execute_all_services(calculation_id)
        engine.execute_service(calculation_id, "energy", {"pthp_unit_cost": 1500})
        ```
    """

    def __init__(
        self,
        registry: ServiceRegistry,
        store: RecordStore,
        settings: Optional[EngineSettings] = None,
    ):
        self.registry = registry
        self.store = store
        self.settings = settings or EngineSettings()

    # === QUERIES ===

    def _load(self, calculation_id: str) -> CalculationRecord:
        record = self.store.get(calculation_id)
        if record is None:
            raise CalculationNotFoundError(calculation_id)
        return record

    def missing_dependencies(self, calculation_id: str, stage: StageName) -> List[StageName]:
        record = self._load(calculation_id)
        return [
            dep for dep in self.registry.dependencies(stage) if dep.value not in record.service_versions
        ]

    def are_dependencies_satisfied(self, calculation_id: str, stage: StageName) -> bool:
        """True if every direct upstream stage has completed at least once."""
        return not self.missing_dependencies(calculation_id, stage)

    def get_service_status(self, calculation_id: str) -> Dict[str, bool]:
        """Completion flag per stage, in execution order."""
        record = self._load(calculation_id)
        return {stage.value: stage.value in record.service_versions for stage in self.registry.order}

    # === EXECUTION ===

    def execute_service(
        self,
        calculation_id: str,
        stage: StageName,
        overrides: Optional[Mapping[str, Any]] = None,
        cascade: bool = True,
        user_id: Optional[str] = None,
    ) -> CascadeReport:
        """
        Run ``stage`` with ``overrides`` and then, if ``cascade``, every
        downstream stage without overrides.

        Raises:
            CalculationNotFoundError: If the record does not exist
            DependencyNotSatisfiedError: If an upstream stage never completed
            ValidationError: If the requested stage's input is invalid
            StageExecutionError: If a stage fails during execution
        """
        stage = StageName(stage)
        self._load(calculation_id)
        missing = self.missing_dependencies(calculation_id, stage)
        if missing:
            raise DependencyNotSatisfiedError(stage.value, [dep.value for dep in missing])

        run = _Cascade(calculation_id, stage)
        self._run(run, stage, overrides, user_id)

        if cascade:
            dependents = self.registry.dependents(stage)
            if dependents:
                logger.info(
                    f"Cascading {stage.value} for {calculation_id} to: "
                    f"{', '.join(dep.value for dep in dependents)}"
                )
            self._run_all(run, dependents, user_id)
        return run.report()

    def execute_all_services(self, calculation_id: str, user_id: Optional[str] = None) -> CascadeReport:
        """
        Run every stage in execution order.

        The unit-breakdown stage is skipped once it has completed so that a
        user-corrected unit mix is not recomputed from scratch; run it
        explicitly with ``execute_service`` to change it.
        """
        record = self._load(calculation_id)
        run = _Cascade(calculation_id, None)
        stages = []
        for stage in self.registry.order:
            if stage is StageName.UNIT_BREAKDOWN and stage.value in record.service_versions:
                logger.debug(f"{stage.value} already calculated for {calculation_id}; skipping")
                run.skipped.append(stage)
                continue
            stages.append(stage)
        logger.info(f"Executing all services for {calculation_id}: {', '.join(s.value for s in stages)}")
        self._run_all(run, stages, user_id)
        return run.report()

    def _run_all(self, run: _Cascade, stages: List[StageName], user_id: Optional[str]) -> None:
        for stage in stages:
            if run.blocked(self.registry.dependencies(stage)):
                logger.warning(
                    f"Skipping {stage.value} for {run.calculation_id}: an upstream stage did not complete"
                )
                run.skipped.append(stage)
                run.incomplete.add(stage)
                continue
            self._run(run, stage, None, user_id)

    def _run(
        self,
        run: _Cascade,
        stage: StageName,
        overrides: Optional[Mapping[str, Any]],
        user_id: Optional[str],
    ) -> ExecutionResult:
        service = self.registry.get(stage)
        requested = stage is run.requested
        completed = [s.value for s in run.executed]
        try:
            result = service.execute(run.calculation_id, overrides=overrides, user_id=user_id)
        except RetrofitError as e:
            logger.error(
                f"Failed to execute {stage.value} service for {run.calculation_id}: {e}", exc_info=True
            )
            run.fail(stage)
            if requested or self.settings.execution.fail_on_error:
                raise StageExecutionError(stage.value, e, completed) from e
            result = ExecutionResult(stage=stage, success=False, error=e.to_dict())
            run.results[stage] = result
            return result

        run.results[stage] = result
        run.warnings.extend(result.warnings)
        if result.success:
            run.executed.append(stage)
            return result

        run.fail(stage)
        error = validation_error_from_result(result)
        if requested:
            raise error
        if self.settings.execution.fail_on_error:
            raise StageExecutionError(stage.value, error, completed)
        logger.error(f"Failed to execute {stage.value} service for {run.calculation_id}: {error}")
        return result

    # === MAINTENANCE ===

    def reset_calculation(self, calculation_id: str, stage: Optional[StageName] = None) -> CalculationRecord:
        """
        Mark stages as not calculated.

        Removes the version entries of ``stage`` and everything downstream of
        it (or of every stage). Output fields are left in place; they are
        overwritten by the next run.
        """
        record = self._load(calculation_id)
        stages = self.registry.downstream(stage) if stage is not None else self.registry.order
        names = {s.value for s in stages}
        logger.info(f"Resetting {', '.join(sorted(names))} for {calculation_id}")
        return self.store.update(
            calculation_id,
            {
                "service_versions": {k: v for k, v in record.service_versions.items() if k not in names},
                "service_calculated_at": {
                    k: v for k, v in record.service_calculated_at.items() if k not in names
                },
                "last_calculated_service": None,
            },
        )
