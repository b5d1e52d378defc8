# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Service registry - the stage dependency graph

Holds one ``CalculationService`` per stage and derives the execution order
from their declared ``dependencies`` with ``graphlib.TopologicalSorter``.
Stages that become ready at the same time are ordered by registration
order, so the resulting order is deterministic.

The graph is validated once, when the registry is built: every declared
dependency must be registered and the graph must be acyclic.
"""

from __future__ import annotations

import logging
from graphlib import CycleError, TopologicalSorter
from typing import Dict, Iterable, List, Optional, Set

from ..core.primitives import EngineSettings, StageName
from ..core.store import RecordStore
from ..external.noi_registry import NOIRegistry
from ..stages import (
    CalculationService,
    EnergyCalculationService,
    FinancialCalculationService,
    LL97CalculationService,
    NOICalculationService,
    PropertyValueCalculationService,
    UnitBreakdownService,
)

logger = logging.getLogger(__name__)


class ServiceRegistry:
    """
    Stage lookup and dependency ordering.

    Example:
        ```python
        registry = ServiceRegistry([unit_breakdown, energy, ll97, ...])
        registry.order          # topological execution order
        registry.dependents(StageName.ENERGY)
        ```
    """

    def __init__(self, services: Iterable[CalculationService]):
        self._services: Dict[StageName, CalculationService] = {}
        for service in services:
            if service.name in self._services:
                raise ValueError(f"Service {service.name.value} is already registered.")
            self._services[service.name] = service

        for service in self._services.values():
            unknown = [dep for dep in service.dependencies if dep not in self._services]
            if unknown:
                raise ValueError(
                    f"Service {service.name.value} depends on unregistered stage(s): "
                    f"{', '.join(dep.value for dep in unknown)}"
                )

        self._order = self._topological_order()
        self._rank = {stage: index for index, stage in enumerate(self._order, start=1)}
        logger.debug(f"Stage order: {[stage.value for stage in self._order]}")

    def _topological_order(self) -> List[StageName]:
        declared = {stage: index for index, stage in enumerate(self._services)}
        graph = {name: set(service.dependencies) for name, service in self._services.items()}
        order: List[StageName] = []
        try:
            ts = TopologicalSorter(graph)
            ts.prepare()
            while ts.is_active():
                node_group = sorted(ts.get_ready(), key=declared.__getitem__)
                order.extend(node_group)
                ts.done(*node_group)
        except CycleError as e:
            raise ValueError(f"Stage dependency graph has a cycle: {e.args[1]}") from e
        return order

    def __contains__(self, stage: StageName) -> bool:
        return stage in self._services

    def __len__(self) -> int:
        return len(self._services)

    def get(self, stage: StageName) -> CalculationService:
        """
        Registered service for ``stage``.

        Raises:
            KeyError: If no service is registered under that name
        """
        try:
            return self._services[StageName(stage)]
        except KeyError:
            raise KeyError(f"No service registered for stage {stage!r}") from None

    @property
    def order(self) -> List[StageName]:
        """All stages in execution order."""
        return list(self._order)

    def rank(self, stage: StageName) -> int:
        """1-based position of ``stage`` in the execution order."""
        return self._rank[StageName(stage)]

    def dependencies(self, stage: StageName) -> List[StageName]:
        """Direct upstream stages of ``stage``."""
        return list(self.get(stage).dependencies)

    def dependents(self, stage: StageName) -> List[StageName]:
        """
        Every stage downstream of ``stage``, transitively, in execution order.
        """
        found: Set[StageName] = set()
        frontier = [StageName(stage)]
        while frontier:
            current = frontier.pop()
            for name, service in self._services.items():
                if current in service.dependencies and name not in found:
                    found.add(name)
                    frontier.append(name)
        return sorted(found, key=self.rank)

    def downstream(self, stage: StageName) -> List[StageName]:
        """``stage`` followed by its transitive dependents, in execution order."""
        return [StageName(stage)] + self.dependents(stage)


def build_default_registry(
    store: RecordStore,
    noi_registry: Optional[NOIRegistry] = None,
    settings: Optional[EngineSettings] = None,
    limits=None,
) -> ServiceRegistry:
    """
    Registry with the six standard stages.

    Args:
        store: Record store shared by every stage
        noi_registry: Optional NOI registry client; without one the NOI stage
            uses the market-rate estimate
        settings: Engine settings shared by every stage
        limits: Optional emissions-limit table replacing the packaged one
    """
    settings = settings or EngineSettings()
    return ServiceRegistry(
        [
            UnitBreakdownService(store, settings),
            EnergyCalculationService(store, settings),
            LL97CalculationService(store, settings, limits=limits),
            FinancialCalculationService(store, settings),
            NOICalculationService(store, settings, noi_registry=noi_registry),
            PropertyValueCalculationService(store, settings),
        ]
    )
