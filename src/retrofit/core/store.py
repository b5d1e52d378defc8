# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Calculation record storage.

The engine only needs a key-value view of records: ``get`` by id and
``update`` with a partial set of fields. ``RecordStore`` is the protocol a
persistence backend implements; ``InMemoryRecordStore`` is the reference
implementation used by tests and single-process deployments.

Each update is atomic per record and bumps ``record_version``. Passing
``expected_version`` turns the update into a compare-and-swap: the write is
rejected with ``ConcurrentModificationError`` if another writer got there
first.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional, Protocol

from .errors import CalculationNotFoundError, ConcurrentModificationError
from .record import CalculationRecord, utcnow

logger = logging.getLogger(__name__)

_PROTECTED_FIELDS = frozenset({"id", "record_version", "created_at"})


class RecordStore(Protocol):
    """Storage boundary consumed by the stages and the dependency engine."""

    def get(self, calculation_id: str) -> Optional[CalculationRecord]: ...

    def create(self, record: CalculationRecord) -> CalculationRecord: ...

    def update(
        self,
        calculation_id: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> CalculationRecord: ...


class InMemoryRecordStore:
    """Thread-safe dict-backed record store."""

    def __init__(self) -> None:
        self._records: Dict[str, CalculationRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, calculation_id: str) -> bool:
        return calculation_id in self._records

    def get(self, calculation_id: str) -> Optional[CalculationRecord]:
        return self._records.get(calculation_id)

    def create(self, record: CalculationRecord) -> CalculationRecord:
        with self._lock:
            if record.id in self._records:
                raise ValueError(f"Calculation {record.id} already exists")
            self._records[record.id] = record
        logger.debug(f"Created calculation {record.id}")
        return record

    def update(
        self,
        calculation_id: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> CalculationRecord:
        unknown = set(fields) - set(CalculationRecord.model_fields)
        if unknown:
            raise ValueError(f"Unknown calculation fields: {sorted(unknown)}")
        protected = set(fields) & _PROTECTED_FIELDS
        if protected:
            raise ValueError(f"Fields cannot be updated: {sorted(protected)}")

        with self._lock:
            current = self._records.get(calculation_id)
            if current is None:
                raise CalculationNotFoundError(calculation_id)
            if expected_version is not None and current.record_version != expected_version:
                raise ConcurrentModificationError(
                    calculation_id, expected_version, current.record_version
                )
            updated = current.copy(
                updates={
                    **fields,
                    "record_version": current.record_version + 1,
                    "updated_at": utcnow(),
                }
            )
            self._records[calculation_id] = updated

        logger.debug(
            f"Updated calculation {calculation_id} "
            f"(version {updated.record_version}, {len(fields)} fields)"
        )
        return updated
