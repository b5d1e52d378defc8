# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base Pydantic model with common configuration.

    Immutable models; records are replaced through the store rather than
    mutated in place.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,  # Records are replaced, never mutated
        extra="forbid",  # Catches typos in field names and override payloads
    )

    def copy(self, *, updates: Optional[Dict[str, Any]] = None) -> "Model":
        """
        Return a deep copy of the model with optional field updates.

        Unlike ``model_copy(update=...)`` the result is re-validated, so
        updated values are coerced to the declared field types.

        Args:
            updates: Optional dictionary of field values to update

        Returns:
            A validated deep copy of the model
        """
        data = self.model_dump()
        data.update(updates or {})
        return type(self).model_validate(data)
