# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import Field, model_validator

from .model import Model
from .types import Year


class AnalysisSettings(Model):
    """
    Calendar assumptions shared by the financial, NOI and valuation stages.

    The analysis window covers every year from ``analysis_start_year`` to
    ``analysis_end_year`` inclusive. Energy savings start accruing in
    ``savings_start_year`` (the first full year after retrofit completion)
    while LL97 fee avoidance is only counted from ``fees_assessed_year``.
    """

    analysis_start_year: Year = Field(
        default=2024, description="First year of the projection window."
    )
    analysis_end_year: Year = Field(
        default=2050, description="Last year of the projection window (inclusive)."
    )
    upgrade_year: Year = Field(
        default=2025, description="Year the PTHP retrofit is completed."
    )
    loan_start_year: Year = Field(
        default=2025, description="Year the retrofit loan is originated."
    )
    savings_start_year: Year = Field(
        default=2026, description="First year energy savings accrue."
    )
    fees_assessed_year: Year = Field(
        default=2026,
        description="First year LL97 penalties are charged and fee avoidance is counted.",
    )

    @model_validator(mode="after")
    def check_year_ordering(self) -> "AnalysisSettings":
        """Ensure the analysis window is well formed."""
        if self.analysis_start_year > self.analysis_end_year:
            raise ValueError(
                f"analysis_start_year ({self.analysis_start_year}) must not be after "
                f"analysis_end_year ({self.analysis_end_year})"
            )
        if self.savings_start_year < self.upgrade_year:
            raise ValueError(
                "savings_start_year must not be before upgrade_year "
                f"({self.savings_start_year} < {self.upgrade_year})"
            )
        return self

    @property
    def years(self) -> range:
        """Every year in the analysis window."""
        return range(self.analysis_start_year, self.analysis_end_year + 1)


class ExecutionSettings(Model):
    """Settings controlling how the dependency engine runs stages."""

    fail_on_error: bool = Field(
        default=True,
        description=(
            "If True, a failing cascaded stage aborts the rest of the cascade and "
            "the error is raised; if False, the failure is logged and recorded on "
            "the cascade report and the remaining independent stages still run."
        ),
    )
    verify_record_version: bool = Field(
        default=True,
        description=(
            "Guard each stage write with the record version read at input-build "
            "time, rejecting writes that race with another writer."
        ),
    )


class EngineSettings(Model):
    """
    Top-level configuration for the calculation engine.

    Usage Examples:
        # Defaults: 2024-2050 window, retrofit in 2025, savings from 2026
        settings = EngineSettings()

        # Later retrofit
        settings = EngineSettings(
            analysis=AnalysisSettings(upgrade_year=2027, savings_start_year=2028)
        )
    """

    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)
