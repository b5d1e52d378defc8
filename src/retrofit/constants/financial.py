# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Loan and payback defaults for the financial stage."""

DEFAULT_LOAN_TERM_YEARS = 15
DEFAULT_ANNUAL_INTEREST_RATE = 0.06
MONTHS_PER_YEAR = 12

# Sentinel persisted when cumulative savings never cover the capital cost
PAYBACK_NOT_ACHIEVED = -1

# Warning thresholds
MAX_REASONABLE_LOAN_TERM_YEARS = 30
MAX_REASONABLE_INTEREST_RATE = 0.20
